"""
Activity model.

Activities only live for the duration of one generation pass; the assembler
turns them into time blocks.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from dayplanner.models.enums import ActivityType


class Activity(BaseModel):
    """A candidate activity for the day."""

    type: ActivityType
    name: str
    duration_minutes: int = Field(..., ge=0)
    fixed: bool = False
    start_time: Optional[datetime] = Field(None, description="Authoritative start for fixed activities")
    location: Optional[str] = None
    source_id: Optional[str] = Field(None, description="Commitment/task/routine id")
