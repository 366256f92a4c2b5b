"""
Meal placement result model.
"""

from datetime import datetime, timedelta
from typing import Optional

from pydantic import BaseModel

from dayplanner.models.enums import MealType, PlacementReason


class MealPlacement(BaseModel):
    """Outcome of placing one meal: a slot, or a skip with its reason."""

    meal: MealType
    start_time: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    skipped: bool = False
    skip_reason: Optional[str] = None
    target_time: Optional[datetime] = None
    placement_reason: Optional[PlacementReason] = None

    @property
    def end_time(self) -> Optional[datetime]:
        if self.start_time is None or self.duration_minutes is None:
            return None
        return self.start_time + timedelta(minutes=self.duration_minutes)

    @property
    def display_name(self) -> str:
        return self.meal.value.capitalize()
