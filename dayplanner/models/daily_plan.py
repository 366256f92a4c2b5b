"""
Models for daily plans, their time blocks and exit times.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from dayplanner.models.enums import (
    ActivityType,
    BlockStatus,
    EnergyState,
    PlacementReason,
    PlanStatus,
)


class TimeBlockMetadata(BaseModel):
    target_time: Optional[datetime] = None
    placement_reason: Optional[PlacementReason] = None


class TimeBlockCreate(BaseModel):
    """A time block produced by the engine, before persistence."""

    start_time: datetime
    end_time: datetime
    activity_type: ActivityType
    name: str
    source_id: Optional[str] = Field(None, description="Commitment/task/routine id")
    fixed: bool = False
    sequence_order: int = 0
    status: BlockStatus = BlockStatus.PENDING
    skip_reason: Optional[str] = None
    metadata: Optional[TimeBlockMetadata] = None

    @property
    def duration_minutes(self) -> int:
        return int((self.end_time - self.start_time).total_seconds() // 60)

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return start < self.end_time and end > self.start_time


class TimeBlock(TimeBlockCreate):
    """Persisted time block."""

    id: UUID
    plan_id: UUID
    created_at: datetime
    updated_at: datetime


class TimeBlockUpdate(BaseModel):
    """Partial update applied to a persisted block."""

    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    sequence_order: Optional[int] = None
    status: Optional[BlockStatus] = None
    skip_reason: Optional[str] = None


class ExitTimeRecord(BaseModel):
    """Persisted exit time, linked to its travel block."""

    id: UUID
    plan_id: UUID
    time_block_id: Optional[UUID] = None
    commitment_id: str
    exit_time: datetime
    travel_duration_minutes: int
    preparation_time_minutes: int
    travel_method: str
    created_at: datetime


class DailyPlanCreate(BaseModel):
    user_id: str
    plan_date: date
    wake_time: datetime
    sleep_time: datetime
    energy_state: EnergyState
    status: PlanStatus = PlanStatus.ACTIVE
    generated_at: datetime
    generated_after_now: bool
    plan_start: datetime


class DailyPlan(DailyPlanCreate):
    id: UUID
    updated_at: datetime
    blocks: list[TimeBlock] = Field(default_factory=list)
    exit_times: list[ExitTimeRecord] = Field(default_factory=list)
