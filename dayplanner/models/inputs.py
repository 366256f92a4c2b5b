"""
Input models supplied by external collaborators.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from dayplanner.models.enums import EnergyState, RoutineSlot


class Commitment(BaseModel):
    """Fixed calendar commitment (an anchor of the day)."""

    id: str
    title: str
    start_time: datetime
    end_time: datetime
    location: Optional[str] = None


class PendingTask(BaseModel):
    """Pending task as returned by the task provider."""

    id: str
    title: str
    estimated_duration_minutes: Optional[int] = Field(None, ge=1)


class Routine(BaseModel):
    """Active routine definition."""

    id: str
    name: str
    slot: RoutineSlot
    estimated_duration_minutes: int = Field(..., ge=1)


class RoutineSet(BaseModel):
    """Zero or one routine per slot."""

    morning: Optional[Routine] = None
    evening: Optional[Routine] = None

    @classmethod
    def from_routines(cls, routines: list[Routine]) -> RoutineSet:
        """Pick the first active routine for each slot."""
        morning = next((r for r in routines if r.slot == RoutineSlot.MORNING), None)
        evening = next((r for r in routines if r.slot == RoutineSlot.EVENING), None)
        return cls(morning=morning, evening=evening)


class ExitTime(BaseModel):
    """Exit-time calculator output for one commitment."""

    commitment_id: str
    exit_time: datetime
    travel_duration_minutes: int = Field(..., ge=0)
    preparation_time_minutes: int = Field(..., ge=0)
    travel_method: str


class PlanInputs(BaseModel):
    """Everything gathered from providers for one generation pass."""

    commitments: list[Commitment] = Field(default_factory=list)
    tasks: list[PendingTask] = Field(default_factory=list)
    routines: RoutineSet = Field(default_factory=RoutineSet)


class PlanRequest(BaseModel):
    """Request to generate a plan for one user and day."""

    user_id: str = Field(..., min_length=1)
    plan_date: date
    wake_time: datetime
    sleep_time: datetime
    energy_state: EnergyState = EnergyState.MEDIUM
    current_location: Optional[str] = None
