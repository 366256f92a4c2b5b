"""Pydantic models (schemas) for the application."""

from dayplanner.models.activity import Activity
from dayplanner.models.daily_plan import (
    DailyPlan,
    DailyPlanCreate,
    ExitTimeRecord,
    TimeBlock,
    TimeBlockCreate,
    TimeBlockMetadata,
    TimeBlockUpdate,
)
from dayplanner.models.enums import (
    ActivityType,
    BlockStatus,
    EnergyState,
    MealType,
    PlacementReason,
    PlanStatus,
    RoutineSlot,
)
from dayplanner.models.inputs import (
    Commitment,
    ExitTime,
    PendingTask,
    PlanInputs,
    PlanRequest,
    Routine,
    RoutineSet,
)
from dayplanner.models.meal import MealPlacement

__all__ = [
    # Enums
    "ActivityType",
    "BlockStatus",
    "EnergyState",
    "MealType",
    "PlacementReason",
    "PlanStatus",
    "RoutineSlot",
    # Inputs
    "Commitment",
    "ExitTime",
    "PendingTask",
    "PlanInputs",
    "PlanRequest",
    "Routine",
    "RoutineSet",
    # Engine
    "Activity",
    "MealPlacement",
    # Plans
    "DailyPlan",
    "DailyPlanCreate",
    "ExitTimeRecord",
    "TimeBlock",
    "TimeBlockCreate",
    "TimeBlockMetadata",
    "TimeBlockUpdate",
]
