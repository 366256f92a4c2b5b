"""
Enum definitions for the application.

These enums are used across models and provide type-safe status values.
"""

from enum import Enum


class ActivityType(str, Enum):
    """Kind of scheduled activity (also the time block type)."""

    COMMITMENT = "commitment"
    TASK = "task"
    ROUTINE = "routine"
    MEAL = "meal"
    BUFFER = "buffer"
    TRAVEL = "travel"


class BlockStatus(str, Enum):
    """Time block status."""

    PENDING = "pending"
    COMPLETED = "completed"
    SKIPPED = "skipped"


class EnergyState(str, Enum):
    """
    Self-reported energy for the day.

    Drives how many tasks are pulled into the plan.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class PlanStatus(str, Enum):
    """Daily plan status."""

    ACTIVE = "active"
    DEGRADED = "degraded"
    COMPLETED = "completed"


class MealType(str, Enum):
    """Meals placed each day, in placement order."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"


class PlacementReason(str, Enum):
    """How a meal's target time was chosen."""

    ANCHOR_AWARE = "anchor-aware"
    DEFAULT = "default"


class RoutineSlot(str, Enum):
    """Part of the day a routine belongs to."""

    MORNING = "morning"
    EVENING = "evening"
