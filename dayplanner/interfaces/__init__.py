"""Abstract interfaces for infrastructure abstraction."""

from dayplanner.interfaces.commitment_provider import ICommitmentProvider
from dayplanner.interfaces.daily_plan_repository import IDailyPlanRepository
from dayplanner.interfaces.exit_time_calculator import IExitTimeCalculator
from dayplanner.interfaces.routine_provider import IRoutineProvider
from dayplanner.interfaces.task_provider import ITaskProvider

__all__ = [
    "ICommitmentProvider",
    "IDailyPlanRepository",
    "IExitTimeCalculator",
    "IRoutineProvider",
    "ITaskProvider",
]
