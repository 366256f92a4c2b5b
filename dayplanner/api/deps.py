"""
Dependency injection for API endpoints.

This module provides FastAPI dependencies that inject the correct
infrastructure implementations based on environment configuration.
"""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, status

from dayplanner.core.config import get_settings
from dayplanner.interfaces.commitment_provider import ICommitmentProvider
from dayplanner.interfaces.daily_plan_repository import IDailyPlanRepository
from dayplanner.interfaces.exit_time_calculator import IExitTimeCalculator
from dayplanner.interfaces.routine_provider import IRoutineProvider
from dayplanner.interfaces.task_provider import ITaskProvider
from dayplanner.services.daily_plan_service import DailyPlanService

DEV_USER_ID = "dev_user"


# ===========================================
# Repository / Provider Dependencies
# ===========================================


@lru_cache()
def get_daily_plan_repository() -> IDailyPlanRepository:
    """Get daily plan repository instance."""
    from dayplanner.infrastructure.local.daily_plan_repository import SqliteDailyPlanRepository

    return SqliteDailyPlanRepository()


@lru_cache()
def get_commitment_provider() -> ICommitmentProvider:
    from dayplanner.infrastructure.local.memory_providers import InMemoryCommitmentProvider

    return InMemoryCommitmentProvider()


@lru_cache()
def get_task_provider() -> ITaskProvider:
    from dayplanner.infrastructure.local.memory_providers import InMemoryTaskProvider

    return InMemoryTaskProvider()


@lru_cache()
def get_routine_provider() -> IRoutineProvider:
    from dayplanner.infrastructure.local.memory_providers import InMemoryRoutineProvider

    return InMemoryRoutineProvider()


@lru_cache()
def get_exit_time_calculator() -> IExitTimeCalculator:
    from dayplanner.infrastructure.local.exit_time_calculator import FixedOffsetExitTimeCalculator

    return FixedOffsetExitTimeCalculator()


# ===========================================
# Service Dependencies
# ===========================================


def get_daily_plan_service() -> DailyPlanService:
    """Get DailyPlanService wired to the configured collaborators."""
    return DailyPlanService(
        commitment_provider=get_commitment_provider(),
        task_provider=get_task_provider(),
        routine_provider=get_routine_provider(),
        exit_time_calculator=get_exit_time_calculator(),
        plan_repo=get_daily_plan_repository(),
        settings=get_settings(),
    )


# ===========================================
# Authentication
# ===========================================


async def get_current_user_id(
    authorization: Annotated[Optional[str], Header()] = None,
) -> str:
    """
    Get the calling user's id.

    Mock auth: the bearer token is the user id; requests without a header
    act as the development user.
    """
    if not authorization:
        return DEV_USER_ID

    try:
        scheme, token = authorization.split()
        if scheme.lower() != "bearer":
            raise ValueError("Invalid scheme")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
        )
    return token


# ===========================================
# Type Aliases for Cleaner Code
# ===========================================

CurrentUserId = Annotated[str, Depends(get_current_user_id)]
PlanService = Annotated[DailyPlanService, Depends(get_daily_plan_service)]
