"""
Daily plan repository interface.

Defines the contract for plan, time block and exit time persistence.
Implementations: SQLite
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional
from uuid import UUID

from dayplanner.models.daily_plan import (
    DailyPlan,
    DailyPlanCreate,
    TimeBlock,
    TimeBlockCreate,
    TimeBlockUpdate,
)
from dayplanner.models.enums import PlanStatus
from dayplanner.models.inputs import ExitTime


class IDailyPlanRepository(ABC):
    """Abstract interface for daily plan persistence."""

    @abstractmethod
    async def create_plan(
        self,
        plan: DailyPlanCreate,
        blocks: list[TimeBlockCreate],
        exit_times: list[ExitTime],
    ) -> DailyPlan:
        """
        Persist a plan together with its blocks and exit times.

        Exit times are linked to the travel block whose ``source_id`` is
        their commitment id.

        Returns:
            The stored plan with blocks ordered by sequence_order
        """
        pass

    @abstractmethod
    async def get(self, user_id: str, plan_id: UUID) -> Optional[DailyPlan]:
        pass

    @abstractmethod
    async def get_by_date(self, user_id: str, plan_date: date) -> Optional[DailyPlan]:
        pass

    @abstractmethod
    async def delete_plan(self, user_id: str, plan_id: UUID) -> bool:
        """Delete a plan with its exit times and blocks."""
        pass

    @abstractmethod
    async def update_plan_status(
        self,
        user_id: str,
        plan_id: UUID,
        status: PlanStatus,
    ) -> Optional[DailyPlan]:
        pass

    @abstractmethod
    async def get_time_block(self, user_id: str, block_id: UUID) -> Optional[TimeBlock]:
        pass

    @abstractmethod
    async def update_time_block(
        self,
        user_id: str,
        block_id: UUID,
        update: TimeBlockUpdate,
    ) -> Optional[TimeBlock]:
        pass

    @abstractmethod
    async def create_time_blocks(
        self,
        plan_id: UUID,
        blocks: list[TimeBlockCreate],
    ) -> list[TimeBlock]:
        pass

    @abstractmethod
    async def delete_time_blocks(self, plan_id: UUID, block_ids: list[UUID]) -> int:
        """Delete blocks by id; returns the number removed."""
        pass
