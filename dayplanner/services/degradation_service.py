"""
Plan degradation.

Strips optional work from an active plan when the user has fallen behind:
non-essential pending blocks are skipped, every buffer is deleted, and the
essentials keep their slots with fresh buffers after them. Degradation is
one-way.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union
from uuid import UUID

from dayplanner.core.exceptions import BusinessLogicError, NotFoundError
from dayplanner.core.logger import setup_logger
from dayplanner.interfaces.daily_plan_repository import IDailyPlanRepository
from dayplanner.models.daily_plan import DailyPlan, TimeBlock, TimeBlockCreate, TimeBlockUpdate
from dayplanner.models.enums import ActivityType, BlockStatus, PlanStatus
from dayplanner.services.schedule_assembler import BUFFER_MINUTES, BUFFER_NAME
from dayplanner.utils.datetime_utils import add_minutes

logger = setup_logger(__name__)

SKIP_DROPPED = "Dropped during degradation"
ESSENTIAL_TYPES = frozenset({ActivityType.ROUTINE, ActivityType.MEAL, ActivityType.TRAVEL})


def is_essential(block: TimeBlockCreate) -> bool:
    """Fixed blocks, plus routines, meals and travel regardless of the flag."""
    if block.activity_type == ActivityType.BUFFER:
        return False
    return block.fixed or block.activity_type in ESSENTIAL_TYPES


@dataclass
class DegradationResult:
    """Changes needed to degrade a plan, ready to be persisted."""

    updates: dict[UUID, TimeBlockUpdate] = field(default_factory=dict)
    deleted_buffer_ids: list[UUID] = field(default_factory=list)
    new_buffers: list[TimeBlockCreate] = field(default_factory=list)
    dropped_ids: list[UUID] = field(default_factory=list)


def compute_degradation(plan: DailyPlan, buffer_minutes: int = BUFFER_MINUTES) -> DegradationResult:
    """
    Work out how to degrade a plan without touching storage.

    Essentials keep their times. Each pending essential gets a new buffer
    when it fits before the next occupied block and before sleep, and every
    remaining block is renumbered by start time.
    """
    result = DegradationResult()

    kept: list[TimeBlock] = []
    for block in plan.blocks:
        if block.activity_type == ActivityType.BUFFER:
            result.deleted_buffer_ids.append(block.id)
            continue
        if not is_essential(block) and block.status == BlockStatus.PENDING:
            result.dropped_ids.append(block.id)
            result.updates[block.id] = TimeBlockUpdate(
                status=BlockStatus.SKIPPED,
                skip_reason=SKIP_DROPPED,
            )
        kept.append(block)

    occupied = [
        b for b in kept if b.status != BlockStatus.SKIPPED and b.id not in result.dropped_ids
    ]
    essentials = sorted((b for b in kept if is_essential(b)), key=lambda b: b.start_time)

    for block in essentials:
        if block.status != BlockStatus.PENDING:
            continue
        next_start = min(
            (b.start_time for b in occupied if b.id != block.id and b.start_time >= block.end_time),
            default=plan.sleep_time,
        )
        buffer_end = add_minutes(block.end_time, buffer_minutes)
        if buffer_end <= min(next_start, plan.sleep_time) and buffer_end > plan.plan_start:
            result.new_buffers.append(
                TimeBlockCreate(
                    start_time=block.end_time,
                    end_time=buffer_end,
                    activity_type=ActivityType.BUFFER,
                    name=BUFFER_NAME,
                )
            )

    ordered: list[Union[TimeBlock, TimeBlockCreate]] = [*kept, *result.new_buffers]
    ordered.sort(key=lambda item: (item.start_time, item.activity_type == ActivityType.BUFFER))
    for order, item in enumerate(ordered, start=1):
        if not isinstance(item, TimeBlock):
            item.sequence_order = order
            continue
        update = result.updates.get(item.id, TimeBlockUpdate())
        update.sequence_order = order
        result.updates[item.id] = update

    return result


class DegradationService:
    """Applies a degradation to a persisted plan."""

    def __init__(self, plan_repo: IDailyPlanRepository, buffer_minutes: int = BUFFER_MINUTES):
        self._plan_repo = plan_repo
        self._buffer_minutes = buffer_minutes

    async def degrade_plan(self, user_id: str, plan_id: UUID) -> DailyPlan:
        """
        Degrade an active plan and return it with its new block sequence.

        Raises:
            NotFoundError: Plan does not exist for this user
            BusinessLogicError: Plan is not active (already degraded or completed)
        """
        plan = await self._plan_repo.get(user_id, plan_id)
        if plan is None:
            raise NotFoundError(f"Plan {plan_id} not found")
        if plan.status != PlanStatus.ACTIVE:
            raise BusinessLogicError(
                f"Only active plans can be degraded (plan is {plan.status.value})",
                details={"plan_id": str(plan_id), "status": plan.status.value},
            )

        result = compute_degradation(plan, self._buffer_minutes)

        await self._plan_repo.delete_time_blocks(plan_id, result.deleted_buffer_ids)
        for block_id, update in result.updates.items():
            await self._plan_repo.update_time_block(user_id, block_id, update)
        if result.new_buffers:
            await self._plan_repo.create_time_blocks(plan_id, result.new_buffers)

        degraded = await self._plan_repo.update_plan_status(user_id, plan_id, PlanStatus.DEGRADED)
        if degraded is None:
            raise NotFoundError(f"Plan {plan_id} not found")

        logger.info(
            f"Degraded plan {plan_id}: dropped {len(result.dropped_ids)} blocks, "
            f"replaced {len(result.deleted_buffer_ids)} buffers with {len(result.new_buffers)}"
        )
        return degraded
