"""
Daily plan service.

Orchestrates one generation run: validates the request, gathers inputs from
the providers, builds and assembles the activity list, and replaces any
plan already stored for the same user and day. Also owns the block
lifecycle and the behind-schedule check.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Optional
from uuid import UUID

from dayplanner.core.config import Settings, get_settings
from dayplanner.core.exceptions import BusinessLogicError, NotFoundError, ValidationError
from dayplanner.core.logger import setup_logger
from dayplanner.interfaces.commitment_provider import ICommitmentProvider
from dayplanner.interfaces.daily_plan_repository import IDailyPlanRepository
from dayplanner.interfaces.exit_time_calculator import IExitTimeCalculator
from dayplanner.interfaces.routine_provider import IRoutineProvider
from dayplanner.interfaces.task_provider import ITaskProvider
from dayplanner.models.activity import Activity
from dayplanner.models.daily_plan import DailyPlan, DailyPlanCreate, TimeBlock, TimeBlockUpdate
from dayplanner.models.enums import BlockStatus
from dayplanner.models.inputs import PlanInputs, PlanRequest, RoutineSet
from dayplanner.models.meal import MealPlacement
from dayplanner.services.activity_list_builder import build_activity_list
from dayplanner.services.behind_schedule import is_behind_schedule
from dayplanner.services.degradation_service import DegradationService
from dayplanner.services.schedule_assembler import ScheduleAssembler
from dayplanner.utils.datetime_utils import day_bounds, now_local, round_up_to_step, to_local_naive

logger = setup_logger(__name__)

DEFAULT_SKIP_REASON = "Skipped by user"


def compute_plan_start(wake_time: datetime, now: datetime, step_minutes: int = 5) -> datetime:
    """A plan starts at wake time, or at ``now`` rounded up when generated later."""
    return max(wake_time, round_up_to_step(now, step_minutes))


@dataclass
class GeneratedPlan:
    """A stored plan plus what the engine had to leave out."""

    plan: DailyPlan
    meal_placements: list[MealPlacement] = field(default_factory=list)
    unplaced_activities: list[Activity] = field(default_factory=list)
    tail_plan_used: bool = False


class DailyPlanService:
    def __init__(
        self,
        commitment_provider: ICommitmentProvider,
        task_provider: ITaskProvider,
        routine_provider: IRoutineProvider,
        exit_time_calculator: IExitTimeCalculator,
        plan_repo: IDailyPlanRepository,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._commitment_provider = commitment_provider
        self._task_provider = task_provider
        self._routine_provider = routine_provider
        self._exit_time_calculator = exit_time_calculator
        self._plan_repo = plan_repo
        self._settings = settings or get_settings()
        self._clock = clock or (lambda: now_local(self._settings.TIMEZONE))
        self._assembler = ScheduleAssembler(buffer_minutes=self._settings.BUFFER_MINUTES)
        self._degradation = DegradationService(plan_repo, buffer_minutes=self._settings.BUFFER_MINUTES)

    def _now(self, now: Optional[datetime]) -> datetime:
        if now is None:
            return self._clock()
        return to_local_naive(now, self._settings.TIMEZONE)

    def _validate(self, request: PlanRequest) -> tuple[datetime, datetime]:
        timezone = self._settings.TIMEZONE
        wake_time = to_local_naive(request.wake_time, timezone)
        sleep_time = to_local_naive(request.sleep_time, timezone)
        if wake_time is None or sleep_time is None:
            raise ValidationError("Wake and sleep times are required")
        if sleep_time <= wake_time:
            raise ValidationError(
                "Sleep time must be after wake time",
                details={"wake_time": wake_time.isoformat(), "sleep_time": sleep_time.isoformat()},
            )
        return wake_time, sleep_time

    async def _gather_inputs(self, user_id: str, plan_date: date) -> PlanInputs:
        timezone = self._settings.TIMEZONE
        start, end = day_bounds(plan_date)

        commitments = await self._commitment_provider.get_commitments(user_id, start, end)
        for commitment in commitments:
            commitment.start_time = to_local_naive(commitment.start_time, timezone)
            commitment.end_time = to_local_naive(commitment.end_time, timezone)
        commitments.sort(key=lambda c: c.start_time)

        tasks = await self._task_provider.get_pending_tasks(
            user_id, limit=self._settings.TASK_FETCH_LIMIT
        )

        try:
            routines = RoutineSet.from_routines(
                await self._routine_provider.get_active_routines(user_id)
            )
        except Exception as e:
            logger.warning(f"Routine provider failed for {user_id}, using default routines: {e}")
            routines = RoutineSet()

        return PlanInputs(commitments=commitments, tasks=tasks, routines=routines)

    async def generate_plan(
        self,
        request: PlanRequest,
        now: Optional[datetime] = None,
    ) -> GeneratedPlan:
        """
        Generate and store the plan for one user and day.

        ``now`` is captured once; every later step sees the same value.

        Raises:
            ValidationError: Sleep time is missing or not after wake time
        """
        wake_time, sleep_time = self._validate(request)
        now = self._now(now)
        plan_start = compute_plan_start(
            wake_time, now, self._settings.PLAN_START_ROUNDING_MINUTES
        )

        inputs = await self._gather_inputs(request.user_id, request.plan_date)
        activities = build_activity_list(inputs, request.energy_state)
        exit_times = await self._exit_time_calculator.calculate_exit_times(
            inputs.commitments, current_location=request.current_location
        )

        result = self._assembler.assemble(
            activities,
            exit_times,
            wake_time=wake_time,
            sleep_time=sleep_time,
            plan_start=plan_start,
            energy_state=request.energy_state,
            now=now,
            routines=inputs.routines,
        )

        existing = await self._plan_repo.get_by_date(request.user_id, request.plan_date)
        if existing:
            logger.info(f"Replacing plan {existing.id} for {request.user_id} on {request.plan_date}")
            await self._plan_repo.delete_plan(request.user_id, existing.id)

        plan = await self._plan_repo.create_plan(
            DailyPlanCreate(
                user_id=request.user_id,
                plan_date=request.plan_date,
                wake_time=wake_time,
                sleep_time=sleep_time,
                energy_state=request.energy_state,
                generated_at=now,
                generated_after_now=plan_start > wake_time,
                plan_start=plan_start,
            ),
            result.blocks,
            exit_times,
        )
        logger.info(
            f"Generated plan {plan.id} for {request.user_id} on {request.plan_date} "
            f"starting {plan_start:%H:%M} with {len(plan.blocks)} blocks"
        )
        return GeneratedPlan(
            plan=plan,
            meal_placements=result.meal_placements,
            unplaced_activities=result.unplaced_activities,
            tail_plan_used=result.tail_plan_used,
        )

    async def get_plan(self, user_id: str, plan_id: UUID) -> DailyPlan:
        plan = await self._plan_repo.get(user_id, plan_id)
        if plan is None:
            raise NotFoundError(f"Plan {plan_id} not found")
        return plan

    async def get_plan_for_date(self, user_id: str, plan_date: date) -> Optional[DailyPlan]:
        return await self._plan_repo.get_by_date(user_id, plan_date)

    async def delete_plan(self, user_id: str, plan_id: UUID) -> None:
        """Delete a plan with its blocks and exit times so the day can be planned again."""
        deleted = await self._plan_repo.delete_plan(user_id, plan_id)
        if not deleted:
            raise NotFoundError(f"Plan {plan_id} not found")
        logger.info(f"Deleted plan {plan_id} for {user_id}")

    async def degrade_plan(self, user_id: str, plan_id: UUID) -> DailyPlan:
        return await self._degradation.degrade_plan(user_id, plan_id)

    async def is_behind_schedule(
        self,
        user_id: str,
        plan_date: date,
        now: Optional[datetime] = None,
    ) -> bool:
        """Behind-schedule check for the user's plan on a day (False when there is none)."""
        plan = await self._plan_repo.get_by_date(user_id, plan_date)
        if plan is None:
            return False
        return is_behind_schedule(plan, self._now(now), self._settings.BEHIND_SCHEDULE_GRACE_MINUTES)

    async def is_plan_behind_schedule(
        self,
        user_id: str,
        plan_id: UUID,
        now: Optional[datetime] = None,
    ) -> bool:
        plan = await self.get_plan(user_id, plan_id)
        return is_behind_schedule(plan, self._now(now), self._settings.BEHIND_SCHEDULE_GRACE_MINUTES)

    async def _transition_block(
        self,
        user_id: str,
        block_id: UUID,
        update: TimeBlockUpdate,
    ) -> TimeBlock:
        block = await self._plan_repo.get_time_block(user_id, block_id)
        if block is None:
            raise NotFoundError(f"Time block {block_id} not found")
        if block.status != BlockStatus.PENDING:
            raise BusinessLogicError(
                f"Time block {block_id} is already {block.status.value}",
                details={"block_id": str(block_id), "status": block.status.value},
            )
        updated = await self._plan_repo.update_time_block(user_id, block_id, update)
        if updated is None:
            raise NotFoundError(f"Time block {block_id} not found")
        return updated

    async def complete_block(self, user_id: str, block_id: UUID) -> TimeBlock:
        return await self._transition_block(
            user_id, block_id, TimeBlockUpdate(status=BlockStatus.COMPLETED)
        )

    async def skip_block(
        self,
        user_id: str,
        block_id: UUID,
        reason: Optional[str] = None,
    ) -> TimeBlock:
        return await self._transition_block(
            user_id,
            block_id,
            TimeBlockUpdate(status=BlockStatus.SKIPPED, skip_reason=reason or DEFAULT_SKIP_REASON),
        )
