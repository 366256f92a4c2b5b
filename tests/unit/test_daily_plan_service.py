"""
Unit tests for DailyPlanService with mocked collaborators.
"""

from datetime import date, datetime
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from dayplanner.core.config import Settings
from dayplanner.core.exceptions import BusinessLogicError, NotFoundError, ValidationError
from dayplanner.models.daily_plan import DailyPlan, DailyPlanCreate, TimeBlock, TimeBlockCreate
from dayplanner.models.enums import ActivityType, BlockStatus, EnergyState, RoutineSlot
from dayplanner.models.inputs import Commitment, ExitTime, PlanRequest, Routine
from dayplanner.services.daily_plan_service import (
    DEFAULT_SKIP_REASON,
    DailyPlanService,
    compute_plan_start,
)

DAY = datetime(2026, 3, 2)
USER_ID = "test_user"


def at(hour: int, minute: int = 0, second: int = 0) -> datetime:
    return DAY.replace(hour=hour, minute=minute, second=second)


async def store_plan(
    plan: DailyPlanCreate,
    blocks: list[TimeBlockCreate],
    exit_times: list[ExitTime],
) -> DailyPlan:
    plan_id = uuid4()
    return DailyPlan(
        **plan.model_dump(),
        id=plan_id,
        updated_at=plan.generated_at,
        blocks=[
            TimeBlock(
                **block.model_dump(),
                id=uuid4(),
                plan_id=plan_id,
                created_at=plan.generated_at,
                updated_at=plan.generated_at,
            )
            for block in blocks
        ],
    )


def make_block(status: BlockStatus = BlockStatus.PENDING) -> TimeBlock:
    return TimeBlock(
        id=uuid4(),
        plan_id=uuid4(),
        start_time=at(10),
        end_time=at(11),
        activity_type=ActivityType.TASK,
        name="Write report",
        status=status,
        created_at=DAY,
        updated_at=DAY,
    )


def make_request(**overrides) -> PlanRequest:
    values = {
        "user_id": USER_ID,
        "plan_date": date(2026, 3, 2),
        "wake_time": at(7),
        "sleep_time": at(23),
        "energy_state": EnergyState.MEDIUM,
    }
    values.update(overrides)
    return PlanRequest(**values)


@pytest.fixture
def collaborators():
    commitment_provider = AsyncMock()
    commitment_provider.get_commitments.return_value = []
    task_provider = AsyncMock()
    task_provider.get_pending_tasks.return_value = []
    routine_provider = AsyncMock()
    routine_provider.get_active_routines.return_value = []
    exit_time_calculator = AsyncMock()
    exit_time_calculator.calculate_exit_times.return_value = []
    plan_repo = AsyncMock()
    plan_repo.get_by_date.return_value = None
    plan_repo.create_plan.side_effect = store_plan
    return {
        "commitment_provider": commitment_provider,
        "task_provider": task_provider,
        "routine_provider": routine_provider,
        "exit_time_calculator": exit_time_calculator,
        "plan_repo": plan_repo,
    }


@pytest.fixture
def service(collaborators):
    return DailyPlanService(
        **collaborators,
        settings=Settings(TIMEZONE="Europe/London", TASK_FETCH_LIMIT=7),
        clock=lambda: at(7),
    )


class TestComputePlanStart:
    def test_before_wake_uses_wake(self):
        assert compute_plan_start(at(7), at(6, 12)) == at(7)

    def test_rounds_up_to_five_minutes(self):
        assert compute_plan_start(at(7), at(12, 1)) == at(12, 5)
        assert compute_plan_start(at(7), at(12, 5)) == at(12, 5)
        assert compute_plan_start(at(7), at(12, 5, 30)) == at(12, 10)


@pytest.mark.asyncio
async def test_generate_plan_at_wake(service, collaborators):
    generated = await service.generate_plan(make_request())
    plan = generated.plan

    assert plan.plan_start == at(7)
    assert plan.generated_after_now is False
    assert plan.generated_at == at(7)
    breakfast = next(b for b in plan.blocks if b.name == "Breakfast")
    assert breakfast.start_time == at(9, 30)
    assert generated.tail_plan_used is False
    collaborators["task_provider"].get_pending_tasks.assert_awaited_once_with(USER_ID, limit=7)
    start, end = collaborators["commitment_provider"].get_commitments.await_args.args[1:]
    assert start == DAY
    assert end.date() == DAY.date()
    assert end.hour == 23 and end.minute == 59


@pytest.mark.asyncio
async def test_generate_plan_mid_day(service):
    generated = await service.generate_plan(make_request(), now=at(12, 3))

    assert generated.plan.plan_start == at(12, 5)
    assert generated.plan.generated_after_now is True
    morning = next(b for b in generated.plan.blocks if b.name == "Morning Routine")
    assert morning.status == BlockStatus.SKIPPED


@pytest.mark.asyncio
async def test_sleep_before_wake_is_rejected(service, collaborators):
    with pytest.raises(ValidationError):
        await service.generate_plan(make_request(sleep_time=at(6)))

    collaborators["commitment_provider"].get_commitments.assert_not_awaited()
    collaborators["plan_repo"].create_plan.assert_not_awaited()


@pytest.mark.asyncio
async def test_routine_provider_failure_uses_defaults(service, collaborators):
    collaborators["routine_provider"].get_active_routines.side_effect = RuntimeError("routines down")

    generated = await service.generate_plan(make_request())

    names = [b.name for b in generated.plan.blocks]
    assert "Morning Routine" in names
    assert "Evening Routine" in names


@pytest.mark.asyncio
async def test_user_routines_are_used(service, collaborators):
    collaborators["routine_provider"].get_active_routines.return_value = [
        Routine(id="r1", name="Yoga", slot=RoutineSlot.MORNING, estimated_duration_minutes=20),
    ]

    generated = await service.generate_plan(make_request())

    yoga = next(b for b in generated.plan.blocks if b.name == "Yoga")
    assert yoga.source_id == "r1"
    assert yoga.duration_minutes == 20


@pytest.mark.asyncio
async def test_commitment_provider_failure_propagates(service, collaborators):
    collaborators["commitment_provider"].get_commitments.side_effect = RuntimeError("calendar down")

    with pytest.raises(RuntimeError):
        await service.generate_plan(make_request())
    collaborators["plan_repo"].create_plan.assert_not_awaited()


@pytest.mark.asyncio
async def test_commitments_reach_exit_time_calculator(service, collaborators):
    commitment = Commitment(id="c1", title="Dentist", start_time=at(10), end_time=at(11), location="High St")
    collaborators["commitment_provider"].get_commitments.return_value = [commitment]
    collaborators["exit_time_calculator"].calculate_exit_times.return_value = [
        ExitTime(
            commitment_id="c1",
            exit_time=at(9, 30),
            travel_duration_minutes=20,
            preparation_time_minutes=10,
            travel_method="walking",
        )
    ]

    generated = await service.generate_plan(make_request())

    collaborators["exit_time_calculator"].calculate_exit_times.assert_awaited_once_with(
        [commitment], current_location=None
    )
    types = [b.activity_type for b in generated.plan.blocks]
    assert ActivityType.TRAVEL in types
    assert ActivityType.COMMITMENT in types
    stored_exit_times = collaborators["plan_repo"].create_plan.await_args.args[2]
    assert [e.commitment_id for e in stored_exit_times] == ["c1"]


@pytest.mark.asyncio
async def test_current_location_reaches_exit_time_calculator(service, collaborators):
    await service.generate_plan(make_request(current_location="Office"))

    kwargs = collaborators["exit_time_calculator"].calculate_exit_times.await_args.kwargs
    assert kwargs["current_location"] == "Office"


@pytest.mark.asyncio
async def test_regenerate_replaces_existing_plan(service, collaborators):
    first = await service.generate_plan(make_request())
    collaborators["plan_repo"].get_by_date.return_value = first.plan

    await service.generate_plan(make_request(energy_state=EnergyState.HIGH))

    collaborators["plan_repo"].delete_plan.assert_awaited_once_with(USER_ID, first.plan.id)
    assert collaborators["plan_repo"].create_plan.await_count == 2


@pytest.mark.asyncio
async def test_complete_block(service, collaborators):
    block = make_block()
    collaborators["plan_repo"].get_time_block.return_value = block
    collaborators["plan_repo"].update_time_block.return_value = block.model_copy(
        update={"status": BlockStatus.COMPLETED}
    )

    completed = await service.complete_block(USER_ID, block.id)

    assert completed.status == BlockStatus.COMPLETED
    update = collaborators["plan_repo"].update_time_block.await_args.args[2]
    assert update.status == BlockStatus.COMPLETED


@pytest.mark.asyncio
async def test_skip_block_default_reason(service, collaborators):
    block = make_block()
    collaborators["plan_repo"].get_time_block.return_value = block
    collaborators["plan_repo"].update_time_block.return_value = block

    await service.skip_block(USER_ID, block.id)

    update = collaborators["plan_repo"].update_time_block.await_args.args[2]
    assert update.status == BlockStatus.SKIPPED
    assert update.skip_reason == DEFAULT_SKIP_REASON


@pytest.mark.asyncio
async def test_block_must_be_pending(service, collaborators):
    collaborators["plan_repo"].get_time_block.return_value = make_block(BlockStatus.COMPLETED)

    with pytest.raises(BusinessLogicError):
        await service.skip_block(USER_ID, uuid4(), reason="Too tired")
    collaborators["plan_repo"].update_time_block.assert_not_awaited()


@pytest.mark.asyncio
async def test_unknown_block(service, collaborators):
    collaborators["plan_repo"].get_time_block.return_value = None

    with pytest.raises(NotFoundError):
        await service.complete_block(USER_ID, uuid4())


@pytest.mark.asyncio
async def test_get_plan_not_found(service, collaborators):
    collaborators["plan_repo"].get.return_value = None

    with pytest.raises(NotFoundError):
        await service.get_plan(USER_ID, uuid4())


@pytest.mark.asyncio
async def test_delete_plan(service, collaborators):
    plan_id = uuid4()
    collaborators["plan_repo"].delete_plan.return_value = True

    await service.delete_plan(USER_ID, plan_id)

    collaborators["plan_repo"].delete_plan.assert_awaited_once_with(USER_ID, plan_id)


@pytest.mark.asyncio
async def test_delete_plan_not_found(service, collaborators):
    collaborators["plan_repo"].delete_plan.return_value = False

    with pytest.raises(NotFoundError):
        await service.delete_plan(USER_ID, uuid4())


@pytest.mark.asyncio
async def test_behind_schedule_without_plan(service, collaborators):
    collaborators["plan_repo"].get_by_date.return_value = None

    assert await service.is_behind_schedule(USER_ID, date(2026, 3, 2)) is False


@pytest.mark.asyncio
async def test_behind_schedule_uses_injected_now(service, collaborators):
    generated = await service.generate_plan(make_request())
    collaborators["plan_repo"].get_by_date.return_value = generated.plan

    # Morning Routine runs 07:00-07:30 and is still pending
    assert await service.is_behind_schedule(USER_ID, date(2026, 3, 2), now=at(7, 45)) is False
    assert await service.is_behind_schedule(USER_ID, date(2026, 3, 2), now=at(8, 5)) is True
