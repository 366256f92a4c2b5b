"""
Unit tests for the schedule assembler and tail plan.
"""

from datetime import datetime

from dayplanner.models.activity import Activity
from dayplanner.models.daily_plan import TimeBlockCreate
from dayplanner.models.enums import ActivityType, BlockStatus, EnergyState, MealType
from dayplanner.models.inputs import Commitment, ExitTime, PendingTask, PlanInputs
from dayplanner.services.activity_list_builder import build_activity_list
from dayplanner.services.meal_placement import SKIP_PAST_WINDOW
from dayplanner.services.schedule_assembler import (
    SKIP_BEFORE_PLAN_START,
    ScheduleAssembler,
    build_anchor_blocks,
    build_tail_plan,
)
from dayplanner.utils.datetime_utils import add_minutes

DAY = datetime(2026, 3, 2)


def at(hour: int, minute: int = 0) -> datetime:
    return DAY.replace(hour=hour, minute=minute)


def assert_plan_invariants(blocks: list[TimeBlockCreate], plan_start: datetime) -> None:
    live = [b for b in blocks if b.status != BlockStatus.SKIPPED]
    for first, second in zip(live, live[1:]):
        assert first.end_time <= second.start_time, f"{first.name} overlaps {second.name}"
    orders = [b.sequence_order for b in live]
    assert orders == sorted(orders)
    assert len(set(orders)) == len(orders)
    for first, second in zip(blocks, blocks[1:]):
        assert not (
            first.activity_type == ActivityType.BUFFER and second.activity_type == ActivityType.BUFFER
        )
    for block in blocks:
        if block.end_time <= plan_start:
            assert block.status == BlockStatus.SKIPPED
            assert block.skip_reason


def assemble(inputs: PlanInputs, now: datetime, energy=EnergyState.MEDIUM, exit_times=None, sleep=None):
    plan_start = max(at(7), now)
    return ScheduleAssembler().assemble(
        build_activity_list(inputs, energy),
        exit_times or [],
        wake_time=at(7),
        sleep_time=sleep or at(23),
        plan_start=plan_start,
        energy_state=energy,
        now=now,
        routines=inputs.routines,
    )


def test_default_day_scenario():
    result = assemble(PlanInputs(), now=at(7))
    blocks = result.blocks
    named = {b.name: b for b in blocks if b.activity_type != ActivityType.BUFFER}

    assert named["Breakfast"].start_time == at(9, 30)
    assert named["Lunch"].start_time == at(13)
    assert named["Dinner"].start_time == at(19)
    assert named["Primary Focus Block"].activity_type == ActivityType.TASK
    assert named["Primary Focus Block"].duration_minutes == 60
    evening = named["Evening Routine"]
    assert evening.start_time >= at(18)
    assert evening.duration_minutes == 20
    assert [b.sequence_order for b in blocks] == list(range(1, len(blocks) + 1))
    assert result.tail_plan_used is False
    assert result.unplaced_activities == []
    assert_plan_invariants(blocks, at(7))


def test_flexible_work_fills_the_first_gap_with_buffers():
    blocks = assemble(PlanInputs(), now=at(7)).blocks

    assert [(b.name, b.start_time, b.end_time) for b in blocks[:4]] == [
        ("Morning Routine", at(7), at(7, 30)),
        ("Transition", at(7, 30), at(7, 35)),
        ("Primary Focus Block", at(7, 35), at(8, 35)),
        ("Transition", at(8, 35), at(8, 40)),
    ]


def test_generation_at_noon():
    result = assemble(PlanInputs(), now=at(12))
    blocks = result.blocks
    named = {b.name: b for b in blocks if b.activity_type != ActivityType.BUFFER}

    breakfast = next(p for p in result.meal_placements if p.meal == MealType.BREAKFAST)
    assert breakfast.skipped is True
    assert breakfast.skip_reason == SKIP_PAST_WINDOW
    assert "Breakfast" not in named
    assert at(12) <= named["Lunch"].start_time <= at(15, 30)
    assert named["Lunch"].status == BlockStatus.PENDING
    assert named["Dinner"].start_time == at(19)
    assert named["Morning Routine"].status == BlockStatus.SKIPPED
    assert named["Morning Routine"].skip_reason == SKIP_BEFORE_PLAN_START
    assert_plan_invariants(blocks, at(12))


def test_commitment_with_travel():
    inputs = PlanInputs(
        commitments=[
            Commitment(
                id="c1",
                title="Dentist",
                start_time=at(10),
                end_time=at(11),
                location="High Street",
            )
        ],
        tasks=[PendingTask(id="t1", title="Write report", estimated_duration_minutes=60)],
    )
    exit_times = [
        ExitTime(
            commitment_id="c1",
            exit_time=at(9, 30),
            travel_duration_minutes=20,
            preparation_time_minutes=10,
            travel_method="walking",
        )
    ]

    blocks = assemble(inputs, now=at(7), exit_times=exit_times).blocks
    travel = next(b for b in blocks if b.activity_type == ActivityType.TRAVEL)
    commitment = next(b for b in blocks if b.activity_type == ActivityType.COMMITMENT)
    report = next(b for b in blocks if b.name == "Write report")

    assert (travel.start_time, travel.end_time) == (at(9, 30), at(9, 50))
    assert travel.name == "Travel to Dentist"
    assert travel.fixed is True
    assert (commitment.start_time, commitment.end_time) == (at(10), at(11))
    assert report.end_time <= travel.start_time
    assert_plan_invariants(blocks, at(7))


def walking(commitment_id: str, start: datetime) -> ExitTime:
    return ExitTime(
        commitment_id=commitment_id,
        exit_time=add_minutes(start, -30),
        travel_duration_minutes=20,
        preparation_time_minutes=10,
        travel_method="walking",
    )


def test_travel_after_a_close_commitment_starts_when_it_ends():
    inputs = PlanInputs(
        commitments=[
            Commitment(id="c1", title="Lecture", start_time=at(10), end_time=at(11), location="Campus"),
            Commitment(id="c2", title="Lab", start_time=at(11, 15), end_time=at(12), location="Lab"),
        ]
    )
    exit_times = [walking("c1", at(10)), walking("c2", at(11, 15))]

    blocks = assemble(inputs, now=at(7), exit_times=exit_times).blocks
    travel = next(b for b in blocks if b.name == "Travel to Lab")

    assert (travel.start_time, travel.end_time) == (at(11), at(11, 5))
    assert exit_times[1].exit_time == at(10, 45)
    assert_plan_invariants(blocks, at(7))


def test_travel_swallowed_by_previous_commitment_is_dropped():
    commitments = [
        Activity(
            type=ActivityType.COMMITMENT,
            name=name,
            duration_minutes=60,
            fixed=True,
            start_time=start,
            source_id=source_id,
        )
        for name, start, source_id in [("Lecture", at(10), "c1"), ("Lab", at(11), "c2")]
    ]

    blocks = build_anchor_blocks(commitments, [walking("c1", at(10)), walking("c2", at(11))])

    assert [b.name for b in blocks] == ["Travel to Lecture", "Lecture", "Lab"]
    assert blocks[0].start_time == at(9, 30)


def test_build_anchor_blocks_without_exit_time():
    commitment = Activity(
        type=ActivityType.COMMITMENT,
        name="Call",
        duration_minutes=30,
        fixed=True,
        start_time=at(14),
        source_id="c2",
    )

    blocks = build_anchor_blocks([commitment], [])

    assert len(blocks) == 1
    assert (blocks[0].start_time, blocks[0].end_time) == (at(14), at(14, 30))


def test_evening_routine_dropped_when_it_cannot_fit():
    result = assemble(PlanInputs(), now=at(7), sleep=at(18, 10))

    assert all(b.name != "Evening Routine" for b in result.blocks)


def test_early_sleep_allows_routine_before_six():
    result = assemble(PlanInputs(), now=at(7), sleep=at(17))
    evening = next(b for b in result.blocks if b.name == "Evening Routine")

    assert evening.end_time <= at(17)
    assert evening.start_time < at(18)


def test_activities_that_never_fit_are_reported():
    inputs = PlanInputs(tasks=[PendingTask(id="t1", title="Marathon", estimated_duration_minutes=900)])

    result = assemble(inputs, now=at(7))

    assert [a.name for a in result.unplaced_activities] == ["Marathon"]
    assert_plan_invariants(result.blocks, at(7))


def test_late_generation_uses_tail_plan():
    result = assemble(PlanInputs(), now=at(22, 45))

    assert result.tail_plan_used is True
    tail = [b for b in result.blocks if b.status == BlockStatus.PENDING]
    assert tail[0].name == "Reset/Admin"
    assert (tail[0].start_time, tail[0].end_time) == (at(22, 45), at(22, 55))
    assert_plan_invariants(result.blocks, at(22, 45))


class TestTailPlan:
    def test_full_sequence(self):
        blocks = build_tail_plan(at(20), at(23), EnergyState.MEDIUM)

        assert [b.name for b in blocks if b.activity_type != ActivityType.BUFFER] == [
            "Reset/Admin",
            "Primary Focus Block",
            "Dinner",
            "Evening Routine",
        ]
        assert blocks[-1].end_time == at(22, 35)

    def test_low_energy_skips_focus_block(self):
        blocks = build_tail_plan(at(20), at(23), EnergyState.LOW)

        names = [b.name for b in blocks if b.activity_type != ActivityType.BUFFER]
        assert names == ["Reset/Admin", "Dinner", "Evening Routine"]

    def test_stops_at_first_item_that_overruns(self):
        blocks = build_tail_plan(at(22), at(23), EnergyState.MEDIUM)

        # Dinner would fit after Reset/Admin but is never tried
        assert [b.name for b in blocks] == ["Reset/Admin", "Transition"]

    def test_reset_admin_fits_when_ten_minutes_remain(self):
        blocks = build_tail_plan(at(22, 50), at(23), EnergyState.MEDIUM)

        assert [b.name for b in blocks] == ["Reset/Admin"]
