"""
Unit tests for activity list construction.
"""

from datetime import datetime

from dayplanner.models.enums import ActivityType, EnergyState, RoutineSlot
from dayplanner.models.inputs import Commitment, PendingTask, PlanInputs, Routine, RoutineSet
from dayplanner.services.activity_list_builder import (
    PRIMARY_FOCUS_BLOCK_NAME,
    build_activity_list,
    build_evening_routine,
    get_task_limit,
)


def make_task(index: int, minutes: int | None = None) -> PendingTask:
    return PendingTask(id=f"task-{index}", title=f"Task {index}", estimated_duration_minutes=minutes)


def test_task_limit_follows_energy():
    assert get_task_limit(EnergyState.LOW) == 1
    assert get_task_limit(EnergyState.MEDIUM) == 2
    assert get_task_limit(EnergyState.HIGH) == 3


def test_empty_inputs_use_defaults():
    activities = build_activity_list(PlanInputs(), EnergyState.MEDIUM)

    assert [a.name for a in activities] == [
        "Morning Routine",
        "Breakfast",
        "Lunch",
        "Dinner",
        PRIMARY_FOCUS_BLOCK_NAME,
    ]
    assert activities[0].duration_minutes == 30
    assert [a.duration_minutes for a in activities[1:4]] == [15, 30, 45]
    assert activities[-1].type == ActivityType.TASK
    assert activities[-1].duration_minutes == 60


def test_order_routine_commitments_meals_tasks():
    commitment = Commitment(
        id="c1",
        title="Standup",
        start_time=datetime(2026, 3, 2, 10, 0),
        end_time=datetime(2026, 3, 2, 10, 30),
        location="Office",
    )
    inputs = PlanInputs(
        commitments=[commitment],
        tasks=[make_task(1, 45), make_task(2)],
        routines=RoutineSet(
            morning=Routine(id="r1", name="Stretch", slot=RoutineSlot.MORNING, estimated_duration_minutes=15)
        ),
    )

    activities = build_activity_list(inputs, EnergyState.HIGH)

    assert [a.type for a in activities] == [
        ActivityType.ROUTINE,
        ActivityType.COMMITMENT,
        ActivityType.MEAL,
        ActivityType.MEAL,
        ActivityType.MEAL,
        ActivityType.TASK,
        ActivityType.TASK,
    ]
    routine, fixed = activities[0], activities[1]
    assert routine.name == "Stretch"
    assert routine.duration_minutes == 15
    assert routine.source_id == "r1"
    assert fixed.fixed is True
    assert fixed.start_time == commitment.start_time
    assert fixed.duration_minutes == 30
    assert fixed.location == "Office"
    assert activities[-2].duration_minutes == 45
    # Unestimated task falls back to an hour
    assert activities[-1].duration_minutes == 60


def test_tasks_capped_by_energy():
    inputs = PlanInputs(tasks=[make_task(i) for i in range(5)])

    low = build_activity_list(inputs, EnergyState.LOW)
    high = build_activity_list(inputs, EnergyState.HIGH)

    assert [a.name for a in low if a.type == ActivityType.TASK] == ["Task 0"]
    assert [a.name for a in high if a.type == ActivityType.TASK] == ["Task 0", "Task 1", "Task 2"]


def test_evening_routine_never_in_activity_list():
    inputs = PlanInputs(
        routines=RoutineSet(
            evening=Routine(id="r2", name="Wind down", slot=RoutineSlot.EVENING, estimated_duration_minutes=25)
        )
    )

    activities = build_activity_list(inputs, EnergyState.MEDIUM)

    assert all(a.name != "Wind down" for a in activities)


def test_build_evening_routine_default_and_custom():
    default = build_evening_routine(RoutineSet())
    custom = build_evening_routine(
        RoutineSet(
            evening=Routine(id="r2", name="Wind down", slot=RoutineSlot.EVENING, estimated_duration_minutes=25)
        )
    )

    assert (default.name, default.duration_minutes) == ("Evening Routine", 20)
    assert (custom.name, custom.duration_minutes, custom.source_id) == ("Wind down", 25, "r2")


def test_routine_set_picks_first_routine_per_slot():
    routines = [
        Routine(id="a", name="A", slot=RoutineSlot.EVENING, estimated_duration_minutes=10),
        Routine(id="b", name="B", slot=RoutineSlot.MORNING, estimated_duration_minutes=10),
        Routine(id="c", name="C", slot=RoutineSlot.EVENING, estimated_duration_minutes=10),
    ]

    routine_set = RoutineSet.from_routines(routines)

    assert routine_set.morning.id == "b"
    assert routine_set.evening.id == "a"
