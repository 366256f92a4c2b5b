"""
Activity list construction.

Turns raw commitments, tasks and routines into the ordered candidate list
that the schedule assembler works from.
"""

from __future__ import annotations

from dayplanner.models.activity import Activity
from dayplanner.models.enums import ActivityType, EnergyState, MealType
from dayplanner.models.inputs import PlanInputs, RoutineSet
from dayplanner.utils.datetime_utils import minutes_between

DEFAULT_MORNING_ROUTINE_NAME = "Morning Routine"
DEFAULT_MORNING_ROUTINE_MINUTES = 30
DEFAULT_EVENING_ROUTINE_NAME = "Evening Routine"
DEFAULT_EVENING_ROUTINE_MINUTES = 20

DEFAULT_TASK_MINUTES = 60
PRIMARY_FOCUS_BLOCK_NAME = "Primary Focus Block"
PRIMARY_FOCUS_BLOCK_MINUTES = 60

MEAL_DURATIONS: dict[MealType, int] = {
    MealType.BREAKFAST: 15,
    MealType.LUNCH: 30,
    MealType.DINNER: 45,
}

TASK_LIMITS: dict[EnergyState, int] = {
    EnergyState.LOW: 1,
    EnergyState.MEDIUM: 2,
    EnergyState.HIGH: 3,
}


def get_task_limit(energy_state: EnergyState) -> int:
    """How many tasks the day can carry for a given energy state."""
    return TASK_LIMITS.get(energy_state, TASK_LIMITS[EnergyState.MEDIUM])


def meal_activity_name(meal: MealType) -> str:
    return meal.value.capitalize()


def build_activity_list(inputs: PlanInputs, energy_state: EnergyState) -> list[Activity]:
    """
    Build the ordered candidate list for one generation pass.

    Order: morning routine, fixed commitments, breakfast/lunch/dinner
    placeholders, then tasks (capped by energy). The evening routine is
    left out on purpose; the assembler schedules it last.
    """
    activities: list[Activity] = []

    morning = inputs.routines.morning
    if morning:
        activities.append(
            Activity(
                type=ActivityType.ROUTINE,
                name=morning.name,
                duration_minutes=morning.estimated_duration_minutes,
                source_id=morning.id,
            )
        )
    else:
        activities.append(
            Activity(
                type=ActivityType.ROUTINE,
                name=DEFAULT_MORNING_ROUTINE_NAME,
                duration_minutes=DEFAULT_MORNING_ROUTINE_MINUTES,
            )
        )

    for commitment in inputs.commitments:
        activities.append(
            Activity(
                type=ActivityType.COMMITMENT,
                name=commitment.title,
                duration_minutes=max(0, minutes_between(commitment.start_time, commitment.end_time)),
                fixed=True,
                start_time=commitment.start_time,
                location=commitment.location,
                source_id=commitment.id,
            )
        )

    for meal, duration in MEAL_DURATIONS.items():
        activities.append(
            Activity(
                type=ActivityType.MEAL,
                name=meal_activity_name(meal),
                duration_minutes=duration,
            )
        )

    selected = inputs.tasks[: get_task_limit(energy_state)]
    if not selected:
        activities.append(
            Activity(
                type=ActivityType.TASK,
                name=PRIMARY_FOCUS_BLOCK_NAME,
                duration_minutes=PRIMARY_FOCUS_BLOCK_MINUTES,
            )
        )
    for task in selected:
        activities.append(
            Activity(
                type=ActivityType.TASK,
                name=task.title,
                duration_minutes=task.estimated_duration_minutes or DEFAULT_TASK_MINUTES,
                source_id=task.id,
            )
        )

    return activities


def build_evening_routine(routines: RoutineSet) -> Activity:
    """The evening routine activity (user's own, or the 20-minute default)."""
    evening = routines.evening
    if evening:
        return Activity(
            type=ActivityType.ROUTINE,
            name=evening.name,
            duration_minutes=evening.estimated_duration_minutes,
            source_id=evening.id,
        )
    return Activity(
        type=ActivityType.ROUTINE,
        name=DEFAULT_EVENING_ROUTINE_NAME,
        duration_minutes=DEFAULT_EVENING_ROUTINE_MINUTES,
    )
