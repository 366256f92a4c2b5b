"""
Meal placement.

Places breakfast, lunch and dinner one after another. Each meal gets a target
time, is clamped into its window, checked against the spacing from the
previous meal, nudged around fixed blocks by a small local search, and
finally checked against sleep time. Any failed step skips the meal with a
reason instead of bending the window.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from dayplanner.core.logger import setup_logger
from dayplanner.models.daily_plan import TimeBlockCreate
from dayplanner.models.enums import ActivityType, MealType, PlacementReason
from dayplanner.models.meal import MealPlacement
from dayplanner.services.activity_list_builder import MEAL_DURATIONS
from dayplanner.utils.datetime_utils import add_minutes, at_clock

logger = setup_logger(__name__)

MEAL_ORDER = (MealType.BREAKFAST, MealType.LUNCH, MealType.DINNER)

MEAL_WINDOWS: dict[MealType, tuple[str, str]] = {
    MealType.BREAKFAST: ("06:30", "11:30"),
    MealType.LUNCH: ("11:30", "15:30"),
    MealType.DINNER: ("17:00", "21:30"),
}

DEFAULT_MEAL_TIMES: dict[MealType, str] = {
    MealType.BREAKFAST: "09:30",
    MealType.LUNCH: "13:00",
    MealType.DINNER: "19:00",
}

MIN_MEAL_GAP_MINUTES = 180
SLOT_SEARCH_RANGE_MINUTES = 30
SLOT_SEARCH_STEP_MINUTES = 5

LATE_WAKE_CLOCK = "09:00"
BREAKFAST_AFTER_WAKE_MINUTES = 45
MEAL_AFTER_ANCHOR_MINUTES = 30
LUNCH_ANCHOR_CUTOFF = "12:00"
LUNCH_ANCHOR_DEFAULT = "12:30"
DINNER_ANCHOR_CUTOFF = "15:00"

SKIP_PAST_WINDOW = "Past meal window"
SKIP_SPACING = "Spacing constraint"
SKIP_NO_SLOT = "No valid slot"
SKIP_PAST_SLEEP = "Would exceed sleep time"


def meal_window(meal: MealType, day: datetime) -> tuple[datetime, datetime]:
    start, end = MEAL_WINDOWS[meal]
    return at_clock(day, start), at_clock(day, end)


def has_conflict(start: datetime, end: datetime, anchors: list[TimeBlockCreate]) -> bool:
    return any(anchor.overlaps(start, end) for anchor in anchors)


def check_meal_spacing(
    proposed_start: datetime,
    previous_meal_end: Optional[datetime],
    min_gap_minutes: int = MIN_MEAL_GAP_MINUTES,
) -> bool:
    """Spacing is measured from the previous meal's end, not its start."""
    if previous_meal_end is None:
        return True
    return proposed_start - previous_meal_end >= timedelta(minutes=min_gap_minutes)


def calculate_meal_target_time(
    meal: MealType,
    commitments: list[TimeBlockCreate],
    wake_time: datetime,
) -> datetime:
    """
    Pick the time a meal would ideally start.

    Without commitments the defaults apply (breakfast moves to wake + 45min
    for a wake at or after 09:00). With commitments, lunch and dinner follow
    the last morning/evening commitment by 30 minutes.
    """
    if not commitments:
        if meal == MealType.BREAKFAST and wake_time >= at_clock(wake_time, LATE_WAKE_CLOCK):
            return add_minutes(wake_time, BREAKFAST_AFTER_WAKE_MINUTES)
        return at_clock(wake_time, DEFAULT_MEAL_TIMES[meal])

    if meal == MealType.BREAKFAST:
        return add_minutes(wake_time, BREAKFAST_AFTER_WAKE_MINUTES)

    if meal == MealType.LUNCH:
        noon = at_clock(wake_time, LUNCH_ANCHOR_CUTOFF)
        morning = [c for c in commitments if c.end_time < noon]
        if morning:
            last_end = max(c.end_time for c in morning)
            return add_minutes(last_end, MEAL_AFTER_ANCHOR_MINUTES)
        return at_clock(wake_time, LUNCH_ANCHOR_DEFAULT)

    afternoon = at_clock(wake_time, DINNER_ANCHOR_CUTOFF)
    evening = [c for c in commitments if c.end_time > afternoon]
    if evening:
        last_end = max(c.end_time for c in evening)
        return add_minutes(last_end, MEAL_AFTER_ANCHOR_MINUTES)
    return at_clock(wake_time, DEFAULT_MEAL_TIMES[MealType.DINNER])


def clamp_to_meal_window(target: datetime, meal: MealType, now: datetime) -> Optional[datetime]:
    """
    Clamp a target into the meal's window and never before ``now``.

    Returns None once the window has closed relative to ``now``.
    """
    window_start, window_end = meal_window(meal, target)
    if now > window_end:
        return None

    clamped = min(max(target, window_start), window_end)
    if clamped < now:
        clamped = now
    if clamped > window_end:
        return None
    return clamped


def find_available_slot(
    target: datetime,
    duration_minutes: int,
    anchors: list[TimeBlockCreate],
    search_range_minutes: int = SLOT_SEARCH_RANGE_MINUTES,
    step_minutes: int = SLOT_SEARCH_STEP_MINUTES,
    earliest: Optional[datetime] = None,
    latest: Optional[datetime] = None,
) -> Optional[datetime]:
    """
    Find a conflict-free start near ``target``.

    Tries the target, then forward, then backward in ``step_minutes`` steps
    up to ``search_range_minutes``. Candidates outside ``[earliest, latest]``
    are not considered.
    """
    offsets = [0]
    offsets += list(range(step_minutes, search_range_minutes + 1, step_minutes))
    offsets += [-offset for offset in range(step_minutes, search_range_minutes + 1, step_minutes)]

    for offset in offsets:
        candidate = add_minutes(target, offset)
        if earliest is not None and candidate < earliest:
            continue
        if latest is not None and candidate > latest:
            continue
        if not has_conflict(candidate, add_minutes(candidate, duration_minutes), anchors):
            return candidate
    return None


def place_meals(
    anchors: list[TimeBlockCreate],
    wake_time: datetime,
    sleep_time: datetime,
    now: datetime,
    meal_durations: Optional[dict[MealType, int]] = None,
    min_gap_minutes: int = MIN_MEAL_GAP_MINUTES,
) -> list[MealPlacement]:
    """
    Place the three daily meals around the fixed blocks.

    Args:
        anchors: Fixed blocks (commitments and travel) for the day
        wake_time: Start of the day
        sleep_time: End of the day
        now: Effective current time; nothing is placed before it
        meal_durations: Override of the 15/30/45 minute defaults
        min_gap_minutes: Minimum gap between one meal's end and the next start

    Returns:
        One placement per meal, in breakfast/lunch/dinner order
    """
    durations = {**MEAL_DURATIONS, **(meal_durations or {})}
    commitments = [a for a in anchors if a.activity_type == ActivityType.COMMITMENT]
    reason = PlacementReason.ANCHOR_AWARE if commitments else PlacementReason.DEFAULT

    placements: list[MealPlacement] = []
    previous_meal_end: Optional[datetime] = None

    for meal in MEAL_ORDER:
        target = calculate_meal_target_time(meal, commitments, wake_time)

        clamped = clamp_to_meal_window(target, meal, now)
        if clamped is None:
            placements.append(_skip(meal, SKIP_PAST_WINDOW, target))
            continue

        if not check_meal_spacing(clamped, previous_meal_end, min_gap_minutes):
            placements.append(_skip(meal, SKIP_SPACING, target))
            continue

        duration = durations[meal]
        window_start, window_end = meal_window(meal, target)
        earliest = max(window_start, now)
        if previous_meal_end is not None:
            earliest = max(earliest, add_minutes(previous_meal_end, min_gap_minutes))
        slot = find_available_slot(clamped, duration, anchors, earliest=earliest, latest=window_end)
        if slot is None:
            placements.append(_skip(meal, SKIP_NO_SLOT, target))
            continue

        meal_end = add_minutes(slot, duration)
        if meal_end > sleep_time:
            placements.append(_skip(meal, SKIP_PAST_SLEEP, target))
            continue

        logger.info(
            f"Placed {meal.value} at {slot:%H:%M}-{meal_end:%H:%M} "
            f"(target {target:%H:%M}, {reason.value})"
        )
        placements.append(
            MealPlacement(
                meal=meal,
                start_time=slot,
                duration_minutes=duration,
                target_time=target,
                placement_reason=reason,
            )
        )
        previous_meal_end = meal_end

    placed = sum(1 for p in placements if not p.skipped)
    logger.info(f"Meal placement: {placed} placed, {len(placements) - placed} skipped")
    return placements


def _skip(meal: MealType, skip_reason: str, target: datetime) -> MealPlacement:
    logger.info(f"Skipped {meal.value}: {skip_reason}")
    return MealPlacement(meal=meal, skipped=True, skip_reason=skip_reason, target_time=target)
