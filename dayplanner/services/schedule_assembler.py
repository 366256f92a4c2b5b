"""
Schedule assembler.

Merges pinned blocks (commitments, their travel legs and placed meals) with
the flexible activity queue into one chronological, non-overlapping block
sequence, then schedules the evening routine, marks everything that ended
before the plan start as skipped, and falls back to a tail plan when nothing
actionable is left.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from dayplanner.core.logger import setup_logger
from dayplanner.models.activity import Activity
from dayplanner.models.daily_plan import TimeBlockCreate, TimeBlockMetadata
from dayplanner.models.enums import ActivityType, BlockStatus, EnergyState, MealType
from dayplanner.models.inputs import ExitTime, RoutineSet
from dayplanner.models.meal import MealPlacement
from dayplanner.services.activity_list_builder import (
    DEFAULT_EVENING_ROUTINE_MINUTES,
    DEFAULT_EVENING_ROUTINE_NAME,
    PRIMARY_FOCUS_BLOCK_MINUTES,
    PRIMARY_FOCUS_BLOCK_NAME,
    build_evening_routine,
    meal_activity_name,
)
from dayplanner.services.meal_placement import place_meals
from dayplanner.utils.datetime_utils import add_minutes, at_clock

logger = setup_logger(__name__)

BUFFER_MINUTES = 5
BUFFER_NAME = "Transition"
EVENING_ROUTINE_EARLIEST = "18:00"
SKIP_BEFORE_PLAN_START = "Occurred before plan start"

# (name, type, minutes); the focus block is left out on low energy days
TAIL_PLAN_ITEMS: tuple[tuple[str, ActivityType, int], ...] = (
    ("Reset/Admin", ActivityType.TASK, 10),
    (PRIMARY_FOCUS_BLOCK_NAME, ActivityType.TASK, PRIMARY_FOCUS_BLOCK_MINUTES),
    ("Dinner", ActivityType.MEAL, 45),
    (DEFAULT_EVENING_ROUTINE_NAME, ActivityType.ROUTINE, DEFAULT_EVENING_ROUTINE_MINUTES),
)


@dataclass
class AssemblyResult:
    """Blocks for one plan plus the decisions made while building them."""

    blocks: list[TimeBlockCreate]
    meal_placements: list[MealPlacement] = field(default_factory=list)
    unplaced_activities: list[Activity] = field(default_factory=list)
    tail_plan_used: bool = False


@dataclass
class _Walk:
    """Accumulator for the fold over pinned blocks."""

    cursor: datetime
    queue: deque[Activity]
    output: list[TimeBlockCreate] = field(default_factory=list)


def build_anchor_blocks(
    commitments: list[Activity],
    exit_times: list[ExitTime],
) -> list[TimeBlockCreate]:
    """
    Materialize fixed blocks: a travel leg (when an exit time exists) and the
    commitment itself, sorted by start time.
    """
    exits = {exit_time.commitment_id: exit_time for exit_time in exit_times}
    blocks: list[TimeBlockCreate] = []
    for commitment in commitments:
        if commitment.start_time is None:
            continue
        exit_time = exits.get(commitment.source_id) if commitment.source_id else None
        if exit_time:
            travel_end = add_minutes(commitment.start_time, -exit_time.preparation_time_minutes)
            if travel_end > exit_time.exit_time:
                blocks.append(
                    TimeBlockCreate(
                        start_time=exit_time.exit_time,
                        end_time=travel_end,
                        activity_type=ActivityType.TRAVEL,
                        name=f"Travel to {commitment.name}",
                        source_id=commitment.source_id,
                        fixed=True,
                    )
                )
        blocks.append(
            TimeBlockCreate(
                start_time=commitment.start_time,
                end_time=add_minutes(commitment.start_time, commitment.duration_minutes),
                activity_type=ActivityType.COMMITMENT,
                name=commitment.name,
                source_id=commitment.source_id,
                fixed=True,
            )
        )
    blocks.sort(key=lambda block: block.start_time)
    return _clamp_travel(blocks)


def _clamp_travel(blocks: list[TimeBlockCreate]) -> list[TimeBlockCreate]:
    """Start each travel leg no earlier than the end of the block before it."""
    clamped: list[TimeBlockCreate] = []
    occupied_until: Optional[datetime] = None
    for block in blocks:
        if block.activity_type == ActivityType.TRAVEL and occupied_until:
            if occupied_until >= block.end_time:
                continue
            if occupied_until > block.start_time:
                block = block.model_copy(update={"start_time": occupied_until})
        clamped.append(block)
        if occupied_until is None or block.end_time > occupied_until:
            occupied_until = block.end_time
    return clamped


def build_tail_plan(
    plan_start: datetime,
    sleep_time: datetime,
    energy_state: EnergyState,
    buffer_minutes: int = BUFFER_MINUTES,
) -> list[TimeBlockCreate]:
    """
    Minimal sequence for a plan generated too late to hold anything else.

    Items are appended in order while they fit before sleep; the first item
    that does not fit ends the sequence.
    """
    blocks: list[TimeBlockCreate] = []
    cursor = plan_start
    for name, activity_type, minutes in TAIL_PLAN_ITEMS:
        if name == PRIMARY_FOCUS_BLOCK_NAME and energy_state == EnergyState.LOW:
            continue
        end = add_minutes(cursor, minutes)
        if end > sleep_time:
            break
        blocks.append(
            TimeBlockCreate(
                start_time=cursor,
                end_time=end,
                activity_type=activity_type,
                name=name,
            )
        )
        cursor = end
        buffer = _buffer_after(cursor, buffer_minutes, limit=sleep_time)
        if buffer:
            blocks.append(buffer)
            cursor = buffer.end_time
    return blocks


def _buffer_after(start: datetime, buffer_minutes: int, limit: datetime) -> Optional[TimeBlockCreate]:
    end = add_minutes(start, buffer_minutes)
    if end > limit:
        return None
    return TimeBlockCreate(
        start_time=start,
        end_time=end,
        activity_type=ActivityType.BUFFER,
        name=BUFFER_NAME,
    )


def _meal_durations(activities: list[Activity]) -> dict[MealType, int]:
    by_name = {meal_activity_name(meal): meal for meal in MealType}
    return {
        by_name[activity.name]: activity.duration_minutes
        for activity in activities
        if activity.type == ActivityType.MEAL and activity.name in by_name
    }


def _meal_block(placement: MealPlacement) -> TimeBlockCreate:
    return TimeBlockCreate(
        start_time=placement.start_time,
        end_time=placement.end_time,
        activity_type=ActivityType.MEAL,
        name=placement.display_name,
        metadata=TimeBlockMetadata(
            target_time=placement.target_time,
            placement_reason=placement.placement_reason,
        ),
    )


class ScheduleAssembler:
    """
    Gap-filling scheduler for one day.

    Greedy and non-backtracking: flexible activities are taken from the
    front of the queue while they fit, and an activity that does not fit
    waits for the next gap.
    """

    def __init__(
        self,
        buffer_minutes: int = BUFFER_MINUTES,
        evening_routine_earliest: str = EVENING_ROUTINE_EARLIEST,
    ):
        self.buffer_minutes = buffer_minutes
        self.evening_routine_earliest = evening_routine_earliest

    def assemble(
        self,
        activities: list[Activity],
        exit_times: list[ExitTime],
        wake_time: datetime,
        sleep_time: datetime,
        plan_start: datetime,
        energy_state: EnergyState,
        now: datetime,
        routines: Optional[RoutineSet] = None,
    ) -> AssemblyResult:
        """
        Build the block sequence for a day.

        Args:
            activities: Output of build_activity_list
            exit_times: Exit-time results for the commitments
            wake_time: Start of the day; the walk begins here
            sleep_time: Nothing is scheduled past this
            plan_start: Blocks ending at or before this are marked skipped
            energy_state: Used by the tail plan
            now: Current time, captured once by the caller
            routines: Source of the evening routine (default when absent)

        Returns:
            AssemblyResult with blocks numbered by sequence_order
        """
        commitments = [a for a in activities if a.fixed and a.type == ActivityType.COMMITMENT]
        anchors = build_anchor_blocks(commitments, exit_times)

        meal_placements = place_meals(
            anchors,
            wake_time,
            sleep_time,
            max(now, wake_time),
            meal_durations=_meal_durations(activities),
        )
        pinned = anchors + [_meal_block(p) for p in meal_placements if not p.skipped]
        pinned.sort(key=lambda block: block.start_time)

        flexible = deque(a for a in activities if not a.fixed and a.type != ActivityType.MEAL)
        walk = _Walk(cursor=wake_time, queue=flexible)
        for index, block in enumerate(pinned):
            next_start = pinned[index + 1].start_time if index + 1 < len(pinned) else sleep_time
            walk = self._emit_pinned(self._fill_gap(walk, block.start_time), block, next_start)
        walk = self._fill_until_sleep(walk, sleep_time)

        evening = build_evening_routine(routines or RoutineSet())
        walk = self._place_evening_routine(walk, evening, wake_time, sleep_time, plan_start)

        blocks = walk.output
        for block in blocks:
            if block.end_time <= plan_start:
                block.status = BlockStatus.SKIPPED
                block.skip_reason = SKIP_BEFORE_PLAN_START

        tail_plan_used = not any(
            block.status == BlockStatus.PENDING and block.end_time > plan_start for block in blocks
        )
        if tail_plan_used:
            tail = build_tail_plan(plan_start, sleep_time, energy_state, self.buffer_minutes)
            logger.info(f"No actionable blocks after {plan_start:%H:%M}; using tail plan ({len(tail)} blocks)")
            blocks.extend(tail)

        for order, block in enumerate(blocks, start=1):
            block.sequence_order = order

        skipped = sum(1 for block in blocks if block.status == BlockStatus.SKIPPED)
        logger.info(
            f"Assembled {len(blocks)} blocks ({skipped} skipped, "
            f"{len(walk.queue)} flexible activities unplaced)"
        )
        return AssemblyResult(
            blocks=blocks,
            meal_placements=meal_placements,
            unplaced_activities=list(walk.queue),
            tail_plan_used=tail_plan_used,
        )

    def _place(self, walk: _Walk, activity: Activity, limit: datetime) -> None:
        end = add_minutes(walk.cursor, activity.duration_minutes)
        walk.output.append(
            TimeBlockCreate(
                start_time=walk.cursor,
                end_time=end,
                activity_type=activity.type,
                name=activity.name,
                source_id=activity.source_id,
            )
        )
        walk.cursor = end
        buffer = _buffer_after(end, self.buffer_minutes, limit)
        if buffer:
            walk.output.append(buffer)
            walk.cursor = buffer.end_time

    def _fill_gap(self, walk: _Walk, gap_end: datetime) -> _Walk:
        while walk.queue and walk.cursor < gap_end:
            activity = walk.queue[0]
            needed = add_minutes(walk.cursor, activity.duration_minutes + self.buffer_minutes)
            if needed > gap_end:
                break
            self._place(walk, walk.queue.popleft(), gap_end)
        return walk

    def _emit_pinned(self, walk: _Walk, block: TimeBlockCreate, next_start: datetime) -> _Walk:
        walk.output.append(block)
        walk.cursor = max(walk.cursor, block.end_time)
        buffer = _buffer_after(walk.cursor, self.buffer_minutes, limit=next_start)
        if buffer:
            walk.output.append(buffer)
            walk.cursor = buffer.end_time
        return walk

    def _fill_until_sleep(self, walk: _Walk, sleep_time: datetime) -> _Walk:
        while walk.queue and walk.cursor < sleep_time:
            activity = walk.queue[0]
            if add_minutes(walk.cursor, activity.duration_minutes) > sleep_time:
                break
            self._place(walk, walk.queue.popleft(), sleep_time)
        return walk

    def _place_evening_routine(
        self,
        walk: _Walk,
        evening: Activity,
        wake_time: datetime,
        sleep_time: datetime,
        plan_start: datetime,
    ) -> _Walk:
        start = max(walk.cursor, plan_start)
        earliest = at_clock(wake_time, self.evening_routine_earliest)
        if sleep_time >= earliest:
            start = max(start, earliest)

        if add_minutes(start, evening.duration_minutes) > sleep_time:
            logger.info(f"Evening routine dropped: does not fit before {sleep_time:%H:%M}")
            return walk

        walk.cursor = start
        self._place(walk, evening, sleep_time)
        return walk
