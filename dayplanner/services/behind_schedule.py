"""
Behind-schedule check, polled by clients about once a minute.
"""

from datetime import datetime
from typing import Optional

from dayplanner.models.daily_plan import DailyPlan, TimeBlock
from dayplanner.models.enums import BlockStatus
from dayplanner.utils.datetime_utils import add_minutes

BEHIND_SCHEDULE_GRACE_MINUTES = 30


def current_block(plan: DailyPlan) -> Optional[TimeBlock]:
    """First pending block that ends after the plan start, skipped blocks ignored."""
    for block in sorted(plan.blocks, key=lambda b: b.sequence_order):
        if block.end_time <= plan.plan_start:
            continue
        if block.status == BlockStatus.PENDING:
            return block
    return None


def is_behind_schedule(
    plan: DailyPlan,
    now: datetime,
    grace_minutes: int = BEHIND_SCHEDULE_GRACE_MINUTES,
) -> bool:
    """
    True when the current block's end plus the grace period has passed.

    Nothing before the current pending block counts, so a run of skipped
    blocks never makes the plan late on its own.
    """
    block = current_block(plan)
    if block is None:
        return False
    if block.start_time > now:
        return False
    return now > add_minutes(block.end_time, grace_minutes)
