"""API routers."""

from dayplanner.api import daily_plans, time_blocks

__all__ = [
    "daily_plans",
    "time_blocks",
]
