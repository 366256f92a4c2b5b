"""
Fixed-offset exit-time calculator for local use.

Every commitment with a location gets the same travel and preparation time;
commitments without a location need no travel.
"""

from __future__ import annotations

from typing import Optional

from dayplanner.core.config import get_settings
from dayplanner.interfaces.exit_time_calculator import IExitTimeCalculator
from dayplanner.models.inputs import Commitment, ExitTime
from dayplanner.utils.datetime_utils import add_minutes

DEFAULT_TRAVEL_METHOD = "walking"


class FixedOffsetExitTimeCalculator(IExitTimeCalculator):
    def __init__(
        self,
        travel_minutes: Optional[int] = None,
        preparation_minutes: Optional[int] = None,
        travel_method: str = DEFAULT_TRAVEL_METHOD,
    ):
        settings = get_settings()
        self._travel_minutes = (
            settings.DEFAULT_TRAVEL_MINUTES if travel_minutes is None else travel_minutes
        )
        self._preparation_minutes = (
            settings.DEFAULT_PREPARATION_MINUTES if preparation_minutes is None else preparation_minutes
        )
        self._travel_method = travel_method

    async def calculate_exit_times(
        self,
        commitments: list[Commitment],
        current_location: Optional[str] = None,
    ) -> list[ExitTime]:
        exit_times: list[ExitTime] = []
        for commitment in commitments:
            if not commitment.location or commitment.location == current_location:
                continue
            exit_times.append(
                ExitTime(
                    commitment_id=commitment.id,
                    exit_time=add_minutes(
                        commitment.start_time,
                        -(self._travel_minutes + self._preparation_minutes),
                    ),
                    travel_duration_minutes=self._travel_minutes,
                    preparation_time_minutes=self._preparation_minutes,
                    travel_method=self._travel_method,
                )
            )
        return exit_times
