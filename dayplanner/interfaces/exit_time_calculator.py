"""
Exit-time calculator interface.

Travel routing lives outside the planner; it only tells us when to leave.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from dayplanner.models.inputs import Commitment, ExitTime


class IExitTimeCalculator(ABC):
    @abstractmethod
    async def calculate_exit_times(
        self,
        commitments: list[Commitment],
        current_location: Optional[str] = None,
    ) -> list[ExitTime]:
        """
        Compute when to leave for each commitment.

        Args:
            commitments: The day's commitments
            current_location: Where the user starts from

        Returns:
            One entry per commitment that needs travel (others are omitted)
        """
        pass
