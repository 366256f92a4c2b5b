"""
Commitment provider interface.

Supplies the day's fixed calendar commitments.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from dayplanner.models.inputs import Commitment


class ICommitmentProvider(ABC):
    """Abstract source of calendar commitments."""

    @abstractmethod
    async def get_commitments(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
    ) -> list[Commitment]:
        """
        Get commitments that start within a time range.

        Args:
            user_id: Owner user ID
            start: Range start (inclusive)
            end: Range end (inclusive)

        Returns:
            Commitments ordered by start time
        """
        pass
