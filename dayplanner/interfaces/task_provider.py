"""
Task provider interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from dayplanner.models.inputs import PendingTask


class ITaskProvider(ABC):
    """Abstract source of pending tasks."""

    @abstractmethod
    async def get_pending_tasks(self, user_id: str, limit: int = 10) -> list[PendingTask]:
        """
        Get up to ``limit`` pending tasks sorted by deadline ascending.
        """
        pass
