"""
Routine provider interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from dayplanner.models.inputs import Routine


class IRoutineProvider(ABC):
    @abstractmethod
    async def get_active_routines(self, user_id: str) -> list[Routine]:
        """Get the user's active routines (at most one per slot is used)."""
        pass
