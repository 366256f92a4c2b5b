"""
In-memory commitment, task and routine providers.

Used by the local environment and tests; calendars, task stores and routine
settings live in other services in a real deployment.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Optional

from dayplanner.interfaces.commitment_provider import ICommitmentProvider
from dayplanner.interfaces.routine_provider import IRoutineProvider
from dayplanner.interfaces.task_provider import ITaskProvider
from dayplanner.models.inputs import Commitment, PendingTask, Routine


class InMemoryCommitmentProvider(ICommitmentProvider):
    def __init__(self):
        self._commitments: dict[str, list[Commitment]] = defaultdict(list)

    def add(self, user_id: str, commitment: Commitment) -> None:
        self._commitments[user_id].append(commitment)

    async def get_commitments(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
    ) -> list[Commitment]:
        matches = [
            c.model_copy()
            for c in self._commitments.get(user_id, [])
            if start <= c.start_time <= end
        ]
        return sorted(matches, key=lambda c: c.start_time)


class InMemoryTaskProvider(ITaskProvider):
    def __init__(self):
        self._tasks: dict[str, list[tuple[Optional[datetime], PendingTask]]] = defaultdict(list)

    def add(self, user_id: str, task: PendingTask, due_date: Optional[datetime] = None) -> None:
        self._tasks[user_id].append((due_date, task))

    async def get_pending_tasks(self, user_id: str, limit: int = 10) -> list[PendingTask]:
        # Tasks without a deadline sort last
        entries = sorted(
            self._tasks.get(user_id, []),
            key=lambda entry: (entry[0] is None, entry[0] or datetime.max),
        )
        return [task for _, task in entries[:limit]]


class InMemoryRoutineProvider(IRoutineProvider):
    def __init__(self):
        self._routines: dict[str, list[Routine]] = defaultdict(list)

    def add(self, user_id: str, routine: Routine) -> None:
        self._routines[user_id].append(routine)

    async def get_active_routines(self, user_id: str) -> list[Routine]:
        return list(self._routines.get(user_id, []))
