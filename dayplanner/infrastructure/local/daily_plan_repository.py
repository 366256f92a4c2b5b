"""
SQLite implementation of the daily plan repository.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import and_, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dayplanner.core.exceptions import InfrastructureError, NotFoundError
from dayplanner.infrastructure.local.database import (
    DailyPlanORM,
    ExitTimeORM,
    TimeBlockORM,
    get_session_factory,
)
from dayplanner.interfaces.daily_plan_repository import IDailyPlanRepository
from dayplanner.models.daily_plan import (
    DailyPlan,
    DailyPlanCreate,
    ExitTimeRecord,
    TimeBlock,
    TimeBlockCreate,
    TimeBlockMetadata,
    TimeBlockUpdate,
)
from dayplanner.models.enums import ActivityType, BlockStatus, EnergyState, PlanStatus
from dayplanner.models.inputs import ExitTime


class SqliteDailyPlanRepository(IDailyPlanRepository):
    """SQLite implementation of daily plan repository."""

    def __init__(self, session_factory=None):
        """
        Initialize repository.

        Args:
            session_factory: Optional session factory (for testing)
        """
        self._session_factory = session_factory or get_session_factory()

    def _block_to_model(self, orm: TimeBlockORM) -> TimeBlock:
        return TimeBlock(
            id=UUID(orm.id),
            plan_id=UUID(orm.plan_id),
            start_time=orm.start_time,
            end_time=orm.end_time,
            activity_type=ActivityType(orm.activity_type),
            name=orm.name,
            source_id=orm.source_id,
            fixed=bool(orm.fixed),
            sequence_order=orm.sequence_order,
            status=BlockStatus(orm.status),
            skip_reason=orm.skip_reason,
            metadata=TimeBlockMetadata(**orm.metadata_json) if orm.metadata_json else None,
            created_at=orm.created_at,
            updated_at=orm.updated_at,
        )

    def _exit_time_to_model(self, orm: ExitTimeORM) -> ExitTimeRecord:
        return ExitTimeRecord(
            id=UUID(orm.id),
            plan_id=UUID(orm.plan_id),
            time_block_id=UUID(orm.time_block_id) if orm.time_block_id else None,
            commitment_id=orm.commitment_id,
            exit_time=orm.exit_time,
            travel_duration_minutes=orm.travel_duration_minutes,
            preparation_time_minutes=orm.preparation_time_minutes,
            travel_method=orm.travel_method,
            created_at=orm.created_at,
        )

    def _block_to_orm(self, plan_id: str, user_id: str, block: TimeBlockCreate) -> TimeBlockORM:
        now = datetime.utcnow()
        return TimeBlockORM(
            id=str(uuid4()),
            plan_id=plan_id,
            user_id=user_id,
            start_time=block.start_time,
            end_time=block.end_time,
            activity_type=block.activity_type.value,
            name=block.name,
            source_id=block.source_id,
            fixed=block.fixed,
            sequence_order=block.sequence_order,
            status=block.status.value,
            skip_reason=block.skip_reason,
            metadata_json=block.metadata.model_dump(mode="json") if block.metadata else None,
            created_at=now,
            updated_at=now,
        )

    async def _load_plan(self, session: AsyncSession, orm: DailyPlanORM) -> DailyPlan:
        blocks = await session.execute(
            select(TimeBlockORM)
            .where(TimeBlockORM.plan_id == orm.id)
            .order_by(TimeBlockORM.sequence_order.asc(), TimeBlockORM.start_time.asc())
        )
        exit_times = await session.execute(
            select(ExitTimeORM)
            .where(ExitTimeORM.plan_id == orm.id)
            .order_by(ExitTimeORM.exit_time.asc())
        )
        return DailyPlan(
            id=UUID(orm.id),
            user_id=orm.user_id,
            plan_date=orm.plan_date,
            wake_time=orm.wake_time,
            sleep_time=orm.sleep_time,
            energy_state=EnergyState(orm.energy_state),
            status=PlanStatus(orm.status),
            generated_at=orm.generated_at,
            generated_after_now=bool(orm.generated_after_now),
            plan_start=orm.plan_start,
            updated_at=orm.updated_at,
            blocks=[self._block_to_model(b) for b in blocks.scalars().all()],
            exit_times=[self._exit_time_to_model(e) for e in exit_times.scalars().all()],
        )

    async def create_plan(
        self,
        plan: DailyPlanCreate,
        blocks: list[TimeBlockCreate],
        exit_times: list[ExitTime],
    ) -> DailyPlan:
        async with self._session_factory() as session:
            try:
                orm = DailyPlanORM(
                    id=str(uuid4()),
                    user_id=plan.user_id,
                    plan_date=plan.plan_date,
                    wake_time=plan.wake_time,
                    sleep_time=plan.sleep_time,
                    energy_state=plan.energy_state.value,
                    status=plan.status.value,
                    generated_at=plan.generated_at,
                    generated_after_now=plan.generated_after_now,
                    plan_start=plan.plan_start,
                    updated_at=datetime.utcnow(),
                )
                session.add(orm)
                await session.flush()

                travel_blocks: dict[str, str] = {}
                for block in blocks:
                    block_orm = self._block_to_orm(orm.id, plan.user_id, block)
                    session.add(block_orm)
                    if block.activity_type == ActivityType.TRAVEL and block.source_id:
                        travel_blocks[block.source_id] = block_orm.id
                await session.flush()

                for exit_time in exit_times:
                    session.add(
                        ExitTimeORM(
                            id=str(uuid4()),
                            plan_id=orm.id,
                            time_block_id=travel_blocks.get(exit_time.commitment_id),
                            commitment_id=exit_time.commitment_id,
                            exit_time=exit_time.exit_time,
                            travel_duration_minutes=exit_time.travel_duration_minutes,
                            preparation_time_minutes=exit_time.preparation_time_minutes,
                            travel_method=exit_time.travel_method,
                            created_at=datetime.utcnow(),
                        )
                    )
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise InfrastructureError(f"Failed to store plan for {plan.plan_date}: {e}") from e

            return await self._load_plan(session, orm)

    async def get(self, user_id: str, plan_id: UUID) -> Optional[DailyPlan]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(DailyPlanORM).where(
                    and_(DailyPlanORM.id == str(plan_id), DailyPlanORM.user_id == user_id)
                )
            )
            orm = result.scalar_one_or_none()
            return await self._load_plan(session, orm) if orm else None

    async def get_by_date(self, user_id: str, plan_date: date) -> Optional[DailyPlan]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(DailyPlanORM).where(
                    and_(DailyPlanORM.user_id == user_id, DailyPlanORM.plan_date == plan_date)
                )
            )
            orm = result.scalar_one_or_none()
            return await self._load_plan(session, orm) if orm else None

    async def delete_plan(self, user_id: str, plan_id: UUID) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(
                select(DailyPlanORM).where(
                    and_(DailyPlanORM.id == str(plan_id), DailyPlanORM.user_id == user_id)
                )
            )
            orm = result.scalar_one_or_none()
            if not orm:
                return False
            try:
                # Exit times reference blocks, blocks reference the plan
                await session.execute(delete(ExitTimeORM).where(ExitTimeORM.plan_id == orm.id))
                await session.execute(delete(TimeBlockORM).where(TimeBlockORM.plan_id == orm.id))
                await session.delete(orm)
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise InfrastructureError(f"Failed to delete plan {plan_id}: {e}") from e
            return True

    async def update_plan_status(
        self,
        user_id: str,
        plan_id: UUID,
        status: PlanStatus,
    ) -> Optional[DailyPlan]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(DailyPlanORM).where(
                    and_(DailyPlanORM.id == str(plan_id), DailyPlanORM.user_id == user_id)
                )
            )
            orm = result.scalar_one_or_none()
            if not orm:
                return None
            orm.status = status.value
            orm.updated_at = datetime.utcnow()
            await session.commit()
            await session.refresh(orm)
            return await self._load_plan(session, orm)

    async def get_time_block(self, user_id: str, block_id: UUID) -> Optional[TimeBlock]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(TimeBlockORM).where(
                    and_(TimeBlockORM.id == str(block_id), TimeBlockORM.user_id == user_id)
                )
            )
            orm = result.scalar_one_or_none()
            return self._block_to_model(orm) if orm else None

    async def update_time_block(
        self,
        user_id: str,
        block_id: UUID,
        update: TimeBlockUpdate,
    ) -> Optional[TimeBlock]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(TimeBlockORM).where(
                    and_(TimeBlockORM.id == str(block_id), TimeBlockORM.user_id == user_id)
                )
            )
            orm = result.scalar_one_or_none()
            if not orm:
                return None

            update_data = update.model_dump(exclude_unset=True)
            for field, value in update_data.items():
                if value is not None:
                    if hasattr(value, "value"):  # Enum
                        value = value.value
                    setattr(orm, field, value)
            orm.updated_at = datetime.utcnow()

            await session.commit()
            await session.refresh(orm)
            return self._block_to_model(orm)

    async def create_time_blocks(
        self,
        plan_id: UUID,
        blocks: list[TimeBlockCreate],
    ) -> list[TimeBlock]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(DailyPlanORM).where(DailyPlanORM.id == str(plan_id))
            )
            plan = result.scalar_one_or_none()
            if not plan:
                raise NotFoundError(f"Plan {plan_id} not found")

            orms = [self._block_to_orm(plan.id, plan.user_id, block) for block in blocks]
            try:
                session.add_all(orms)
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise InfrastructureError(f"Failed to add blocks to plan {plan_id}: {e}") from e
            return [self._block_to_model(orm) for orm in orms]

    async def delete_time_blocks(self, plan_id: UUID, block_ids: list[UUID]) -> int:
        if not block_ids:
            return 0
        ids = [str(block_id) for block_id in block_ids]
        async with self._session_factory() as session:
            await session.execute(
                delete(ExitTimeORM).where(ExitTimeORM.time_block_id.in_(ids))
            )
            result = await session.execute(
                delete(TimeBlockORM).where(
                    and_(TimeBlockORM.plan_id == str(plan_id), TimeBlockORM.id.in_(ids))
                )
            )
            await session.commit()
            return result.rowcount or 0
