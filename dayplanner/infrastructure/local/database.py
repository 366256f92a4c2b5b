"""
SQLite database configuration and ORM models.

This module defines the SQLAlchemy ORM models and database initialization.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from dayplanner.core.config import get_settings


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


# ===========================================
# ORM Models
# ===========================================


class DailyPlanORM(Base):
    """One plan per user and day."""

    __tablename__ = "daily_plans"
    __table_args__ = (UniqueConstraint("user_id", "plan_date", name="uq_daily_plans_user_date"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(255), nullable=False, index=True)
    plan_date = Column(Date, nullable=False, index=True)
    wake_time = Column(DateTime, nullable=False)
    sleep_time = Column(DateTime, nullable=False)
    energy_state = Column(String(10), nullable=False, default="medium")
    status = Column(String(20), nullable=False, default="active")
    generated_at = Column(DateTime, nullable=False)
    generated_after_now = Column(Boolean, default=False)
    plan_start = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class TimeBlockORM(Base):
    """Time block ORM model."""

    __tablename__ = "time_blocks"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    plan_id = Column(String(36), ForeignKey("daily_plans.id"), nullable=False, index=True)
    user_id = Column(String(255), nullable=False, index=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    activity_type = Column(String(20), nullable=False)
    name = Column(String(500), nullable=False)
    source_id = Column(String(255), nullable=True)
    fixed = Column(Boolean, default=False)
    sequence_order = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="pending", index=True)
    skip_reason = Column(Text, nullable=True)
    # target_time / placement_reason for meals
    metadata_json = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class ExitTimeORM(Base):
    """Exit time ORM model, linked to the travel block of its commitment."""

    __tablename__ = "exit_times"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    plan_id = Column(String(36), ForeignKey("daily_plans.id"), nullable=False, index=True)
    time_block_id = Column(String(36), ForeignKey("time_blocks.id"), nullable=True)
    commitment_id = Column(String(255), nullable=False)
    exit_time = Column(DateTime, nullable=False)
    travel_duration_minutes = Column(Integer, nullable=False)
    preparation_time_minutes = Column(Integer, nullable=False)
    travel_method = Column(String(50), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


# ===========================================
# Database Session Management
# ===========================================


def get_engine():
    """Get async engine instance."""
    settings = get_settings()
    return create_async_engine(settings.DATABASE_URL, echo=settings.DEBUG)


def get_session_factory():
    """Get async session factory."""
    engine = get_engine()
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db():
    """Initialize database tables."""
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
