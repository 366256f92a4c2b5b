"""
Daily plan API endpoints.

Generate, read, delete and degrade plans, and poll whether the user has fallen
behind.
"""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel

from dayplanner.api.deps import CurrentUserId, PlanService
from dayplanner.core.config import get_settings
from dayplanner.core.exceptions import BusinessLogicError, NotFoundError, ValidationError
from dayplanner.models.activity import Activity
from dayplanner.models.daily_plan import DailyPlan
from dayplanner.models.enums import EnergyState
from dayplanner.models.inputs import PlanRequest
from dayplanner.models.meal import MealPlacement
from dayplanner.utils.datetime_utils import now_local

router = APIRouter()


class GeneratePlanRequest(BaseModel):
    """Body of a generate call; plan_date defaults to the wake date."""
    wake_time: datetime
    sleep_time: datetime
    energy_state: EnergyState = EnergyState.MEDIUM
    plan_date: Optional[date] = None
    current_location: Optional[str] = None


class GeneratePlanResponse(BaseModel):
    plan: DailyPlan
    meal_placements: list[MealPlacement]
    unplaced_activities: list[Activity]
    tail_plan_used: bool


class BehindScheduleResponse(BaseModel):
    plan_id: UUID
    behind_schedule: bool


@router.post("/generate", response_model=GeneratePlanResponse, status_code=status.HTTP_201_CREATED)
async def generate_plan(
    request: GeneratePlanRequest,
    user_id: CurrentUserId,
    service: PlanService,
    now: Optional[datetime] = Query(None, description="Override the current time"),
):
    """Generate (or regenerate) the plan for a day."""
    plan_request = PlanRequest(
        user_id=user_id,
        plan_date=request.plan_date or request.wake_time.date(),
        wake_time=request.wake_time,
        sleep_time=request.sleep_time,
        energy_state=request.energy_state,
        current_location=request.current_location,
    )
    try:
        generated = await service.generate_plan(plan_request, now=now)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.message,
        )
    return GeneratePlanResponse(
        plan=generated.plan,
        meal_placements=generated.meal_placements,
        unplaced_activities=generated.unplaced_activities,
        tail_plan_used=generated.tail_plan_used,
    )


@router.get("/today", response_model=DailyPlan)
async def get_today_plan(user_id: CurrentUserId, service: PlanService):
    """Get today's plan in the configured timezone."""
    today = now_local(get_settings().TIMEZONE).date()
    plan = await service.get_plan_for_date(user_id, today)
    if not plan:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No plan for {today}",
        )
    return plan


@router.get("/{plan_id}", response_model=DailyPlan)
async def get_plan(plan_id: UUID, user_id: CurrentUserId, service: PlanService):
    try:
        return await service.get_plan(user_id, plan_id)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message,
        )


@router.delete("/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_plan(plan_id: UUID, user_id: CurrentUserId, service: PlanService):
    """Delete a plan so the day can be generated from scratch."""
    try:
        await service.delete_plan(user_id, plan_id)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message,
        )


@router.post("/{plan_id}/degrade", response_model=DailyPlan)
async def degrade_plan(plan_id: UUID, user_id: CurrentUserId, service: PlanService):
    """Drop optional work from an active plan. Cannot be undone."""
    try:
        return await service.degrade_plan(user_id, plan_id)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message,
        )
    except BusinessLogicError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=e.message,
        )


@router.get("/{plan_id}/behind-schedule", response_model=BehindScheduleResponse)
async def get_behind_schedule(
    plan_id: UUID,
    user_id: CurrentUserId,
    service: PlanService,
    now: Optional[datetime] = Query(None, description="Override the current time"),
):
    try:
        behind = await service.is_plan_behind_schedule(user_id, plan_id, now=now)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message,
        )
    return BehindScheduleResponse(plan_id=plan_id, behind_schedule=behind)
