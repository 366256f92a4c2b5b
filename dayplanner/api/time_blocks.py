"""
Time block API endpoints.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from dayplanner.api.deps import CurrentUserId, PlanService
from dayplanner.core.exceptions import BusinessLogicError, NotFoundError
from dayplanner.models.daily_plan import TimeBlock

router = APIRouter()


class SkipBlockRequest(BaseModel):
    reason: Optional[str] = None


def _to_http(error: Exception) -> HTTPException:
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error.message)
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))


@router.post("/{block_id}/complete", response_model=TimeBlock)
async def complete_block(block_id: UUID, user_id: CurrentUserId, service: PlanService):
    try:
        return await service.complete_block(user_id, block_id)
    except (NotFoundError, BusinessLogicError) as e:
        raise _to_http(e)


@router.post("/{block_id}/skip", response_model=TimeBlock)
async def skip_block(
    block_id: UUID,
    user_id: CurrentUserId,
    service: PlanService,
    request: Optional[SkipBlockRequest] = None,
):
    try:
        return await service.skip_block(user_id, block_id, reason=request.reason if request else None)
    except (NotFoundError, BusinessLogicError) as e:
        raise _to_http(e)
