"""Usage router: daily quota and account stats."""

from fastapi import APIRouter, Depends

from ..database import UserProfile
from ..services import SessionController
from .dependencies import get_current_user, get_session_controller
from .schemas import DailyUsageResponse, UserStatsResponse

router = APIRouter(prefix="/usage", tags=["usage"])


@router.get("/daily", response_model=DailyUsageResponse)
async def get_daily_usage(
    user: UserProfile = Depends(get_current_user),
    controller: SessionController = Depends(get_session_controller),
):
    usage = await controller.get_daily_usage(user)
    return DailyUsageResponse(**usage.to_dict())


@router.get("/stats", response_model=UserStatsResponse)
async def get_user_stats(
    user: UserProfile = Depends(get_current_user),
    controller: SessionController = Depends(get_session_controller),
):
    return UserStatsResponse(**await controller.get_user_stats(user))
