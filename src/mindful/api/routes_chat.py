"""Chat router: sending turns and switching modes."""

from fastapi import APIRouter, Depends

from ..database import UserProfile
from ..services import SessionController
from .dependencies import get_current_user, get_session_controller
from .schemas import (
    ModeSwitchRequest,
    ModeSwitchResponse,
    SendMessageRequest,
    SendMessageResponse,
)

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("/send", response_model=SendMessageResponse)
async def send_message(
    data: SendMessageRequest,
    user: UserProfile = Depends(get_current_user),
    controller: SessionController = Depends(get_session_controller),
):
    """Send one message and get the assistant's reply."""
    result = await controller.send_turn(user, data.session_id, data.message)
    return SendMessageResponse(**result.to_dict())


@router.post("/mode", response_model=ModeSwitchResponse)
async def switch_mode(
    data: ModeSwitchRequest,
    user: UserProfile = Depends(get_current_user),
    controller: SessionController = Depends(get_session_controller),
):
    """Manually move a session to another mode."""
    result = await controller.switch_mode(user, data.session_id, data.new_mode, data.message)
    return ModeSwitchResponse(**result.to_dict())
