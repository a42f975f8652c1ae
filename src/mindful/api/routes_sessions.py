"""Session router: CRUD operations for therapy sessions and their transcripts."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from ..database import UserProfile
from ..services import SessionController
from .dependencies import get_current_user, get_session_controller
from .schemas import (
    MessageListResponse,
    MessageResponse,
    SessionCreate,
    SessionListResponse,
    SessionResponse,
    TitleResponse,
    TransitionListResponse,
    TransitionResponse,
)

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.get("", response_model=SessionListResponse)
async def list_sessions(
    user: UserProfile = Depends(get_current_user),
    controller: SessionController = Depends(get_session_controller),
):
    """List the user's sessions, newest first."""
    sessions = await controller.list_sessions(user)
    return SessionListResponse(
        sessions=[SessionResponse.model_validate(s) for s in sessions]
    )


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    data: SessionCreate,
    user: UserProfile = Depends(get_current_user),
    controller: SessionController = Depends(get_session_controller),
):
    session = await controller.create_session(user, title=data.title, mode=data.mode)
    return SessionResponse.model_validate(session)


@router.get("/{session_id}/messages", response_model=MessageListResponse)
async def get_messages(
    session_id: UUID,
    limit: int = Query(50),
    user: UserProfile = Depends(get_current_user),
    controller: SessionController = Depends(get_session_controller),
):
    """Transcript of a session in chronological order."""
    messages = await controller.get_history(user, session_id, limit=limit)
    return MessageListResponse(
        messages=[MessageResponse.model_validate(m) for m in messages]
    )


@router.get("/{session_id}/transitions", response_model=TransitionListResponse)
async def get_transitions(
    session_id: UUID,
    user: UserProfile = Depends(get_current_user),
    controller: SessionController = Depends(get_session_controller),
):
    transitions = await controller.get_mode_history(user, session_id)
    return TransitionListResponse(
        transitions=[TransitionResponse.model_validate(t) for t in transitions]
    )


@router.post("/{session_id}/complete", response_model=SessionResponse)
async def complete_session(
    session_id: UUID,
    user: UserProfile = Depends(get_current_user),
    controller: SessionController = Depends(get_session_controller),
):
    session = await controller.complete_session(user, session_id)
    return SessionResponse.model_validate(session)


@router.post("/{session_id}/title", response_model=TitleResponse)
async def generate_title(
    session_id: UUID,
    user: UserProfile = Depends(get_current_user),
    controller: SessionController = Depends(get_session_controller),
):
    """Generate and store a short title from the first user messages."""
    title = await controller.generate_title(user, session_id)
    return TitleResponse(title=title)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: UUID,
    user: UserProfile = Depends(get_current_user),
    controller: SessionController = Depends(get_session_controller),
):
    """Delete a session with its messages and mode transitions."""
    await controller.delete_session(user, session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
