"""Dependency injection for FastAPI endpoints."""

from typing import AsyncGenerator, Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import UnauthorizedError
from ..database import async_session_maker, UserProfile
from ..repositories import UserRepository
from ..services import OpenAICompletionClient, SessionController
from ..services.completion import CompletionService
from .auth import user_id_from_token


# Security scheme; missing headers are reported as UnauthorizedError below
security = HTTPBearer(auto_error=False)


# Database session dependency
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_user_repository(
    session: AsyncSession = Depends(get_session)
) -> UserRepository:
    """Get UserRepository instance."""
    return UserRepository(UserProfile, session)


_completion_client: Optional[OpenAICompletionClient] = None


def get_completion_service() -> CompletionService:
    """Process-wide completion client."""
    global _completion_client
    if _completion_client is None:
        _completion_client = OpenAICompletionClient()
    return _completion_client


async def get_session_controller(
    session: AsyncSession = Depends(get_session),
    completion: CompletionService = Depends(get_completion_service),
) -> SessionController:
    """Get SessionController instance."""
    return SessionController.for_session(session, completion)


# Authentication dependencies
async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    user_repo: UserRepository = Depends(get_user_repository),
) -> UserProfile:
    """
    Get current authenticated user.

    Raises:
        UnauthorizedError: Missing or invalid token, or no profile for its subject
    """
    if credentials is None:
        raise UnauthorizedError("Missing bearer token")

    user = await user_repo.get(user_id_from_token(credentials.credentials))
    if not user:
        raise UnauthorizedError("User not found")

    return user
