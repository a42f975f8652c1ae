"""Repository layer for data access."""

from .base import BaseRepository, store_operation
from .user_repository import UserRepository
from .session_repository import SessionRepository
from .message_repository import MessageRepository
from .transition_repository import TransitionRepository
from .credit_repository import CreditRepository

__all__ = [
    "BaseRepository",
    "store_operation",
    "UserRepository",
    "SessionRepository",
    "MessageRepository",
    "TransitionRepository",
    "CreditRepository",
]
