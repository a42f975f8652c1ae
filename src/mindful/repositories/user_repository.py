"""User profile repository."""

from .base import BaseRepository
from ..database import UserProfile


class UserRepository(BaseRepository[UserProfile]):
    """Profiles are looked up by id only; identity itself lives with the auth provider."""
