"""Base repository pattern for all data access."""

import functools
from typing import Any, Awaitable, Callable, Generic, TypeVar, Type, Optional
from uuid import UUID

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import StoreUnavailableError
from ..database import Base

ModelType = TypeVar("ModelType", bound=Base)
R = TypeVar("R")


def store_operation(
    func: Callable[..., Awaitable[R]],
) -> Callable[..., Awaitable[R]]:
    """Translate driver/ORM failures into StoreUnavailableError."""

    @functools.wraps(func)
    async def wrapper(self, *args: Any, **kwargs: Any) -> R:
        try:
            return await func(self, *args, **kwargs)
        except SQLAlchemyError as e:
            operation = f"{type(self).__name__}.{func.__name__}"
            logger.error(f"Store operation {operation} failed: {e}")
            raise StoreUnavailableError(operation, e) from e

    return wrapper


class BaseRepository(Generic[ModelType]):
    """
    Base repository with common CRUD operations.

    All repositories should inherit from this class.
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            session: Async database session
        """
        self.model = model
        self.session = session

    @store_operation
    async def get(self, id: UUID) -> Optional[ModelType]:
        """Get single record by ID."""
        result = await self.session.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    @store_operation
    async def create(self, **data) -> ModelType:
        """Create new record."""
        instance = self.model(**data)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    @store_operation
    async def commit(self) -> None:
        """Commit the unit of work shared by every repository on this session."""
        await self.session.commit()

    @store_operation
    async def rollback(self) -> None:
        await self.session.rollback()
