# backend/app/repositories/base_repository.py
"""
Base Repository Pattern for the trade platform

Provides the foundation for all repository classes with:
- Common CRUD operations
- Type safety with generics
- Transaction support (managed by services)
- Guarded status updates for optimistic concurrency

Repositories never commit. The service layer owns the transaction so
that a multi-entity state change (accepting an offer, completing a room)
either lands as a whole or not at all.
"""

from abc import ABC, abstractmethod
import logging
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException

# Type variable for generic model support
T = TypeVar("T")

logger = logging.getLogger(__name__)


class IRepository(ABC, Generic[T]):
    """
    Abstract repository interface defining core data access methods.

    All repositories must implement these methods to ensure consistency
    across the application.
    """

    @abstractmethod
    def get_by_id(self, id: str, load_relationships: bool = True) -> Optional[T]:
        """
        Retrieve an entity by its primary key.

        Args:
            id: The primary key value
            load_relationships: Whether to eager load relationships

        Returns:
            The entity if found, None otherwise
        """

    @abstractmethod
    def create(self, **kwargs: Any) -> T:
        """
        Create a new entity.

        Raises:
            RepositoryException: If creation fails
        """

    @abstractmethod
    def delete(self, id: str) -> bool:
        """
        Delete an entity by its primary key.

        Returns:
            True if deleted, False if not found
        """


class BaseRepository(IRepository[T]):
    """
    Concrete base repository implementation with common data access patterns.

    Attributes:
        db: SQLAlchemy session
        model: SQLAlchemy model class
    """

    def __init__(self, db: Session, model: Type[T]):
        """
        Initialize repository with database session and model.

        Args:
            db: SQLAlchemy session (managed by service layer)
            model: SQLAlchemy model class
        """
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    def get_by_id(self, id: str, load_relationships: bool = True) -> Optional[T]:
        """
        Retrieve an entity by its primary key.

        Implements eager loading for relationships when requested.
        """
        try:
            query = self.db.query(self.model).filter(self.model.id == id)

            if load_relationships:
                query = self._apply_eager_loading(query)

            return query.first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting {self.model.__name__} by id {id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve {self.model.__name__}: {str(e)}")

    def refresh(self, instance: T) -> None:
        """Refresh an instance from the database."""
        self.db.refresh(instance)

    def create(self, **kwargs: Any) -> T:
        """
        Create a new entity.

        Note: Does NOT commit - transaction management is handled by service layer.
        """
        try:
            created_at = kwargs.pop("created_at", None)

            entity = self.model(**kwargs)

            if created_at and hasattr(entity, "created_at"):
                entity.created_at = created_at

            self.db.add(entity)
            self.db.flush()  # Get ID without committing
            return entity
        except IntegrityError as exc:
            self.logger.error(
                "Integrity error creating %s: %s", self.model.__name__, exc, exc_info=True
            )
            raise RepositoryException(f"Integrity constraint violated: {exc}") from exc
        except SQLAlchemyError as e:
            self.logger.error(f"Error creating {self.model.__name__}: {str(e)}")
            raise RepositoryException(f"Failed to create {self.model.__name__}: {str(e)}")

    def flush(self) -> None:
        """Flush pending ORM changes."""
        self.db.flush()

    def update_if(self, id: str, expected: Dict[str, Any], **values: Any) -> bool:
        """
        Conditionally update a row only while it still matches ``expected``.

        Issues ``UPDATE ... WHERE id = :id AND <expected>`` and reports
        whether a row was touched. Two writers racing on the same row
        cannot both succeed: the loser sees the new value and gets False.

        Args:
            id: Primary key of the row
            expected: Column values the row must still have
            **values: Columns to set

        Returns:
            True if exactly one row was updated
        """
        try:
            self.db.flush()
            stmt = update(self.model).where(self.model.id == id)
            for column, value in expected.items():
                stmt = stmt.where(getattr(self.model, column) == value)
            result = self.db.execute(
                stmt.values(**values).execution_options(synchronize_session=False)
            )
            updated = bool(result.rowcount == 1)
            if updated:
                # Keep any already-loaded instance in step with the row
                instance = self.db.get(self.model, id)
                if instance is not None:
                    self.db.refresh(instance)
            return updated
        except SQLAlchemyError as e:
            self.logger.error(f"Error in guarded update of {self.model.__name__} {id}: {str(e)}")
            raise RepositoryException(f"Failed to update {self.model.__name__}: {str(e)}")

    def delete(self, id: str) -> bool:
        """
        Delete an entity by its primary key.

        Returns False if entity not found, raises exception for constraint violations.
        """
        try:
            entity = self.get_by_id(id, load_relationships=False)
            if not entity:
                return False

            self.db.delete(entity)
            self.db.flush()
            return True
        except IntegrityError as e:
            self.logger.error(
                f"Cannot delete {self.model.__name__} {id} due to constraints: {str(e)}"
            )
            raise RepositoryException(f"Cannot delete due to existing references: {str(e)}")
        except SQLAlchemyError as e:
            self.logger.error(f"Error deleting {self.model.__name__} {id}: {str(e)}")
            raise RepositoryException(f"Failed to delete {self.model.__name__}: {str(e)}")

    def find_one_by(self, **kwargs: Any) -> Optional[T]:
        """Find a single entity by given criteria."""
        try:
            return self.db.query(self.model).filter_by(**kwargs).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error finding one by criteria: {str(e)}")
            raise RepositoryException(f"Failed to find record: {str(e)}")

    # Protected helper methods for use by subclasses

    def _apply_eager_loading(self, query: Query) -> Query:
        """
        Apply eager loading to relationships.

        Override in subclasses to specify which relationships to load.
        """
        return query

    def _build_query(self) -> Query:
        """Get base query for the model."""
        return self.db.query(self.model)

    def _execute_query(self, query: Query) -> List[T]:
        """Execute query with error handling."""
        try:
            return query.all()
        except SQLAlchemyError as e:
            self.logger.error(f"Query execution error: {str(e)}")
            raise RepositoryException(f"Query failed: {str(e)}")
