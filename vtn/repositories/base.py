"""
Base CRUD Repository Pattern
Generic repository with common database operations
"""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete, select
import structlog

from vtn.core.database import Base

logger = structlog.get_logger()

ModelType = TypeVar("ModelType", bound=Base)


class CRUDBase(Generic[ModelType]):
    """
    Base CRUD repository with generic database operations
    """

    def __init__(self, model: Type[ModelType], key: str = "id"):
        """
        Initialize CRUD repository

        Args:
            model: SQLAlchemy model class
            key: Name of the column records are addressed by
        """
        self.model = model
        self.key = key

    def _apply_filters(self, query, filters: Optional[Dict[str, Any]]):
        for field, value in (filters or {}).items():
            if hasattr(self.model, field):
                if isinstance(value, list):
                    query = query.where(getattr(self.model, field).in_(value))
                else:
                    query = query.where(getattr(self.model, field) == value)
        return query

    async def get(
        self,
        db: AsyncSession,
        id: str,
        for_update: bool = False,
    ) -> Optional[ModelType]:
        """
        Get a single record by its key

        Args:
            db: Database session
            id: Record key
            for_update: Lock the row until the transaction ends

        Returns:
            Model instance or None
        """
        try:
            query = select(self.model).where(getattr(self.model, self.key) == id)
            if for_update:
                query = query.with_for_update()

            result = await db.execute(query)
            record = result.scalar_one_or_none()

            if record:
                logger.debug("Record retrieved", model=self.model.__name__, id=id)
            else:
                logger.debug("Record not found", model=self.model.__name__, id=id)

            return record

        except Exception as e:
            logger.error("Error retrieving record", model=self.model.__name__, id=id, error=str(e))
            raise

    async def get_multi(
        self,
        db: AsyncSession,
        *,
        skip: int = 0,
        limit: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[ModelType]:
        """
        Get multiple records in insertion order

        Args:
            db: Database session
            skip: Number of records to skip
            limit: Maximum number of records to return, None for all
            filters: Dictionary of column filters; list values match any element

        Returns:
            List of model instances
        """
        try:
            query = self._apply_filters(select(self.model), filters)

            if hasattr(self.model, "seq"):
                query = query.order_by(self.model.seq)
            else:
                query = query.order_by(self.model.created_date_time)

            if skip:
                query = query.offset(skip)
            if limit is not None:
                query = query.limit(limit)

            result = await db.execute(query)
            records = list(result.scalars().all())

            logger.debug(
                "Multiple records retrieved",
                model=self.model.__name__,
                count=len(records),
                skip=skip,
                limit=limit,
            )

            return records

        except Exception as e:
            logger.error("Error retrieving multiple records", model=self.model.__name__, error=str(e))
            raise

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: Dict[str, Any],
        commit: bool = True,
    ) -> ModelType:
        """
        Create a new record

        Args:
            db: Database session
            obj_in: Column values of the new record
            commit: Whether to commit the transaction

        Returns:
            Created model instance
        """
        try:
            db_obj = self.model(**obj_in)
            db.add(db_obj)

            if commit:
                await db.commit()
                await db.refresh(db_obj)
            else:
                await db.flush()

            logger.debug("Record created", model=self.model.__name__, id=getattr(db_obj, self.key))
            return db_obj

        except Exception as e:
            if commit:
                await db.rollback()
            logger.error("Error creating record", model=self.model.__name__, error=str(e))
            raise

    async def update(
        self,
        db: AsyncSession,
        *,
        db_obj: ModelType,
        obj_in: Dict[str, Any],
        commit: bool = True,
    ) -> ModelType:
        """
        Update an existing record

        Args:
            db: Database session
            db_obj: Existing model instance
            obj_in: Column values to replace
            commit: Whether to commit the transaction

        Returns:
            Updated model instance
        """
        key = getattr(db_obj, self.key)
        try:
            for field, value in obj_in.items():
                if hasattr(db_obj, field):
                    setattr(db_obj, field, value)

            if commit:
                await db.commit()
                await db.refresh(db_obj)
            else:
                await db.flush()

            logger.debug("Record updated", model=self.model.__name__, id=key)
            return db_obj

        except Exception as e:
            if commit:
                await db.rollback()
            logger.error("Error updating record", model=self.model.__name__, id=key, error=str(e))
            raise

    async def delete(
        self,
        db: AsyncSession,
        *,
        db_obj: ModelType,
        commit: bool = True,
    ) -> ModelType:
        """
        Delete a record

        Args:
            db: Database session
            db_obj: Existing model instance
            commit: Whether to commit the transaction

        Returns:
            Deleted model instance
        """
        key = getattr(db_obj, self.key)
        try:
            await db.delete(db_obj)

            if commit:
                await db.commit()
            else:
                await db.flush()

            logger.debug("Record deleted", model=self.model.__name__, id=key)
            return db_obj

        except Exception as e:
            if commit:
                await db.rollback()
            logger.error("Error deleting record", model=self.model.__name__, id=key, error=str(e))
            raise

    async def delete_where(
        self,
        db: AsyncSession,
        *,
        filters: Dict[str, Any],
        commit: bool = False,
    ) -> int:
        """
        Delete every record matching the filters

        Returns:
            Number of deleted records
        """
        try:
            query = self._apply_filters(delete(self.model), filters)
            result = await db.execute(query)

            if commit:
                await db.commit()
            else:
                await db.flush()

            logger.debug("Records deleted", model=self.model.__name__, filters=filters, count=result.rowcount)
            return result.rowcount

        except Exception as e:
            if commit:
                await db.rollback()
            logger.error("Error deleting records", model=self.model.__name__, error=str(e))
            raise
