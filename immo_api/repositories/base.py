"""
Generic async repository shared by the property and image repositories.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func
from immo_api.database import Base
from typing import TypeVar, Generic, Optional, List, Dict, Any, Type
import uuid
import logging

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    CRUD helpers for one model bound to one session.

    Mutations commit by default. With ``commit=False`` they only flush, and
    the caller owns the transaction: it commits or rolls back the whole unit.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    @property
    def _name(self) -> str:
        return self.model.__name__

    async def _finish(self, commit: bool) -> None:
        if commit:
            await self.db.commit()
        else:
            await self.db.flush()

    async def _abort(self, commit: bool) -> None:
        # Caller-managed transactions are rolled back by the caller
        if commit:
            await self.db.rollback()

    async def create(self, obj_in: Dict[str, Any], commit: bool = True) -> ModelType:
        """
        Insert one row.

        Args:
            obj_in: Column values keyed by attribute name
            commit: Commit now, or only flush into the caller's transaction

        Returns:
            The new instance with its generated id and timestamps
        """
        instance = self.model(**obj_in)
        self.db.add(instance)
        try:
            await self._finish(commit)
        except Exception as e:
            await self._abort(commit)
            logger.error(f"Insert into {self._name} failed: {e}")
            raise

        await self.db.refresh(instance)
        logger.debug(f"Inserted {self._name} {instance.id}")
        return instance

    async def get_by_id(self, id: uuid.UUID) -> Optional[ModelType]:
        """
        Fetch one row by primary key.

        Instances already in the session are overwritten with the stored
        state, so values changed by bulk statements are never stale.
        """
        query = (
            select(self.model)
            .where(self.model.id == id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def update(self, id: uuid.UUID, values: Dict[str, Any], commit: bool = True) -> Optional[ModelType]:
        """
        Overwrite the given columns of one row.

        Args:
            id: Primary key
            values: Every column to write; ``None`` is written as NULL
            commit: Commit now, or only flush into the caller's transaction

        Returns:
            The reloaded instance, or None when no row has this id
        """
        stmt = update(self.model).where(self.model.id == id).values(**values)
        try:
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                return None
            await self._finish(commit)
        except Exception as e:
            await self._abort(commit)
            logger.error(f"Update of {self._name} {id} failed: {e}")
            raise

        logger.debug(f"Updated {self._name} {id}: {sorted(values)}")
        return await self.get_by_id(id)

    async def delete(self, id: uuid.UUID, commit: bool = True) -> bool:
        """
        Delete one row.

        Returns:
            False when no row has this id
        """
        stmt = delete(self.model).where(self.model.id == id)
        try:
            result = await self.db.execute(stmt)
            await self._finish(commit)
        except Exception as e:
            await self._abort(commit)
            logger.error(f"Delete of {self._name} {id} failed: {e}")
            raise

        logger.debug(f"Delete {self._name} {id}: {result.rowcount} row(s)")
        return result.rowcount > 0

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """
        Count rows matching column equality filters.

        A list value matches any of its elements. Keys that are not columns
        of the model are ignored.
        """
        query = select(func.count(self.model.id))
        for field, value in (filters or {}).items():
            column = getattr(self.model, field, None)
            if column is None:
                continue
            query = query.where(column.in_(value) if isinstance(value, list) else column == value)

        result = await self.db.execute(query)
        return result.scalar_one()

    async def exists(self, id: uuid.UUID) -> bool:
        return await self.count({"id": id}) > 0

    async def bulk_create(self, objects_in: List[Dict[str, Any]], commit: bool = True) -> List[ModelType]:
        """
        Insert several rows as one unit.

        Args:
            objects_in: Column values for each row, in insertion order
            commit: Commit now, or only flush into the caller's transaction

        Returns:
            The new instances, in the same order as ``objects_in``
        """
        instances = [self.model(**values) for values in objects_in]
        self.db.add_all(instances)
        try:
            await self._finish(commit)
        except Exception as e:
            await self._abort(commit)
            logger.error(f"Bulk insert of {len(instances)} {self._name} rows failed: {e}")
            raise

        for instance in instances:
            await self.db.refresh(instance)

        logger.debug(f"Inserted {len(instances)} {self._name} rows")
        return instances
