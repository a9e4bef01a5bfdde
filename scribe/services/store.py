"""Filter-based persistence facade over an async SQLAlchemy session."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterable, Sequence
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from sqlalchemy import ColumnElement, false, func, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from scribe.errors import ConflictError, UnexpectedError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class Store:
    """Document-store style access to the ORM models.

    Every call is a single round trip. Uniqueness violations surface as
    ``ConflictError``; any other database failure is logged and re-raised
    as ``UnexpectedError``.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @asynccontextmanager
    async def _guard(self, operation: str) -> AsyncIterator[None]:
        try:
            yield
        except IntegrityError as exc:
            await self.session.rollback()
            logger.warning("Constraint violation during %s: %s", operation, exc.orig)
            raise ConflictError() from exc
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.exception("Database failure during %s", operation)
            raise UnexpectedError() from exc

    async def find_one(self, model: type[ModelT], *criteria: Any) -> ModelT | None:
        """Return the first record matching every criterion, or None."""
        async with self._guard("find_one"):
            result = await self.session.execute(select(model).where(*criteria).limit(1))
            return result.scalars().first()

    async def find(
        self,
        model: type[ModelT],
        *criteria: Any,
        order_by: Sequence[Any] = (),
        offset: int = 0,
        limit: int | None = None,
    ) -> list[ModelT]:
        """Return the records matching every criterion.

        Args:
            model: Mapped class to query
            *criteria: SQLAlchemy boolean expressions, AND-ed together
            order_by: Sort expressions
            offset: Rows to skip
            limit: Maximum rows to return; None means no limit

        Returns:
            Matching records in ``order_by`` order
        """
        stmt = select(model).where(*criteria).order_by(*order_by).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        async with self._guard("find"):
            result = await self.session.execute(stmt)
            return list(result.scalars().all())

    async def count(self, model: type, *criteria: Any) -> int:
        async with self._guard("count"):
            result = await self.session.execute(
                select(func.count()).select_from(model).where(*criteria)
            )
            return int(result.scalar_one())

    async def insert(self, record: ModelT) -> ModelT:
        """Persist a new record and reload it, relationships included.

        Raises:
            ConflictError: A unique index rejected the record
        """
        async with self._guard("insert"):
            self.session.add(record)
            await self.session.commit()
            await self.session.refresh(record)
        return record

    async def update(self, record: ModelT) -> ModelT:
        """Commit pending changes on a loaded record and reload it.

        Raises:
            ConflictError: A unique index rejected the change
        """
        async with self._guard("update"):
            await self.session.commit()
            await self.session.refresh(record)
        return record

    async def increment(self, record: ModelT, column: str, amount: int = 1) -> ModelT:
        """Add ``amount`` to a counter column in a single UPDATE.

        The addition happens in the database, so concurrent increments are
        not lost. Timestamps with an ``onupdate`` keep their value.

        Args:
            record: Loaded record whose counter is bumped
            column: Name of the integer column
            amount: Value to add

        Returns:
            The record, reloaded
        """
        model = type(record)
        values: dict[str, Any] = {
            stamp.key: stamp
            for stamp in model.__table__.columns
            if stamp.onupdate is not None and stamp.key != column
        }
        values[column] = getattr(model, column) + amount
        stmt = (
            update(model)
            .where(model.id == record.id)
            .values(values)
            .execution_options(synchronize_session=False)
        )
        async with self._guard("increment"):
            await self.session.execute(stmt)
            await self.session.commit()
            await self.session.refresh(record)
        return record

    async def delete(self, model: type, *criteria: Any) -> int:
        """Delete every matching record, running ORM cascades. Returns the count."""
        async with self._guard("delete"):
            result = await self.session.execute(select(model).where(*criteria))
            records = list(result.scalars().all())
            for record in records:
                await self.session.delete(record)
            await self.session.commit()
        return len(records)

    @staticmethod
    def text_search(model: type, term: str) -> ColumnElement[bool]:
        """Criterion matching any word of ``term`` in the model's search columns."""
        columns: Iterable[Any] = [
            getattr(model, name) for name in getattr(model, "search_columns", ())
        ]
        clauses = [
            column.icontains(word, autoescape=True)
            for column in columns
            for word in term.split()
        ]
        if not clauses:
            return false()
        return or_(*clauses)
