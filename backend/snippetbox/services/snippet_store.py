"""
SnippetBox — Snippet Store (Data Access Layer)
================================================

What:  The three statements the application runs against the `snippets` table:
       insert, get-by-id and list-latest.
Why:   Keeps every SQL detail and every SQLAlchemy error type behind one
       class. Callers see SnippetResponse values, NoRecordError or
       DatabaseError, nothing else.
How:   Each operation opens its own session from the shared factory, runs one
       self-contained statement and closes the session (returning the
       connection to the pool) before returning, on success or failure.
Who:   Constructed once by create_app(); used by the snippet route handlers.

Concurrency:
    The store keeps no mutable state. The session factory wraps the engine's
    pool, which SQLAlchemy makes safe for concurrent checkouts, so the
    operations can run from any number of in-flight requests without locks.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import NoResultFound, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from snippetbox.exceptions import DatabaseError, NoRecordError
from snippetbox.models.snippet import Snippet
from snippetbox.schemas.snippet import SnippetResponse

logger = logging.getLogger(__name__)

# Latest() page size
LATEST_LIMIT = 10


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SnippetStore:
    """
    Persistence for snippets.

    Error Handling Strategy:
        - "no rows" from SQLAlchemy (NoResultFound) → NoRecordError
        - any other SQLAlchemyError → DatabaseError (original chained)
        Nothing is retried; the caller decides what to do.
        Failures are logged here as one line; the traceback is logged once,
        by server_error(), when the error reaches the client as a 500.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def insert(self, title: str, content: str, expires: int) -> int:
        """
        Insert a new snippet and return its database-assigned id.

        Args:
            title:   Snippet title
            content: Snippet body
            expires: Lifetime in days, counted from now (UTC)

        Raises:
            DatabaseError: The statement or the connection failed
        """
        created = utcnow()
        record = Snippet(
            title=title,
            content=content,
            created=created,
            expires=created + timedelta(days=expires),
        )

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(record)
                    # Flush emits the INSERT and populates the primary key
                    await session.flush()
                    snippet_id = record.id
        except SQLAlchemyError as e:
            logger.error("Database error inserting snippet: %s", str(e))
            raise DatabaseError(
                message="Could not insert the snippet",
                context={"error_type": type(e).__name__},
            ) from e

        logger.debug("Inserted snippet %d (expires in %d days)", snippet_id, expires)
        return snippet_id

    async def get(self, snippet_id: int) -> SnippetResponse:
        """
        Fetch one unexpired snippet by id.

        Query plan:
            SELECT ... FROM snippets WHERE expires > :now AND id = :id

        Raises:
            NoRecordError: No row matches (absent or expired)
            DatabaseError: Query execution failed
        """
        stmt = select(Snippet).where(
            Snippet.expires > utcnow(),
            Snippet.id == snippet_id,
        )

        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                record = result.scalar_one()
                return SnippetResponse.model_validate(record)
        except NoResultFound as e:
            # NoResultFound is itself a SQLAlchemyError: translate it first
            raise NoRecordError(snippet_id=snippet_id) from e
        except SQLAlchemyError as e:
            logger.error("Database error fetching snippet %s: %s", snippet_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the snippet",
                context={"snippet_id": snippet_id, "error_type": type(e).__name__},
            ) from e

    async def latest(self) -> List[SnippetResponse]:
        """
        Return up to ten unexpired snippets, newest id first.

        Query plan:
            SELECT ... FROM snippets WHERE expires > :now
            ORDER BY id DESC LIMIT 10

        The result is read to the end inside the session block, so the
        cursor is closed and the connection back in the pool before this
        returns, including when row conversion fails part way.

        Raises:
            DatabaseError: Query execution failed
        """
        stmt = (
            select(Snippet)
            .where(Snippet.expires > utcnow())
            .order_by(Snippet.id.desc())
            .limit(LATEST_LIMIT)
        )

        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                records = result.scalars().all()
                return [SnippetResponse.model_validate(r) for r in records]
        except SQLAlchemyError as e:
            logger.error("Database error listing snippets: %s", str(e))
            raise DatabaseError(
                message="Could not retrieve the latest snippets",
                context={"error_type": type(e).__name__},
            ) from e
