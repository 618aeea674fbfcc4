"""
SnippetBox — Snippet SQLAlchemy Model
=======================================

What:  ORM model representing the `snippets` table.
Why:   Maps rows to Python objects for typed, parameterized statements.
Who:   Used only by SnippetStore. Handlers never see these objects; the store
       converts them to SnippetResponse values before returning.

Table Design Rationale:
    - Integer autoincrement primary key: ids appear in URLs (?id=3); the
      view handler rejects ids beyond the 32-bit INTEGER range up front
    - created / expires: UTC with timezone; expiry is a read-time filter,
      expired rows are never deleted
    - Index on expires: every read filters on `expires > now`
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from snippetbox.database import Base


class Snippet(Base):
    """
    A titled piece of text with a creation time and an expiry time.

    Lifecycle:
        1. Inserted with created = now (UTC), expires = now + N days
        2. Visible to Get/Latest while expires > now
        3. Never updated, never deleted
    """

    __tablename__ = "snippets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(100), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    # Why timezone=True: PostgreSQL stores TIMESTAMPTZ; SQLite drops the zone
    # and SnippetResponse re-attaches UTC on the way out
    created: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    expires: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_snippets_expires", "expires"),
    )

    def __repr__(self) -> str:
        return f"<Snippet(id={self.id}, title='{self.title}', expires='{self.expires}')>"
