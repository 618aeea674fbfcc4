"""
SnippetBox — Custom Exception Hierarchy
=========================================

What:  Application-specific exceptions for the failure modes of the store
       and the template layer.
Why:   Handlers branch on exception TYPE, never on a dependency's concrete
       error object. The store translates SQLAlchemy's errors into these
       kinds, so nothing above it imports sqlalchemy.exc.
How:   Each exception carries a message and an optional context dict.
       The context is logged server-side and never sent to the client.

Exception Hierarchy:
    SnippetBoxError (base)
    ├── NoRecordError               → 404 Not Found (absent or expired)
    ├── DatabaseError               → 500 Internal Server Error
    ├── TemplateCacheError          → startup aborted
    ├── TemplateNotRegisteredError  → 500 Internal Server Error
    └── TemplateRenderError         → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class SnippetBoxError(Exception):
    """
    Base exception for all SnippetBox application errors.

    Attributes:
        message:  Short description (logged; never returned to the client)
        context:  Additional debug info (logged only)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class NoRecordError(SnippetBoxError):
    """
    Raised when no matching snippet exists.

    When:    Get() on an id that was never inserted, or whose expiry has passed.
    HTTP:    404 Not Found

    The store raises this in place of SQLAlchemy's NoResultFound so that
    callers can tell "absent/expired" apart from "storage broken".
    """

    def __init__(
        self,
        snippet_id: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = "no matching record found"
        ctx = context or {}
        if snippet_id is not None:
            ctx["snippet_id"] = snippet_id
        super().__init__(message=message, context=ctx)
        self.snippet_id = snippet_id


class DatabaseError(SnippetBoxError):
    """
    Raised when a statement or connection fails.

    HTTP:    500 Internal Server Error
    The store never retries; the handler turns this into a generic 500.
    """

    def __init__(
        self,
        message: str = "A database error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class TemplateCacheError(SnippetBoxError):
    """
    Raised when the template cache cannot be built.

    When:    A page, partial or the base layout is missing or fails to parse.
    Effect:  create_app() propagates it and the process does not start.
    """

    def __init__(
        self,
        message: str = "Template cache could not be built",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class TemplateNotRegisteredError(SnippetBoxError):
    """Raised when a handler asks to render a page the cache never registered."""

    def __init__(self, page: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["page"] = page
        super().__init__(message=f"the template {page} does not exist", context=ctx)
        self.page = page


class TemplateRenderError(SnippetBoxError):
    """
    Raised when executing a compiled template fails.

    Nothing has been written to the client at that point (render executes
    into a buffer first), so the error path can still send a clean 500.
    """

    def __init__(
        self,
        page: str,
        message: str = "Template execution failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["page"] = page
        super().__init__(message=message, context=ctx)
        self.page = page
