"""
SnippetBox — Application Dependency Bundle
============================================

What:  One immutable value holding the long-lived collaborators every
       handler needs: settings, engine, snippet store and template cache.
Why:   Handlers receive their dependencies explicitly through FastAPI's
       Depends() instead of importing module-level singletons, so tests can
       build an app around a temporary database and template directory.
How:   create_app() builds the bundle once and stores it on app.state;
       get_application() is the dependency that hands it to a route.
"""

from dataclasses import dataclass

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine

from snippetbox.config import Settings
from snippetbox.services.snippet_store import SnippetStore
from snippetbox.services.templates import TemplateCache


@dataclass(frozen=True)
class Application:
    settings: Settings
    engine: AsyncEngine
    snippets: SnippetStore
    templates: TemplateCache


def get_application(request: Request) -> Application:
    """FastAPI dependency returning the bundle built by create_app()."""
    return request.app.state.application
