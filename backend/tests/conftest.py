"""
SnippetBox — Test Configuration (conftest.py)
===============================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test that touches the database gets its own SQLite file under
       pytest's tmp_path (aiosqlite driver), so tests never share rows.

Fixture Hierarchy (all function-scoped):
    ├── test_settings: Settings pointing at a fresh SQLite file
    ├── engine / store: schema-initialised engine and a SnippetStore on it
    ├── app: application built by create_app(test_settings), schema created
    ├── test_client: HTTPX AsyncClient talking to `app` over ASGITransport
    └── write_templates: writes a throwaway templates directory
"""

import os
import tempfile

# Override settings for testing BEFORE any snippetbox imports
# Why: snippetbox.main builds a module-level app from the environment
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="snippetbox_test_"), "default.db"
)
os.environ["LOG_LEVEL"] = "WARNING"

from pathlib import Path  # noqa: E402
from typing import Callable, Dict  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from snippetbox.config import Settings  # noqa: E402
from snippetbox.database import (  # noqa: E402
    create_engine,
    create_schema,
    create_session_factory,
    dispose_engine,
)
from snippetbox.main import create_app  # noqa: E402
from snippetbox.services.snippet_store import SnippetStore  # noqa: E402


BASE_TEMPLATE = (
    "<html><body>{% include 'partials/nav.html' %}"
    "{% block main %}{% endblock %}<footer>{{ current_year }}</footer></body></html>"
)
NAV_TEMPLATE = "<nav>nav</nav>"


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings for one test: private SQLite file, packaged templates."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'snippetbox.db'}",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def engine(test_settings):
    engine = create_engine(test_settings)
    await create_schema(engine)
    yield engine
    await dispose_engine(engine)


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def store(session_factory) -> SnippetStore:
    return SnippetStore(session_factory)


@pytest_asyncio.fixture
async def app(test_settings):
    """
    Application with the snippets table created.

    ASGITransport does not run the lifespan, so the schema is created here.
    """
    app = create_app(test_settings)
    await create_schema(app.state.application.engine)
    yield app
    await dispose_engine(app.state.application.engine)


@pytest_asyncio.fixture
async def test_client(app):
    """
    Usage:
        async def test_home(test_client):
            response = await test_client.get("/")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def write_templates(tmp_path) -> Callable[[Dict[str, str]], str]:
    """
    Returns a function that writes a templates directory and returns its path.

    base.html and partials/nav.html are provided unless overridden; the
    caller supplies the pages, e.g. {"pages/home.html": "..."}.
    """
    def _write(files: Dict[str, str]) -> str:
        root = tmp_path / "templates"
        contents = {
            "base.html": BASE_TEMPLATE,
            "partials/nav.html": NAV_TEMPLATE,
            **files,
        }
        for name, body in contents.items():
            path = root / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(body, encoding="utf-8")
        (root / "pages").mkdir(parents=True, exist_ok=True)
        return str(root)

    return _write
