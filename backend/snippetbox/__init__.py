"""
SnippetBox — Application Package
==================================

A small snippet-sharing site: view the latest snippets, view one snippet,
create a snippet. Pages are rendered server-side from Jinja2 templates.

Architecture Note:

    ┌─────────────────────────────────────┐
    │           Routes (HTTP Layer)       │  ← parse request, pick status
    ├─────────────────────────────────────┤
    │   Services (Store, Template Cache)  │  ← SQL statements, rendering
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← async engine + pool
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
