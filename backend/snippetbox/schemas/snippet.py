"""
SnippetBox — Pydantic Value Schemas
=====================================

What:  Immutable values passed from the store to handlers and templates.
Why:   Handlers and templates must not hold ORM rows (no lazy loads, no
       accidental writes); these models are built from attributes once and
       frozen.
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class SnippetResponse(BaseModel):
    """
    What:  A single snippet as seen by handlers and templates.
    Who:   Returned by SnippetStore.get() and SnippetStore.latest().
    """
    id: int = Field(description="Database-assigned identifier")
    title: str = Field(description="Short title")
    content: str = Field(description="Snippet body")
    created: datetime = Field(description="Creation time (UTC)")
    expires: datetime = Field(description="Expiry time (UTC)")

    model_config = {"from_attributes": True, "frozen": True}

    @field_validator("created", "expires")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        """SQLite hands back naive datetimes; every stored value is UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class TemplateData(BaseModel):
    """
    What:  Per-request data handed to a page template.
    When:  Built fresh by each handler via new_template_data(); discarded
           once the response is sent.
    """
    current_year: int = Field(description="Year at render time, for the footer")
    snippet: Optional[SnippetResponse] = Field(default=None)
    snippets: List[SnippetResponse] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and dependency status.
    Who:   Returned by GET /health for monitoring and load balancer probes.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
