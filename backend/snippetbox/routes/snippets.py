"""
SnippetBox — Snippet Route Handlers
=====================================

What:  Home page, snippet detail page and snippet creation.
How:   Each handler receives the Application bundle through Depends(),
       calls the SnippetStore and hands a fresh TemplateData to render().

Status mapping:
    - missing, non-numeric or non-positive id → 404 (same as an absent record)
    - NoRecordError                            → 404
    - any other SnippetBoxError                → raised; global handler → 500
    - wrong method on /snippet/create          → 405 + Allow: POST (router)
"""

import logging
import re
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from starlette.responses import Response

from snippetbox.application import Application, get_application
from snippetbox.exceptions import NoRecordError
from snippetbox.responses import not_found
from snippetbox.services.templates import new_template_data, render

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Snippets"])

# Placeholder snippet inserted by POST /snippet/create
PLACEHOLDER_TITLE = "O snail"
PLACEHOLDER_CONTENT = "O snail\nClimb Mount Fuji,\nBut slowly, slowly!\n\n– Kobayashi Issa"
PLACEHOLDER_EXPIRES_DAYS = 7

_ID_PATTERN = re.compile(r"[+-]?[0-9]+")
# snippets.id is a 32-bit INTEGER on PostgreSQL; larger ids cannot exist
MAX_SNIPPET_ID = 2**31 - 1


def parse_snippet_id(raw: Optional[str]) -> Optional[int]:
    """Return `raw` as a positive int, or None when it is not one."""
    if raw is None or not _ID_PATTERN.fullmatch(raw):
        return None
    value = int(raw)
    if value < 1 or value > MAX_SNIPPET_ID:
        return None
    return value


@router.get("/", response_class=HTMLResponse, summary="Latest snippets")
async def home(application: Application = Depends(get_application)) -> Response:
    snippets = await application.snippets.latest()
    return render(
        application.templates,
        "home",
        200,
        new_template_data(snippets=snippets),
    )


@router.get("/snippet/view", response_class=HTMLResponse, summary="View one snippet")
async def snippet_view(
    request: Request,
    application: Application = Depends(get_application),
) -> Response:
    """
    Render a single unexpired snippet.

    A malformed id is answered like an absent one (404, not 400). When `id`
    is repeated, the first value is used.
    """
    raw_ids = request.query_params.getlist("id")
    snippet_id = parse_snippet_id(raw_ids[0] if raw_ids else None)
    if snippet_id is None:
        return not_found()

    try:
        snippet = await application.snippets.get(snippet_id)
    except NoRecordError:
        return not_found()

    return render(
        application.templates,
        "view",
        200,
        new_template_data(snippet=snippet),
    )


@router.post("/snippet/create", status_code=303, summary="Create a snippet")
async def snippet_create(
    application: Application = Depends(get_application),
) -> RedirectResponse:
    """
    Insert the placeholder snippet and redirect to its page.

    Only POST is routed here; any other method gets 405 with `Allow: POST`
    from the router before this function is reached.
    """
    snippet_id = await application.snippets.insert(
        title=PLACEHOLDER_TITLE,
        content=PLACEHOLDER_CONTENT,
        expires=PLACEHOLDER_EXPIRES_DAYS,
    )
    logger.info("Created snippet %d", snippet_id)
    return RedirectResponse(url=f"/snippet/view?id={snippet_id}", status_code=303)
