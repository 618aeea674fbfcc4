"""
SnippetBox — Error Responses
==============================

What:  The three ways a request can end without a rendered page.
Why:   Every internal failure goes through server_error(), which logs the
       full detail and answers with a fixed body. Client errors go through
       client_error() and are not logged as faults.

    server_error(request, exc) → 500 "Internal Server Error" (logged with traceback)
    client_error(status)       → <status> "<reason phrase>"
    not_found()                → 404 "Not Found"
"""

import logging
from http import HTTPStatus
from typing import Mapping, Optional

from starlette.requests import Request
from starlette.responses import PlainTextResponse

from snippetbox.middleware.request_id import request_id_var

logger = logging.getLogger("snippetbox.errors")


def server_error(request: Request, exc: BaseException) -> PlainTextResponse:
    """
    Log `exc` with its traceback and respond with a generic 500.

    Security: the response body is always the bare reason phrase; storage
    and template error text stays in the server log.
    """
    rid = request_id_var.get("")
    context = getattr(exc, "context", {})
    logger.error(
        "[%s] %s %s failed: %s | Context: %s",
        rid,
        request.method,
        request.url.path,
        str(exc),
        context,
        exc_info=exc,
    )
    return PlainTextResponse(
        HTTPStatus.INTERNAL_SERVER_ERROR.phrase,
        status_code=int(HTTPStatus.INTERNAL_SERVER_ERROR),
    )


def client_error(
    status_code: int,
    headers: Optional[Mapping[str, str]] = None,
) -> PlainTextResponse:
    return PlainTextResponse(
        HTTPStatus(status_code).phrase,
        status_code=int(status_code),
        headers=dict(headers) if headers else None,
    )


def not_found() -> PlainTextResponse:
    return client_error(HTTPStatus.NOT_FOUND)
