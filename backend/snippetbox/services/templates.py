"""
SnippetBox — Template Cache & Render Pipeline
===============================================

What:  Compiles every page template once at startup and renders pages into
       HTML responses.
Why:   Parsing templates per request is wasted work, and a broken template
       should stop the process at boot rather than surface as a 500 later.
How:   Jinja2 environment over the templates directory:

           templates_dir/
           ├── base.html            ← layout every page extends
           ├── partials/*.html      ← fragments included by the layout/pages
           └── pages/*.html         ← one entry in the cache per file

       TemplateCache.build() compiles, for each page, the layout, all
       partials, the page itself and anything they reference. Any failure
       aborts the build with TemplateCacheError.

Render discipline (buffer, then commit):
    render() executes the template into a string first. Only when that
    succeeds is the HTMLResponse (status line + body) created. A template
    that fails half way therefore never produces a 200 with a truncated
    body; the caller gets TemplateRenderError and the 500 path takes over.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Set, Tuple

from fastapi.responses import HTMLResponse
from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    Template,
    TemplateError,
    meta,
    select_autoescape,
)

from snippetbox.exceptions import (
    TemplateCacheError,
    TemplateNotRegisteredError,
    TemplateRenderError,
)
from snippetbox.schemas.snippet import TemplateData

logger = logging.getLogger(__name__)

LAYOUT_TEMPLATE = "base.html"
PARTIALS_DIR = "partials"
PAGES_DIR = "pages"


def human_date(value: Optional[datetime]) -> str:
    """Format a timestamp as '02 Jan 2024 at 15:04' (UTC)."""
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%d %b %Y at %H:%M")


def create_environment(templates_dir: Path) -> Environment:
    """
    Jinja2 environment used by the cache.

    - StrictUndefined: a missing variable/attribute raises during execution
      instead of rendering as an empty string
    - auto_reload=False, cache_size=-1: compiled templates are never
      evicted or re-read from disk once loaded
    """
    env = Environment(
        loader=FileSystemLoader(str(templates_dir)),
        autoescape=select_autoescape(["html"]),
        undefined=StrictUndefined,
        auto_reload=False,
        cache_size=-1,
    )
    env.filters["human_date"] = human_date
    return env


def page_name(path: Path) -> str:
    """'pages/home.html' → 'home'; 'pages/view.tmpl.html' → 'view'."""
    return path.name.split(".", 1)[0]


@dataclass(frozen=True)
class TemplateSet:
    """One layout + the partials + exactly one page, compiled."""
    name: str
    layout: Template
    partials: Tuple[Template, ...]
    page: Template

    def render(self, context: Dict[str, Any]) -> str:
        return self.page.render(context)


class TemplateCache:
    """
    Read-only mapping of page name → TemplateSet.

    Built once by create_app(); shared by every request without locking
    since nothing mutates it after build().
    """

    def __init__(self, sets: Mapping[str, TemplateSet]):
        self._sets = MappingProxyType(dict(sets))

    def __contains__(self, name: object) -> bool:
        return name in self._sets

    def __len__(self) -> int:
        return len(self._sets)

    @property
    def pages(self) -> Tuple[str, ...]:
        return tuple(sorted(self._sets))

    def get(self, name: str) -> TemplateSet:
        """
        Raises:
            TemplateNotRegisteredError: `name` was never built (a programming
            or deployment error, not a data error)
        """
        try:
            return self._sets[name]
        except KeyError:
            raise TemplateNotRegisteredError(page=name) from None

    @classmethod
    def build(cls, templates_dir: str) -> "TemplateCache":
        """
        Compile every page under `<templates_dir>/pages`.

        Raises:
            TemplateCacheError: the directory, the layout, a partial, a page
            or a template they reference is missing or does not parse
        """
        root = Path(templates_dir)
        if not (root / PAGES_DIR).is_dir():
            raise TemplateCacheError(
                message="Template pages directory not found",
                context={"templates_dir": str(root)},
            )

        env = create_environment(root)
        compiled: Set[str] = set()
        sets: Dict[str, TemplateSet] = {}

        try:
            layout = _compile(env, LAYOUT_TEMPLATE, compiled)
            partials = tuple(
                _compile(env, path.relative_to(root).as_posix(), compiled)
                for path in sorted((root / PARTIALS_DIR).glob("*.html"))
            )
            for path in sorted((root / PAGES_DIR).glob("*.html")):
                name = page_name(path)
                sets[name] = TemplateSet(
                    name=name,
                    layout=layout,
                    partials=partials,
                    page=_compile(env, path.relative_to(root).as_posix(), compiled),
                )
        except TemplateError as e:
            raise TemplateCacheError(
                message=f"Template cache could not be built: {e}",
                context={"templates_dir": str(root), "error_type": type(e).__name__},
            ) from e

        logger.info("Template cache built: %s", ", ".join(sorted(sets)) or "(no pages)")
        return cls(sets)


def _compile(env: Environment, name: str, compiled: Set[str]) -> Template:
    """
    Load `name` and, recursively, every template it extends/includes/imports.

    Jinja resolves {% extends %} lazily at render time; walking the
    references here moves "parent not found" and syntax errors in parents
    to build time.
    """
    template = env.get_template(name)
    if name in compiled:
        return template
    compiled.add(name)

    source, _, _ = env.loader.get_source(env, name)
    for ref in meta.find_referenced_templates(env.parse(source)):
        # None means a dynamic name ({% include var %}); nothing to check
        if ref is not None:
            _compile(env, ref, compiled)
    return template


def new_template_data(**fields: Any) -> TemplateData:
    """Fresh per-request template data, stamped with the current year."""
    return TemplateData(current_year=datetime.now(timezone.utc).year, **fields)


def render(
    templates: TemplateCache,
    page: str,
    status_code: int,
    data: TemplateData,
) -> HTMLResponse:
    """
    Render `page` with `data` into an HTMLResponse.

    Steps:
        1. Resolve the TemplateSet (unknown page → TemplateNotRegisteredError)
        2. Execute it fully into a string buffer
        3. Only then build the response with `status_code`

    Raises:
        TemplateNotRegisteredError: page was never registered
        TemplateRenderError:        execution failed; nothing was sent
    """
    template_set = templates.get(page)

    try:
        body = template_set.render(dict(data))
    except Exception as e:
        raise TemplateRenderError(
            page=page,
            message=f"Template execution failed: {e}",
            context={"error_type": type(e).__name__},
        ) from e

    return HTMLResponse(content=body, status_code=status_code)
