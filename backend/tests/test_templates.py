"""
SnippetBox — Template Cache & Render Tests
============================================

What we test:
    ✅ The packaged templates build into one set per page
    ✅ One broken page (syntax, missing parent, missing include) fails the build
    ✅ Unknown page names raise TemplateNotRegisteredError
    ✅ render() only builds a response after the template fully executed
    ✅ human_date formatting
"""

from datetime import datetime, timedelta, timezone

import pytest
from jinja2.exceptions import UndefinedError

from snippetbox.config import Settings
from snippetbox.exceptions import (
    TemplateCacheError,
    TemplateNotRegisteredError,
    TemplateRenderError,
)
from snippetbox.schemas.snippet import SnippetResponse
from snippetbox.services.templates import (
    TemplateCache,
    human_date,
    new_template_data,
    page_name,
    render,
)

PAGE = "{% extends 'base.html' %}{% block main %}BODY{% endblock %}"


def _snippet(**overrides) -> SnippetResponse:
    now = datetime(2024, 3, 5, 9, 30, tzinfo=timezone.utc)
    fields = {
        "id": 3,
        "title": "A title",
        "content": "Some content",
        "created": now,
        "expires": now + timedelta(days=7),
    }
    fields.update(overrides)
    return SnippetResponse(**fields)


class TestTemplateCacheBuild:

    def test_packaged_templates(self):
        cache = TemplateCache.build(Settings().templates_dir)

        assert cache.pages == ("home", "view")
        assert "home" in cache
        assert len(cache) == 2

    def test_set_contains_layout_partials_and_page(self, write_templates):
        root = write_templates({"pages/home.html": PAGE})

        template_set = TemplateCache.build(root).get("home")

        assert template_set.name == "home"
        assert template_set.layout.name == "base.html"
        assert [p.name for p in template_set.partials] == ["partials/nav.html"]
        assert template_set.page.name == "pages/home.html"

    def test_page_name_strips_extensions(self, tmp_path):
        assert page_name(tmp_path / "home.html") == "home"
        assert page_name(tmp_path / "view.tmpl.html") == "view"

    def test_syntax_error_aborts_build(self, write_templates):
        """One bad page means no cache at all, not a cache without it."""
        root = write_templates({
            "pages/good.html": PAGE,
            "pages/bad.html": "{% extends 'base.html' %}{% block main %}{% if %}{% endblock %}",
        })

        with pytest.raises(TemplateCacheError):
            TemplateCache.build(root)

    def test_missing_parent_aborts_build(self, write_templates):
        root = write_templates({
            "pages/home.html": "{% extends 'missing.html' %}{% block main %}{% endblock %}",
        })

        with pytest.raises(TemplateCacheError):
            TemplateCache.build(root)

    def test_missing_include_in_layout_aborts_build(self, write_templates):
        root = write_templates({
            "base.html": "{% include 'partials/footer.html' %}",
            "pages/home.html": PAGE,
        })

        with pytest.raises(TemplateCacheError):
            TemplateCache.build(root)

    def test_missing_pages_directory(self, tmp_path):
        with pytest.raises(TemplateCacheError):
            TemplateCache.build(str(tmp_path / "nowhere"))

    def test_unknown_page(self, write_templates):
        cache = TemplateCache.build(write_templates({"pages/home.html": PAGE}))

        with pytest.raises(TemplateNotRegisteredError) as exc_info:
            cache.get("about")
        assert exc_info.value.page == "about"


class TestRender:

    def test_render_sets_status_and_body(self, write_templates):
        cache = TemplateCache.build(write_templates({"pages/home.html": PAGE}))

        response = render(cache, "home", 201, new_template_data())

        assert response.status_code == 201
        assert response.media_type == "text/html"
        body = response.body.decode()
        assert "BODY" in body
        assert "<nav>nav</nav>" in body
        assert str(datetime.now(timezone.utc).year) in body

    def test_execution_failure_produces_no_response(self, write_templates):
        """Output before the failing expression is discarded with it."""
        cache = TemplateCache.build(write_templates({
            "pages/view.html": (
                "{% extends 'base.html' %}"
                "{% block main %}<p>partial output</p>{{ snippet.no_such_field }}{% endblock %}"
            ),
        }))

        with pytest.raises(TemplateRenderError) as exc_info:
            render(cache, "view", 200, new_template_data(snippet=_snippet()))

        assert exc_info.value.page == "view"
        assert isinstance(exc_info.value.__cause__, UndefinedError)

    def test_unknown_page_is_not_rendered(self, write_templates):
        cache = TemplateCache.build(write_templates({"pages/home.html": PAGE}))

        with pytest.raises(TemplateNotRegisteredError):
            render(cache, "missing", 200, new_template_data())

    def test_output_is_autoescaped(self):
        cache = TemplateCache.build(Settings().templates_dir)
        data = new_template_data(snippet=_snippet(title="<script>x</script>"))

        body = render(cache, "view", 200, data).body.decode()

        assert "<script>x</script>" not in body
        assert "&lt;script&gt;x&lt;/script&gt;" in body


class TestHumanDate:

    def test_formats_utc(self):
        value = datetime(2024, 1, 2, 15, 4, tzinfo=timezone.utc)
        assert human_date(value) == "02 Jan 2024 at 15:04"

    def test_converts_other_zones_to_utc(self):
        value = datetime(2024, 1, 2, 17, 4, tzinfo=timezone(timedelta(hours=2)))
        assert human_date(value) == "02 Jan 2024 at 15:04"

    def test_naive_is_treated_as_utc(self):
        assert human_date(datetime(2024, 1, 2, 15, 4)) == "02 Jan 2024 at 15:04"

    def test_none(self):
        assert human_date(None) == ""
