"""Tests for the article renderer facade (convert -> sanitize -> mount -> ...)."""

from __future__ import annotations

from typing import Any
from unittest.mock import patch

import pytest

from blockdoc.core.settings import Settings
from blockdoc.execution.runner import RunState
from blockdoc.render.converter import NO_CONTENT_MARKUP
from blockdoc.render.pipeline import ArticleRenderer, render_article, render_page
from blockdoc.render.surface import RENDER_ERROR_MARKUP, DisplaySurface


def test_render_returns_sanitized_markup_and_mounts_it(article: dict[str, Any]) -> None:
    rendered = render_article(article)
    assert rendered.html.startswith('<h1 class="article-heading article-heading-1">Title</h1>')
    assert len(rendered.surface) == 5
    assert rendered.executables == ()
    assert "execute-code-btn" not in rendered.surface_html()


def test_returned_markup_is_free_of_active_content() -> None:
    doc = {
        "blocks": [
            {"type": "paragraph", "data": {"text": 'x<script>alert(1)</script><a href="javascript:y()">l</a>'}},
            {"type": "header", "data": {"text": '<img src="a.png" onerror="z()">', "level": 2}},
        ]
    }
    html = render_article(doc).html
    for needle in ("<script", "alert", "javascript:", "onerror"):
        assert needle not in html


def test_none_renders_placeholder_without_raising() -> None:
    rendered = render_article(None)
    assert rendered.html == NO_CONTENT_MARKUP
    assert rendered.surface.inner_html() == NO_CONTENT_MARKUP


def test_code_blocks_are_highlighted_on_the_surface(article: dict[str, Any]) -> None:
    rendered = render_article(article)
    (code,) = rendered.surface.code_elements()
    assert code.get("data-highlighted") == "yes"
    assert code.text_content() == 'console.log("hi"); 42'
    # The returned string is the sanitized markup, before highlighting.
    assert "hl-" not in rendered.html


def test_run_code_instruments_and_triggers(article: dict[str, Any]) -> None:
    rendered = render_article(article, run_code=True)
    (block,) = rendered.executables
    assert "execute-code-btn" in rendered.surface_html()

    result = block.trigger()

    assert result is not None
    assert result.by_channel("log") == ["hi"]
    assert result.value == "42"
    assert block.state is RunState.SUCCEEDED
    assert "Console Output:" in rendered.surface_html()


def test_rerender_replaces_surface_content(article: dict[str, Any]) -> None:
    renderer = ArticleRenderer(DisplaySurface())
    renderer.render(article, run_code=True)
    assert len(renderer.surface.executables) == 1

    renderer.render({"blocks": [{"type": "paragraph", "data": {"text": "only"}}]})
    assert renderer.surface.inner_html() == '<p class="article-paragraph">only</p>'
    assert renderer.surface.executables == ()


def test_unexpected_failure_shows_error_message(article: dict[str, Any]) -> None:
    renderer = ArticleRenderer(DisplaySurface())
    with patch("blockdoc.render.pipeline.sanitize", side_effect=RuntimeError("kaput")):
        html = renderer.render(article)
    assert html == RENDER_ERROR_MARKUP
    assert renderer.surface.inner_html() == RENDER_ERROR_MARKUP


def test_auto_run_policy_follows_settings() -> None:
    doc = {
        "blocks": [
            {
                "type": "code",
                "data": {"code": 'var html = "<iframe></iframe>"; html', "language": "javascript"},
            }
        ]
    }
    renderer = ArticleRenderer(settings=Settings(auto_run_embeds=True))
    renderer.render(doc, run_code=True)
    (block,) = renderer.surface.executables
    assert block.state is RunState.SUCCEEDED
    assert block.last_result is not None
    assert block.last_result.value == "<iframe></iframe>"

    quiet = ArticleRenderer(settings=Settings(auto_run_embeds=False))
    quiet.render(doc, run_code=True)
    assert quiet.surface.executables[0].state is RunState.IDLE


def test_max_width_is_passed_through() -> None:
    rendered = render_article(None, max_width="640px")
    assert "max-width: 640px" in rendered.surface_html()


def test_render_page_is_standalone_document(article: dict[str, Any]) -> None:
    page = render_page(article, title="A & B")
    assert page.startswith("<!DOCTYPE html>")
    assert "<title>A &amp; B</title>" in page
    assert ".article-content" in page
    assert ".article-code .hl-k" in page
    assert '<div class="article-content"' in page


def test_single_block_is_mounted_on_the_returned_surface() -> None:
    rendered = render_article(
        {"blocks": [{"type": "paragraph", "data": {"text": "only"}}]}, max_width="60ch"
    )
    assert rendered.surface.inner_html() == '<p class="article-paragraph">only</p>'
    assert rendered.surface_html() == (
        '<div class="article-content" style="max-width: 60ch; margin: 0 auto; width: 100%">'
        '<p class="article-paragraph">only</p></div>'
    )


def test_renderer_keeps_the_surface_it_was_given() -> None:
    surface = DisplaySurface(max_width="40em")
    renderer = ArticleRenderer(surface)
    assert renderer.surface is surface

    renderer.render({"blocks": [{"type": "delimiter", "data": {}}]})
    assert len(surface) == 1
    assert bool(DisplaySurface()) is True


def test_render_page_contains_the_rendered_blocks() -> None:
    page = render_page({"blocks": [{"type": "header", "data": {"text": "Hi", "level": 3}}]})
    assert '<h3 class="article-heading article-heading-3">Hi</h3></div>' in page


@pytest.mark.parametrize("breakout", ["a</body>", "a</html>", "a<frameset>", "<!DOCTYPE html>a"])  # type: ignore[misc]
def test_document_level_tags_in_one_block_keep_later_blocks(breakout: str) -> None:
    doc = {
        "blocks": [
            {"type": "paragraph", "data": {"text": breakout}},
            {"type": "paragraph", "data": {"text": "keep me"}},
            {"type": "delimiter", "data": {}},
        ]
    }
    rendered = render_article(doc)
    assert rendered.html.endswith('<p class="article-paragraph">keep me</p><hr class="article-delimiter">')
    assert len(rendered.surface) == 3


def test_run_code_registers_executables_on_the_returned_surface(article: dict[str, Any]) -> None:
    rendered = render_article(article, run_code=True)
    assert len(rendered.executables) == 1
    assert rendered.surface.executable(0) is rendered.executables[0]
