"""
Article Renderer (convert -> sanitize -> mount -> highlight -> instrument).

This module is the single entry point used by the API and CLI to turn a block
document into something displayable.

Stages
------
1. `convert_to_fragments`: structural block-to-markup transform (unsanitized).
2. `sanitize`: allow-list cleaning, block by block; the joined result is the
   markup string returned to callers.
3. `DisplaySurface.mount`: attach to the surface, replacing what was there.
4. `highlight_surface`: additive token highlighting of code blocks.
5. `instrument_surface` (only with ``run_code=True``): run buttons and result
   panels for executable blocks, plus the optional auto-run policy.

Only steps 1-2 shape the returned string; steps 3-5 are side effects on the
surface. Rendering never raises: an unexpected failure leaves the fixed error
message on the surface and returns it.
"""

from __future__ import annotations

from dataclasses import dataclass
from html import escape
from typing import Any

from blockdoc.core.settings import Settings, get_logger, load_settings
from blockdoc.execution.runner import ExecutableBlock, instrument_surface
from blockdoc.execution.sandbox import JavaScriptSandbox
from blockdoc.render.converter import convert_to_fragments
from blockdoc.render.highlight import highlight_surface, stylesheet
from blockdoc.render.sanitizer import sanitize
from blockdoc.render.styles import ARTICLE_CSS
from blockdoc.render.surface import RENDER_ERROR_MARKUP, DisplaySurface

logger = get_logger("blockdoc.pipeline")


class ArticleRenderer:
    """Renders block documents onto a display surface it owns.

    Parameters
    ----------
    surface : DisplaySurface | None
        Target surface; a new one (default width) is created if omitted.
    sandbox : JavaScriptSandbox | None
        Evaluator for executable blocks; created lazily from settings.
    settings : Settings | None
        Configuration override (defaults to the cached settings).
    """

    def __init__(
        self,
        surface: DisplaySurface | None = None,
        *,
        sandbox: JavaScriptSandbox | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.surface = (
            surface if surface is not None else DisplaySurface(max_width=self.settings.max_width)
        )
        self._sandbox = sandbox

    @property
    def sandbox(self) -> JavaScriptSandbox:
        if self._sandbox is None:
            self._sandbox = JavaScriptSandbox(
                timeout_ms=self.settings.exec_timeout_ms,
                max_memory=self.settings.exec_max_memory,
            )
        return self._sandbox

    def render(self, content: Any, *, run_code: bool = False) -> str:
        """Render `content` onto the surface and return the sanitized markup.

        Parameters
        ----------
        content : Any
            Block document (model, mapping or JSON text); ``None`` is allowed.
        run_code : bool, default False
            Attach run controls to executable code blocks.
        """
        try:
            markup = "".join(sanitize(fragment) for fragment in convert_to_fragments(content))
            self.surface.mount(markup)
            highlight_surface(self.surface)
            if run_code:
                instrument_surface(
                    self.surface, self.sandbox, auto_run=self.settings.auto_run_embeds
                )
        except Exception:
            logger.exception("Error rendering content")
            self.surface.show_error()
            return RENDER_ERROR_MARKUP
        return markup


@dataclass(frozen=True)
class RenderedArticle:
    """Result of a one-shot render: returned markup plus the live surface."""

    html: str
    surface: DisplaySurface

    @property
    def executables(self) -> tuple[ExecutableBlock, ...]:
        return self.surface.executables

    def surface_html(self) -> str:
        return self.surface.to_html()


def render_article(
    content: Any, *, run_code: bool = False, max_width: str | None = None
) -> RenderedArticle:
    """Render `content` on a fresh surface."""
    surface = DisplaySurface(max_width=max_width)
    html = ArticleRenderer(surface).render(content, run_code=run_code)
    return RenderedArticle(html=html, surface=surface)


_PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{title}</title>
<style>{article_css}
{highlight_css}</style>
</head>
<body>
{surface}
</body>
</html>
"""


def render_page(
    content: Any,
    *,
    title: str = "Article",
    run_code: bool = False,
    max_width: str | None = None,
) -> str:
    """Render `content` as a standalone HTML page with its stylesheets."""
    article = render_article(content, run_code=run_code, max_width=max_width)
    return _PAGE_TEMPLATE.format(
        title=escape(title),
        article_css=ARTICLE_CSS,
        highlight_css=stylesheet(),
        surface=article.surface_html(),
    )


__all__ = ["ArticleRenderer", "RenderedArticle", "render_article", "render_page"]
