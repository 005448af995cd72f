"""
Syntax highlighting for code blocks on a display surface.

Runs after the sanitized markup is mounted. For each ``pre > code`` element
the source text is tokenized with Pygments and rewritten as a sequence of
``<span class="hl-…">`` runs. The pass is purely additive:

- The element's text content is unchanged. Lexers are built without newline
  stripping/ensuring, and if the tokens do not reassemble to the exact source
  the element is only marked, never rewritten.
- It is idempotent: highlighted elements carry ``data-highlighted="yes"`` and
  the ``hljs`` class, and are skipped on later passes, as are elements that
  already contain child markup.

`stylesheet()` emits the matching CSS so pages can style the token classes.
"""

from __future__ import annotations

from collections.abc import Iterable

from lxml.html import HtmlElement
from pygments.formatters import HtmlFormatter
from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name, guess_lexer
from pygments.lexers.special import TextLexer
from pygments.token import STANDARD_TYPES, _TokenType
from pygments.util import ClassNotFound

from blockdoc.core.settings import get_logger, load_settings
from blockdoc.render.surface import DisplaySurface, add_class, clear_element

logger = get_logger("blockdoc.highlight")

CLASS_PREFIX = "hl-"
HIGHLIGHTED_ATTR = "data-highlighted"
HIGHLIGHTED_CLASS = "hljs"

_LEXER_OPTIONS = {"stripnl": False, "stripall": False, "ensurenl": False}


def language_of(element: HtmlElement) -> str | None:
    """Return ``X`` from the element's ``language-X`` class, if any."""
    for css in (element.get("class") or "").split():
        if css.startswith("language-") and len(css) > len("language-"):
            return css[len("language-") :]
    return None


def lexer_for(language: str | None, source: str) -> Lexer:
    """Pick a lexer by language name, falling back to detection, then plain text."""
    if language:
        try:
            return get_lexer_by_name(language, **_LEXER_OPTIONS)
        except ClassNotFound:
            logger.debug("No lexer named %r; guessing from content", language)
    try:
        return guess_lexer(source, **_LEXER_OPTIONS)
    except ClassNotFound:
        return TextLexer(**_LEXER_OPTIONS)


def token_class(ttype: _TokenType) -> str:
    """Short Pygments class for a token type ("" for plain text)."""
    while ttype not in STANDARD_TYPES:
        ttype = ttype.parent
    short = STANDARD_TYPES[ttype]
    return f"{CLASS_PREFIX}{short}" if short else ""


def _append_text(element: HtmlElement, text: str) -> None:
    if len(element):
        last = element[-1]
        last.tail = (last.tail or "") + text
    else:
        element.text = (element.text or "") + text


def _write_tokens(element: HtmlElement, tokens: Iterable[tuple[_TokenType, str]]) -> None:
    clear_element(element)
    for ttype, value in tokens:
        css = token_class(ttype)
        if not css:
            _append_text(element, value)
            continue
        span = element.makeelement("span", {"class": css})
        span.text = value
        element.append(span)


def is_highlighted(element: HtmlElement) -> bool:
    return element.get(HIGHLIGHTED_ATTR) == "yes"


def highlight_element(element: HtmlElement) -> bool:
    """Highlight one code element in place.

    Returns
    -------
    bool
        ``True`` if the element's content was rewritten into token spans.
    """
    if is_highlighted(element) or len(element):
        return False
    source = element.text or ""
    rewritten = False
    if source:
        tokens = list(lexer_for(language_of(element), source).get_tokens(source))
        if "".join(value for _, value in tokens) == source:
            _write_tokens(element, tokens)
            rewritten = True
        else:
            logger.debug("Token stream does not reproduce the source; leaving text as-is")
    add_class(element, HIGHLIGHTED_CLASS)
    element.set(HIGHLIGHTED_ATTR, "yes")
    return rewritten


def highlight_surface(surface: DisplaySurface) -> int:
    """Highlight every code block on `surface`; returns how many were rewritten."""
    return sum(highlight_element(element) for element in surface.code_elements())


def stylesheet(style: str | None = None, scope: str = ".article-code") -> str:
    """CSS for the token classes, scoped under `scope`."""
    formatter = HtmlFormatter(style=style or load_settings().highlight_style, classprefix=CLASS_PREFIX)
    return formatter.get_style_defs(scope)


__all__ = [
    "CLASS_PREFIX",
    "HIGHLIGHTED_ATTR",
    "HIGHLIGHTED_CLASS",
    "highlight_element",
    "highlight_surface",
    "is_highlighted",
    "language_of",
    "lexer_for",
    "stylesheet",
    "token_class",
]
