"""
HTML sanitizer for rendered block markup.

Security model
--------------
- The converter emits author text verbatim, so its output is untrusted.
- Raw-text active elements (`script`, `style`, ...) are dropped together with
  their content first.
- `bleach` then rebuilds the markup from a central allow-list
  (`SanitizerPolicy`): unknown tags are stripped, unknown attributes and
  inline event handlers are removed, URLs are limited to safe protocols and
  inline styles are reduced to a few layout properties.
- Embeds are the only framed content: `iframe` plus its `allow`,
  `allowfullscreen`, `frameborder` and `scrolling` attributes.

`sanitize()` is pure: it builds a fresh `Cleaner` per call and reads only the
immutable policy it is given. If the markup cannot be processed at all it
degrades to plain escaped text rather than raising.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from html import escape
from types import MappingProxyType

from bleach.css_sanitizer import CSSSanitizer
from bleach.sanitizer import Cleaner
from lxml import etree
from lxml import html as lxml_html

from blockdoc.core.settings import get_logger

logger = get_logger("blockdoc.sanitizer")

AttributeRule = tuple[str, ...] | Callable[[str, str, str], bool]

BASE_TAGS: frozenset[str] = frozenset(
    {
        "a", "abbr", "b", "blockquote", "br", "code", "del", "div", "em",
        "figcaption", "figure", "h1", "h2", "h3", "h4", "h5", "h6", "hr", "i",
        "img", "input", "kbd", "li", "mark", "ol", "p", "pre", "s", "span",
        "strong", "sub", "sup", "table", "tbody", "td", "th", "thead", "tr",
        "u", "ul",
    }
)  # fmt: skip

EMBED_TAGS: frozenset[str] = frozenset({"iframe"})
EMBED_ATTRIBUTES: tuple[str, ...] = ("allow", "allowfullscreen", "frameborder", "scrolling")

# Elements whose content is script/style source rather than readable text.
ACTIVE_ELEMENTS: tuple[str, ...] = (
    "script", "style", "noscript", "template", "object", "embed", "applet", "frameset",
)  # fmt: skip

ALLOWED_PROTOCOLS: frozenset[str] = frozenset({"http", "https", "mailto"})

ALLOWED_CSS_PROPERTIES: frozenset[str] = frozenset(
    {"position", "top", "left", "width", "height", "max-width", "overflow", "padding-top", "margin"}
)


def _input_attribute(tag: str, name: str, value: str) -> bool:
    """Checklist inputs only: a (disabled) checkbox and its state."""
    if name == "type":
        return value.strip().lower() == "checkbox"
    return name in ("checked", "disabled", "class")


BASE_ATTRIBUTES: Mapping[str, AttributeRule] = MappingProxyType(
    {
        "*": ("class",),
        "a": ("class", "href", "title", "target", "rel"),
        "img": ("class", "src", "alt", "title", "width", "height"),
        "div": ("class", "style"),
        "ol": ("class", "start"),
        "td": ("class", "colspan", "rowspan"),
        "th": ("class", "colspan", "rowspan"),
        "input": _input_attribute,
        "iframe": ("src", "style", "title", "width", "height", *EMBED_ATTRIBUTES),
    }
)


@dataclass(frozen=True, slots=True)
class SanitizerPolicy:
    """Immutable allow-list consumed by `sanitize()`.

    Attributes
    ----------
    tags : frozenset[str]
        Elements kept in the output (everything else is stripped).
    attributes : Mapping[str, AttributeRule]
        Per-tag attribute names (or a predicate); ``"*"`` applies to all tags.
    protocols : frozenset[str]
        URL schemes permitted in ``href``/``src``.
    css_properties : frozenset[str]
        Inline style properties permitted in ``style`` attributes.
    """

    tags: frozenset[str] = BASE_TAGS | EMBED_TAGS
    attributes: Mapping[str, AttributeRule] = field(default_factory=lambda: BASE_ATTRIBUTES)
    protocols: frozenset[str] = ALLOWED_PROTOCOLS
    css_properties: frozenset[str] = ALLOWED_CSS_PROPERTIES

    def cleaner(self) -> Cleaner:
        """Build a new `bleach` cleaner for this policy (cleaners are not shared)."""
        return Cleaner(
            tags=set(self.tags),
            attributes=dict(self.attributes),
            protocols=set(self.protocols),
            strip=True,
            strip_comments=True,
            css_sanitizer=CSSSanitizer(allowed_css_properties=set(self.css_properties)),
        )


DEFAULT_POLICY = SanitizerPolicy()

_TAG = re.compile(r"<[^>]*>?")
# Document-level tags; inside a fragment they would end the body and drop what follows.
_DOCUMENT_TAGS = re.compile(r"<(?:!doctype|/?(?:html|head|body|frameset)\b)[^>]*>", re.IGNORECASE)


def _drop_active_elements(markup: str) -> str:
    """Remove raw-text active elements together with their content.

    `markup` is parsed as a fragment under a throwaway ``div``; document-level
    tags are removed beforehand.
    """
    markup, removed = _DOCUMENT_TAGS.subn("", markup)
    while removed:
        markup, removed = _DOCUMENT_TAGS.subn("", markup)
    if not markup.strip():
        return ""
    container = lxml_html.fragment_fromstring(markup, create_parent="div")
    for element in list(container.iter(*ACTIVE_ELEMENTS)):
        element.drop_tree()
    head = escape(container.text or "", quote=False)
    return head + "".join(lxml_html.tostring(child, encoding="unicode") for child in container)


def strip_all_markup(markup: str) -> str:
    """Last-resort fallback: remove every tag and escape what is left."""
    return escape(_TAG.sub("", markup), quote=False)


def sanitize(markup: str, policy: SanitizerPolicy = DEFAULT_POLICY) -> str:
    """Return `markup` reduced to the allow-listed, inert subset of HTML.

    Parameters
    ----------
    markup : str
        Raw markup from the converter (untrusted).
    policy : SanitizerPolicy, optional
        Allow-list to apply; defaults to the article policy.

    Returns
    -------
    str
        Markup safe to attach to a live document. On processing failure the
        input is returned with all tags stripped and text escaped.
    """
    if not markup or not markup.strip():
        return ""
    try:
        return policy.cleaner().clean(_drop_active_elements(markup))
    except (etree.ParserError, ValueError, TypeError) as exc:
        logger.warning("Sanitizer could not process markup (%s); stripping all tags", exc)
        return strip_all_markup(markup)


__all__ = [
    "ACTIVE_ELEMENTS",
    "ALLOWED_PROTOCOLS",
    "BASE_ATTRIBUTES",
    "BASE_TAGS",
    "DEFAULT_POLICY",
    "EMBED_ATTRIBUTES",
    "EMBED_TAGS",
    "SanitizerPolicy",
    "sanitize",
    "strip_all_markup",
]
