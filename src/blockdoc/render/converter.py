"""
Block-to-Markup Converter.

Turns a `BlockDocument` into an HTML string, one top-level element per block,
in document order. This is a purely structural transform:

- Author text (paragraphs, headings, captions, cells) is emitted verbatim; the
  authoring tool stores inline HTML there. Nothing is sanitized at this stage,
  so the output must always go through `blockdoc.render.sanitizer` before it
  is shown.
- Attribute values (URLs, alt text) are attribute-escaped so they cannot break
  out of their quotes, and code is HTML-escaped so the `<code>` element's text
  content is exactly the author's source.

Error policy
------------
- Absent/malformed document -> `NO_CONTENT_MARKUP`.
- Unknown kind -> warning logged, block skipped.
- Missing required field (image url, embed url) -> block skipped.
- Code containing C0 control characters (other than tab/newline/CR) -> warning
  logged, block skipped; it could not be shown or run unchanged.
- Any exception while converting one block -> logged, block skipped; the
  remaining blocks are still rendered.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from html import escape
from typing import Any

from blockdoc.core.contracts.document import (
    Block,
    BlockData,
    BlockDocument,
    ChecklistData,
    CodeData,
    EmbedData,
    HeaderData,
    ImageData,
    ListData,
    ParagraphData,
    QuoteData,
    TableData,
    parse_document,
)
from blockdoc.core.settings import get_logger

logger = get_logger("blockdoc.render")

NO_CONTENT_MARKUP = "<p>No content</p>"
EXECUTABLE_CLASS = "executable-code"

EMBED_ALLOW = "accelerometer; autoplay; clipboard-write; encrypted-media; gyroscope; picture-in-picture"
# 16:9 responsive box: the padding-top ratio (9 / 16) drives the height.
EMBED_CONTAINER_STYLE = (
    "position: relative; width: 100%; max-width: 900px; overflow: hidden; padding-top: 56.25%;"
)
EMBED_FRAME_STYLE = "position: absolute; top: 0; left: 0; width: 100%; height: 100%;"
# C0 controls other than tab, newline and carriage return.
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


def _attr(value: str) -> str:
    return escape(value, quote=True)


def _figcaption(caption: str | None) -> str:
    return f"<figcaption>{caption}</figcaption>" if caption else ""


# --------------------------------------------------------------------------- #
# Per-kind renderers
# --------------------------------------------------------------------------- #


def render_paragraph(data: ParagraphData) -> str:
    return f'<p class="article-paragraph">{data.text}</p>'


def render_header(data: HeaderData) -> str:
    level = data.level
    return f'<h{level} class="article-heading article-heading-{level}">{data.text}</h{level}>'


def _render_list_items(items: list[Any], tag: str, css: str) -> str:
    parts = [f'<{tag} class="{css}">']
    for item in items:
        children = ListData.item_children(item)
        nested = _render_list_items(children, tag, css) if children else ""
        parts.append(f"<li>{ListData.item_text(item)}{nested}</li>")
    parts.append(f"</{tag}>")
    return "".join(parts)


def render_list(data: ListData) -> str:
    if data.ordered:
        return _render_list_items(data.items, "ol", "article-list article-ordered-list")
    return _render_list_items(data.items, "ul", "article-list article-unordered-list")


def render_quote(data: QuoteData) -> str:
    return (
        '<figure class="article-quote">'
        f"<blockquote>{data.text}</blockquote>"
        f"{_figcaption(data.caption)}"
        "</figure>"
    )


def render_image(data: ImageData) -> str | None:
    url = data.url
    if not url:
        return None
    classes = ["article-image"]
    if data.with_border:
        classes.append("article-image--bordered")
    if data.stretched:
        classes.append("article-image--stretched")
    if data.with_background:
        classes.append("article-image--background")
    alt = _attr(data.caption or "")
    return (
        f'<figure class="{" ".join(classes)}">'
        f'<img src="{_attr(url)}" alt="{alt}" />'
        f"{_figcaption(data.caption)}"
        "</figure>"
    )


def code_classes(data: CodeData) -> list[str]:
    """Class list for the `<code>` element: language first, then the executable marker."""
    classes: list[str] = []
    if data.language:
        classes.append(f"language-{data.language}")
    if data.is_executable:
        classes.append(EXECUTABLE_CLASS)
    return classes


def render_code(data: CodeData) -> str | None:
    """Escaped source inside ``pre > code``; ``None`` if the source cannot survive sanitizing."""
    if _CONTROL_CHARS.search(data.code):
        # The sanitizer would rewrite these as "?" and change the runnable source.
        logger.warning("Skipping code block with control characters (language=%s)", data.language)
        return None
    classes = code_classes(data)
    class_attr = f' class="{_attr(" ".join(classes))}"' if classes else ""
    return (
        '<div class="article-code">'
        f"<pre><code{class_attr}>{escape(data.code, quote=False)}</code></pre>"
        "</div>"
    )


def render_embed(data: EmbedData) -> str | None:
    url = data.url
    if not url:
        return None
    caption = f'<p class="article-embed-caption">{data.caption}</p>' if data.caption else ""
    return (
        '<div class="article-embed">'
        f'<div class="article-embed-container" style="{EMBED_CONTAINER_STYLE}">'
        f'<iframe src="{_attr(url)}" frameborder="0" allow="{EMBED_ALLOW}" allowfullscreen'
        f' style="{EMBED_FRAME_STYLE}"></iframe>'
        "</div>"
        f"{caption}"
        "</div>"
    )


def render_delimiter(_: BlockData) -> str:
    return '<hr class="article-delimiter" />'


def render_table(data: TableData) -> str:
    rows = data.rows()
    head = ""
    if data.with_headings and rows:
        cells = "".join(f"<th>{cell}</th>" for cell in rows[0])
        head = f"<thead><tr>{cells}</tr></thead>"
        rows = rows[1:]
    body = "".join("<tr>" + "".join(f"<td>{cell}</td>" for cell in row) + "</tr>" for row in rows)
    return (
        '<div class="article-table-wrapper"><table class="article-table">'
        f"{head}<tbody>{body}</tbody></table></div>"
    )


def render_checklist(data: ChecklistData) -> str:
    parts = ['<div class="article-checklist">']
    for item in data.items:
        checked = " checked" if item.checked else ""
        parts.append(
            '<div class="article-checklist-item">'
            f'<input type="checkbox"{checked} disabled />'
            f"<span>{item.text}</span>"
            "</div>"
        )
    parts.append("</div>")
    return "".join(parts)


BlockRenderer = Callable[[Any], str | None]

BLOCK_RENDERERS: dict[str, BlockRenderer] = {
    "paragraph": render_paragraph,
    "header": render_header,
    "list": render_list,
    "quote": render_quote,
    "image": render_image,
    "code": render_code,
    "embed": render_embed,
    "delimiter": render_delimiter,
    "table": render_table,
    "checklist": render_checklist,
}


# --------------------------------------------------------------------------- #
# Document conversion
# --------------------------------------------------------------------------- #


def convert_block(block: Block) -> str | None:
    """Convert one block; ``None`` means the block contributes no markup.

    Raises whatever the kind-specific renderer raises; `convert_to_html`
    is the layer that isolates failures.
    """
    renderer = BLOCK_RENDERERS.get(block.type)
    data = block.typed_data()
    if renderer is None or data is None:
        logger.warning("Unknown block type: %s", block.type)
        return None
    markup = renderer(data)
    if markup is None:
        logger.debug("Skipping %s block without required data (id=%s)", block.type, block.id)
    return markup


def convert_blocks(document: BlockDocument) -> list[tuple[Block, str | None]]:
    """Convert every block, pairing each with its markup (``None`` when skipped)."""
    converted: list[tuple[Block, str | None]] = []
    for index, block in enumerate(document.blocks):
        try:
            markup = convert_block(block)
        except Exception:
            logger.exception("Failed to render block %d (%s); skipping", index, block.type)
            markup = None
        converted.append((block, markup))
    return converted


def convert_to_fragments(content: Any) -> list[str]:
    """Per-block markup for `content`, skipped blocks omitted.

    An absent or empty document yields ``[NO_CONTENT_MARKUP]``. Keeping blocks
    apart lets the sanitizer clean each one on its own, so markup in one block
    cannot swallow the blocks after it.
    """
    document = parse_document(content)
    if document is None or not document.blocks:
        return [NO_CONTENT_MARKUP]
    return [markup for _, markup in convert_blocks(document) if markup]


def convert_to_html(content: Any) -> str:
    """Render a block document (or raw document data) to unsanitized markup.

    Parameters
    ----------
    content : Any
        A `BlockDocument`, its mapping/JSON form, or ``None``.

    Returns
    -------
    str
        Concatenated block markup in document order, or `NO_CONTENT_MARKUP`
        when there is no usable document or it has no blocks at all.
    """
    return "".join(convert_to_fragments(content))


__all__ = [
    "BLOCK_RENDERERS",
    "EXECUTABLE_CLASS",
    "NO_CONTENT_MARKUP",
    "code_classes",
    "convert_block",
    "convert_blocks",
    "convert_to_fragments",
    "convert_to_html",
]
