"""
Block Document Contract.

These Pydantic models describe the article body produced by the block-based
authoring tool (Editor.js output format): a creation timestamp, a format
version tag and an ordered list of typed blocks.

Layers
------
- `Block`: the tagged envelope (`type` + free-form `data`). Unknown kinds are
  valid envelopes; deciding what to do with them is the renderer's job.
- `*Data` models: lenient, kind-specific views over `Block.data`. They never
  reject odd author content; missing fields fall back to empty values and
  wrongly-typed fields are coerced or dropped.
- `parse_document()`: turns untrusted structured input (dict, JSON text) into
  a `BlockDocument`, or ``None`` when there is no usable document.

The renderer only reads these models; nothing here is mutated after parsing.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError, field_validator

from blockdoc.core.errors import DocumentError
from blockdoc.core.settings import get_logger

logger = get_logger("blockdoc.contracts")

BLOCK_KINDS: tuple[str, ...] = (
    "paragraph",
    "header",
    "list",
    "quote",
    "image",
    "code",
    "embed",
    "delimiter",
    "table",
    "checklist",
)

SCRIPT_LANGUAGES: frozenset[str] = frozenset({"javascript", "js"})

_LANGUAGE_CHARS = re.compile(r"[^\w+#.-]")


def _coerce_text(value: Any) -> str:
    """Render any author value as text the way the authoring tool would show it."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, dict | list):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)


def _optional_text(value: Any) -> str | None:
    text = _coerce_text(value)
    return text or None


def _list_or_empty(value: Any) -> list[Any]:
    return list(value) if isinstance(value, list | tuple) else []


Text = Annotated[str, BeforeValidator(_coerce_text)]
OptionalText = Annotated[str | None, BeforeValidator(_optional_text)]
Flag = Annotated[bool, BeforeValidator(lambda v: bool(v))]


# ---- Kind-specific data ------------------------------------------------------


class BlockData(BaseModel):
    """Base for the lenient per-kind views over ``Block.data``."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class ParagraphData(BlockData):
    text: Text = ""


class HeaderData(BlockData):
    """Heading text plus a level clamped into the valid ``h1``..``h6`` range."""

    text: Text = ""
    level: int = 2

    @field_validator("level", mode="before")
    @classmethod
    def _clamp_level(cls, value: Any) -> int:
        try:
            level = int(value)
        except (TypeError, ValueError):
            return 2
        if level == 0:
            return 2
        return min(max(level, 1), 6)


class ListData(BlockData):
    """Ordered/unordered list; items are strings or ``{content|text, items}`` objects."""

    style: Text = "unordered"
    items: Annotated[list[Any], BeforeValidator(_list_or_empty)] = Field(default_factory=list)

    @property
    def ordered(self) -> bool:
        return self.style == "ordered"

    @staticmethod
    def item_text(item: Any) -> str:
        """Resolve the display text of one list item.

        Strings are used as-is; objects expose ``content`` or ``text`` (first
        non-empty wins); anything else is stringified as compact JSON.
        """
        if isinstance(item, str):
            return item
        if isinstance(item, Mapping):
            for key in ("content", "text"):
                if item.get(key):
                    return _coerce_text(item[key])
        return _coerce_text(item)

    @staticmethod
    def item_children(item: Any) -> list[Any]:
        """Return the nested items of an object item (empty for plain strings)."""
        if isinstance(item, Mapping):
            return _list_or_empty(item.get("items"))
        return []


class QuoteData(BlockData):
    text: Text = ""
    caption: OptionalText = None
    alignment: Text = "left"


class ImageData(BlockData):
    """Image reference; only renderable when ``file.url`` is present."""

    file: dict[str, Any] | None = None
    caption: OptionalText = None
    with_border: Flag = Field(default=False, alias="withBorder")
    stretched: Flag = False
    with_background: Flag = Field(default=False, alias="withBackground")

    @field_validator("file", mode="before")
    @classmethod
    def _mapping_only(cls, value: Any) -> dict[str, Any] | None:
        return dict(value) if isinstance(value, Mapping) else None

    @property
    def url(self) -> str | None:
        if not self.file:
            return None
        return _optional_text(self.file.get("url"))


class CodeData(BlockData):
    code: Text = ""
    language: OptionalText = None

    @field_validator("language", mode="after")
    @classmethod
    def _normalise_language(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _LANGUAGE_CHARS.sub("", value.strip()) or None

    @property
    def is_executable(self) -> bool:
        """True when the language marks the block as runnable script content."""
        return (self.language or "").lower() in SCRIPT_LANGUAGES


class EmbedData(BlockData):
    """Embedded frame; the url comes from ``embed`` or, failing that, ``service.url``."""

    embed: OptionalText = None
    service: Any = None
    source: OptionalText = None
    caption: OptionalText = None

    @property
    def url(self) -> str | None:
        if self.embed:
            return self.embed
        if isinstance(self.service, Mapping):
            return _optional_text(self.service.get("url"))
        return None


class DelimiterData(BlockData):
    pass


class TableData(BlockData):
    content: Annotated[list[Any], BeforeValidator(_list_or_empty)] = Field(default_factory=list)
    with_headings: Flag = Field(default=False, alias="withHeadings")

    def rows(self) -> list[list[str]]:
        """Return the rows as text cells; a non-list row becomes an empty row."""
        return [[_coerce_text(cell) for cell in _list_or_empty(row)] for row in self.content]


class ChecklistItem(BlockData):
    text: Text = ""
    checked: Flag = False


class ChecklistData(BlockData):
    items: list[ChecklistItem] = Field(default_factory=list)

    @field_validator("items", mode="before")
    @classmethod
    def _mappings_only(cls, value: Any) -> list[Any]:
        return [item for item in _list_or_empty(value) if isinstance(item, Mapping)]


BLOCK_DATA_MODELS: dict[str, type[BlockData]] = {
    "paragraph": ParagraphData,
    "header": HeaderData,
    "list": ListData,
    "quote": QuoteData,
    "image": ImageData,
    "code": CodeData,
    "embed": EmbedData,
    "delimiter": DelimiterData,
    "table": TableData,
    "checklist": ChecklistData,
}


# ---- Envelope models ---------------------------------------------------------


class Block(BaseModel):
    """One unit of authored content: a kind tag plus kind-specific data."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: OptionalText = None
    type: str = Field(..., min_length=1, description="Block kind, e.g. 'paragraph'.")
    data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("data", mode="before")
    @classmethod
    def _data_mapping(cls, value: Any) -> dict[str, Any]:
        return dict(value) if isinstance(value, Mapping) else {}

    @property
    def is_known(self) -> bool:
        return self.type in BLOCK_DATA_MODELS

    def typed_data(self) -> BlockData | None:
        """Return the kind-specific view over ``data`` (``None`` for unknown kinds)."""
        model = BLOCK_DATA_MODELS.get(self.type)
        if model is None:
            return None
        return model.model_validate(self.data)

    @property
    def is_executable(self) -> bool:
        if self.type != "code":
            return False
        data = self.typed_data()
        return isinstance(data, CodeData) and data.is_executable


class BlockDocument(BaseModel):
    """Root value: opaque metadata plus the ordered block sequence."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    time: int | None = None
    version: OptionalText = None
    blocks: list[Block] = Field(default_factory=list)

    @field_validator("time", mode="before")
    @classmethod
    def _opaque_time(cls, value: Any) -> int | None:
        if isinstance(value, bool):
            return None
        if isinstance(value, int | float):
            return int(value)
        return None


# ---- Parsing -----------------------------------------------------------------


def _load(raw: Any) -> Any:
    if isinstance(raw, bytes | bytearray):
        raw = raw.decode("utf-8", errors="replace")
    if isinstance(raw, str):
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.debug("Document is not valid JSON: %s", exc)
            return None
    return raw


def _parse_blocks(entries: list[Any]) -> list[Block]:
    blocks: list[Block] = []
    for position, entry in enumerate(entries):
        if not isinstance(entry, Mapping) or not isinstance(entry.get("type"), str):
            logger.debug("Dropping malformed block at position %d", position)
            continue
        try:
            blocks.append(Block.model_validate(entry))
        except ValidationError as exc:
            logger.debug("Dropping invalid block at position %d: %s", position, exc)
    return blocks


def parse_document(raw: Any) -> BlockDocument | None:
    """Build a `BlockDocument` from untrusted input, or return ``None``.

    Parameters
    ----------
    raw : Any
        A mapping in the authoring tool's output format, the same as JSON
        text/bytes, or an existing `BlockDocument`.

    Returns
    -------
    BlockDocument | None
        ``None`` when the input is absent, not a mapping, or lacks a ``blocks``
        list. Individual malformed blocks are dropped; this never raises.
    """
    if isinstance(raw, BlockDocument):
        return raw
    data = _load(raw)
    if not isinstance(data, Mapping):
        return None
    entries = data.get("blocks")
    if not isinstance(entries, list):
        return None
    return BlockDocument(
        time=data.get("time"),
        version=data.get("version"),
        blocks=_parse_blocks(entries),
    )


def parse_document_strict(raw: Any) -> BlockDocument:
    """Like `parse_document` but raise `DocumentError` when there is no document."""
    document = parse_document(raw)
    if document is None:
        raise DocumentError("content is not a block document (expected an object with a 'blocks' list)")
    return document


__all__ = [
    "BLOCK_DATA_MODELS",
    "BLOCK_KINDS",
    "SCRIPT_LANGUAGES",
    "Block",
    "BlockData",
    "BlockDocument",
    "ChecklistData",
    "ChecklistItem",
    "CodeData",
    "DelimiterData",
    "EmbedData",
    "HeaderData",
    "ImageData",
    "ListData",
    "ParagraphData",
    "QuoteData",
    "TableData",
    "parse_document",
    "parse_document_strict",
]
