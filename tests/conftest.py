"""Shared fixtures for the blockdoc test-suite."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import pytest

from blockdoc.core.settings import load_settings


@pytest.fixture(autouse=True)  # type: ignore[misc]
def _fresh_settings() -> Iterator[None]:
    """Rebuild cached settings after each test so env tweaks do not leak."""
    yield
    load_settings.cache_clear()


@pytest.fixture  # type: ignore[misc]
def article() -> dict[str, Any]:
    """A small document touching most block kinds."""
    return {
        "time": 1700000000000,
        "version": "2.28.2",
        "blocks": [
            {"id": "h1", "type": "header", "data": {"text": "Title", "level": 1}},
            {"id": "p1", "type": "paragraph", "data": {"text": "Hello <b>world</b>"}},
            {"id": "l1", "type": "list", "data": {"style": "ordered", "items": ["one", "two"]}},
            {
                "id": "c1",
                "type": "code",
                "data": {"code": 'console.log("hi"); 42', "language": "javascript"},
            },
            {"id": "d1", "type": "delimiter", "data": {}},
        ],
    }
