"""Core package initializer for blockdoc.

Downstream code imports the pieces it needs directly:
    from blockdoc.core.settings import settings, load_settings, Settings, get_logger
    from blockdoc.core.contracts.document import BlockDocument, parse_document
"""

from __future__ import annotations

__all__ = ["__doc__"]
