"""blockdoc package bootstrap.

Renders block-structured article documents (Editor.js style) into sanitized,
highlighted HTML, with an optional sandboxed runner for JavaScript code blocks.
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.3.0"
