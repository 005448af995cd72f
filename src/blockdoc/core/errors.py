"""Exception hierarchy for blockdoc.

The rendering core recovers from content problems locally (placeholder output,
skipped blocks, error entries in a result panel). These exceptions exist for
the seams: strict parsing requested by API/CLI callers, sandbox internals, and
misuse of a display surface.
"""

from __future__ import annotations


class BlockdocError(Exception):
    """Base class for every error raised by blockdoc."""


class DocumentError(BlockdocError, ValueError):
    """The supplied block document is absent or structurally malformed."""


class EvaluationError(BlockdocError):
    """The sandbox could not complete an evaluation (timeout, memory, engine)."""


class SurfaceError(BlockdocError):
    """An operation was attempted on a display surface in an invalid state."""


__all__ = ["BlockdocError", "DocumentError", "EvaluationError", "SurfaceError"]
