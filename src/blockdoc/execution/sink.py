"""
Scoped capture of diagnostic output from one code evaluation.

An `OutputSink` is created for a single evaluation, handed explicitly to the
sandbox, and discarded afterwards. Nothing process-wide (no logging handlers,
no global console objects) is swapped while code runs, so overlapping or later
evaluations cannot see each other's output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from blockdoc.core.settings import get_logger

Channel = Literal["log", "info", "warning", "error"]
CHANNELS: tuple[Channel, ...] = ("log", "info", "warning", "error")

logger = get_logger("blockdoc.console")


@dataclass(frozen=True, slots=True)
class ConsoleEntry:
    """One captured line of console output.

    Attributes
    ----------
    channel : Channel
        Severity channel: ``log``, ``info``, ``warning`` or ``error``.
    content : str
        The formatted message (arguments already joined by spaces).
    """

    channel: Channel
    content: str


class OutputSink:
    """Append-only collector for the console output of one evaluation."""

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: list[ConsoleEntry] = []

    def write(self, channel: Channel, content: str) -> None:
        if channel not in CHANNELS:
            channel = "log"
        self._entries.append(ConsoleEntry(channel=channel, content=content))
        logger.debug("[%s] %s", channel, content)

    def log(self, content: str) -> None:
        self.write("log", content)

    def info(self, content: str) -> None:
        self.write("info", content)

    def warning(self, content: str) -> None:
        self.write("warning", content)

    def error(self, content: str) -> None:
        self.write("error", content)

    def entries(self) -> tuple[ConsoleEntry, ...]:
        return tuple(self._entries)

    @property
    def has_errors(self) -> bool:
        return any(entry.channel == "error" for entry in self._entries)

    def __len__(self) -> int:
        return len(self._entries)


@dataclass(frozen=True, slots=True)
class EvaluationResult:
    """Outcome of one evaluation: captured output, final value and failure flag."""

    entries: tuple[ConsoleEntry, ...] = ()
    value: str | None = None
    failed: bool = False
    duration_ms: float = field(default=0.0, compare=False)

    def by_channel(self, channel: Channel) -> list[str]:
        return [entry.content for entry in self.entries if entry.channel == channel]


__all__ = ["CHANNELS", "Channel", "ConsoleEntry", "EvaluationResult", "OutputSink"]
