"""
Sandboxed JavaScript evaluation for executable code blocks.

Every call to `JavaScriptSandbox.evaluate()` runs the source in a brand-new V8
isolate (via `mini-racer`). The isolate has no DOM, filesystem or network
bindings, a wall-clock timeout and a hard heap limit, and is closed as soon as
the evaluation ends.

Capture protocol
----------------
A small prelude installs a `console` object inside the isolate whose
``log``/``debug``/``info``/``warn``/``error`` methods append
``{channel, content}`` records to a buffer local to that evaluation. The
prelude then evaluates the author's source as a global script, keeps its
completion value, catches anything thrown, and returns everything as one JSON
document. The Python side replays those records into the caller's
`OutputSink`.

Value rules
-----------
- ``undefined``, ``null`` and ``""`` mean "no value".
- Objects are rendered as ``JSON.stringify(value, null, 2)``; everything else
  with ``String(value)``.
- A thrown error becomes an error entry ``"Error: <message>"``; output logged
  before the throw is kept.
- Engine-level failures (timeout, out of memory) also become error entries.
  `evaluate()` never raises.
"""

from __future__ import annotations

import json
import time
from typing import Any

from py_mini_racer import (
    JSEvalException,
    JSOOMException,
    JSTimeoutException,
    LibNotFoundError,
    MiniRacer,
)

from blockdoc.core.errors import EvaluationError
from blockdoc.core.settings import get_logger, load_settings
from blockdoc.execution.sink import CHANNELS, EvaluationResult, OutputSink

logger = get_logger("blockdoc.sandbox")

_PRELUDE = """
(function (source) {
  var stringify = JSON.stringify;
  var entries = [];
  var show = function (value) {
    if (typeof value === 'object' && value !== null) {
      try { return stringify(value, null, 2); } catch (err) { return String(value); }
    }
    return String(value);
  };
  var capture = function (channel) {
    return function () {
      var parts = [];
      for (var i = 0; i < arguments.length; i++) { parts.push(show(arguments[i])); }
      entries.push({ channel: channel, content: parts.join(' ') });
    };
  };
  globalThis.console = {
    log: capture('log'),
    debug: capture('log'),
    info: capture('info'),
    warn: capture('warning'),
    error: capture('error')
  };
  var value = null;
  var failed = false;
  try {
    var result = (0, eval)(source);
    if (result !== undefined && result !== null && result !== '') {
      value = show(result);
    }
  } catch (err) {
    failed = true;
    entries.push({
      channel: 'error',
      content: 'Error: ' + (err instanceof Error ? err.message : String(err))
    });
  }
  return stringify({ entries: entries, value: value, failed: failed });
})(%s)
"""


class JavaScriptSandbox:
    """Evaluates JavaScript snippets in isolated, resource-limited contexts.

    Parameters
    ----------
    timeout_ms : int | None
        Wall-clock budget per evaluation; defaults to `Settings.exec_timeout_ms`.
    max_memory : int | None
        Hard heap limit in bytes; defaults to `Settings.exec_max_memory`.
    """

    language = "javascript"

    def __init__(self, timeout_ms: int | None = None, max_memory: int | None = None) -> None:
        cfg = load_settings()
        self.timeout_ms = timeout_ms or cfg.exec_timeout_ms
        self.max_memory = max_memory or cfg.exec_max_memory

    # ------------------------------- Internals -------------------------------

    def _run(self, source: str) -> dict[str, Any]:
        """Run the capture prelude around `source` and decode its JSON report."""
        script = _PRELUDE % json.dumps(source)
        try:
            with MiniRacer() as ctx:
                ctx.set_hard_memory_limit(self.max_memory)
                raw = ctx.eval(script, timeout_sec=self.timeout_ms / 1000)
        except JSTimeoutException as exc:
            raise EvaluationError(f"execution timed out after {self.timeout_ms} ms") from exc
        except JSOOMException as exc:
            raise EvaluationError("execution ran out of memory") from exc
        except (JSEvalException, LibNotFoundError) as exc:
            raise EvaluationError(f"script engine failure: {exc}") from exc
        try:
            report = json.loads(raw) if isinstance(raw, str) else None
        except json.JSONDecodeError:
            report = None
        if not isinstance(report, dict):
            raise EvaluationError("evaluation produced no readable result")
        return report

    # --------------------------------- API -----------------------------------

    def evaluate(self, source: str, sink: OutputSink | None = None) -> EvaluationResult:
        """Evaluate `source` and capture its console output into `sink`.

        Parameters
        ----------
        source : str
            JavaScript source text (a global script; its completion value is
            the result).
        sink : OutputSink | None
            Collector scoped to this evaluation; a new one is used if omitted.

        Returns
        -------
        EvaluationResult
            Captured entries, rendered value and whether the evaluation failed.
        """
        sink = sink if sink is not None else OutputSink()
        started = time.perf_counter()
        value: str | None = None
        failed = False
        try:
            report = self._run(source)
        except EvaluationError as exc:
            logger.info("Evaluation aborted: %s", exc)
            sink.error(f"Error: {exc}")
            failed = True
        else:
            for record in report.get("entries") or []:
                if not isinstance(record, dict):
                    continue
                channel = record.get("channel")
                sink.write(channel if channel in CHANNELS else "log", str(record.get("content", "")))
            raw_value = report.get("value")
            value = None if raw_value is None else str(raw_value)
            failed = bool(report.get("failed"))
            if failed:
                logger.info("Evaluation raised inside the sandbox")
        return EvaluationResult(
            entries=sink.entries(),
            value=value,
            failed=failed,
            duration_ms=(time.perf_counter() - started) * 1000,
        )


def evaluate_source(source: str) -> EvaluationResult:
    """One-shot evaluation with default limits and a fresh sink."""
    return JavaScriptSandbox().evaluate(source)


__all__ = ["JavaScriptSandbox", "evaluate_source"]
