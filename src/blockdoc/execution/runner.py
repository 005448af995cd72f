"""
Interactive run controls for executable code blocks.

When code execution is allowed, every executable ``code`` element on a display
surface is wrapped in an `ExecutableBlock`: a "Run Code" button and an empty
result container are inserted after its ``<pre>``, and `trigger()` plays the
role of the button's click handler.

State machine (per block)
-------------------------
``IDLE -> RUNNING -> SUCCEEDED | FAILED``

The two final states are "idle with a result": they may be triggered again.
A trigger while ``RUNNING`` is refused (the button is disabled during a run),
so captured output from overlapping runs can never interleave.
If the evaluator itself raises, the block ends ``FAILED`` with an error panel
and the exception propagates to the caller.

Result panel
------------
Each trigger clears the block's container before evaluating, then renders::

    <div class="code-output">
      <div class="console-output"><strong>Console Output:</strong>
        <ul class="console-output-list"><li class="console-log">…</li></ul></div>
      <div class="result-output"><strong>Return Value:</strong><pre>…</pre></div>
    </div>

Only the latest run's panel is ever visible.
"""

from __future__ import annotations

import threading
from enum import Enum

from lxml import html as lxml_html
from lxml.html import HtmlElement

from blockdoc.core.settings import get_logger
from blockdoc.execution.sandbox import JavaScriptSandbox
from blockdoc.execution.sink import EvaluationResult, OutputSink
from blockdoc.render.surface import DisplaySurface, clear_element

logger = get_logger("blockdoc.runner")

RUN_BUTTON_LABEL = "Run Code"

# Sources that write markup are run once at render time when the policy is on.
AUTO_RUN_MARKERS: tuple[str, ...] = ("<iframe", "<html", "document.write")


class RunState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def should_auto_run(source: str) -> bool:
    """Auto-run policy: true when the source looks like it writes markup."""
    return any(marker in source for marker in AUTO_RUN_MARKERS)


def _sub(parent: HtmlElement, tag: str, css: str | None = None, text: str | None = None) -> HtmlElement:
    child = parent.makeelement(tag, {"class": css} if css else {})
    child.text = text
    parent.append(child)
    return child


def build_result_panel(result: EvaluationResult) -> HtmlElement:
    """Build the ``div.code-output`` panel for one evaluation result."""
    panel = lxml_html.Element("div")
    panel.set("class", "code-output")
    if result.entries:
        console = _sub(panel, "div", "console-output")
        _sub(console, "strong", text="Console Output:")
        items = _sub(console, "ul", "console-output-list")
        for entry in result.entries:
            _sub(items, "li", f"console-{entry.channel}", entry.content)
    if result.value is not None:
        output = _sub(panel, "div", "result-output")
        _sub(output, "strong", text="Return Value:")
        _sub(output, "pre", text=result.value)
    return panel


def build_error_panel(message: str) -> HtmlElement:
    panel = lxml_html.Element("div")
    panel.set("class", "code-error")
    _sub(panel, "strong", text="Error:").tail = f" {message}"
    return panel


class ExecutableBlock:
    """Run control and result panel for one executable code element.

    Parameters
    ----------
    index : int
        Position among the surface's executable blocks (0-based).
    code : HtmlElement
        The ``code`` element whose text content is the source to evaluate.
    sandbox : JavaScriptSandbox
        Evaluator used for every trigger of this block.
    """

    def __init__(self, index: int, code: HtmlElement, sandbox: JavaScriptSandbox) -> None:
        self.index = index
        self.code = code
        self.sandbox = sandbox
        self.state = RunState.IDLE
        self.last_result: EvaluationResult | None = None
        self._lock = threading.Lock()

        anchor = code.getparent() if code.getparent() is not None else code
        self.button = anchor.makeelement(
            "button",
            {"class": "execute-code-btn", "type": "button", "data-block-index": str(index)},
        )
        self.button.text = RUN_BUTTON_LABEL
        self.container = anchor.makeelement(
            "div", {"class": "code-output-container", "data-block-index": str(index)}
        )
        anchor.addnext(self.container)
        anchor.addnext(self.button)

    @property
    def source(self) -> str:
        return self.code.text_content()

    @property
    def panel(self) -> HtmlElement | None:
        """The currently visible result panel, if any."""
        return self.container[0] if len(self.container) else None

    def trigger(self) -> EvaluationResult | None:
        """Evaluate the block and replace its result panel.

        Returns
        -------
        EvaluationResult | None
            The new result, or ``None`` when the block is already running.
        """
        if not self._lock.acquire(blocking=False):
            logger.warning("Block %d is already running; ignoring trigger", self.index)
            return None
        try:
            self.state = RunState.RUNNING
            self.button.set("disabled", "disabled")
            clear_element(self.container)
            try:
                result = self.sandbox.evaluate(self.source, OutputSink())
            except Exception as exc:
                logger.exception("Evaluator failed on block %d", self.index)
                self.state = RunState.FAILED
                self.container.append(build_error_panel(str(exc)))
                raise
            try:
                self.container.append(build_result_panel(result))
            except (ValueError, TypeError) as exc:
                # lxml rejects text it cannot store (e.g. control characters).
                logger.warning("Could not render result panel for block %d: %s", self.index, exc)
                clear_element(self.container)
                self.container.append(build_error_panel(str(exc)))
            self.last_result = result
            self.state = RunState.FAILED if result.failed else RunState.SUCCEEDED
            return result
        finally:
            self.button.attrib.pop("disabled", None)
            self._lock.release()


def instrument_surface(
    surface: DisplaySurface,
    sandbox: JavaScriptSandbox | None = None,
    *,
    auto_run: bool = False,
) -> list[ExecutableBlock]:
    """Attach run controls to every executable code element on `surface`.

    Parameters
    ----------
    surface : DisplaySurface
        Surface with sanitized (and usually highlighted) content mounted.
    sandbox : JavaScriptSandbox | None
        Shared evaluator; a default-configured one is created if omitted.
    auto_run : bool
        Apply the auto-run policy (`should_auto_run`) once per block.
    """
    sandbox = sandbox or JavaScriptSandbox()
    blocks: list[ExecutableBlock] = []
    for index, code in enumerate(surface.executable_elements()):
        block = ExecutableBlock(index, code, sandbox)
        surface.register(block)
        blocks.append(block)
        if auto_run and should_auto_run(block.source):
            logger.info("Auto-running markup-writing code block %d", index)
            block.trigger()
    return blocks


__all__ = [
    "AUTO_RUN_MARKERS",
    "RUN_BUTTON_LABEL",
    "ExecutableBlock",
    "RunState",
    "build_error_panel",
    "build_result_panel",
    "instrument_surface",
    "should_auto_run",
]
