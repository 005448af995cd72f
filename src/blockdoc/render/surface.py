"""
Display surface: the live container that rendered articles are attached to.

The browser version of the renderer writes into a DOM node; here that node is
an `lxml.html` element tree owned by a `DisplaySurface`. Everything that runs
*after* sanitization (syntax highlighting, run buttons, result panels) works on
this tree, and `to_html()` serializes the current state.

Ownership rules
---------------
- The surface owns its subtree completely: `mount()` replaces all previous
  children and forgets previously registered executable blocks.
- Interactive elements are registered on the surface by the runner; the
  surface itself knows nothing about code evaluation.
"""

from __future__ import annotations

from html import escape
from typing import TYPE_CHECKING

from lxml import etree
from lxml import html as lxml_html
from lxml.html import HtmlElement

from blockdoc.core.errors import SurfaceError
from blockdoc.core.settings import load_settings
from blockdoc.render.converter import EXECUTABLE_CLASS

if TYPE_CHECKING:
    from blockdoc.execution.runner import ExecutableBlock

RENDER_ERROR_MARKUP = '<p class="error">Error rendering content</p>'

_CODE_XPATH = "descendant::pre/code"
_EXECUTABLE_XPATH = (
    f"descendant::code[contains(concat(' ', normalize-space(@class), ' '), ' {EXECUTABLE_CLASS} ')]"
)


def has_class(element: HtmlElement, name: str) -> bool:
    return name in (element.get("class") or "").split()


def add_class(element: HtmlElement, name: str) -> None:
    classes = (element.get("class") or "").split()
    if name not in classes:
        classes.append(name)
        element.set("class", " ".join(classes))


def clear_element(element: HtmlElement) -> None:
    """Remove every child and the text of `element`, keeping its attributes and tail."""
    for child in list(element):
        element.remove(child)
    element.text = None


def parse_fragment(markup: str) -> tuple[str, list[HtmlElement]]:
    """Parse trusted (already sanitized) markup into leading text plus elements."""
    if not markup.strip():
        return markup, []
    container = lxml_html.fragment_fromstring(markup, create_parent="div")
    return container.text or "", list(container)


class DisplaySurface:
    """The container element an article is rendered into.

    Parameters
    ----------
    max_width : str | None
        CSS length used as the container's max width; passed through as-is.
        Defaults to `Settings.max_width`.
    class_name : str | None
        Extra class(es) appended to ``article-content``.
    """

    def __init__(self, max_width: str | None = None, class_name: str | None = None) -> None:
        self.max_width = max_width or load_settings().max_width
        self.root: HtmlElement = lxml_html.Element("div")
        self.root.set("class", " ".join(filter(None, ("article-content", class_name))))
        self.root.set("style", f"max-width: {self.max_width}; margin: 0 auto; width: 100%")
        self._executables: list[ExecutableBlock] = []

    # ------------------------------- Content ---------------------------------

    def mount(self, markup: str) -> None:
        """Replace the surface content with `markup` (sanitized HTML)."""
        clear_element(self.root)
        self._executables.clear()
        text, elements = parse_fragment(markup)
        self.root.text = text or None
        for element in elements:
            self.root.append(element)

    def show_error(self) -> None:
        """Replace the content with the fixed render-error message."""
        self.mount(RENDER_ERROR_MARKUP)

    def code_elements(self) -> list[HtmlElement]:
        """All code-block content elements (``pre > code``) in document order."""
        return list(self.root.xpath(_CODE_XPATH))

    def executable_elements(self) -> list[HtmlElement]:
        """Code elements carrying the executable marker class, in document order."""
        return list(self.root.xpath(_EXECUTABLE_XPATH))

    def text_content(self) -> str:
        return self.root.text_content()

    # ----------------------------- Interactivity -----------------------------

    def register(self, block: ExecutableBlock) -> None:
        self._executables.append(block)

    @property
    def executables(self) -> tuple[ExecutableBlock, ...]:
        return tuple(self._executables)

    def executable(self, index: int) -> ExecutableBlock:
        """Return the registered executable block at `index`."""
        try:
            return self._executables[index]
        except IndexError:
            raise SurfaceError(
                f"no executable block {index} (surface has {len(self._executables)})"
            ) from None

    # ------------------------------- Output ----------------------------------

    def inner_html(self) -> str:
        head = escape(self.root.text or "", quote=False)
        return head + "".join(
            etree.tostring(child, encoding="unicode", method="html") for child in self.root
        )

    def to_html(self) -> str:
        """Serialize the container element including its live controls."""
        return etree.tostring(self.root, encoding="unicode", method="html")

    def __len__(self) -> int:
        return len(self.root)

    def __bool__(self) -> bool:
        # An empty surface is still a surface.
        return True


__all__ = [
    "RENDER_ERROR_MARKUP",
    "DisplaySurface",
    "add_class",
    "clear_element",
    "has_class",
    "parse_fragment",
]
