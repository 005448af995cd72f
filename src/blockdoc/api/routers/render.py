"""
API Routes for rendering and code evaluation.

Endpoints
---------
- `POST /render`: Render a block document to sanitized HTML.
- `POST /execute`: Evaluate a JavaScript snippet in the sandbox (the server
  side of a code block's "Run Code" button).

Both handlers are synchronous (`def`): rendering and evaluation are CPU-bound
and FastAPI runs them in its worker thread pool.
"""

from __future__ import annotations

from fastapi import APIRouter

from blockdoc.api.schemas import (
    ExecuteRequest,
    ExecuteResponse,
    RenderRequest,
    RenderResponse,
)
from blockdoc.core.contracts.document import parse_document_strict
from blockdoc.execution.sandbox import JavaScriptSandbox
from blockdoc.render.pipeline import render_article

router = APIRouter(tags=["Rendering"])


@router.post("/render", response_model=RenderResponse, summary="Render a block document")
def render(request: RenderRequest) -> RenderResponse:
    """
    Convert, sanitize and highlight a block document.

    With ``strict=true`` a malformed document is rejected (HTTP 400) instead of
    being rendered as the "No content" placeholder.
    """
    content = parse_document_strict(request.content) if request.strict else request.content
    article = render_article(content, run_code=request.run_code, max_width=request.max_width)
    return RenderResponse(
        html=article.html,
        surface_html=article.surface_html(),
        executable_blocks=len(article.executables),
    )


@router.post("/execute", response_model=ExecuteResponse, summary="Evaluate a code block")
def execute(request: ExecuteRequest) -> ExecuteResponse:
    """
    Run `source` in a fresh sandbox and return the captured console output.

    Evaluation failures are reported in the payload (``failed=true`` plus an
    error entry); they never turn into HTTP errors.
    """
    result = JavaScriptSandbox().evaluate(request.source)
    return ExecuteResponse.from_result(result)


__all__ = ["router"]
