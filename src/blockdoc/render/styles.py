"""Stylesheet for rendered articles and their run controls.

Class names here are the ones emitted by `blockdoc.render.converter` and
`blockdoc.execution.runner`; keep the three in step.
"""

from __future__ import annotations

ARTICLE_CSS = """
.article-content {
  font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Oxygen, Ubuntu, sans-serif;
  line-height: 1.6;
  color: var(--foreground, #1f2328);
}
.article-heading { margin-top: 1.5em; margin-bottom: 0.75em; font-weight: 600; }
.article-heading-1 { font-size: 2rem; }
.article-heading-2 { font-size: 1.75rem; }
.article-heading-3 { font-size: 1.5rem; }
.article-heading-4 { font-size: 1.25rem; }
.article-paragraph { margin-bottom: 1em; }
.article-paragraph a { text-decoration: underline; }
.article-list { margin-bottom: 1em; padding-left: 1.5em; }
.article-quote {
  margin: 1.5em 0;
  padding-left: 1em;
  border-left: 4px solid var(--border, #d0d7de);
  color: var(--muted-foreground, #59636e);
}
.article-quote blockquote { font-style: italic; margin: 0; }
.article-quote figcaption { margin-top: 0.5em; font-size: 0.9em; opacity: 0.8; text-align: right; }
.article-image { margin: 1.5em 0; text-align: center; }
.article-image img { max-width: 100%; height: auto; border-radius: 4px; }
.article-image--bordered img { border: 1px solid var(--border, #d0d7de); }
.article-image--stretched img { width: 100%; }
.article-image--background { background: var(--muted, #f6f8fa); padding: 1em; }
.article-image figcaption { margin-top: 0.5em; font-size: 0.9em; opacity: 0.8; }
.article-code { margin: 1.5em 0; }
.article-code pre {
  padding: 1em;
  border-radius: 4px;
  background-color: var(--muted, #f6f8fa);
  overflow: auto;
}
.article-embed { margin: 1.5em 0; max-width: 900px; }
.article-embed-caption { margin-top: 0.5em; font-size: 0.9em; opacity: 0.8; text-align: center; }
.article-delimiter { margin: 2em 0; border: none; border-top: 2px solid var(--border, #d0d7de); }
.article-table-wrapper { margin: 1.5em 0; overflow-x: auto; }
.article-table { width: 100%; border-collapse: collapse; }
.article-table td, .article-table th { border: 1px solid var(--border, #d0d7de); padding: 0.5em; }
.article-checklist { margin: 1.5em 0; }
.article-checklist-item { display: flex; align-items: center; margin-bottom: 0.5em; }
.article-checklist-item input { margin-right: 0.5em; }
.execute-code-btn {
  display: block;
  margin: 0.5em 0;
  padding: 0.3em 0.7em;
  border: none;
  border-radius: 3px;
  background-color: #4f46e5;
  color: white;
  font-size: 0.8em;
  cursor: pointer;
}
.execute-code-btn:hover { background-color: #4338ca; }
.execute-code-btn[disabled] { opacity: 0.6; cursor: progress; }
.code-output-container { margin-top: 0.5em; }
.code-output, .code-error { margin-top: 0.5em; padding: 0.5em; border-radius: 4px; }
.code-output { background-color: rgba(34, 197, 94, 0.2); }
.code-error { background-color: rgba(239, 68, 68, 0.2); border: 1px solid rgba(239, 68, 68, 0.2); }
.console-output-list { list-style: none; padding: 0; margin: 0.5em 0; }
.console-output strong, .result-output strong { display: block; margin-bottom: 0.3em; font-size: 0.9em; }
.console-log, .console-info, .console-warning, .console-error { padding: 0.25em 0; }
.console-info { color: #0969da; }
.console-warning { color: #9a6700; }
.console-error { color: #d1242f; }
.result-output pre {
  margin: 0.5em 0;
  padding: 0.5em;
  background-color: var(--muted, #f6f8fa);
  border-radius: 3px;
  overflow: auto;
  font-family: monospace;
}
.error { color: #d1242f; }
@media (max-width: 768px) {
  .article-content { padding: 0 1em; }
}
"""

__all__ = ["ARTICLE_CSS"]
