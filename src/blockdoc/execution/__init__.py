"""Sandboxed evaluation and run controls for executable code blocks."""
