"""HTTP surface for blockdoc (FastAPI)."""
