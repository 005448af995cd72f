"""
ASGI Entry Point for the blockdoc API.

This module exposes the `app` object required by ASGI servers (Uvicorn/Gunicorn).
It loads `.env` first so that settings read at import time see the values.

Usage
-----
Run via the module entry point:
    $ python -m blockdoc.api.server

Or via uvicorn directly:
    $ uvicorn blockdoc.api.server:app --reload
"""

from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from blockdoc.api.app import create_app
from blockdoc.core.settings import get_logger, load_settings

# --------------------------------------------------------------------------- #
# Environment Setup
# --------------------------------------------------------------------------- #

load_dotenv(dotenv_path=Path(".env"))
load_settings.cache_clear()

app = create_app()


def main() -> None:
    """Run the API server locally for development."""
    cfg = load_settings()
    logger = get_logger("blockdoc.server")
    logger.info(
        "Sandbox limits: timeout=%d ms, memory=%d bytes, auto-run embeds=%s",
        cfg.exec_timeout_ms,
        cfg.exec_max_memory,
        cfg.auto_run_embeds,
    )

    uvicorn.run(
        "blockdoc.api.server:app",
        host="0.0.0.0",
        port=8000,
        reload=cfg.is_dev,
        log_level=cfg.log_level.lower(),
    )


if __name__ == "__main__":
    main()
