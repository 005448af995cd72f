"""Runtime configuration for blockdoc, backed by pydantic-settings.

Values come from process environment variables first, then from `.env` and
`.env.local` in the working directory. `load_settings()` caches the result;
tests call `load_settings.cache_clear()` after patching the environment.

Renderer knobs
--------------
- `max_width` is the default layout hint handed to every display surface.
- `exec_timeout_ms` / `exec_max_memory` bound each sandboxed code evaluation.
- `auto_run_embeds` enables the "run on render" policy for code blocks that
  write markup (off unless explicitly requested).
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["dev", "test", "prod"]
LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_MIB = 1024 * 1024


class Settings(BaseSettings):
    """Typed application configuration loaded from env and `.env` files.

    Attributes
    ----------
    environment : EnvName
        Runtime environment flag; maps from `BLOCKDOC_ENV`.
    log_level : LogLevelName
        Global log level string; maps from `LOG_LEVEL`.
    max_width : str
        CSS length used as the default surface width; maps from `BLOCKDOC_MAX_WIDTH`.
    exec_timeout_ms : int
        Wall-clock budget for one code evaluation; maps from `BLOCKDOC_EXEC_TIMEOUT_MS`.
    exec_max_memory : int
        Heap ceiling in bytes for one code evaluation; maps from `BLOCKDOC_EXEC_MAX_MEMORY`.
    auto_run_embeds : bool
        Auto-trigger markup-writing code blocks at render time; maps from
        `BLOCKDOC_AUTO_RUN_EMBEDS`.
    highlight_style : str
        Pygments style name for emitted stylesheets; maps from `BLOCKDOC_HIGHLIGHT_STYLE`.
    """

    environment: EnvName = Field(default="dev", alias="BLOCKDOC_ENV")
    log_level: LogLevelName = Field(default="INFO", alias="LOG_LEVEL")
    max_width: str = Field(default="900px", alias="BLOCKDOC_MAX_WIDTH")
    exec_timeout_ms: int = Field(default=2000, ge=1, alias="BLOCKDOC_EXEC_TIMEOUT_MS")
    exec_max_memory: int = Field(default=64 * _MIB, ge=_MIB, alias="BLOCKDOC_EXEC_MAX_MEMORY")
    auto_run_embeds: bool = Field(default=False, alias="BLOCKDOC_AUTO_RUN_EMBEDS")
    highlight_style: str = Field(default="default", alias="BLOCKDOC_HIGHLIGHT_STYLE")

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def is_dev(self) -> bool:
        """Local development mode (enables uvicorn reload)."""
        return self.environment == "dev"

    @property
    def is_test(self) -> bool:
        """Running under the test suite."""
        return self.environment == "test"

    @property
    def is_prod(self) -> bool:
        """Deployed mode."""
        return self.environment == "prod"

    def log_level_numeric(self) -> int:
        """`log_level` as a `logging` module constant."""
        return getattr(logging, self.log_level, logging.INFO)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Create and cache a `Settings` instance.

    Kept behind an LRU cache so tests can force a rebuild via
    `load_settings.cache_clear()` after mutating `os.environ`.
    """
    os.environ.setdefault("BLOCKDOC_ENV", "dev")
    return Settings()


# Ready-to-use singleton (import-time read of env / .env files).
settings: Settings = load_settings()


def get_logger(name: str = "blockdoc") -> logging.Logger:
    """Named logger with a single stream handler, leveled from `LOG_LEVEL`."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(load_settings().log_level_numeric())
    logger.propagate = False
    return logger
