"""Configuration: limits, storage keys and runtime settings.

Module-level constants hold the fixed limits of the calculator core.
``Settings`` carries the values that may vary per run and is built from
the environment by ``Settings.from_env()``.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Limits
# ---------------------------------------------------------------------------

HISTORY_LIMIT = 100
MEMORY_SLOTS = 10
DEFAULT_WORD_SIZE = 32
MAX_EXPRESSION_LENGTH = 100
GRAPH_POINTS = 200

# ---------------------------------------------------------------------------
# Storage keys
# ---------------------------------------------------------------------------

STORAGE_KEYS = {
    "theme": "calculator-theme",
    "history": "calculator-history",
    "memory": "calculator-memory",
    "last_mode": "calculator-last-mode",
}

# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------

ENV_STORAGE_PATH = "CALCSUITE_STORAGE_PATH"
ENV_LOG_LEVEL = "CALCSUITE_LOG_LEVEL"
ENV_WORD_SIZE = "CALCSUITE_WORD_SIZE"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    """Runtime settings for a calculator session.

    ``storage_path`` of None keeps everything in memory.
    """

    storage_path: str | None = None
    log_level: str = "WARNING"
    word_size: int = DEFAULT_WORD_SIZE
    history_limit: int = HISTORY_LIMIT
    memory_slots: int = MEMORY_SLOTS
    max_expression_length: int = MAX_EXPRESSION_LENGTH

    def __post_init__(self) -> None:
        if self.word_size not in (8, 16, 32, 64):
            raise ValueError(f"word_size must be 8, 16, 32 or 64, got {self.word_size}")
        if self.history_limit < 1:
            raise ValueError("history_limit must be positive")
        if self.memory_slots < 1:
            raise ValueError("memory_slots must be positive")

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Settings:
        """Build settings from ``CALCSUITE_*`` environment variables."""
        env = os.environ if environ is None else environ
        word_size = env.get(ENV_WORD_SIZE)
        return cls(
            storage_path=env.get(ENV_STORAGE_PATH) or None,
            log_level=env.get(ENV_LOG_LEVEL, "WARNING").upper(),
            word_size=int(word_size) if word_size else DEFAULT_WORD_SIZE,
        )


def setup_logging(level: str | int = "WARNING") -> None:
    """Attach a stream handler to the ``calcsuite`` logger tree."""
    root = logging.getLogger("calcsuite")
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
