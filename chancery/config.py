"""Runtime configuration read from the environment (and an optional .env file)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_DATA_DIR = Path("data")


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class ChanceryConfig:
    """Where data lives and how to reach the remote store.

    An empty `remote_url` means no remote: the engine runs local-only.
    """

    data_dir: Path = field(default_factory=lambda: DEFAULT_DATA_DIR)
    remote_url: str = ""
    remote_token: str = ""
    remote_timeout: float = 30.0
    save_delay: float = 0.5
    push_concurrency: int = 4
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env_file: Path | None = None) -> ChanceryConfig:
        """Build config from CHANCERY_* environment variables."""
        load_dotenv(env_file or Path(".env"))
        return cls(
            data_dir=Path(os.getenv("CHANCERY_DATA_DIR", "").strip() or DEFAULT_DATA_DIR),
            remote_url=os.getenv("CHANCERY_REMOTE_URL", "").strip(),
            remote_token=os.getenv("CHANCERY_REMOTE_TOKEN", "").strip(),
            remote_timeout=_float_env("CHANCERY_REMOTE_TIMEOUT", 30.0),
            save_delay=_float_env("CHANCERY_SAVE_DELAY", 0.5),
            push_concurrency=_int_env("CHANCERY_PUSH_CONCURRENCY", 4),
            log_level=os.getenv("CHANCERY_LOG_LEVEL", "INFO").strip().upper() or "INFO",
        )
