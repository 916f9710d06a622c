"""Process-wide sync engine instance.

There is exactly one engine per process. `init_engine()` builds it once from
config (or from explicitly passed stores), `get_engine()` hands it to
consumers, and `shutdown_engine()` flushes and releases it at exit.
"""

from __future__ import annotations

import logging

from chancery.config import ChanceryConfig
from chancery.local_store import LocalStore
from chancery.remote import HttpRemote, InMemoryRemote, RemoteStore
from chancery.sync_engine import SyncEngine

logger = logging.getLogger(__name__)

_engine: SyncEngine | None = None


def build_remote(config: ChanceryConfig) -> RemoteStore:
    """HttpRemote when a URL is configured, else an unavailable in-memory remote."""
    if config.remote_url:
        return HttpRemote(
            config.remote_url, api_key=config.remote_token, timeout=config.remote_timeout
        )
    logger.info("No remote configured; running local-only")
    return InMemoryRemote(available=False)


def init_engine(
    config: ChanceryConfig | None = None,
    *,
    local: LocalStore | None = None,
    remote: RemoteStore | None = None,
) -> SyncEngine:
    """Create the process-wide engine. Call `await engine.start()` next.

    `start()` connects an `HttpRemote` and runs the first sync in the
    background, so callers never need to call `connect()` themselves.
    """
    global _engine
    if _engine is not None:
        raise RuntimeError("Sync engine already initialised; call shutdown_engine() first")
    config = config or ChanceryConfig()
    _engine = SyncEngine(
        local or LocalStore(config.data_dir),
        remote or build_remote(config),
        save_delay=config.save_delay,
        push_concurrency=config.push_concurrency,
    )
    return _engine


def get_engine() -> SyncEngine:
    if _engine is None:
        raise RuntimeError("Call init_engine() before using the sync engine")
    return _engine


async def shutdown_engine() -> None:
    global _engine
    if _engine is None:
        return
    engine, _engine = _engine, None
    await engine.close()
