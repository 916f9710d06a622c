"""Remote store — the cloud side of synchronisation.

The sync engine talks to the remote through the `RemoteStore` protocol:

    is_available                       → checked before every sync
    await connect()                    → probe the remote, update is_available
    await fetch_changes()              → RemoteChanges(characters, presets, timestamp)
    await fetch_global_settings()      → GlobalSettings | None
    await save_character(c) / save_characters([...])
    await save_preset(p) / save_presets([...])
    await save_global_settings(s)
    await delete_character(c) / delete_preset(p)
    add_status_listener(cb)            → push-based SyncStatus stream

Every operation may fail independently with `RemoteError`; nothing is
transactional across entity types.

Two implementations are provided:

    HttpRemote      — JSON-over-HTTP client built on httpx.
    InMemoryRemote  — keeps records in dictionaries. No network calls. Used
                      when no remote is configured and as the test double.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Protocol

import httpx
from pydantic import TypeAdapter, ValidationError

from chancery.models import Character, GlobalSettings, PromptPreset, SyncStatus

logger = logging.getLogger(__name__)

StatusListener = Callable[[SyncStatus], None]


@dataclass
class RemoteChanges:
    characters: list[Character] = field(default_factory=list)
    presets: list[PromptPreset] = field(default_factory=list)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


# ---------------------------------------------------------------------------
# Protocol: every remote implementation must match this shape
# ---------------------------------------------------------------------------

class RemoteStore(Protocol):
    @property
    def is_available(self) -> bool: ...

    async def connect(self) -> bool: ...

    async def fetch_changes(self) -> RemoteChanges: ...

    async def fetch_global_settings(self) -> GlobalSettings | None: ...

    async def save_character(self, character: Character) -> None: ...

    async def save_characters(self, characters: list[Character]) -> None: ...

    async def delete_character(self, character: Character) -> None: ...

    async def save_preset(self, preset: PromptPreset) -> None: ...

    async def save_presets(self, presets: list[PromptPreset]) -> None: ...

    async def delete_preset(self, preset: PromptPreset) -> None: ...

    async def save_global_settings(self, settings: GlobalSettings) -> None: ...

    def add_status_listener(self, listener: StatusListener) -> Callable[[], None]: ...


class _StatusSource:
    """Listener bookkeeping shared by the implementations below."""

    def __init__(self) -> None:
        self._status_listeners: list[StatusListener] = []

    def add_status_listener(self, listener: StatusListener) -> Callable[[], None]:
        self._status_listeners.append(listener)

        def remove() -> None:
            if listener in self._status_listeners:
                self._status_listeners.remove(listener)

        return remove

    def _publish(self, status: SyncStatus) -> None:
        for listener in list(self._status_listeners):
            try:
                listener(status)
            except Exception:
                logger.exception("Remote status listener failed")


# ---------------------------------------------------------------------------
# HttpRemote: talks to a JSON API
# ---------------------------------------------------------------------------

_CHARACTER_LIST = TypeAdapter(list[Character])
_PRESET_LIST = TypeAdapter(list[PromptPreset])


def _dump(value: Any) -> Any:
    if isinstance(value, list):
        return [v.model_dump(mode="json", by_alias=True) for v in value]
    return value.model_dump(mode="json", by_alias=True)


class HttpRemote(_StatusSource):
    """Async JSON client for a record-per-id remote API.

    Endpoints (relative to `base_url`):
      GET    /health                 availability probe used by connect()
      GET    /characters             → [Character, ...]
      PUT    /characters             bulk upsert
      PUT    /characters/{id}        upsert one
      DELETE /characters/{id}
      GET/PUT/DELETE /presets...     same shape as characters
      GET    /settings               → GlobalSettings, 404 when never saved
      PUT    /settings

    Args:
        base_url: Root URL of the API, e.g. "https://sync.example.com/v1".
        api_key:  Bearer token, or empty string if not required.
        timeout:  HTTP timeout in seconds. Defaults to 30.
    """

    def __init__(self, base_url: str, api_key: str = "", timeout: float = 30.0) -> None:
        super().__init__()
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._available = False

    @property
    def is_available(self) -> bool:
        return self._available

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Accept": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def _request(
        self, method: str, path: str, body: Any = None, allow_missing: bool = False
    ) -> Any:
        url = f"{self._base_url}{path}"
        logger.debug("remote %s %s", method, url)
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.request(
                    method, url, json=body, headers=self._headers()
                )
                if allow_missing and resp.status_code == 404:
                    return None
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise RemoteError(f"Cannot connect to remote store at {self._base_url}") from e
        except httpx.HTTPStatusError as e:
            raise RemoteError(
                f"Remote store returned HTTP {e.response.status_code} for {method} {path}"
            ) from e
        except httpx.TimeoutException as e:
            raise RemoteError(f"Remote store timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise RemoteError(f"Remote store request failed: {e}") from e
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise RemoteError(f"Remote store returned invalid JSON for {method} {path}") from e

    async def connect(self) -> bool:
        """Probe the remote and update availability. Never raises."""
        try:
            await self._request("GET", "/health")
        except RemoteError as e:
            logger.warning("Remote store unavailable: %s", e)
            self._available = False
            self._publish(SyncStatus.failure(str(e)))
            return False
        logger.info("Remote store available at %s", self._base_url)
        self._available = True
        self._publish(SyncStatus.idle())
        return True

    # -- fetch ---------------------------------------------------------

    async def fetch_changes(self) -> RemoteChanges:
        characters = await self._request("GET", "/characters")
        presets = await self._request("GET", "/presets")
        try:
            changes = RemoteChanges(
                characters=_CHARACTER_LIST.validate_python(characters or []),
                presets=_PRESET_LIST.validate_python(presets or []),
            )
        except ValidationError as e:
            raise RemoteError(f"Unexpected response format from remote store: {e}") from e
        logger.info(
            "Fetched %d characters and %d presets from remote",
            len(changes.characters), len(changes.presets),
        )
        return changes

    async def fetch_global_settings(self) -> GlobalSettings | None:
        data = await self._request("GET", "/settings", allow_missing=True)
        if data is None:
            return None
        try:
            return GlobalSettings.model_validate(data)
        except ValidationError as e:
            raise RemoteError(f"Unexpected settings format from remote store: {e}") from e

    # -- characters ----------------------------------------------------

    async def save_character(self, character: Character) -> None:
        await self._request("PUT", f"/characters/{character.id}", _dump(character))

    async def save_characters(self, characters: list[Character]) -> None:
        await self._request("PUT", "/characters", _dump(characters))
        logger.info("Batch saved %d characters", len(characters))

    async def delete_character(self, character: Character) -> None:
        await self._request("DELETE", f"/characters/{character.id}")

    # -- presets -------------------------------------------------------

    async def save_preset(self, preset: PromptPreset) -> None:
        await self._request("PUT", f"/presets/{preset.id}", _dump(preset))

    async def save_presets(self, presets: list[PromptPreset]) -> None:
        await self._request("PUT", "/presets", _dump(presets))
        logger.info("Batch saved %d presets", len(presets))

    async def delete_preset(self, preset: PromptPreset) -> None:
        await self._request("DELETE", f"/presets/{preset.id}")

    # -- settings ------------------------------------------------------

    async def save_global_settings(self, settings: GlobalSettings) -> None:
        await self._request("PUT", "/settings", _dump(settings))


# ---------------------------------------------------------------------------
# InMemoryRemote: dictionaries instead of a server
# ---------------------------------------------------------------------------

class InMemoryRemote(_StatusSource):
    """Keeps deep copies of everything it is given. No network calls.

    With ``available=False`` it behaves like a remote that was never
    configured: the engine skips every sync.
    """

    def __init__(self, available: bool = True) -> None:
        super().__init__()
        self.available = available
        self.characters: dict[str, Character] = {}
        self.presets: dict[str, PromptPreset] = {}
        self.settings: GlobalSettings | None = None

    @property
    def is_available(self) -> bool:
        return self.available

    async def connect(self) -> bool:
        """Nothing to probe; reports the current availability."""
        return self.available

    def set_available(self, available: bool) -> None:
        self.available = available
        self._publish(SyncStatus.idle())

    async def fetch_changes(self) -> RemoteChanges:
        return RemoteChanges(
            characters=[c.model_copy(deep=True) for c in self.characters.values()],
            presets=[p.model_copy(deep=True) for p in self.presets.values()],
        )

    async def fetch_global_settings(self) -> GlobalSettings | None:
        return self.settings.model_copy(deep=True) if self.settings else None

    async def save_character(self, character: Character) -> None:
        self.characters[str(character.id)] = character.model_copy(deep=True)

    async def save_characters(self, characters: list[Character]) -> None:
        for c in characters:
            await self.save_character(c)

    async def delete_character(self, character: Character) -> None:
        self.characters.pop(str(character.id), None)

    async def save_preset(self, preset: PromptPreset) -> None:
        self.presets[str(preset.id)] = preset.model_copy(deep=True)

    async def save_presets(self, presets: list[PromptPreset]) -> None:
        for p in presets:
            await self.save_preset(p)

    async def delete_preset(self, preset: PromptPreset) -> None:
        self.presets.pop(str(preset.id), None)

    async def save_global_settings(self, settings: GlobalSettings) -> None:
        self.settings = settings.model_copy(deep=True)


# ---------------------------------------------------------------------------
# RemoteError: raised by every remote operation on failure
# ---------------------------------------------------------------------------

class RemoteError(RuntimeError):
    """Raised when the remote store cannot be reached or rejects a request."""
