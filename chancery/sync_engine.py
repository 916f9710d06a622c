"""Sync engine — owns the in-memory collections and keeps disk and cloud in step.

Startup (`start()`):
  1. Load characters, presets and settings from the local store. Missing or
     unreadable documents fall back to built-in data (sample presets, sample
     defaults, no characters).
  2. Mark the engine loaded. Callers can render from local state from here on.
  3. In the background, connect to the remote if it is not available yet,
     then run `sync_with_cloud()`. `start()` itself returns right away.

Sync cycle (`sync_with_cloud()`):
  1. Skip quietly if the remote is unavailable.
  2. Fetch characters + presets, then settings. A failure here leaves memory
     untouched and sets status to failure.
  3. Merge characters and presets by id (remote wins, unknown ids appended,
     local-only records kept). Remote settings replace local settings.
  4. Write the merged state to disk before reporting success.

Mutations apply to memory and return immediately. Each one then
  (a) restarts the debounced local write, and
  (b) submits a push to the remote through the outbound queue.
Push failures are logged and never reach the caller.

All methods must be called from the event loop thread. Disk I/O runs in
worker threads on snapshots taken on the loop thread.

Known limitations (kept on purpose):
  - Merge never deletes. A record deleted on one device while another was
    offline comes back on that device's next sync.
  - Pushes for the same record may complete out of order; no version or
    timestamp is attached.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Protocol, TypeVar
from uuid import UUID, uuid4

from chancery.debounce import Debouncer
from chancery.defaults import sample_presets, sample_settings
from chancery.local_store import LocalStore
from chancery.models import (
    DEFAULT_GENERATOR,
    Character,
    GlobalSettings,
    PromptPreset,
    SectionKind,
    SyncStatus,
)
from chancery.outbound import PushFn, PushQueue
from chancery.remote import RemoteStore

logger = logging.getLogger(__name__)

Listener = Callable[[str], None]

# Topics passed to subscribers
TOPIC_CHARACTERS = "characters"
TOPIC_PRESETS = "presets"
TOPIC_SETTINGS = "settings"
TOPIC_STATUS = "status"
TOPIC_LOADED = "loaded"


class _HasId(Protocol):
    id: UUID


R = TypeVar("R", bound=_HasId)


def merge_records(local: list[R], incoming: list[R]) -> list[R]:
    """Merge `incoming` into `local` by id.

    Matching ids are replaced in place, new ids are appended in incoming
    order, and local-only records are kept.
    """
    merged = list(local)
    index = {r.id: i for i, r in enumerate(merged)}
    for record in incoming:
        i = index.get(record.id)
        if i is None:
            index[record.id] = len(merged)
            merged.append(record)
        else:
            merged[i] = record
    return merged


class SyncEngine:
    """Local-first store for characters, presets and global settings.

    Args:
        local:            Where the three documents are persisted.
        remote:           Cloud counterpart; see `chancery.remote.RemoteStore`.
        save_delay:       Debounce window for local writes, in seconds.
        push_concurrency: Maximum number of pushes in flight at once.

    Records passed to mutation methods are copied, so later edits to the
    caller's object do not leak in. Records returned by the accessors are the
    engine's own: treat them as read-only and change them through
    `model_copy(update=...)` followed by `update_character` / `save_preset`.
    """

    def __init__(
        self,
        local: LocalStore,
        remote: RemoteStore,
        *,
        save_delay: float = 0.5,
        push_concurrency: int = 4,
    ) -> None:
        self._local = local
        self._remote = remote

        self._characters: list[Character] = []
        self._presets: list[PromptPreset] = []
        self._global_defaults: dict[SectionKind, str] = {}
        self._default_generator = DEFAULT_GENERATOR
        self._sync_status = SyncStatus.idle()
        self._last_sync: datetime | None = None
        self._is_loaded = False

        self._listeners: list[Listener] = []
        self._write_lock = asyncio.Lock()
        self._debouncer = Debouncer(self._persist, delay=save_delay)
        self._pushes = PushQueue(push_concurrency)
        self._initial_sync: asyncio.Task[None] | None = None
        self._started = False
        self._detach_remote: Callable[[], None] | None = remote.add_status_listener(
            self._on_remote_status
        )

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def characters(self) -> list[Character]:
        return list(self._characters)

    @property
    def presets(self) -> list[PromptPreset]:
        return list(self._presets)

    @property
    def global_defaults(self) -> dict[SectionKind, str]:
        return dict(self._global_defaults)

    @property
    def default_generator(self) -> str:
        return self._default_generator

    @property
    def settings(self) -> GlobalSettings:
        return GlobalSettings(
            global_defaults=dict(self._global_defaults),
            default_generator=self._default_generator,
        )

    @property
    def sync_status(self) -> SyncStatus:
        return self._sync_status

    @property
    def last_sync(self) -> datetime | None:
        return self._last_sync

    @property
    def is_loaded(self) -> bool:
        return self._is_loaded

    @property
    def has_pending_write(self) -> bool:
        return self._debouncer.pending

    @property
    def push_queue(self) -> PushQueue:
        return self._pushes

    def get_character(self, character_id: UUID) -> Character | None:
        i = self.character_index(character_id)
        return self._characters[i] if i is not None else None

    def character_index(self, character_id: UUID) -> int | None:
        for i, c in enumerate(self._characters):
            if c.id == character_id:
                return i
        return None

    def presets_of(self, kind: SectionKind) -> list[PromptPreset]:
        return [p for p in self._presets if p.kind == kind]

    def get_preset(self, preset_id: UUID) -> PromptPreset | None:
        return next((p for p in self._presets if p.id == preset_id), None)

    def global_default(self, kind: SectionKind) -> str | None:
        return self._global_defaults.get(kind)

    def effective_default(self, character: Character, kind: SectionKind) -> str | None:
        return character.effective_default(kind, self._global_defaults)

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener(topic)` after every state change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, topic: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(topic)
            except Exception:
                logger.exception("Listener failed for topic %r", topic)

    def _set_status(self, status: SyncStatus) -> None:
        if status == self._sync_status:
            return
        self._sync_status = status
        self._notify(TOPIC_STATUS)

    def _on_remote_status(self, status: SyncStatus) -> None:
        logger.debug("Remote status: %s", status)
        self._set_status(status)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Load local data, then connect and run the first cloud sync in the background."""
        if self._started:
            logger.debug("Sync engine already started")
            return
        self._started = True
        logger.info("Sync engine starting (data dir %s)", self._local.base_path)

        characters, presets, settings = await asyncio.to_thread(self._load_local)
        self._characters = characters
        self._presets = presets
        self._global_defaults = dict(settings.global_defaults)
        self._default_generator = settings.default_generator
        self._is_loaded = True
        for topic in (TOPIC_CHARACTERS, TOPIC_PRESETS, TOPIC_SETTINGS, TOPIC_LOADED):
            self._notify(topic)

        self._initial_sync = asyncio.get_running_loop().create_task(self._connect_and_sync())

    async def _connect_and_sync(self) -> None:
        if not self._remote.is_available:
            await self._remote.connect()
        await self.sync_with_cloud()

    def _load_local(self) -> tuple[list[Character], list[PromptPreset], GlobalSettings]:
        characters = self._local.load_characters()
        if characters is None:
            characters = []
        else:
            logger.info("Loaded %d characters from local storage", len(characters))

        presets = self._local.load_presets()
        if presets is None:
            presets = sample_presets()
            logger.debug("Using sample presets")
        else:
            logger.info("Loaded %d presets from local storage", len(presets))

        settings = self._local.load_settings()
        if settings is None:
            settings = sample_settings()
            logger.debug("Using sample defaults")
        else:
            logger.debug("Loaded settings from local storage")

        return characters, presets, settings

    async def wait_idle(self) -> None:
        """Wait for the initial sync, any pending local write and all queued pushes."""
        if self._initial_sync is not None:
            await asyncio.gather(self._initial_sync, return_exceptions=True)
        await self._debouncer.wait()
        await self._pushes.drain()

    async def close(self) -> None:
        """Write pending changes now, finish outstanding pushes and detach from the remote."""
        if self._initial_sync is not None:
            await asyncio.gather(self._initial_sync, return_exceptions=True)
        await self._debouncer.flush()
        await self._pushes.drain()
        if self._detach_remote is not None:
            self._detach_remote()
            self._detach_remote = None
        logger.info("Sync engine closed")

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def _persist(self) -> None:
        # One write at a time; the snapshot is taken once the previous write is
        # done, so the last write to finish carries the newest state.
        async with self._write_lock:
            characters = [c.model_copy(deep=True) for c in self._characters]
            presets = [p.model_copy(deep=True) for p in self._presets]
            settings = self.settings
            logger.debug("Saving local data")
            ok = await asyncio.to_thread(self._local.save_all, characters, presets, settings)
        if not ok:
            logger.warning("Local save incomplete; previous documents kept where writes failed")

    def _changed(self, topic: str) -> None:
        self._debouncer.schedule()
        self._notify(topic)

    def _push(self, label: str, push: PushFn) -> None:
        if not self._remote.is_available:
            logger.debug("Remote store not available, push skipped (%s)", label)
            return
        self._pushes.submit(label, push)

    def _push_settings(self) -> None:
        settings = self.settings
        self._push("save settings", lambda: self._remote.save_global_settings(settings))

    # ------------------------------------------------------------------
    # Cloud sync
    # ------------------------------------------------------------------

    async def sync_with_cloud(self) -> None:
        """Fetch remote state and merge it in. Never raises."""
        if not self._remote.is_available:
            logger.debug("Remote store not available, skipping sync")
            return

        logger.info("Starting cloud sync")
        self._set_status(SyncStatus.syncing())
        try:
            changes = await self._remote.fetch_changes()
            remote_settings = await self._remote.fetch_global_settings()
        except Exception as e:
            logger.error("Cloud sync failed: %s", e)
            self._set_status(SyncStatus.failure(str(e)))
            return

        if changes.characters:
            self._characters = merge_records(self._characters, changes.characters)
            self._notify(TOPIC_CHARACTERS)
        if changes.presets:
            self._presets = merge_records(self._presets, changes.presets)
            self._notify(TOPIC_PRESETS)
        if remote_settings is not None:
            self._global_defaults = dict(remote_settings.global_defaults)
            self._default_generator = remote_settings.default_generator
            self._notify(TOPIC_SETTINGS)

        await self._persist()
        self._last_sync = datetime.now(timezone.utc)
        logger.info(
            "Cloud sync completed (%d characters, %d presets fetched)",
            len(changes.characters), len(changes.presets),
        )
        self._set_status(SyncStatus.success())

    async def force_sync(self) -> None:
        """Upload every local collection to the remote. Never raises."""
        if not self._remote.is_available:
            logger.debug("Remote store not available, skipping force sync")
            return

        logger.info("Force syncing all data to remote")
        self._set_status(SyncStatus.syncing())
        characters = [c.model_copy(deep=True) for c in self._characters]
        presets = [p.model_copy(deep=True) for p in self._presets]
        settings = self.settings
        try:
            await self._remote.save_characters(characters)
            await self._remote.save_presets(presets)
            await self._remote.save_global_settings(settings)
        except Exception as e:
            logger.error("Force sync failed: %s", e)
            self._set_status(SyncStatus.failure(str(e)))
            return

        self._last_sync = datetime.now(timezone.utc)
        logger.info("Force sync completed")
        self._set_status(SyncStatus.success())

    # ------------------------------------------------------------------
    # Characters
    # ------------------------------------------------------------------

    def add_character(self, character: Character) -> None:
        """Insert a copy at the front (most recent first)."""
        self._characters.insert(0, character.model_copy(deep=True))
        self._changed(TOPIC_CHARACTERS)
        snapshot = character.model_copy(deep=True)
        self._push(f"save character {character.id}", lambda: self._remote.save_character(snapshot))
        logger.info("Added character: %s", character.name)

    def update_character(self, character: Character) -> None:
        """Replace the character with the same id. Unknown ids are logged and ignored."""
        i = self.character_index(character.id)
        if i is None:
            logger.warning("Character not found for update: %s", character.id)
            return
        self._characters[i] = character.model_copy(deep=True)
        self._changed(TOPIC_CHARACTERS)
        snapshot = character.model_copy(deep=True)
        self._push(f"save character {character.id}", lambda: self._remote.save_character(snapshot))
        logger.debug("Updated character: %s", character.name)

    def delete_character(self, character: Character) -> None:
        self._characters = [c for c in self._characters if c.id != character.id]
        self._changed(TOPIC_CHARACTERS)
        snapshot = character.model_copy(deep=True)
        self._push(
            f"delete character {character.id}", lambda: self._remote.delete_character(snapshot)
        )
        logger.info("Deleted character: %s", character.name)

    # ------------------------------------------------------------------
    # Presets
    # ------------------------------------------------------------------

    def save_preset(self, preset: PromptPreset) -> None:
        """Replace the preset with the same id, or append it."""
        self._presets = merge_records(self._presets, [preset.model_copy()])
        self._changed(TOPIC_PRESETS)
        snapshot = preset.model_copy()
        self._push(f"save preset {preset.id}", lambda: self._remote.save_preset(snapshot))
        logger.debug("Saved preset: %s", preset.name)

    def add_preset(self, kind: SectionKind, name: str, text: str) -> None:
        """Add a preset, or overwrite the text of one with the same kind and name.

        Name matching ignores case. Blank names or texts are ignored.
        """
        name = name.strip()
        text = text.strip()
        if not name or not text:
            return

        folded = name.casefold()
        i = next(
            (
                i for i, p in enumerate(self._presets)
                if p.kind == kind and p.name.casefold() == folded
            ),
            None,
        )
        if i is not None:
            preset = self._presets[i].model_copy(update={"text": text})
            self._presets[i] = preset
            logger.debug("Updated preset text: %s", preset.name)
        else:
            preset = PromptPreset(id=uuid4(), kind=kind, name=name, text=text)
            self._presets.append(preset)
            logger.debug("Added preset: %s", preset.name)

        self._changed(TOPIC_PRESETS)
        snapshot = preset.model_copy()
        self._push(f"save preset {preset.id}", lambda: self._remote.save_preset(snapshot))

    def delete_preset(self, preset: PromptPreset) -> None:
        self._presets = [p for p in self._presets if p.id != preset.id]
        self._changed(TOPIC_PRESETS)
        snapshot = preset.model_copy()
        self._push(f"delete preset {preset.id}", lambda: self._remote.delete_preset(snapshot))
        logger.debug("Deleted preset: %s", preset.name)

    def remove_preset(self, preset_id: UUID) -> bool:
        """Delete a preset by id. Returns False if there is no such preset."""
        preset = self.get_preset(preset_id)
        if preset is None:
            logger.warning("Attempted to remove non-existent preset: %s", preset_id)
            return False
        self.delete_preset(preset)
        return True

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def set_global_default(self, value: str | None, kind: SectionKind) -> None:
        """Set the default for `kind`. None or blank removes it."""
        value = value.strip() if value is not None else ""
        if value:
            self._global_defaults[kind] = value
        else:
            self._global_defaults.pop(kind, None)
        self._changed(TOPIC_SETTINGS)
        self._push_settings()

    def set_default_generator(self, generator: str) -> None:
        generator = generator.strip()
        if not generator or generator == self._default_generator:
            return
        self._default_generator = generator
        self._changed(TOPIC_SETTINGS)
        self._push_settings()
        logger.info("Generator changed to: %s", generator)
