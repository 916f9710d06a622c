"""JSON file storage for the three collections.

Each collection is one whole JSON document under a base directory. There is
no database and no journaling; a save replaces the whole document.

Directory layout:

    {base}/
      characters.json   ← list of Character objects
      presets.json      ← list of PromptPreset objects
      settings.json     ← {"globalDefaults": {...}, "defaultGenerator": "..."}

Read failures (missing file, malformed JSON, schema mismatch) are logged and
reported as ``None`` so the caller can fall back to built-in defaults. Write
failures are logged and reported as ``False``; the document is written to a
temp file of its own first and moved into place, so a failed write leaves
the previous version untouched and concurrent writers never share a temp file.
"""

from __future__ import annotations

import contextlib
import logging
import os
import uuid
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from chancery.models import Character, GlobalSettings, PromptPreset

logger = logging.getLogger(__name__)

CHARACTERS = "characters"
PRESETS = "presets"
SETTINGS = "settings"

_ADAPTERS: dict[str, TypeAdapter[Any]] = {
    CHARACTERS: TypeAdapter(list[Character]),
    PRESETS: TypeAdapter(list[PromptPreset]),
    SETTINGS: TypeAdapter(GlobalSettings),
}


class LocalStore:
    def __init__(self, base_path: Path) -> None:
        self._base = base_path

    @property
    def base_path(self) -> Path:
        return self._base

    # ------------------------------------------------------------------
    # Internal path helpers
    # ------------------------------------------------------------------

    def _path(self, name: str) -> Path:
        return self._base / f"{name}.json"

    def _adapter(self, name: str) -> TypeAdapter[Any]:
        try:
            return _ADAPTERS[name]
        except KeyError:
            raise ValueError(f"Unknown collection {name!r}") from None

    # ------------------------------------------------------------------
    # Generic load / save
    # ------------------------------------------------------------------

    def load_collection(self, name: str) -> Any | None:
        """Load one collection document. Returns None if missing or unreadable."""
        adapter = self._adapter(name)
        path = self._path(name)
        if not path.is_file():
            logger.debug("No local %s document at %s", name, path)
            return None
        try:
            return adapter.validate_json(path.read_bytes())
        except (OSError, ValidationError) as e:
            logger.warning("Could not read local %s document %s: %s", name, path, e)
            return None

    def save_collection(self, name: str, value: Any) -> bool:
        """Replace one collection document. Returns False on failure."""
        adapter = self._adapter(name)
        path = self._path(name)
        tmp = path.with_name(f"{path.name}.{uuid.uuid4().hex}.tmp")
        try:
            data = adapter.dump_json(value, indent=2, by_alias=True)
            self._base.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(data)
            os.replace(tmp, path)
        except (OSError, ValueError) as e:
            logger.warning("Could not write local %s document %s: %s", name, path, e)
            with contextlib.suppress(OSError):
                tmp.unlink(missing_ok=True)
            return False
        return True

    # ------------------------------------------------------------------
    # Typed helpers
    # ------------------------------------------------------------------

    def load_characters(self) -> list[Character] | None:
        return self.load_collection(CHARACTERS)

    def load_presets(self) -> list[PromptPreset] | None:
        return self.load_collection(PRESETS)

    def load_settings(self) -> GlobalSettings | None:
        return self.load_collection(SETTINGS)

    def save_all(
        self,
        characters: list[Character],
        presets: list[PromptPreset],
        settings: GlobalSettings,
    ) -> bool:
        """Write all three documents. Returns True only if every write succeeded."""
        ok = self.save_collection(CHARACTERS, characters)
        ok = self.save_collection(PRESETS, presets) and ok
        ok = self.save_collection(SETTINGS, settings) and ok
        return ok
