"""Core domain models.

Every collection the sync engine owns is made of these types. Pydantic is
used for validation and serialisation at both data boundaries (the local
JSON documents and the remote store).

On disk, field names are camelCase (``globalDefaults``, ``profileImageData``)
and bytes are base64 strings; in Python everything is snake_case and raw
bytes.
"""

from __future__ import annotations

import uuid
from typing import Literal, get_args
from urllib.parse import SplitResult, urlsplit

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SectionKind = Literal[
    "physical_description",
    "outfit",
    "pose",
    "environment",
    "lighting",
    "style",
    "technical",
    "negative",
]

SECTION_KINDS: tuple[SectionKind, ...] = get_args(SectionKind)

SECTION_LABELS: dict[SectionKind, str] = {
    "physical_description": "Physical Description",
    "outfit": "Outfit",
    "pose": "Pose",
    "environment": "Environment",
    "lighting": "Lighting",
    "style": "Style Modifiers",
    "technical": "Technical Modifiers",
    "negative": "Negative Prompt",
}

DEFAULT_GENERATOR = "ai-vibrant-image-generator"


class _Record(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        ser_json_bytes="base64",
        val_json_bytes="base64",
    )


# ---------------------------------------------------------------------------
# Prompt content
# ---------------------------------------------------------------------------

class PromptImage(_Record):
    """An encoded image attached to a saved prompt. Immutable."""

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    data: bytes


# Section kind → (content field, preset-name field) on SavedPrompt
_SECTION_FIELDS: dict[SectionKind, tuple[str, str]] = {
    "physical_description": ("physical_description", "physical_description_preset_name"),
    "outfit": ("outfit", "outfit_preset_name"),
    "pose": ("pose", "pose_preset_name"),
    "environment": ("environment", "environment_preset_name"),
    "lighting": ("lighting", "lighting_preset_name"),
    "style": ("style_modifiers", "style_preset_name"),
    "technical": ("technical_modifiers", "technical_preset_name"),
    "negative": ("negative_prompt", "negative_preset_name"),
}


class SavedPrompt(_Record):
    """A saved prompt. Owned by exactly one Character."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    title: str
    text: str = ""

    physical_description: str | None = None
    outfit: str | None = None
    pose: str | None = None
    environment: str | None = None
    lighting: str | None = None
    style_modifiers: str | None = None
    technical_modifiers: str | None = None
    negative_prompt: str | None = None
    additional_info: str | None = None

    # Name of the preset (if any) that populated each section
    physical_description_preset_name: str | None = None
    outfit_preset_name: str | None = None
    pose_preset_name: str | None = None
    environment_preset_name: str | None = None
    lighting_preset_name: str | None = None
    style_preset_name: str | None = None
    technical_preset_name: str | None = None
    negative_preset_name: str | None = None

    images: list[PromptImage] = Field(default_factory=list)

    def content_for(self, kind: SectionKind) -> str | None:
        return getattr(self, _SECTION_FIELDS[kind][0])

    def preset_name_for(self, kind: SectionKind) -> str | None:
        return getattr(self, _SECTION_FIELDS[kind][1])

    def set_content(self, kind: SectionKind, value: str | None) -> None:
        setattr(self, _SECTION_FIELDS[kind][0], value)

    def set_preset_name(self, kind: SectionKind, name: str | None) -> None:
        setattr(self, _SECTION_FIELDS[kind][1], name)

    @property
    def composed_prompt(self) -> str:
        """Positive sections joined by commas, then ``| negative`` if present."""
        positive = [
            self.physical_description,
            self.outfit,
            self.pose,
            self.environment,
            self.lighting,
            self.style_modifiers,
            self.technical_modifiers,
            self.additional_info,
        ]
        joined = ", ".join(s for s in positive if s and s.strip())
        negative = self.negative_prompt
        if negative and negative.strip():
            return f"{joined} | {negative}" if joined else f"| {negative}"
        return joined

    @property
    def has_content(self) -> bool:
        sections = [self.content_for(k) for k in SECTION_KINDS] + [self.additional_info]
        return any(s and s.strip() for s in sections)

    @property
    def image_count(self) -> int:
        return len(self.images)


class RelatedLink(_Record):
    """A titled URL attached to a character."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    title: str
    url_string: str

    @property
    def url(self) -> SplitResult | None:
        """Parsed URL, or None unless it has both a scheme and a host."""
        try:
            parts = urlsplit(self.url_string.strip())
            host = parts.hostname
        except ValueError:
            return None
        if not parts.scheme or not host:
            return None
        return parts

    @property
    def is_valid(self) -> bool:
        return self.url is not None

    @property
    def host(self) -> str | None:
        parts = self.url
        return parts.hostname if parts is not None else None


# ---------------------------------------------------------------------------
# Collections owned by the sync engine
# ---------------------------------------------------------------------------

class Character(_Record):
    """A character profile: identity, saved prompts, media and overrides."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str
    bio: str = ""
    notes: str = ""
    prompts: list[SavedPrompt] = Field(default_factory=list)
    profile_image_data: bytes | None = None
    links: list[RelatedLink] = Field(default_factory=list)
    character_defaults: dict[SectionKind, str] = Field(default_factory=dict)
    default_generator: str | None = None  # overrides GlobalSettings.default_generator
    theme_id: str | None = None

    @property
    def prompt_count(self) -> int:
        return len(self.prompts)

    @property
    def total_image_count(self) -> int:
        return sum(p.image_count for p in self.prompts)

    @property
    def has_profile_image(self) -> bool:
        return self.profile_image_data is not None

    @property
    def has_custom_defaults(self) -> bool:
        return bool(self.character_defaults)

    @property
    def has_custom_theme(self) -> bool:
        return self.theme_id is not None

    @property
    def has_custom_generator(self) -> bool:
        return self.default_generator is not None

    def effective_default(
        self, kind: SectionKind, global_defaults: dict[SectionKind, str]
    ) -> str | None:
        """Character-level default for `kind`, falling back to the global one."""
        if kind in self.character_defaults:
            return self.character_defaults[kind]
        return global_defaults.get(kind)


class PromptPreset(_Record):
    """A reusable snippet for one section kind.

    Names are unique per kind, case-insensitively; the sync engine enforces
    this in ``add_preset``.
    """

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    kind: SectionKind
    name: str
    text: str


class GlobalSettings(_Record):
    """Process-wide defaults. A missing key means "no default" for that kind."""

    global_defaults: dict[SectionKind, str] = Field(default_factory=dict)
    default_generator: str = DEFAULT_GENERATOR


# ---------------------------------------------------------------------------
# Sync status
# ---------------------------------------------------------------------------

SyncState = Literal["idle", "syncing", "success", "failure"]


class SyncStatus(BaseModel):
    """Observable sync state. `reason` is set only for failures."""

    model_config = ConfigDict(frozen=True)

    state: SyncState = "idle"
    reason: str | None = None

    @classmethod
    def idle(cls) -> SyncStatus:
        return cls(state="idle")

    @classmethod
    def syncing(cls) -> SyncStatus:
        return cls(state="syncing")

    @classmethod
    def success(cls) -> SyncStatus:
        return cls(state="success")

    @classmethod
    def failure(cls, reason: str) -> SyncStatus:
        return cls(state="failure", reason=reason)

    def __str__(self) -> str:
        return f"failure: {self.reason}" if self.state == "failure" else self.state
