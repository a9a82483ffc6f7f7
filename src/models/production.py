"""Data models for the movie production pipeline.

The production document is built incrementally: script analysis creates it,
later stages merge their output field by field, and the review tools mutate
single characters or scenes by id.
"""

import mimetypes
import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional


def new_id() -> str:
    """Generate a fresh unique identifier for a character, scene or suggestion."""
    return str(uuid.uuid4())


class RunStatus(str, Enum):
    """Overall status of a production run."""

    SETUP = "setup"
    RUNNING = "running"
    REVIEW = "review"
    COMPLETE = "complete"
    ERROR = "error"


class ProductionStage(str, Enum):
    """Ordered production stages. Values are the user-facing stage names."""

    SCRIPT_ANALYSIS = "Script Analysis"
    STYLE_ANALYSIS = "Visual Style Analysis"
    STORY_CONSULTATION = "Scene Suggestion Consultation"
    VOICE_CASTING = "Voice Actor Casting"
    VOICE_LINES = "Voice Clip Generation"
    CHARACTER_VISUALS = "Character Generation"
    STORYBOARD = "Storyboard Generation"
    RENDERING = "Video Rendering"


class QualityMode(str, Enum):
    """Visual generation quality."""

    STANDARD = "standard"
    HIGH = "high"


class AssetState(str, Enum):
    """Lifecycle of a generated asset field."""

    NOT_STARTED = "not_started"
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class Asset:
    """A generated asset reference with an explicit state.

    Only READY assets carry a usable value. PENDING is the loading state
    shown while a generation or regeneration is in flight.
    """

    state: AssetState = AssetState.NOT_STARTED
    value: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def not_started(cls) -> "Asset":
        return cls()

    @classmethod
    def pending(cls) -> "Asset":
        return cls(state=AssetState.PENDING)

    @classmethod
    def ready(cls, value: str) -> "Asset":
        if not value:
            raise ValueError("A ready asset requires a non-empty value")
        return cls(state=AssetState.READY, value=value)

    @classmethod
    def failed(cls, error: str) -> "Asset":
        return cls(state=AssetState.FAILED, error=error)

    @property
    def is_ready(self) -> bool:
        return self.state == AssetState.READY

    @property
    def is_pending(self) -> bool:
        return self.state == AssetState.PENDING

    def to_dict(self) -> dict:
        return {"state": self.state.value, "value": self.value, "error": self.error}


@dataclass
class VisualReference:
    """User-supplied inspiration file (image or video)."""

    data: bytes
    mime_type: str
    filename: str = ""

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    @property
    def is_video(self) -> bool:
        return self.mime_type.startswith("video/")

    @classmethod
    def from_path(cls, path: str | Path) -> "VisualReference":
        """Load a reference file, guessing its MIME type from the extension."""
        path = Path(path)
        mime_type, _ = mimetypes.guess_type(str(path))
        if not mime_type:
            raise ValueError(f"Cannot determine media type of reference file: {path.name}")
        return cls(data=path.read_bytes(), mime_type=mime_type, filename=path.name)


@dataclass(frozen=True)
class VoiceActor:
    """A (fictional) voice actor cast for a character."""

    name: str
    vocal_style: str

    def to_dict(self) -> dict:
        return {"name": self.name, "vocal_style": self.vocal_style}


@dataclass
class Character:
    """A character in the movie."""

    name: str
    description: str
    id: str = field(default_factory=new_id)
    image: Asset = field(default_factory=Asset.not_started)
    voice_actor: Optional[VoiceActor] = None
    voice_line: Asset = field(default_factory=Asset.not_started)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "image": self.image.to_dict(),
            "voice_actor": self.voice_actor.to_dict() if self.voice_actor else None,
            "voice_line": self.voice_line.to_dict(),
        }


@dataclass
class Scene:
    """A scene in the movie. scene_number always mirrors its 1-based position."""

    scene_number: int
    description: str
    id: str = field(default_factory=new_id)
    storyboard: Asset = field(default_factory=Asset.not_started)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "scene_number": self.scene_number,
            "description": self.description,
            "storyboard": self.storyboard.to_dict(),
        }


@dataclass
class SceneSuggestion:
    """An AI-proposed scene awaiting an accept/reject decision."""

    title: str
    reasoning: str
    scene_description: str
    suggested_position: int
    id: str = field(default_factory=new_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "reasoning": self.reasoning,
            "scene_description": self.scene_description,
            "suggested_position": self.suggested_position,
        }


@dataclass
class ScriptAnalysis:
    """Structured output of script analysis."""

    title: str
    logline: str
    characters: list[Character]
    scenes: list[Scene]


@dataclass
class ProductionDocument:
    """The movie in progress.

    Characters keep analyzer order for the whole run. Scenes are ordered and
    renumbered on every insertion or removal.
    """

    title: str
    logline: str
    script: str
    characters: list[Character] = field(default_factory=list)
    scenes: list[Scene] = field(default_factory=list)
    music_style: str = "Cinematic"
    style_prompt: Optional[str] = None
    inspiration_reference: Optional[VisualReference] = None
    quality: QualityMode = QualityMode.STANDARD
    final_video: Asset = field(default_factory=Asset.not_started)
    promo_video: Asset = field(default_factory=Asset.not_started)

    def get_character(self, character_id: str) -> Optional[Character]:
        return next((c for c in self.characters if c.id == character_id), None)

    def get_scene(self, scene_id: str) -> Optional[Scene]:
        return next((s for s in self.scenes if s.id == scene_id), None)

    def renumber_scenes(self) -> None:
        """Reset every scene_number to its 1-based position."""
        for index, scene in enumerate(self.scenes):
            scene.scene_number = index + 1

    def insert_scene(self, scene: Scene, position: int) -> int:
        """Insert a scene at a 1-based position, clamped to the valid range.

        Returns:
            The 0-based index the scene was inserted at.
        """
        index = max(0, min(len(self.scenes), position - 1))
        self.scenes.insert(index, scene)
        self.renumber_scenes()
        return index

    def remove_scene(self, scene_id: str) -> Optional[Scene]:
        """Remove a scene by id and renumber the rest."""
        scene = self.get_scene(scene_id)
        if scene is None:
            return None
        self.scenes = [s for s in self.scenes if s.id != scene_id]
        self.renumber_scenes()
        return scene

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization. Reference bytes are omitted."""
        reference = None
        if self.inspiration_reference:
            reference = {
                "mime_type": self.inspiration_reference.mime_type,
                "filename": self.inspiration_reference.filename,
            }
        return {
            "title": self.title,
            "logline": self.logline,
            "script": self.script,
            "characters": [c.to_dict() for c in self.characters],
            "scenes": [s.to_dict() for s in self.scenes],
            "music_style": self.music_style,
            "style_prompt": self.style_prompt,
            "inspiration_reference": reference,
            "quality": self.quality.value,
            "final_video": self.final_video.to_dict(),
            "promo_video": self.promo_video.to_dict(),
        }


@dataclass
class ProductionRequest:
    """User input that starts a production run."""

    script: str
    reference: Optional[VisualReference] = None
    quality: QualityMode = QualityMode.STANDARD
    music_style: str = "Cinematic"
