"""Generative asset collaborators behind the production pipeline.

The pipeline only depends on the AssetService protocol. GeminiAssetService
talks to Google's APIs; DemoAssetService (services.demo_service) returns
offline placeholders.
"""

import asyncio
import logging
from typing import Callable, Optional, Protocol

from models.production import (
    Character,
    ProductionDocument,
    QualityMode,
    Scene,
    SceneSuggestion,
    ScriptAnalysis,
    VisualReference,
    VoiceActor,
)
from services.ai_service import AIService, ScriptAnalysisError
from services.demo_service import DemoAssetService
from services.errors import AssetServiceError
from services.image_generation_service import ImageGenerationService
from services.video_gen_service import VideoGenService

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]

__all__ = [
    "AssetService",
    "AssetServiceError",
    "GeminiAssetService",
    "ProgressCallback",
    "ScriptAnalysisError",
    "create_asset_service",
]


class AssetService(Protocol):
    """Async request/response contract for every generative backend call."""

    async def analyze_script(self, script: str) -> ScriptAnalysis:
        """Raises ScriptAnalysisError if flagged invalid or nothing was found."""
        ...

    async def analyze_image_style(self, reference: VisualReference) -> str: ...

    async def generate_scene_suggestions(
        self, logline: str, scenes: list[Scene]
    ) -> list[SceneSuggestion]:
        """Never raises; returns zero to two suggestions."""
        ...

    async def match_voice_actors(self, characters: list[Character]) -> dict[str, VoiceActor]:
        """Never raises; returns a mapping of character name to voice actor."""
        ...

    async def generate_character_voice_line(self, character: Character) -> str: ...

    async def generate_character_image(
        self, description: str, style_prompt: Optional[str], quality: QualityMode
    ) -> str: ...

    async def generate_storyboard_video(
        self, description: str, style_prompt: Optional[str], quality: QualityMode
    ) -> str: ...

    async def edit_image(self, image_reference: str, instruction: str) -> str: ...

    async def enhance_scene_description(self, description: str) -> str: ...

    async def render_final_video(
        self, document: ProductionDocument, progress_callback: ProgressCallback
    ) -> str: ...

    async def render_promo_video(
        self, document: ProductionDocument, progress_callback: ProgressCallback
    ) -> str: ...


class GeminiAssetService:
    """AssetService backed by Gemini, Imagen and Veo.

    Text and vision calls use the synchronous google-genai SDK and are run
    in a worker thread; image and video calls are native httpx coroutines.
    """

    def __init__(self, config: dict):
        api_key = config.get("gemini_api_key") or ""
        self.ai = AIService(
            api_key=api_key,
            model_name=config.get("gemini_model", "gemini-2.5-flash"),
            image_edit_model=config.get("image_edit_model", "gemini-2.5-flash-image"),
        )
        self.images = ImageGenerationService(
            api_key=api_key,
            model=config.get("image_model", "imagen-4.0-generate-001"),
        )
        self.videos = VideoGenService(
            api_key=api_key,
            model=config.get("video_model", "veo-2.0-generate-001"),
            output_dir=config.get("local_output_folder", "output"),
            poll_interval=float(config.get("video_poll_interval", 10.0)),
            storyboard_poll_interval=float(config.get("storyboard_poll_interval", 5.0)),
        )

    async def analyze_script(self, script: str) -> ScriptAnalysis:
        return await asyncio.to_thread(self.ai.analyze_script, script)

    async def analyze_image_style(self, reference: VisualReference) -> str:
        return await asyncio.to_thread(self.ai.analyze_image_style, reference)

    async def generate_scene_suggestions(
        self, logline: str, scenes: list[Scene]
    ) -> list[SceneSuggestion]:
        return await asyncio.to_thread(self.ai.generate_scene_suggestions, logline, scenes)

    async def match_voice_actors(self, characters: list[Character]) -> dict[str, VoiceActor]:
        return await asyncio.to_thread(self.ai.match_voice_actors, characters)

    async def generate_character_voice_line(self, character: Character) -> str:
        return await asyncio.to_thread(self.ai.generate_character_voice_line, character)

    async def generate_character_image(
        self,
        description: str,
        style_prompt: Optional[str] = None,
        quality: QualityMode = QualityMode.STANDARD,
    ) -> str:
        return await self.images.generate_character_image(description, style_prompt, quality)

    async def generate_storyboard_video(
        self,
        description: str,
        style_prompt: Optional[str] = None,
        quality: QualityMode = QualityMode.STANDARD,
    ) -> str:
        return await self.videos.generate_storyboard_video(description, style_prompt, quality)

    async def edit_image(self, image_reference: str, instruction: str) -> str:
        return await asyncio.to_thread(self.ai.edit_image, image_reference, instruction)

    async def enhance_scene_description(self, description: str) -> str:
        return await asyncio.to_thread(self.ai.enhance_scene_description, description)

    async def render_final_video(
        self, document: ProductionDocument, progress_callback: ProgressCallback
    ) -> str:
        return await self.videos.render_final_video(document, progress_callback)

    async def render_promo_video(
        self, document: ProductionDocument, progress_callback: ProgressCallback
    ) -> str:
        return await self.videos.render_promo_video(document, progress_callback)

    async def close(self) -> None:
        await self.images.close()
        await self.videos.close()


def create_asset_service(config: dict) -> AssetService:
    """Pick the demo or Gemini backend from configuration."""
    if config.get("demo_mode"):
        logger.info("DEMO MODE enabled: using offline placeholder assets")
        return DemoAssetService()
    return GeminiAssetService(config)
