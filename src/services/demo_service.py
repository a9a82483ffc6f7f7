"""Demo asset service - offline placeholders with simulated latency.

Lets the whole pipeline run without API keys. Every method mirrors the
GeminiAssetService contract and returns canned data or public sample URLs.
"""

import asyncio
import logging
import random
import re
from typing import Callable, Optional
from urllib.parse import quote

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
from services.ai_service import ScriptAnalysisError

logger = logging.getLogger(__name__)

# Whole-word marker that makes demo analysis reject the script
INVALID_SCRIPT_MARKER = re.compile(r"\berror\b", re.IGNORECASE)

DEMO_TITLE = "Galactic Rescue (Demo)"
DEMO_LOGLINE = (
    "A grizzled pilot and a determined botanist race against time to save a stranded "
    "research team from a mysterious, rapidly-growing alien plant."
)
DEMO_CHARACTERS = [
    ("Kael", "A grizzled starship pilot with a heart of gold."),
    ("Zora", "A brilliant and determined xenobotanist."),
    ("Unit 734", "A witty and resourceful droid companion."),
]
DEMO_SCENES = [
    "The bridge of the starship 'Stardust Drifter'. Kael and Zora receive a distress signal.",
    "The lush, alien jungle of Xylos. The team navigates through glowing flora.",
    "A cavern deep within the jungle. They discover a stranded research team.",
    "The 'Stardust Drifter' speeds away from Xylos, the rescued team safely aboard.",
]
DEMO_ACTORS = [
    VoiceActor(name="Jake 'Gravel' Johnson", vocal_style="Deep and raspy"),
    VoiceActor(name="Elara Vance", vocal_style="Clear and confident"),
    VoiceActor(name="Chip Unit 734", vocal_style="Modulated and witty"),
    VoiceActor(name="General Xylo", vocal_style="Commanding and stern"),
]

STORYBOARD_SAMPLE_URL = "https://storage.googleapis.com/gtv-videos-bucket/sample/ForBiggerFun.mp4"
FINAL_SAMPLE_URL = "https://storage.googleapis.com/gtv-videos-bucket/sample/BigBuckBunny.mp4"
PROMO_SAMPLE_URL = "https://storage.googleapis.com/gtv-videos-bucket/sample/ForBiggerBlazes.mp4"
EDITED_IMAGE_URL = "https://placehold.co/512x512/06b6d4/white?text=Edited!"


def placeholder_image_url(description: str) -> str:
    """Placeholder portrait labelled with the last word of the description's first clause."""
    words = description.split(",")[0].split()
    label = words[-1] if words else "Character"
    return f"https://placehold.co/512x512/1f2937/ffffff?text={quote(label)}"


class DemoAssetService:
    """Offline implementation of the asset service contract."""

    def __init__(self, delay_scale: float = 1.0) -> None:
        """
        Args:
            delay_scale: Multiplier for simulated latency (0 disables sleeping)
        """
        self.delay_scale = delay_scale

    async def _delay(self, seconds: float, jitter: float = 0.0) -> None:
        if self.delay_scale <= 0:
            return
        await asyncio.sleep((seconds + random.random() * jitter) * self.delay_scale)

    async def analyze_script(self, script: str) -> ScriptAnalysis:
        if INVALID_SCRIPT_MARKER.search(script):
            raise ScriptAnalysisError("Script contains invalid content.")

        logger.info("DEMO MODE: Bypassing script analysis.")
        await self._delay(1.0)
        return ScriptAnalysis(
            title=DEMO_TITLE,
            logline=DEMO_LOGLINE,
            characters=[Character(name=name, description=desc) for name, desc in DEMO_CHARACTERS],
            scenes=[
                Scene(scene_number=index + 1, description=desc)
                for index, desc in enumerate(DEMO_SCENES)
            ],
        )

    async def analyze_image_style(self, reference: VisualReference) -> str:
        await self._delay(0.5)
        return "vibrant cartoon"

    async def generate_scene_suggestions(
        self, logline: str, scenes: list[Scene]
    ) -> list[SceneSuggestion]:
        await self._delay(1.2)
        return [
            SceneSuggestion(
                title="A Moment of Doubt",
                reasoning=(
                    "This new scene adds emotional depth to Kael, showing a moment of "
                    "vulnerability before the final rescue."
                ),
                scene_description=(
                    "INT. STARDUST DRIFTER - COCKPIT - NIGHT. Kael stares at an old, faded "
                    "photo of a lost loved one. Unit 734 silently rolls up, its single optic "
                    "glowing softly. Kael confesses he's not sure if he's making the right choice."
                ),
                suggested_position=4,
            ),
            SceneSuggestion(
                title="The Plant's True Nature",
                reasoning=(
                    "This twist raises the stakes by revealing the mission was more than a "
                    "simple rescue, creating a moral dilemma."
                ),
                scene_description=(
                    "CLOSE UP - Zora's datapad reveals the alien plant has incredible "
                    "terraforming capabilities. She realizes the stranded researchers weren't "
                    "just exploring; they were trying to capture it."
                ),
                suggested_position=3,
            ),
        ]

    async def match_voice_actors(self, characters: list[Character]) -> dict[str, VoiceActor]:
        logger.info("DEMO MODE: Bypassing voice actor casting.")
        await self._delay(0.5)
        return {
            character.name: DEMO_ACTORS[index % len(DEMO_ACTORS)]
            for index, character in enumerate(characters)
        }

    async def generate_character_voice_line(self, character: Character) -> str:
        await self._delay(0.3, jitter=0.3)
        return f"This is a sample voice line for {character.name}."

    async def generate_character_image(
        self,
        description: str,
        style_prompt: Optional[str] = None,
        quality: QualityMode = QualityMode.STANDARD,
    ) -> str:
        await self._delay(0.8, jitter=0.4)
        return placeholder_image_url(description)

    async def generate_storyboard_video(
        self,
        description: str,
        style_prompt: Optional[str] = None,
        quality: QualityMode = QualityMode.STANDARD,
    ) -> str:
        await self._delay(2.0, jitter=1.0)
        return STORYBOARD_SAMPLE_URL

    async def edit_image(self, image_reference: str, instruction: str) -> str:
        await self._delay(0.8)
        return EDITED_IMAGE_URL

    async def enhance_scene_description(self, description: str) -> str:
        await self._delay(0.6)
        return (
            f"{description}. (Enhanced) A high-angle crane shot reveals the full scope of the "
            "action, with dramatic backlighting casting long shadows. The mood is tense and urgent."
        )

    async def render_final_video(
        self, document: ProductionDocument, progress_callback: Callable[[str], None]
    ) -> str:
        progress_callback("🎥 DEMO MODE: Simulating video render.")
        for message in (
            "Warming up the virtual cameras...",
            "Polishing the digital lens...",
            "Syncing audio and video...",
            "Adding end credits...",
            "Applying final color grading...",
        ):
            progress_callback(f"⏳ {message}")
            await self._delay(1.0)
        progress_callback("✅ Demo video ready!")
        return FINAL_SAMPLE_URL

    async def render_promo_video(
        self, document: ProductionDocument, progress_callback: Callable[[str], None]
    ) -> str:
        progress_callback("🎬 DEMO MODE: Simulating promo video generation.")
        for message in (
            "Finding the most exciting clips...",
            "Adding flashy text effects...",
            "Syncing epic trailer music...",
        ):
            progress_callback(f"⏳ {message}")
            await self._delay(1.5)
        progress_callback("✅ Demo promo ready!")
        return PROMO_SAMPLE_URL
