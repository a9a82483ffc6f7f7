"""AI service for script analysis, casting and text generation using Google GenAI.

All methods are synchronous SDK calls; async callers move them off the event
loop with asyncio.to_thread.
"""

import json
import logging
from typing import Optional

from google.genai import Client
from google.genai import types

from models.production import (
    Character,
    Scene,
    SceneSuggestion,
    ScriptAnalysis,
    VisualReference,
    VoiceActor,
)
from services.errors import AssetServiceError
from services.image_generation_service import decode_data_url, encode_data_url
from services.prompts import (
    SCENE_ENHANCER_V1,
    SCENE_SUGGESTER_V1,
    SCRIPT_ANALYZER_V1,
    STYLE_ANALYZER_V1,
    VOICE_CASTING_V1,
    VOICE_LINE_V1,
    strip_markdown_code_blocks,
)
from utils.retry import classify_api_error, retry_api_call

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Untitled Movie"
DEFAULT_LOGLINE = "A thrilling adventure unfolds based on the provided script."

# Upper bound on suggestions kept from one consultation
MAX_SCENE_SUGGESTIONS = 2


class AIServiceError(AssetServiceError):
    """Raised when an AI text/vision call fails or returns unusable output."""


class ScriptAnalysisError(AIServiceError):
    """Raised when a script is flagged invalid or yields no characters/scenes."""


class AIService:
    """Service for Gemini-backed text and vision tasks of the production pipeline."""

    def __init__(
        self,
        api_key: str,
        model_name: str = "gemini-2.5-flash",
        image_edit_model: str = "gemini-2.5-flash-image",
    ):
        """Initialize Google GenAI client.

        Args:
            api_key: Google GenAI API key
            model_name: Gemini model for text and vision prompts
            image_edit_model: Gemini model able to return edited images
        """
        self.api_key = api_key
        self.model_name = model_name
        self.image_edit_model = image_edit_model
        self.client = Client(api_key=api_key)

        logger.info(f"Initialized AI service with model: {model_name}")

    def _generate(
        self,
        contents,
        config: Optional[types.GenerateContentConfig] = None,
        model: Optional[str] = None,
    ):
        try:
            return self.client.models.generate_content(
                model=model or self.model_name,
                contents=contents,
                config=config,
            )
        except Exception as e:
            classified = classify_api_error(e)
            if classified is e:
                raise
            raise classified from e

    def _generate_json(self, prompt: str, temperature: float = 0.7) -> dict:
        response = self._generate(
            prompt,
            config=types.GenerateContentConfig(
                temperature=temperature,
                response_mime_type="application/json",
            ),
        )
        if not response.text:
            raise AIServiceError("Empty AI response")
        try:
            data = json.loads(strip_markdown_code_blocks(response.text))
        except json.JSONDecodeError as e:
            logger.debug(f"Raw response: {response.text[:500]}")
            raise AIServiceError(f"Failed to parse AI response as JSON: {e}") from e
        if not isinstance(data, dict):
            raise AIServiceError("AI response is not a JSON object")
        return data

    @retry_api_call(max_retries=3, base_delay=2.0)
    def analyze_script(self, script: str) -> ScriptAnalysis:
        """Extract title, logline, characters and scenes from a script.

        Raises:
            ScriptAnalysisError: If the content is blocked or nothing usable is found
        """
        logger.info(f"Analyzing script ({len(script)} chars)")
        response = self._generate(
            SCRIPT_ANALYZER_V1.format(script=script),
            config=types.GenerateContentConfig(
                temperature=0.4,
                response_mime_type="application/json",
            ),
        )

        feedback = getattr(response, "prompt_feedback", None)
        if feedback is not None and getattr(feedback, "block_reason", None):
            raise ScriptAnalysisError("Script contains invalid content.")

        if not response.text:
            raise ScriptAnalysisError("Empty AI response for script analysis")
        try:
            data = json.loads(strip_markdown_code_blocks(response.text))
        except json.JSONDecodeError as e:
            raise ScriptAnalysisError(f"Failed to parse script analysis JSON: {e}") from e

        return self.parse_script_analysis(data)

    @staticmethod
    def parse_script_analysis(data: dict) -> ScriptAnalysis:
        """Build a ScriptAnalysis from the analyzer JSON, assigning fresh ids."""
        characters_data = data.get("characters") or []
        scenes_data = data.get("scenes") or []

        characters = [
            Character(
                name=str(c.get("name", "")).strip(),
                description=str(c.get("description", "")).strip(),
            )
            for c in characters_data
            if isinstance(c, dict) and str(c.get("name", "")).strip()
        ]
        scenes = [
            Scene(scene_number=0, description=str(s.get("description", "")).strip())
            for s in sorted(
                (s for s in scenes_data if isinstance(s, dict)),
                key=lambda s: int(s.get("scene_number") or 0),
            )
            if str(s.get("description", "")).strip()
        ]

        if not characters or not scenes:
            raise ScriptAnalysisError(
                "AI could not identify characters and scenes. Please check the script format."
            )

        for index, scene in enumerate(scenes):
            scene.scene_number = index + 1

        return ScriptAnalysis(
            title=str(data.get("title") or "").strip() or DEFAULT_TITLE,
            logline=str(data.get("logline") or "").strip() or DEFAULT_LOGLINE,
            characters=characters,
            scenes=scenes,
        )

    @retry_api_call(max_retries=3, base_delay=1.0)
    def analyze_image_style(self, reference: VisualReference) -> str:
        """Describe the artistic style of an inspiration image in a few keywords."""
        response = self._generate(
            [
                types.Part.from_bytes(data=reference.data, mime_type=reference.mime_type),
                STYLE_ANALYZER_V1,
            ]
        )
        if not response.text or not response.text.strip():
            raise AIServiceError("Empty AI response for style analysis")
        return response.text.strip()

    def generate_scene_suggestions(
        self, logline: str, scenes: list[Scene]
    ) -> list[SceneSuggestion]:
        """Propose up to two new scenes. Never raises; failures yield no suggestions."""
        scene_list = "\n".join(f"Scene {s.scene_number}: {s.description}" for s in scenes)
        try:
            data = self._generate_json(
                SCENE_SUGGESTER_V1.format(logline=logline, scene_list=scene_list),
                temperature=0.9,
            )
            return self.parse_scene_suggestions(data)
        except Exception as e:
            logger.error(f"Failed to generate scene suggestions: {e}")
            return []

    @staticmethod
    def parse_scene_suggestions(data: dict) -> list[SceneSuggestion]:
        suggestions = []
        for item in data.get("suggestions") or []:
            if not isinstance(item, dict):
                continue
            description = str(item.get("scene_description", "")).strip()
            if not description:
                continue
            try:
                position = int(item.get("suggested_position", 1))
            except (TypeError, ValueError):
                position = 1
            suggestions.append(
                SceneSuggestion(
                    title=str(item.get("title", "")).strip() or "Untitled Scene",
                    reasoning=str(item.get("reasoning", "")).strip(),
                    scene_description=description,
                    suggested_position=position,
                )
            )
        return suggestions[:MAX_SCENE_SUGGESTIONS]

    def match_voice_actors(self, characters: list[Character]) -> dict[str, VoiceActor]:
        """Cast a fictional voice actor per character name. Never raises."""
        if not characters:
            return {}

        character_list = "\n".join(f"- {c.name}: {c.description}" for c in characters)
        try:
            data = self._generate_json(VOICE_CASTING_V1.format(character_list=character_list))
        except Exception as e:
            logger.error(f"Error during voice actor casting: {e}")
            return {}

        casting: dict[str, VoiceActor] = {}
        for item in data.get("casting") or []:
            if not isinstance(item, dict):
                continue
            name = str(item.get("character_name", "")).strip()
            actor = str(item.get("actor_name", "")).strip()
            if name and actor:
                casting[name] = VoiceActor(
                    name=actor,
                    vocal_style=str(item.get("vocal_style", "")).strip(),
                )

        if not casting:
            logger.warning("AI could not generate voice actor castings")
        return casting

    @retry_api_call(max_retries=3, base_delay=1.0)
    def generate_character_voice_line(self, character: Character) -> str:
        """Write one short signature line for a character."""
        vocal_style = (
            character.voice_actor.vocal_style if character.voice_actor else "not specified"
        )
        response = self._generate(
            VOICE_LINE_V1.format(
                name=character.name,
                description=character.description,
                vocal_style=vocal_style,
            )
        )
        line = (response.text or "").strip().replace('"', "")
        if not line:
            raise AIServiceError(f"Empty voice line for {character.name}")
        return line

    @retry_api_call(max_retries=3, base_delay=1.0)
    def enhance_scene_description(self, description: str) -> str:
        """Rewrite a scene description with richer visual and camera detail."""
        response = self._generate(SCENE_ENHANCER_V1.format(description=description))
        enhanced = (response.text or "").strip()
        if not enhanced:
            raise AIServiceError("Empty enhanced description")
        return enhanced

    @retry_api_call(max_retries=2, base_delay=2.0)
    def edit_image(self, image_reference: str, instruction: str) -> str:
        """Apply a text instruction to an existing image.

        Args:
            image_reference: data URL of the current image
            instruction: Edit instruction (e.g. "make it night time")

        Returns:
            data URL of the edited image
        """
        image_bytes, mime_type = decode_data_url(image_reference)
        logger.info(f"Editing image with prompt: '{instruction[:60]}'")
        response = self._generate(
            [types.Part.from_bytes(data=image_bytes, mime_type=mime_type), instruction],
            config=types.GenerateContentConfig(response_modalities=["IMAGE", "TEXT"]),
            model=self.image_edit_model,
        )

        for candidate in response.candidates or []:
            content = getattr(candidate, "content", None)
            for part in getattr(content, "parts", None) or []:
                inline_data = getattr(part, "inline_data", None)
                if inline_data is not None and inline_data.data:
                    return encode_data_url(inline_data.data, inline_data.mime_type or "image/png")

        raise AIServiceError("AI did not return an edited image.")
