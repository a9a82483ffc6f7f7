"""Video generation service - Veo long-running jobs via the Gemini REST API."""

import asyncio
import base64
import logging
import uuid
from pathlib import Path
from typing import Callable, Optional

import httpx

from models.production import ProductionDocument, QualityMode
from services.errors import AssetServiceError
from services.prompts import (
    FINAL_RENDER_V1,
    HIGH_QUALITY_VIDEO_SUFFIX,
    PROMO_RENDER_V1,
    STORYBOARD_VIDEO_V1,
)

logger = logging.getLogger(__name__)

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"

FINAL_RENDER_MESSAGES = [
    "Warming up the virtual cameras...",
    "AI director is reviewing the script...",
    "Digital actors are getting into character...",
    "Rendering the first few frames...",
    "Compositing visual effects...",
    "Syncing audio and video...",
    "Rendering the credit sequence...",
    "Applying final color grading...",
    "Almost there, polishing the final cut...",
]

PROMO_RENDER_MESSAGES = [
    "Finding the most exciting angles...",
    "Editing the clips together...",
    "Adding flashy text effects...",
    "Syncing the epic trailer music...",
    "Applying cinematic color grading...",
]

ProgressCallback = Callable[[str], None]


class VideoGenServiceError(AssetServiceError):
    """Raised when video generation fails."""


def build_storyboard_prompt(
    description: str, style_prompt: Optional[str], quality: QualityMode
) -> str:
    prompt = STORYBOARD_VIDEO_V1.format(description=description)
    if style_prompt:
        prompt += f" Match this artistic style: {style_prompt}."
    if quality == QualityMode.HIGH:
        prompt += HIGH_QUALITY_VIDEO_SUFFIX
    return prompt


def build_final_render_prompt(document: ProductionDocument) -> str:
    """Assemble the full-movie prompt: scenes, dialogue samples, music and credits."""
    scene_list = "\n\n".join(
        f"Scene {index + 1}: {scene.description}"
        for index, scene in enumerate(document.scenes)
    )

    dialogue = "\n".join(
        f'{c.name}: "{c.voice_line.value}"'
        for c in document.characters
        if c.voice_line.is_ready and c.voice_line.value.strip()
    )
    dialogue_instruction = ""
    if dialogue:
        dialogue_instruction = (
            "\n- When appropriate, include spoken dialogue for the characters. "
            "These are sample lines to establish their voice and personality. "
            "The characters and their lines are:\n" + dialogue + "\n"
        )

    reference_credit = ""
    if document.inspiration_reference is not None:
        reference_credit = (
            '\n  - 6s: Fade in the line below: "Visual style inspired by user reference".'
        )

    return FINAL_RENDER_V1.format(
        music_style=document.music_style or "Cinematic",
        dialogue_instruction=dialogue_instruction,
        scene_list=scene_list,
        reference_credit=reference_credit,
    )


def build_promo_prompt(document: ProductionDocument) -> str:
    character_list = "\n".join(f"- {c.name}: {c.description}" for c in document.characters)
    return PROMO_RENDER_V1.format(
        title=document.title,
        logline=document.logline,
        character_list=character_list,
    )


class VideoGenService:
    """Generates storyboard clips and full renders with Veo."""

    def __init__(
        self,
        api_key: str,
        model: str = "veo-2.0-generate-001",
        output_dir: str | Path = "output",
        poll_interval: float = 10.0,
        storyboard_poll_interval: float = 5.0,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.output_dir = Path(output_dir)
        self.poll_interval = poll_interval
        self.storyboard_poll_interval = storyboard_poll_interval
        self.client = httpx.AsyncClient(timeout=300.0, follow_redirects=True)

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _headers(self) -> dict:
        return {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }

    async def _start_job(self, prompt: str, image: Optional[tuple[bytes, str]] = None) -> str:
        if not self.is_configured():
            raise VideoGenServiceError(
                "Video generation not configured. Set GEMINI_API_KEY in your .env file."
            )

        instance: dict = {"prompt": prompt}
        if image is not None:
            data, mime_type = image
            instance["image"] = {
                "bytesBase64Encoded": base64.b64encode(data).decode("ascii"),
                "mimeType": mime_type,
            }

        url = f"{GEMINI_API_BASE}/models/{self.model}:predictLongRunning"
        payload = {"instances": [instance], "parameters": {"sampleCount": 1}}

        try:
            response = await self.client.post(url, headers=self._headers(), json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            error_detail = ""
            try:
                error_data = e.response.json()
                error_detail = error_data.get("error", {}).get("message", str(e))
            except Exception:
                error_detail = e.response.text or str(e)
            raise VideoGenServiceError(f"Veo API error: {error_detail}") from e
        except httpx.HTTPError as e:
            raise VideoGenServiceError(f"Veo request failed: {e}") from e

        operation_name = response.json().get("name")
        if not operation_name:
            raise VideoGenServiceError("Veo did not return an operation name")
        return operation_name

    async def _poll_operation(
        self,
        operation_name: str,
        interval: float,
        progress_messages: Optional[list[str]] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> dict:
        """Poll a long-running operation until done.

        When progress messages are given, polling errors are logged and polling
        continues; otherwise they are raised.
        """
        url = f"{GEMINI_API_BASE}/{operation_name}"
        message_index = 0
        operation: dict = {}

        while not operation.get("done"):
            if progress_messages and progress_callback:
                progress_callback(
                    f"⏳ {progress_messages[message_index % len(progress_messages)]}"
                )
                message_index += 1
            await asyncio.sleep(interval)
            try:
                response = await self.client.get(url, headers=self._headers())
                response.raise_for_status()
                operation = response.json()
            except httpx.HTTPError as e:
                if not progress_messages:
                    raise VideoGenServiceError(f"Error polling Veo operation: {e}") from e
                logger.error(f"Error polling video generation status: {e}")

        if operation.get("error"):
            message = operation["error"].get("message", "Unknown error")
            raise VideoGenServiceError(f"Video generation failed: {message}")

        return operation

    @staticmethod
    def _extract_video_uri(operation: dict) -> str:
        response = operation.get("response", {})
        samples = response.get("generateVideoResponse", {}).get("generatedSamples") or []
        for sample in samples:
            uri = sample.get("video", {}).get("uri")
            if uri:
                return uri
        raise VideoGenServiceError(
            "Video generation completed, but no download link was found."
        )

    async def _download(self, uri: str, prefix: str) -> str:
        try:
            response = await self.client.get(uri, headers={"x-goog-api-key": self.api_key})
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise VideoGenServiceError(
                f"Failed to download video: {e.response.status_code}. "
                f"Details: {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise VideoGenServiceError(f"Failed to download video: {e}") from e

        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / f"{prefix}_{uuid.uuid4().hex[:8]}.mp4"
        path.write_bytes(response.content)
        logger.info(f"Saved video to {path}")
        return str(path)

    async def generate_storyboard_video(
        self,
        description: str,
        style_prompt: Optional[str] = None,
        quality: QualityMode = QualityMode.STANDARD,
    ) -> str:
        """Generate a short looping storyboard clip for one scene.

        Returns:
            Local path of the downloaded clip
        """
        logger.info(f"Generating storyboard video with {quality.value} quality")
        operation_name = await self._start_job(
            build_storyboard_prompt(description, style_prompt, quality)
        )
        logger.info("Storyboard video generation started. Polling for completion...")
        operation = await self._poll_operation(operation_name, self.storyboard_poll_interval)
        return await self._download(self._extract_video_uri(operation), "storyboard")

    def _reference_image(
        self, document: ProductionDocument, progress_callback: ProgressCallback, label: str
    ) -> Optional[tuple[bytes, str]]:
        reference = document.inspiration_reference
        if reference is None or not reference.is_image:
            return None
        progress_callback(f"🖼️ Using inspiration image for {label}.")
        return reference.data, reference.mime_type

    async def render_final_video(
        self, document: ProductionDocument, progress_callback: ProgressCallback
    ) -> str:
        """Render the full movie with end credits.

        Args:
            document: Reviewed production document
            progress_callback: Receives human-readable progress lines

        Returns:
            Local path of the rendered movie
        """
        progress_callback("🎥 Assembling scenes for video generation...")
        prompt = build_final_render_prompt(document)

        progress_callback("🎬 Sending request to video generation model...")
        image = self._reference_image(document, progress_callback, "video generation")
        operation_name = await self._start_job(prompt, image)

        progress_callback("⏳ Video generation started. This may take a few minutes...")
        operation = await self._poll_operation(
            operation_name, self.poll_interval, FINAL_RENDER_MESSAGES, progress_callback
        )

        uri = self._extract_video_uri(operation)
        progress_callback("✅ Video data received. Downloading and preparing for playback...")
        return await self._download(uri, "final")

    async def render_promo_video(
        self, document: ProductionDocument, progress_callback: ProgressCallback
    ) -> str:
        """Render a ~30 second promotional trailer ending on the title card."""
        progress_callback("🎬 Assembling assets for promo video...")
        prompt = build_promo_prompt(document)

        progress_callback("🔥 Sending request to video generation model for promo...")
        image = self._reference_image(document, progress_callback, "promo generation")
        operation_name = await self._start_job(prompt, image)

        progress_callback("⏳ Promo generation started. This may take several minutes...")
        operation = await self._poll_operation(
            operation_name, self.poll_interval, PROMO_RENDER_MESSAGES, progress_callback
        )

        uri = self._extract_video_uri(operation)
        progress_callback("✅ Promo video data received. Downloading...")
        return await self._download(uri, "promo")

    async def close(self) -> None:
        await self.client.aclose()
