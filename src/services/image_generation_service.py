"""Image Generation Service - character portraits via the Imagen REST API."""

import base64
import binascii
import logging
import time
from typing import Optional

import httpx

from models.production import QualityMode
from services.errors import AssetServiceError
from services.prompts import CHARACTER_IMAGE_V1, HIGH_QUALITY_IMAGE_SUFFIX

logger = logging.getLogger(__name__)

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"

# Character portraits are square
CHARACTER_ASPECT_RATIO = "1:1"
CHARACTER_IMAGE_MIME = "image/jpeg"


class ImageGenerationServiceError(AssetServiceError):
    """Error from image generation service."""

    pass


def encode_data_url(data: bytes, mime_type: str) -> str:
    """Encode raw bytes as a base64 data URL."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_url(data_url: str) -> tuple[bytes, str]:
    """Split a base64 data URL into raw bytes and MIME type.

    Raises:
        ValueError: If the string is not a base64 data URL
    """
    if not data_url.startswith("data:") or "," not in data_url:
        raise ValueError("Image reference is not a data URL")

    header, payload = data_url[len("data:"):].split(",", 1)
    if not header.endswith(";base64"):
        raise ValueError("Only base64 data URLs are supported")

    mime_type = header[: -len(";base64")] or "application/octet-stream"
    try:
        return base64.b64decode(payload, validate=True), mime_type
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 payload in data URL: {e}") from e


def build_character_prompt(
    description: str, style_prompt: Optional[str], quality: QualityMode
) -> str:
    """Compose the portrait prompt from description, optional style and quality."""
    prompt = CHARACTER_IMAGE_V1.format(description=description)
    if style_prompt:
        prompt += f" Artistic style: {style_prompt}."
    if quality == QualityMode.HIGH:
        prompt += HIGH_QUALITY_IMAGE_SUFFIX
    return prompt


class ImageGenerationService:
    """Generates character portraits with Imagen."""

    def __init__(self, api_key: str, model: str = "imagen-4.0-generate-001") -> None:
        self.api_key = api_key
        self.model = model
        self.client = httpx.AsyncClient(timeout=120.0)

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def generate_character_image(
        self,
        description: str,
        style_prompt: Optional[str] = None,
        quality: QualityMode = QualityMode.STANDARD,
    ) -> str:
        """Generate a single portrait for a character.

        Args:
            description: Character appearance/personality description
            style_prompt: Optional artistic style keywords from the reference
            quality: Standard or high quality rendering

        Returns:
            data URL of the generated image
        """
        if not self.is_configured():
            raise ImageGenerationServiceError(
                "GEMINI_API_KEY not configured. Set it in your .env file."
            )

        url = f"{GEMINI_API_BASE}/models/{self.model}:predict"
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }
        payload = {
            "instances": [
                {"prompt": build_character_prompt(description, style_prompt, quality)}
            ],
            "parameters": {
                "sampleCount": 1,
                "aspectRatio": CHARACTER_ASPECT_RATIO,
                "outputOptions": {"mimeType": CHARACTER_IMAGE_MIME},
            },
        }

        logger.info(f"Generating character image with {quality.value} quality")
        start_time = time.time()

        try:
            response = await self.client.post(url, headers=headers, json=payload)
            response.raise_for_status()
            result_data = response.json()
        except httpx.HTTPStatusError as e:
            error_detail = ""
            try:
                error_data = e.response.json()
                error_detail = error_data.get("error", {}).get("message", str(e))
            except Exception:
                error_detail = e.response.text or str(e)
            raise ImageGenerationServiceError(f"Imagen API error: {error_detail}") from e
        except Exception as e:
            raise ImageGenerationServiceError(f"Imagen image generation failed: {e}") from e

        for prediction in result_data.get("predictions", []):
            encoded = prediction.get("bytesBase64Encoded")
            if encoded:
                mime_type = prediction.get("mimeType", CHARACTER_IMAGE_MIME)
                generation_time_ms = int((time.time() - start_time) * 1000)
                logger.info(f"Imagen generated character image in {generation_time_ms}ms")
                return f"data:{mime_type};base64,{encoded}"

        raise ImageGenerationServiceError("Imagen returned no image")

    async def close(self) -> None:
        await self.client.aclose()
