"""Prompts module - centralized prompt templates for AI services.

Re-exports all prompt constants and utilities for easy importing:
    from services.prompts import strip_markdown_code_blocks
    from services.prompts import SCRIPT_ANALYZER_V1, VOICE_CASTING_V1
"""

from services.prompts._base import strip_markdown_code_blocks
from services.prompts.production import (
    CHARACTER_IMAGE_V1,
    FINAL_RENDER_V1,
    HIGH_QUALITY_IMAGE_SUFFIX,
    HIGH_QUALITY_VIDEO_SUFFIX,
    PROMO_RENDER_V1,
    SCENE_ENHANCER_V1,
    SCENE_SUGGESTER_V1,
    SCRIPT_ANALYZER_V1,
    STORYBOARD_VIDEO_V1,
    STYLE_ANALYZER_V1,
    VOICE_CASTING_V1,
    VOICE_LINE_V1,
)

__all__ = [
    # Utilities
    "strip_markdown_code_blocks",
    # Text prompts
    "SCRIPT_ANALYZER_V1",
    "STYLE_ANALYZER_V1",
    "SCENE_SUGGESTER_V1",
    "VOICE_CASTING_V1",
    "VOICE_LINE_V1",
    "SCENE_ENHANCER_V1",
    # Visual prompts
    "CHARACTER_IMAGE_V1",
    "STORYBOARD_VIDEO_V1",
    "HIGH_QUALITY_IMAGE_SUFFIX",
    "HIGH_QUALITY_VIDEO_SUFFIX",
    # Render prompts
    "FINAL_RENDER_V1",
    "PROMO_RENDER_V1",
]
