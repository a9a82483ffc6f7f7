"""Merging accepted scene suggestions into the storyboard."""

import logging
from typing import Optional

from models.production import Asset, Scene
from movie_agent.collaborators import AssetService
from movie_agent.context import RunContext

logger = logging.getLogger(__name__)


class SuggestionMergeEngine:
    """Accepts or rejects pending scene suggestions."""

    def __init__(self, context: RunContext, service: AssetService):
        self.context = context
        self.service = service

    def _pop(self, suggestion_id: str):
        ctx = self.context
        suggestion = next((s for s in ctx.suggestions if s.id == suggestion_id), None)
        if suggestion is not None:
            ctx.suggestions = [s for s in ctx.suggestions if s.id != suggestion_id]
            ctx.notify_suggestions_changed()
        return suggestion

    async def accept(self, suggestion_id: str) -> Optional[Scene]:
        """Insert the suggested scene and generate its storyboard.

        The scene is inserted and every scene renumbered before the storyboard
        call starts. A failed storyboard is marked FAILED on the new scene.

        Returns:
            The inserted scene, or None if the suggestion is not pending
        """
        ctx = self.context
        if ctx.document is None:
            return None
        suggestion = self._pop(suggestion_id)
        if suggestion is None:
            return None

        ctx.add_log(
            f"👍 Accepted suggestion: \"{suggestion.title}\". Integrating into storyboard..."
        )

        document = ctx.document
        scene = Scene(
            scene_number=0,
            description=suggestion.scene_description,
            storyboard=Asset.pending(),
        )
        document.insert_scene(scene, suggestion.suggested_position)
        ctx.notify_document_changed()

        epoch = ctx.epoch
        try:
            video = await self.service.generate_storyboard_video(
                scene.description, document.style_prompt, document.quality
            )
            storyboard = Asset.ready(video)
        except Exception as e:
            logger.warning(f"Storyboard for accepted scene failed: {e}")
            if ctx.update_scene(epoch, scene.id, storyboard=Asset.failed(str(e))):
                ctx.add_log(
                    "❌ Failed to generate storyboard for new scene. "
                    "Please try regenerating it manually."
                )
            return scene

        if ctx.update_scene(epoch, scene.id, storyboard=storyboard):
            ctx.add_log(
                f"🎞️ Generated new storyboard for accepted scene: \"{suggestion.title}\"."
            )
        return scene

    def reject(self, suggestion_id: str) -> bool:
        if self._pop(suggestion_id) is None:
            return False
        self.context.add_log("👎 Suggestion rejected.")
        return True
