"""Per-item regeneration and manual edits during review.

Every operation is keyed by id. Generated fields go PENDING immediately, are
written READY on success and restored to their previous value on failure.
Collaborator errors never escape; they end up in the progress log.
"""

import logging
from typing import Awaitable, Callable

from models.production import Asset
from movie_agent.collaborators import AssetService
from movie_agent.context import RunContext

logger = logging.getLogger(__name__)


class RegenerationController:
    """Regenerates, edits and updates single characters and scenes."""

    def __init__(self, context: RunContext, service: AssetService):
        self.context = context
        self.service = service

    async def _regenerate(
        self,
        update: Callable[..., bool],
        item_id: str,
        field_name: str,
        previous: Asset,
        produce: Callable[[], Awaitable[str]],
        success_message: str,
        failure_message: str,
    ) -> bool:
        ctx = self.context
        epoch = ctx.epoch
        update(epoch, item_id, **{field_name: Asset.pending()})

        try:
            value = await produce()
            asset = Asset.ready(value)
        except Exception as e:
            logger.warning(f"{failure_message} {e}")
            if update(epoch, item_id, **{field_name: previous}):
                ctx.add_log(f"{failure_message} Error: {e}")
            return False

        if update(epoch, item_id, **{field_name: asset}):
            ctx.add_log(success_message)
            return True
        return False

    async def regenerate_character_image(self, character_id: str) -> bool:
        ctx = self.context
        character = ctx.get_character(character_id)
        if character is None:
            return False

        document = ctx.document
        ctx.add_log(f"🔄 Regenerating visual for character {character.name}...")
        return await self._regenerate(
            ctx.update_character,
            character_id,
            "image",
            character.image,
            lambda: self.service.generate_character_image(
                character.description, document.style_prompt, document.quality
            ),
            f"🎨 Updated visual for character: {character.name}.",
            f"❌ Failed to regenerate visual for {character.name}. Restoring original.",
        )

    async def regenerate_scene_storyboard(self, scene_id: str) -> bool:
        ctx = self.context
        scene = ctx.get_scene(scene_id)
        if scene is None:
            return False

        document = ctx.document
        ctx.add_log(f"🔄 Regenerating animated storyboard for Scene {scene.scene_number}...")
        return await self._regenerate(
            ctx.update_scene,
            scene_id,
            "storyboard",
            scene.storyboard,
            lambda: self.service.generate_storyboard_video(
                scene.description, document.style_prompt, document.quality
            ),
            f"🎞️ Updated animated storyboard for Scene {scene.scene_number}.",
            f"❌ Failed to regenerate storyboard for Scene {scene.scene_number}. "
            "Restoring original.",
        )

    async def regenerate_voice_line(self, character_id: str) -> bool:
        ctx = self.context
        character = ctx.get_character(character_id)
        if character is None:
            return False

        ctx.add_log(f"🔄 Regenerating voice line for {character.name}...")
        return await self._regenerate(
            ctx.update_character,
            character_id,
            "voice_line",
            character.voice_line,
            lambda: self.service.generate_character_voice_line(character),
            f"✏️ Updated voice line for {character.name}.",
            f"❌ Failed to regenerate voice line for {character.name}.",
        )

    async def edit_character_image(self, character_id: str, instruction: str) -> bool:
        """Apply a text edit to a character's existing image."""
        ctx = self.context
        character = ctx.get_character(character_id)
        if character is None:
            return False
        if not character.image.is_ready:
            ctx.add_log(f"⚠️ {character.name} has no finished image to edit.")
            return False

        source = character.image.value
        ctx.add_log(f"🖌️ Editing visual for {character.name}: \"{instruction}\"...")
        return await self._regenerate(
            ctx.update_character,
            character_id,
            "image",
            character.image,
            lambda: self.service.edit_image(source, instruction),
            f"🎨 Edited visual for character: {character.name}.",
            f"❌ Failed to edit visual for {character.name}. Restoring original.",
        )

    async def enhance_scene_description(self, scene_id: str) -> bool:
        """Replace a scene description with an AI-enriched version."""
        ctx = self.context
        scene = ctx.get_scene(scene_id)
        if scene is None:
            return False

        epoch = ctx.epoch
        ctx.add_log(f"✨ Enhancing description for Scene {scene.scene_number}...")
        try:
            enhanced = await self.service.enhance_scene_description(scene.description)
        except Exception as e:
            logger.warning(f"Scene enhancement failed: {e}")
            if ctx.is_current(epoch):
                ctx.add_log(
                    f"❌ Failed to enhance description for Scene {scene.scene_number}. "
                    f"Error: {e}"
                )
            return False

        if not enhanced or not ctx.update_scene(epoch, scene_id, description=enhanced):
            return False
        ctx.add_log(f"📝 Enhanced description for Scene {scene.scene_number}.")
        return True

    def set_voice_line(self, character_id: str, text: str) -> bool:
        """Manually replace a character's voice line. Blank text clears it."""
        ctx = self.context
        character = ctx.get_character(character_id)
        if character is None:
            return False

        text = text.strip()
        voice_line = Asset.ready(text) if text else Asset.not_started()
        ctx.update_character(ctx.epoch, character_id, voice_line=voice_line)
        ctx.add_log(f"✏️ Updated voice line for {character.name}.")
        return True

    def set_scene_description(self, scene_id: str, text: str) -> bool:
        ctx = self.context
        scene = ctx.get_scene(scene_id)
        if scene is None or not text.strip():
            return False

        ctx.update_scene(ctx.epoch, scene_id, description=text.strip())
        ctx.add_log(f"📝 Updated description for Scene {scene.scene_number}.")
        return True

    def remove_scene(self, scene_id: str) -> bool:
        ctx = self.context
        if ctx.document is None:
            return False

        removed = ctx.document.remove_scene(scene_id)
        if removed is None:
            return False
        ctx.notify_document_changed()
        ctx.add_log(f"🗑️ Removed Scene {removed.scene_number}. Remaining scenes renumbered.")
        return True
