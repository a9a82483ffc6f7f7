"""Stage sequencer: runs the fixed pre-production pipeline once per run."""

import asyncio
import logging

from models.production import (
    Asset,
    Character,
    ProductionDocument,
    ProductionRequest,
    ProductionStage,
    QualityMode,
    RunStatus,
    Scene,
)
from movie_agent.collaborators import AssetService
from movie_agent.context import RunContext
from movie_agent.work_queue import BoundedWorkQueue
from utils.logging import set_run_context

logger = logging.getLogger(__name__)


class StageSequencer:
    """Drives script analysis through storyboards, then the final render.

    Stages run strictly in order. Only script analysis and the final render
    are fatal; every other stage degrades softly and logs what it skipped.
    """

    def __init__(
        self,
        context: RunContext,
        service: AssetService,
        character_visual_concurrency: int = 1,
        storyboard_concurrency: int = 1,
    ):
        self.context = context
        self.service = service
        self.character_queue = BoundedWorkQueue(character_visual_concurrency)
        self.storyboard_queue = BoundedWorkQueue(storyboard_concurrency)

    def _abandoned(self, epoch: int) -> bool:
        if self.context.epoch != epoch:
            logger.info("Run was reset; abandoning stale pipeline")
            return True
        return False

    async def run(self, request: ProductionRequest, demo_mode: bool = False) -> None:
        """Run every pre-production stage and leave the run in REVIEW or ERROR.

        Never raises; fatal failures are recorded on the context.
        """
        ctx = self.context
        epoch = ctx.begin_run()
        set_run_context(ctx.run_id)

        try:
            if demo_mode:
                ctx.add_log("🚀 Running in Demo Mode. API calls will be bypassed.")
            ctx.add_log("🎬 Starting movie generation...")
            if request.quality == QualityMode.HIGH:
                ctx.add_log("⚙️ High quality mode enabled. Visual generation may take longer.")

            await self._analyze_script(epoch, request)
            if self._abandoned(epoch):
                return
            await self._analyze_style(epoch, request)
            if self._abandoned(epoch):
                return
            await self._consult_story(epoch)
            if self._abandoned(epoch):
                return
            await self._cast_voices(epoch)
            if self._abandoned(epoch):
                return
            await self._generate_voice_lines(epoch)
            if self._abandoned(epoch):
                return
            await self._generate_character_visuals(epoch)
            if self._abandoned(epoch):
                return
            await self._generate_storyboards(epoch)
            if self._abandoned(epoch):
                return

            ctx.set_stage(None)
            ctx.add_log("🎬 Pre-production complete. Ready to render the final movie.")
            ctx.set_status(RunStatus.REVIEW)

        except Exception as e:
            if ctx.epoch != epoch:
                logger.info(f"Ignoring failure from a reset run: {e}")
                return
            ctx.fail(ctx.stage or ProductionStage.SCRIPT_ANALYSIS, e)

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _analyze_script(self, epoch: int, request: ProductionRequest) -> None:
        ctx = self.context
        ctx.set_stage(ProductionStage.SCRIPT_ANALYSIS)
        ctx.add_log("📝 Analyzing script with AI...")

        analysis = await self.service.analyze_script(request.script)
        if self._abandoned(epoch):
            return

        document = ProductionDocument(
            title=analysis.title,
            logline=analysis.logline,
            script=request.script,
            characters=list(analysis.characters),
            scenes=list(analysis.scenes),
            music_style=request.music_style or "Cinematic",
            inspiration_reference=request.reference,
            quality=request.quality,
        )
        document.renumber_scenes()
        ctx.document = document
        ctx.notify_document_changed()

        ctx.add_log(
            f"✅ Script analysis complete: \"{document.title}\" with "
            f"{len(document.characters)} characters and {len(document.scenes)} scenes."
        )
        ctx.add_log(f"🎵 Music style selected: \"{document.music_style}\".")

    async def _analyze_style(self, epoch: int, request: ProductionRequest) -> None:
        reference = request.reference
        if reference is None:
            return

        ctx = self.context
        ctx.set_stage(ProductionStage.STYLE_ANALYSIS)

        if not reference.is_image:
            ctx.add_log(
                "ℹ️ Video style analysis is not yet supported. "
                "The reference will only be used for the final render."
            )
            return

        ctx.add_log("🖼️ Processing visual reference...")
        try:
            style_prompt = await self.service.analyze_image_style(reference)
        except Exception as e:
            logger.warning(f"Style analysis failed: {e}")
            if ctx.is_current(epoch):
                ctx.add_log(
                    f"⚠️ Could not analyze visual style. Continuing without it. Error: {e}"
                )
            return

        if ctx.is_current(epoch) and style_prompt:
            ctx.document.style_prompt = style_prompt
            ctx.notify_document_changed()
            ctx.add_log(f"🎨 Visual style identified: \"{style_prompt}\"")

    async def _consult_story(self, epoch: int) -> None:
        ctx = self.context
        ctx.set_stage(ProductionStage.STORY_CONSULTATION)
        ctx.add_log("🧠 Consulting AI story co-writer...")

        document = ctx.document
        try:
            suggestions = await self.service.generate_scene_suggestions(
                document.logline, list(document.scenes)
            )
        except Exception as e:
            logger.warning(f"Scene suggestion consultation failed: {e}")
            suggestions = []

        if not ctx.is_current(epoch):
            return

        ctx.suggestions = list(suggestions)
        ctx.notify_suggestions_changed()
        if suggestions:
            ctx.add_log(f"💡 AI has proposed {len(suggestions)} new scene idea(s) for your review.")
        else:
            ctx.add_log("✅ Story structure is solid. No new scenes suggested.")

    async def _cast_voices(self, epoch: int) -> None:
        ctx = self.context
        ctx.set_stage(ProductionStage.VOICE_CASTING)
        ctx.add_log("🎙️ Casting fictional voice actors...")

        characters = list(ctx.document.characters)
        try:
            casting = await self.service.match_voice_actors(characters)
        except Exception as e:
            logger.warning(f"Voice casting failed: {e}")
            casting = {}

        if not ctx.is_current(epoch):
            return

        if not casting:
            ctx.add_log("⚠️ Voice casting was skipped or failed. Continuing without it.")
            return

        for character in characters:
            actor = casting.get(character.name)
            if actor is not None and ctx.update_character(epoch, character.id, voice_actor=actor):
                ctx.add_log(f"🎤 Cast {actor.name} as {character.name}.")
        ctx.add_log("✅ Voice casting complete.")

    async def _generate_voice_lines(self, epoch: int) -> None:
        ctx = self.context
        ctx.set_stage(ProductionStage.VOICE_LINES)

        cast = [c for c in ctx.document.characters if c.voice_actor is not None]
        if not cast:
            ctx.add_log("⚠️ No voice actors cast, skipping voice line generation.")
            return

        ctx.add_log("🗣️ Generating character voice lines...")
        for character in cast:
            ctx.update_character(epoch, character.id, voice_line=Asset.pending())

        async def generate(character: Character) -> tuple[Character, Asset]:
            try:
                line = await self.service.generate_character_voice_line(character)
                return character, Asset.ready(line)
            except Exception as e:
                logger.warning(f"Voice line for {character.name} failed: {e}")
                return character, Asset.failed(str(e))

        results = await asyncio.gather(*(generate(c) for c in cast))

        for character, voice_line in results:
            if not ctx.update_character(epoch, character.id, voice_line=voice_line):
                continue
            if voice_line.is_ready:
                ctx.add_log(f"💬 Generated voice line for {character.name}.")
            else:
                ctx.add_log(
                    f"❌ Failed to generate voice line for {character.name}. "
                    f"Error: {voice_line.error}"
                )
        if ctx.is_current(epoch):
            ctx.add_log("✅ Voice line generation complete.")

    async def _generate_character_visuals(self, epoch: int) -> None:
        ctx = self.context
        ctx.set_stage(ProductionStage.CHARACTER_VISUALS)
        ctx.add_log("👤 Generating character visuals (one at a time to respect API limits)...")

        document = ctx.document

        async def generate(character: Character) -> None:
            if not ctx.update_character(epoch, character.id, image=Asset.pending()):
                return
            try:
                image = await self.service.generate_character_image(
                    character.description, document.style_prompt, document.quality
                )
                if ctx.update_character(epoch, character.id, image=Asset.ready(image)):
                    ctx.add_log(f"🎨 Visual for character {character.name} created.")
            except Exception as e:
                logger.warning(f"Character visual for {character.name} failed: {e}")
                if ctx.update_character(epoch, character.id, image=Asset.failed(str(e))):
                    ctx.add_log(
                        f"❌ Failed to generate visual for {character.name}. Error: {e}"
                    )

        await self.character_queue.run(list(document.characters), generate)
        if ctx.is_current(epoch):
            ctx.add_log("✅ All character visuals generated.")

    async def _generate_storyboards(self, epoch: int) -> None:
        ctx = self.context
        ctx.set_stage(ProductionStage.STORYBOARD)
        ctx.add_log(
            "🖼️ Generating animated storyboard (one scene at a time to respect API limits)..."
        )

        document = ctx.document

        async def generate(scene: Scene) -> None:
            if not ctx.update_scene(epoch, scene.id, storyboard=Asset.pending()):
                return
            try:
                video = await self.service.generate_storyboard_video(
                    scene.description, document.style_prompt, document.quality
                )
                if ctx.update_scene(epoch, scene.id, storyboard=Asset.ready(video)):
                    ctx.add_log(f"🎞️ Animated storyboard for Scene {scene.scene_number} created.")
            except Exception as e:
                logger.warning(f"Storyboard for scene {scene.scene_number} failed: {e}")
                if ctx.update_scene(epoch, scene.id, storyboard=Asset.failed(str(e))):
                    ctx.add_log(
                        f"❌ Failed to generate storyboard for Scene {scene.scene_number}. "
                        f"Error: {e}"
                    )

        await self.storyboard_queue.run(list(document.scenes), generate)
        if ctx.is_current(epoch):
            ctx.add_log("✅ Storyboard generation complete.")

    # ------------------------------------------------------------------
    # Final render
    # ------------------------------------------------------------------

    async def finalize(self) -> None:
        """Render the final movie from the reviewed document. Never raises."""
        ctx = self.context
        if ctx.status != RunStatus.REVIEW or ctx.document is None:
            logger.warning(f"Finalize ignored in status {ctx.status.value}")
            return

        epoch = ctx.epoch
        ctx.set_stage(ProductionStage.RENDERING)
        ctx.set_status(RunStatus.RUNNING)
        ctx.add_log("🎥 Starting final video render...")

        try:
            video = await self.service.render_final_video(
                ctx.document, ctx.progress_logger(epoch)
            )
        except Exception as e:
            if ctx.is_current(epoch):
                ctx.fail(ProductionStage.RENDERING, e)
            return

        if not ctx.is_current(epoch):
            return
        ctx.document.final_video = Asset.ready(video)
        ctx.notify_document_changed()
        ctx.set_stage(None)
        ctx.set_status(RunStatus.COMPLETE)
        ctx.add_log("🎉 Movie render complete!")
