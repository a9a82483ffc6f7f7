"""Movie production agent - facade over the production pipeline."""

import logging
from typing import Optional

from models.production import Asset, ProductionRequest, RunStatus
from movie_agent.collaborators import AssetService, create_asset_service
from movie_agent.commands import CommandAction, CommandRouter
from movie_agent.context import RunContext
from movie_agent.regeneration import RegenerationController
from movie_agent.sequencer import StageSequencer
from movie_agent.suggestions import SuggestionMergeEngine
from utils.config import load_config
from utils.logging import clear_run_context

logger = logging.getLogger(__name__)


class MovieProductionAgent:
    """Script in, reviewed storyboard and rendered movie out.

    Owns one RunContext and wires the sequencer, the regeneration controller,
    the suggestion merge engine and the command router around it.
    """

    def __init__(self, config: dict | None = None, service: AssetService | None = None):
        """Initialize with all services.

        Load config from environment if not provided. The asset service
        defaults to the demo or Gemini backend depending on DEMO_MODE.
        """
        if config is None:
            config = load_config()
        self.config = config

        self.service = service if service is not None else create_asset_service(config)
        self.context = RunContext()
        self.sequencer = StageSequencer(
            self.context,
            self.service,
            character_visual_concurrency=int(config.get("character_visual_concurrency", 1)),
            storyboard_concurrency=int(config.get("storyboard_concurrency", 1)),
        )
        self.regeneration = RegenerationController(self.context, self.service)
        self.suggestions = SuggestionMergeEngine(self.context, self.service)
        self.router = CommandRouter()

        # Request queued for a "generate" voice command
        self.pending_request: Optional[ProductionRequest] = None

    @property
    def status(self) -> RunStatus:
        return self.context.status

    @property
    def document(self):
        return self.context.document

    def prepare(self, request: ProductionRequest) -> None:
        """Queue a request to be submitted by a later command."""
        self.pending_request = request

    async def submit(self, request: ProductionRequest) -> None:
        """Run pre-production. Only allowed from SETUP."""
        if self.context.status != RunStatus.SETUP:
            logger.warning(f"Submit ignored in status {self.context.status.value}")
            return
        self.pending_request = None
        await self.sequencer.run(request, demo_mode=bool(self.config.get("demo_mode")))

    async def finalize(self) -> None:
        await self.sequencer.finalize()

    def reset(self) -> None:
        """Discard the run and return to SETUP."""
        self.context.reset()
        clear_run_context()

    async def render_promo(self) -> bool:
        """Render a promo trailer for a completed movie. Failures are logged only."""
        ctx = self.context
        if ctx.status != RunStatus.COMPLETE or ctx.document is None:
            logger.warning(f"Promo render ignored in status {ctx.status.value}")
            return False

        epoch = ctx.epoch
        document = ctx.document
        document.promo_video = Asset.pending()
        ctx.notify_document_changed()
        ctx.add_log("🔥 Starting promo trailer render...")

        try:
            video = await self.service.render_promo_video(document, ctx.progress_logger(epoch))
            promo = Asset.ready(video)
        except Exception as e:
            logger.error(f"Promo render failed: {e}")
            if ctx.is_current(epoch):
                document.promo_video = Asset.failed(str(e))
                ctx.notify_document_changed()
                ctx.add_log(f"❌ Promo render failed. Error: {e}")
            return False

        if not ctx.is_current(epoch):
            return False
        document.promo_video = promo
        ctx.notify_document_changed()
        ctx.add_log("🎉 Promo trailer ready!")
        return True

    async def handle_command(self, command: str) -> Optional[CommandAction]:
        """Execute a free-text command if it matches the current status.

        Returns:
            The action performed, or None if nothing matched
        """
        action = self.router.resolve(command, self.context.status)
        if action is None:
            logger.debug(f"No action for command '{command}' in {self.context.status.value}")
            return None

        logger.info(f"Voice command '{command}' -> {action.value}")
        if action == CommandAction.SUBMIT:
            if self.pending_request is None:
                logger.warning("No script prepared; ignoring submit command")
                return None
            await self.submit(self.pending_request)
        elif action == CommandAction.FINALIZE:
            await self.finalize()
        elif action == CommandAction.RESET:
            self.reset()
        return action

    async def close(self) -> None:
        close = getattr(self.service, "close", None)
        if close is not None:
            await close()
