"""Run context: the single owner of all mutable state for one production run."""

import logging
from typing import Any, Callable, Iterable, Optional

from models.production import (
    Character,
    ProductionDocument,
    ProductionStage,
    RunStatus,
    Scene,
    SceneSuggestion,
    new_id,
)

logger = logging.getLogger(__name__)

Listener = Callable[[dict], None]


def update_by_id(items: Iterable[Any], item_id: str, **fields: Any) -> bool:
    """Set fields on the item whose id matches.

    Returns:
        True if an item was updated, False if no item has that id
    """
    for item in items:
        if item.id == item_id:
            for name, value in fields.items():
                setattr(item, name, value)
            return True
    return False


class RunContext:
    """Document, progress log, status, stage, pending suggestions and epoch.

    Async work captures ``epoch`` before suspending and writes back through
    ``update_character``/``update_scene``, which drop the write when the run
    was reset in the meantime or the target id is gone.

    Listeners receive dict events:
        {"type": "log", "message": str}
        {"type": "stage", "stage": ProductionStage | None}
        {"type": "status", "status": RunStatus, "error": str | None}
        {"type": "document"}
        {"type": "suggestions", "count": int}
    """

    def __init__(self) -> None:
        self.run_id: str = new_id()
        self.document: Optional[ProductionDocument] = None
        self.log: list[str] = []
        self.status: RunStatus = RunStatus.SETUP
        self.stage: Optional[ProductionStage] = None
        self.suggestions: list[SceneSuggestion] = []
        self.error: Optional[str] = None
        self.epoch: int = 0
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: dict) -> None:
        for listener in list(self._listeners):
            listener(event)

    # ------------------------------------------------------------------
    # Progress, stage and status
    # ------------------------------------------------------------------

    def add_log(self, message: str) -> None:
        """Append a line to the user-facing progress log."""
        self.log.append(message)
        logger.info(message)
        self._emit({"type": "log", "message": message})

    def progress_logger(self, epoch: int) -> Callable[[str], None]:
        """Progress callback that stops logging once the run is reset."""

        def log_progress(message: str) -> None:
            if self.epoch == epoch:
                self.add_log(message)

        return log_progress

    def set_stage(self, stage: Optional[ProductionStage]) -> None:
        self.stage = stage
        self._emit({"type": "stage", "stage": stage})

    def set_status(self, status: RunStatus) -> None:
        self.status = status
        self._emit({"type": "status", "status": status, "error": self.error})

    def fail(self, stage: ProductionStage, error: Exception | str) -> None:
        """Record a fatal failure of a stage and move the run to ERROR."""
        self.error = f"Failure during {stage.value}. Details: {error}"
        logger.error(self.error)
        self.add_log(f"❌ ERROR: {self.error}")
        self.set_status(RunStatus.ERROR)

    def notify_document_changed(self) -> None:
        self._emit({"type": "document"})

    def notify_suggestions_changed(self) -> None:
        self._emit({"type": "suggestions", "count": len(self.suggestions)})

    # ------------------------------------------------------------------
    # Run lifecycle
    # ------------------------------------------------------------------

    def begin_run(self) -> int:
        """Clear previous results, enter RUNNING and return the new epoch."""
        self.epoch += 1
        self.run_id = new_id()
        self.document = None
        self.log = []
        self.suggestions = []
        self.error = None
        self.stage = None
        self.set_status(RunStatus.RUNNING)
        return self.epoch

    def reset(self) -> None:
        """Discard the document and log. In-flight writes become stale."""
        self.epoch += 1
        self.run_id = new_id()
        self.document = None
        self.log = []
        self.suggestions = []
        self.error = None
        self.set_stage(None)
        self.set_status(RunStatus.SETUP)
        self.notify_document_changed()

    def is_current(self, epoch: int) -> bool:
        return epoch == self.epoch and self.document is not None

    # ------------------------------------------------------------------
    # Guarded, id-keyed document writes
    # ------------------------------------------------------------------

    def get_character(self, character_id: str) -> Optional[Character]:
        if self.document is None:
            return None
        return self.document.get_character(character_id)

    def get_scene(self, scene_id: str) -> Optional[Scene]:
        if self.document is None:
            return None
        return self.document.get_scene(scene_id)

    def update_character(self, epoch: int, character_id: str, **fields: Any) -> bool:
        """Write fields onto a character if the run is still current."""
        if not self.is_current(epoch):
            logger.debug(f"Discarding stale write for character {character_id}")
            return False
        updated = update_by_id(self.document.characters, character_id, **fields)
        if updated:
            self.notify_document_changed()
        return updated

    def update_scene(self, epoch: int, scene_id: str, **fields: Any) -> bool:
        """Write fields onto a scene if the run is still current."""
        if not self.is_current(epoch):
            logger.debug(f"Discarding stale write for scene {scene_id}")
            return False
        updated = update_by_id(self.document.scenes, scene_id, **fields)
        if updated:
            self.notify_document_changed()
        return updated

    def snapshot(self) -> dict:
        """Serializable view of the current run."""
        return {
            "run_id": self.run_id,
            "status": self.status.value,
            "stage": self.stage.value if self.stage else None,
            "error": self.error,
            "log": list(self.log),
            "suggestions": [s.to_dict() for s in self.suggestions],
            "document": self.document.to_dict() if self.document else None,
        }
