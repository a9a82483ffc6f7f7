"""Movie Agent - script-to-movie production pipeline."""

from .collaborators import (
    AssetService,
    AssetServiceError,
    GeminiAssetService,
    ScriptAnalysisError,
    create_asset_service,
)
from .context import RunContext, update_by_id
from .work_queue import BoundedWorkQueue
from .sequencer import StageSequencer
from .regeneration import RegenerationController
from .suggestions import SuggestionMergeEngine
from .commands import CommandAction, CommandRouter
from .agent import MovieProductionAgent

__all__ = [
    "AssetService",
    "AssetServiceError",
    "GeminiAssetService",
    "ScriptAnalysisError",
    "create_asset_service",
    "RunContext",
    "update_by_id",
    "BoundedWorkQueue",
    "StageSequencer",
    "RegenerationController",
    "SuggestionMergeEngine",
    "CommandAction",
    "CommandRouter",
    "MovieProductionAgent",
]
