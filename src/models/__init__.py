# Data models for moviemaker
from .production import (
    Asset,
    AssetState,
    Character,
    ProductionDocument,
    ProductionRequest,
    ProductionStage,
    QualityMode,
    RunStatus,
    Scene,
    SceneSuggestion,
    ScriptAnalysis,
    VisualReference,
    VoiceActor,
    new_id,
)

__all__ = [
    "Asset",
    "AssetState",
    "Character",
    "ProductionDocument",
    "ProductionRequest",
    "ProductionStage",
    "QualityMode",
    "RunStatus",
    "Scene",
    "SceneSuggestion",
    "ScriptAnalysis",
    "VisualReference",
    "VoiceActor",
    "new_id",
]
