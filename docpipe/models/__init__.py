"""Pydantic models and value types for DocPipe Studio."""

from .analysis import (
    AnalyzeDocumentRequest,
    AnalyzeDocumentResponse,
    ContentFeatures,
    DocumentAnalysis,
    DocumentStructure,
    ProcessingRecommendation,
    RelationshipFeatures,
)
from .multimodal import (
    MultimodalConfig,
    PartialMultimodalConfig,
    SourcePriorityState,
    UpdateEnvelope,
    UpdateOutcome,
    UpdateSource,
)

__all__ = [
    "AnalyzeDocumentRequest",
    "AnalyzeDocumentResponse",
    "ContentFeatures",
    "DocumentAnalysis",
    "DocumentStructure",
    "MultimodalConfig",
    "PartialMultimodalConfig",
    "ProcessingRecommendation",
    "RelationshipFeatures",
    "SourcePriorityState",
    "UpdateEnvelope",
    "UpdateOutcome",
    "UpdateSource",
]
