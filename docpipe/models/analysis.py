"""Document analysis models served by the mock analysis endpoint.

All models serialize with camelCase keys to match the browser client.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ProcessingType = Literal["rag", "kg", "idp"]
RecommendationPriority = Literal["high", "medium", "low"]
DocumentType = Literal["invoice", "contract", "report", "form", "unknown"]
StructureComplexity = Literal["simple", "complex"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalyzeDocumentRequest(_CamelModel):
    """Metadata describing an uploaded file."""

    file_name: str = Field(min_length=1)
    file_type: str = Field(default="")
    file_size: int = Field(ge=0)


class DocumentStructure(_CamelModel):
    """Layout characteristics of a document."""

    has_tables: bool
    has_lists: bool
    has_images: bool
    form_fields: int = Field(ge=0)
    page_count: int = Field(ge=0)
    structure_complexity: StructureComplexity


class ContentFeatures(_CamelModel):
    """Textual characteristics of a document."""

    language: str = "en"
    word_count: int = Field(ge=0)
    has_named_entities: bool = True
    has_financial_data: bool = False
    top_keywords: list[str] = Field(default_factory=list)


class RelationshipFeatures(_CamelModel):
    """Entity and relation counts used for knowledge-graph suitability."""

    entity_count: int = Field(ge=0)
    potential_relations: int = Field(ge=0)


class DocumentAnalysis(_CamelModel):
    """Fabricated analysis of a document."""

    document_type: DocumentType
    structure: DocumentStructure
    content_features: ContentFeatures
    relationships: RelationshipFeatures
    confidence: float = Field(ge=0, le=1)


class ProcessingRecommendation(_CamelModel):
    """A suggested processing pipeline for a document."""

    processing_type: ProcessingType
    priority: RecommendationPriority = "high"
    reason: str = ""


class AnalyzeDocumentResponse(_CamelModel):
    """Successful response body of the analysis endpoint."""

    success: bool = True
    analysis: DocumentAnalysis
    recommendations: list[ProcessingRecommendation] = Field(default_factory=list)


__all__ = [
    "AnalyzeDocumentRequest",
    "AnalyzeDocumentResponse",
    "ContentFeatures",
    "DocumentAnalysis",
    "DocumentStructure",
    "DocumentType",
    "ProcessingRecommendation",
    "ProcessingType",
    "RecommendationPriority",
    "RelationshipFeatures",
]
