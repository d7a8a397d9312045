"""Mock document analysis.

Fabricates plausible document statistics from a file name, type and size and
derives processing recommendations with simple threshold rules. No file
content is read. Randomness comes from an injectable ``random.Random`` so
results can be made reproducible.
"""

from __future__ import annotations

import math
import random

from loguru import logger

from docpipe.config.settings import AnalysisConfig, settings
from docpipe.models.analysis import (
    ContentFeatures,
    DocumentAnalysis,
    DocumentStructure,
    DocumentType,
    ProcessingRecommendation,
    RelationshipFeatures,
)

_MIB = 1024 * 1024
_COMPLEX_SIZE_BYTES = 5 * _MIB
_RAG_WORD_THRESHOLD = 1000
_KG_ENTITY_THRESHOLD = 5

# Checked in order; first substring match wins
_DOCUMENT_TYPE_MARKERS: tuple[tuple[str, DocumentType], ...] = (
    ("invoice", "invoice"),
    ("contract", "contract"),
    ("report", "report"),
    ("form", "form"),
)

_BASE_KEYWORDS = ("document", "data", "information")
_FINANCIAL_KEYWORDS = ("financial", "revenue", "costs", "profit")
_CONTRACT_KEYWORDS = ("agreement", "terms", "parties", "obligations")


def infer_document_type(file_name: str) -> DocumentType:
    """Guess the document type from its file name."""
    name = file_name.lower()
    for marker, doc_type in _DOCUMENT_TYPE_MARKERS:
        if marker in name:
            return doc_type
    return "unknown"


def generate_keywords(file_name: str) -> list[str]:
    """Return topic keywords suggested by the file name."""
    name = file_name.lower()
    if "financial" in name:
        return [*_BASE_KEYWORDS, *_FINANCIAL_KEYWORDS]
    if "contract" in name:
        return [*_BASE_KEYWORDS, *_CONTRACT_KEYWORDS]
    return list(_BASE_KEYWORDS)


def generate_recommendations(analysis: DocumentAnalysis) -> list[ProcessingRecommendation]:
    """Derive processing recommendations from an analysis.

    - more than 1000 words: semantic search (``rag``)
    - more than 5 entities: knowledge graph (``kg``)
    - tables or form fields: structured extraction (``idp``)
    """
    recommendations: list[ProcessingRecommendation] = []
    if analysis.content_features.word_count > _RAG_WORD_THRESHOLD:
        recommendations.append(
            ProcessingRecommendation(
                processing_type="rag",
                priority="high",
                reason="Document contains substantial text content suitable for semantic search",
            )
        )
    if analysis.relationships.entity_count > _KG_ENTITY_THRESHOLD:
        recommendations.append(
            ProcessingRecommendation(
                processing_type="kg",
                priority="high",
                reason="Document contains multiple entities suitable for knowledge graph construction",
            )
        )
    if analysis.structure.has_tables or analysis.structure.form_fields > 0:
        recommendations.append(
            ProcessingRecommendation(
                processing_type="idp",
                priority="high",
                reason="Document contains structured data requiring specialized extraction",
            )
        )
    return recommendations


class MockDocumentAnalyzer:
    """Produce fabricated document analyses."""

    def __init__(
        self,
        rng: random.Random | None = None,
        *,
        cfg: AnalysisConfig | None = None,
    ) -> None:
        """Initialize the analyzer.

        Args:
            rng: Random source; seeded from ``cfg.seed`` when omitted.
            cfg: Analysis settings (confidence bounds, seed).
        """
        self._cfg = cfg or settings.analysis
        self._rng = rng or random.Random(self._cfg.seed)  # noqa: S311

    def analyze(self, file_name: str, file_type: str, file_size: int) -> DocumentAnalysis:
        """Fabricate an analysis for the described file.

        Args:
            file_name: Original file name.
            file_type: Extension without the dot (``pdf``, ``xlsx``...).
            file_size: Size in bytes.

        Returns:
            DocumentAnalysis: Mock structure, content and relationship data.
        """
        rng = self._rng
        file_type = file_type.lower()
        name = file_name.lower()

        # Evaluate in a fixed order so a seeded RNG gives stable output
        has_tables = file_type == "xlsx" or rng.random() > 0.5
        has_lists = rng.random() > 0.5
        has_images = rng.random() > 0.7
        form_fields = rng.randrange(20) if file_type == "pdf" else 0
        entity_count = rng.randrange(20) + 5
        potential_relations = rng.randrange(10) + 2
        span = self._cfg.confidence_max - self._cfg.confidence_min
        confidence = self._cfg.confidence_min + rng.random() * span

        analysis = DocumentAnalysis(
            document_type=infer_document_type(file_name),
            structure=DocumentStructure(
                has_tables=has_tables,
                has_lists=has_lists,
                has_images=has_images,
                form_fields=form_fields,
                page_count=math.ceil(file_size / _MIB),
                structure_complexity="complex" if file_size > _COMPLEX_SIZE_BYTES else "simple",
            ),
            content_features=ContentFeatures(
                language="en",
                word_count=file_size // 5,
                has_named_entities=True,
                has_financial_data="invoice" in name or "financial" in name,
                top_keywords=generate_keywords(file_name),
            ),
            relationships=RelationshipFeatures(
                entity_count=entity_count,
                potential_relations=potential_relations,
            ),
            confidence=confidence,
        )
        logger.debug(
            "Analyzed {} as {} (size={}, confidence={:.2f})",
            file_name,
            analysis.document_type,
            file_size,
            confidence,
        )
        return analysis


__all__ = [
    "MockDocumentAnalyzer",
    "generate_keywords",
    "generate_recommendations",
    "infer_document_type",
]
