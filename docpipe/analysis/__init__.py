"""Mock document analysis domain module."""

from __future__ import annotations

from docpipe.analysis.service import (
    MockDocumentAnalyzer,
    generate_keywords,
    generate_recommendations,
    infer_document_type,
)

__all__ = [
    "MockDocumentAnalyzer",
    "generate_keywords",
    "generate_recommendations",
    "infer_document_type",
]
