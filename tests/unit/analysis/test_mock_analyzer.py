"""Tests for the mock document analyzer and recommendation rules."""

from __future__ import annotations

import random

import pytest
from hypothesis import HealthCheck, given
from hypothesis import settings as hy_settings
from hypothesis import strategies as st

from docpipe.analysis.service import (
    MockDocumentAnalyzer,
    generate_keywords,
    generate_recommendations,
    infer_document_type,
)
from docpipe.config.settings import AnalysisConfig
from docpipe.models.analysis import (
    ContentFeatures,
    DocumentAnalysis,
    DocumentStructure,
    RelationshipFeatures,
)

MIB = 1024 * 1024


def _analysis(
    *, words: int = 0, entities: int = 0, tables: bool = False, form_fields: int = 0
) -> DocumentAnalysis:
    return DocumentAnalysis(
        document_type="unknown",
        structure=DocumentStructure(
            has_tables=tables,
            has_lists=False,
            has_images=False,
            form_fields=form_fields,
            page_count=1,
            structure_complexity="simple",
        ),
        content_features=ContentFeatures(word_count=words),
        relationships=RelationshipFeatures(entity_count=entities, potential_relations=0),
        confidence=0.8,
    )


@pytest.mark.unit
@pytest.mark.parametrize(
    ("file_name", "expected"),
    [
        ("Invoice-2024.pdf", "invoice"),
        ("service_contract.docx", "contract"),
        ("quarterly REPORT.pdf", "report"),
        ("signup_form.pdf", "form"),
        ("contract_report.pdf", "contract"),
        ("notes.txt", "unknown"),
    ],
)
def test_infer_document_type(file_name: str, expected: str) -> None:
    assert infer_document_type(file_name) == expected


@pytest.mark.unit
def test_generate_keywords() -> None:
    assert generate_keywords("notes.txt") == ["document", "data", "information"]
    assert "revenue" in generate_keywords("Financial_Summary.xlsx")
    assert "obligations" in generate_keywords("contract.pdf")


@pytest.mark.unit
def test_recommendation_thresholds_are_strict() -> None:
    assert generate_recommendations(_analysis(words=1000, entities=5)) == []

    kinds = [
        rec.processing_type
        for rec in generate_recommendations(_analysis(words=1001, entities=6, tables=True))
    ]
    assert kinds == ["rag", "kg", "idp"]


@pytest.mark.unit
def test_form_fields_trigger_idp() -> None:
    recs = generate_recommendations(_analysis(form_fields=3))
    assert [rec.processing_type for rec in recs] == ["idp"]
    assert recs[0].priority == "high"
    assert recs[0].reason


@pytest.mark.unit
def test_seeded_analyzer_is_reproducible() -> None:
    first = MockDocumentAnalyzer(random.Random(7)).analyze("report.pdf", "pdf", 3 * MIB)
    second = MockDocumentAnalyzer(random.Random(7)).analyze("report.pdf", "pdf", 3 * MIB)
    assert first == second


@pytest.mark.unit
def test_analyze_derives_size_statistics() -> None:
    analyzer = MockDocumentAnalyzer(random.Random(1))

    small = analyzer.analyze("invoice.xlsx", "XLSX", MIB + 1)
    large = analyzer.analyze("notes.txt", "txt", 6 * MIB)

    assert small.structure.page_count == 2
    assert small.structure.structure_complexity == "simple"
    assert small.structure.has_tables is True
    assert small.structure.form_fields == 0
    assert small.content_features.word_count == (MIB + 1) // 5
    assert small.content_features.has_financial_data is True
    assert large.structure.structure_complexity == "complex"
    assert large.content_features.has_financial_data is False


@pytest.mark.unit
@hy_settings(deadline=None, suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(
    seed=st.integers(min_value=0, max_value=2**32),
    size=st.integers(min_value=0, max_value=50 * MIB),
    file_type=st.sampled_from(["pdf", "docx", "xlsx", "txt"]),
)
def test_analysis_values_stay_in_range(seed: int, size: int, file_type: str) -> None:
    analysis = MockDocumentAnalyzer(
        random.Random(seed), cfg=AnalysisConfig(confidence_min=0.75, confidence_max=0.95)
    ).analyze("doc", file_type, size)

    assert 0.75 <= analysis.confidence <= 0.95
    assert 5 <= analysis.relationships.entity_count < 25
    assert 2 <= analysis.relationships.potential_relations < 12
    assert 0 <= analysis.structure.form_fields < 20
    if file_type != "pdf":
        assert analysis.structure.form_fields == 0


@pytest.mark.unit
def test_analysis_serializes_camel_case() -> None:
    payload = MockDocumentAnalyzer(random.Random(3)).analyze("a.pdf", "pdf", 10).model_dump(
        by_alias=True
    )
    assert set(payload) == {
        "documentType",
        "structure",
        "contentFeatures",
        "relationships",
        "confidence",
    }
    assert "structureComplexity" in payload["structure"]
    assert "topKeywords" in payload["contentFeatures"]


@pytest.mark.unit
def test_inverted_confidence_bounds_rejected() -> None:
    with pytest.raises(ValueError, match="confidence_min"):
        AnalysisConfig(confidence_min=0.9, confidence_max=0.8)
