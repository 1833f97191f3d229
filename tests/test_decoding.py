from __future__ import annotations

import json

from src.core.decoding import (
    ArticleAnalysisPayload,
    Decoded,
    Rejected,
    decode_article_analysis,
    decode_document_analysis,
)
from tests.fakes import VALID_ANALYSIS


def test_valid_analysis_decodes_completely() -> None:
    result = decode_article_analysis(json.dumps(VALID_ANALYSIS))

    assert isinstance(result, Decoded)
    assert result.complete
    assert result.invalid_fields == []
    payload: ArticleAnalysisPayload = result.value
    assert payload.impact == "High"
    assert payload.implications.short_term == "Budgets shift to tooling"
    assert payload.relevance_score == 8


def test_code_fenced_json_is_accepted() -> None:
    raw = "```json\n" + json.dumps(VALID_ANALYSIS) + "\n```"
    assert isinstance(decode_article_analysis(raw), Decoded)


def test_non_json_is_rejected() -> None:
    result = decode_article_analysis("Sorry, I cannot help with that.")
    assert isinstance(result, Rejected)
    assert "invalid JSON" in result.reason


def test_empty_and_non_object_responses_are_rejected() -> None:
    assert isinstance(decode_article_analysis(""), Rejected)
    assert isinstance(decode_article_analysis(None), Rejected)
    assert isinstance(decode_article_analysis("[1, 2, 3]"), Rejected)


def test_malformed_fields_are_dropped_individually() -> None:
    raw = dict(VALID_ANALYSIS)
    raw["relevanceScore"] = 42
    raw["impact"] = "catastrophic"
    raw["keyInsights"] = "not a list"
    raw["implications"] = {"shortTerm": "", "longTerm": "Roles change"}

    result = decode_article_analysis(json.dumps(raw))

    assert isinstance(result, Decoded)
    assert not result.complete
    assert set(result.invalid_fields) == {"relevanceScore", "impact", "keyInsights", "implications.shortTerm"}
    assert result.value.sector == "Technology"
    assert result.value.relevance_score is None
    assert result.value.implications.long_term == "Roles change"
    assert result.value.implications.short_term is None


def test_missing_fields_decode_as_incomplete() -> None:
    result = decode_article_analysis(json.dumps({"sector": "Finance"}))
    assert isinstance(result, Decoded)
    assert not result.complete
    assert result.invalid_fields == []
    assert result.value.impact is None


def test_impact_is_case_normalised() -> None:
    result = decode_article_analysis(json.dumps({"impact": " high "}))
    assert isinstance(result, Decoded)
    assert result.value.impact == "High"


def test_document_summary_accepts_legacy_content_key() -> None:
    result = decode_document_analysis(json.dumps({"title": "Skills report", "content": "Short summary."}))
    assert isinstance(result, Decoded)
    assert result.value.summary == "Short summary."
    assert result.value.title == "Skills report"
