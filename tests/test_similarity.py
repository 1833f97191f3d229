from __future__ import annotations

import math

import pytest

from src.core.entities import KnowledgeItem
from src.core.similarity import (
    CONNECTION_THRESHOLD,
    connection_strength,
    detect_connections,
    score_candidates,
    tokenize,
)


def _item(item_id: str, title: str, content: str) -> KnowledgeItem:
    return KnowledgeItem(id=item_id, title=title, content=content, category="Test")


def test_tokenize_lowercases_splits_and_drops_short_tokens() -> None:
    tokens = tokenize("AI-driven Recruitment: the NEW automation wave, 2024!")
    assert tokens == {"driven", "recruitment", "automation"}


def test_tokenize_uses_ascii_word_class() -> None:
    # accented letters count as separators, as with a JavaScript \W split
    assert tokenize("café-culture résumé") == {"culture"}


def test_identical_documents_score_one() -> None:
    text = "Recruitment technology automation platforms"
    assert connection_strength(text, text) == pytest.approx(1.0)


def test_disjoint_documents_score_zero() -> None:
    assert connection_strength("recruitment pipelines", "weather forecasts") == 0.0


def test_empty_token_sets_score_zero() -> None:
    assert connection_strength("", "recruitment technology") == 0.0
    assert connection_strength("a an the", "tiny words only") == 0.0
    assert connection_strength("", "") == 0.0


def test_strength_is_symmetric() -> None:
    a = "Recruitment technology automation changes hiring pipelines"
    b = "Automation in warehouse logistics and recruitment"
    assert connection_strength(a, b) == pytest.approx(connection_strength(b, a))


def test_shared_vocabulary_scenario_matches_formula() -> None:
    # three shared long tokens, each side has extra vocabulary of its own
    a = "recruitment technology automation pipelines sourcing"
    b = "recruitment technology automation warehouse robotics logistics staffing"
    expected = 3 / math.sqrt(5 * 7)
    strength = connection_strength(a, b)
    assert strength == pytest.approx(expected)
    assert strength > CONNECTION_THRESHOLD


def test_shared_vocabulary_below_threshold_is_dropped() -> None:
    a = "recruitment technology automation"
    noise = " ".join(f"unrelated{i:03d}" for i in range(300))
    b = f"recruitment technology automation {noise}"
    strength = connection_strength(a, b)
    assert strength == pytest.approx(3 / math.sqrt(3 * 303))
    assert strength <= CONNECTION_THRESHOLD
    assert score_candidates(a, [("b", b)]) == []


def test_score_candidates_keeps_only_strictly_above_threshold() -> None:
    target = "alpha1 bravo2 charl3 delta4 echo55 foxtr6 golf77 hotel8 india9 julie0"
    # one shared token out of ten on each side -> exactly 0.1, which must be excluded
    at_threshold = "alpha1 kilo11 lima22 mike33 novem4 oscar5 papa66 quebe7 romeo8 sierr9"
    above = "alpha1 bravo2 kilo11 lima22 mike33 novem4 oscar5 papa66 quebe7 romeo8"

    assert connection_strength(target, at_threshold) == pytest.approx(0.1)
    scored = score_candidates(target, [("at", at_threshold), ("above", above)])
    assert [candidate_id for candidate_id, _ in scored] == ["above"]


def test_score_candidates_orders_by_strength() -> None:
    target = "recruitment technology automation hiring"
    scored = score_candidates(
        target,
        [
            ("weak", "recruitment payroll benefits pension"),
            ("strong", "recruitment technology automation hiring"),
        ],
    )
    assert [candidate_id for candidate_id, _ in scored] == ["strong", "weak"]
    assert scored[0][1] == pytest.approx(1.0)


def test_document_without_tokens_has_no_connections() -> None:
    lonely = _item("1", "a b", "c d")
    others = [_item("2", "Recruitment", "recruitment technology")]
    assert detect_connections(lonely, others) == []


def test_detect_connections_skips_self_and_builds_edges() -> None:
    source = _item("1", "AI Recruitment", "recruitment technology automation")
    twin = _item("2", "AI Recruitment", "recruitment technology automation")
    unrelated = _item("3", "Weather", "forecast rainfall")

    connections = detect_connections(source, [source, twin, unrelated])

    assert len(connections) == 1
    assert connections[0].source_item_id == "1"
    assert connections[0].target_item_id == "2"
    assert connections[0].connection_strength == pytest.approx(1.0)
