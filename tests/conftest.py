from __future__ import annotations

import copy
from typing import Any, Dict

import pytest

from src.adapters.knowledge_store import KnowledgeStore
from src.core.entities import NewsArticle
from tests.fakes import VALID_ANALYSIS, FakeSupabase


@pytest.fixture()
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture()
def store(fake_supabase: FakeSupabase) -> KnowledgeStore:
    return KnowledgeStore(fake_supabase)  # type: ignore[arg-type]


@pytest.fixture()
def valid_analysis() -> Dict[str, Any]:
    return copy.deepcopy(VALID_ANALYSIS)


@pytest.fixture()
def article() -> NewsArticle:
    return NewsArticle(
        title="Automation reshapes recruitment at tech firms",
        description="Employers adopt automated screening as remote hiring grows and skills shortages persist.",
        url="https://example.com/automation-recruitment",
        source="Example News",
        published_at="2024-03-20T10:00:00Z",
    )
