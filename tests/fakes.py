from __future__ import annotations

import itertools
import json
from typing import Any, Callable, Dict, List, Optional, Union

from postgrest.exceptions import APIError as PostgrestAPIError

from src.core.entities import NewsArticle


class FakeResponse:
    def __init__(self, data: List[Dict[str, Any]]) -> None:
        self.data = data


class FakeQuery:
    """Just enough of the postgrest query builder for KnowledgeStore."""

    def __init__(self, db: "FakeSupabase", table: str) -> None:
        self._db = db
        self._table = table
        self._action = "select"
        self._payload: Any = None
        self._filters: List[Callable[[Dict[str, Any]], bool]] = []

    def select(self, *_columns: str) -> "FakeQuery":
        self._action = "select"
        return self

    def insert(self, rows: Union[Dict[str, Any], List[Dict[str, Any]]]) -> "FakeQuery":
        self._action = "insert"
        self._payload = rows if isinstance(rows, list) else [rows]
        return self

    def update(self, values: Dict[str, Any]) -> "FakeQuery":
        self._action = "update"
        self._payload = values
        return self

    def delete(self) -> "FakeQuery":
        self._action = "delete"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self._filters.append(lambda row: str(row.get(column)) == str(value))
        return self

    def _matches(self, row: Dict[str, Any]) -> bool:
        return all(check(row) for check in self._filters)

    def execute(self) -> FakeResponse:
        if self._table in self._db.failing_tables:
            raise PostgrestAPIError({"message": f"{self._table} unavailable", "code": "500"})
        self._db.calls.append((self._table, self._action))

        rows = self._db.tables.setdefault(self._table, [])
        if self._action == "select":
            return FakeResponse([dict(row) for row in rows if self._matches(row)])
        if self._action == "insert":
            inserted = []
            for row in self._payload:
                stored = {"id": str(next(self._db.ids)), **row}
                rows.append(stored)
                inserted.append(dict(stored))
            return FakeResponse(inserted)
        if self._action == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(self._payload)
                    updated.append(dict(row))
            return FakeResponse(updated)
        # delete
        removed = [row for row in rows if self._matches(row)]
        self._db.tables[self._table] = [row for row in rows if not self._matches(row)]
        return FakeResponse(removed)


class FakeSupabase:
    def __init__(self) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.ids = itertools.count(1)
        self.failing_tables: set = set()
        self.calls: List[tuple] = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


class FakeAnalyst:
    """Stands in for src.adapters.llm.Analyst. Responses may be strings, dicts (JSON-encoded) or exceptions."""

    def __init__(
        self,
        article_response: Union[str, Dict[str, Any], Exception, None] = None,
        document_response: Union[str, Dict[str, Any], Exception, None] = None,
    ) -> None:
        self.article_response = article_response
        self.document_response = document_response
        self.article_calls: List[tuple] = []
        self.document_calls: List[str] = []

    @staticmethod
    def _answer(response: Union[str, Dict[str, Any], Exception, None]) -> str:
        if isinstance(response, Exception):
            raise response
        if isinstance(response, dict):
            return json.dumps(response)
        return response or ""

    def analyze_article(self, article: NewsArticle, category: str) -> str:
        self.article_calls.append((article.title, category))
        if callable(self.article_response):
            return self._answer(self.article_response(article))
        return self._answer(self.article_response)

    def analyze_document(self, content: str) -> str:
        self.document_calls.append(content)
        return self._answer(self.document_response)


VALID_ANALYSIS: Dict[str, Any] = {
    "impact": "High",
    "sector": "Technology",
    "keyInsights": ["AI screening adoption is accelerating", "Recruiters are retraining", "Vendors consolidate"],
    "implications": {"shortTerm": "Budgets shift to tooling", "longTerm": "Recruiter roles change"},
    "relevanceScore": 8,
    "workforceTrends": ["AI Adoption in HR", "Recruitment Automation"],
}


def make_articles(count: int) -> List[NewsArticle]:
    return [
        NewsArticle(
            title=f"Workforce story {index}",
            description=f"Recruitment update number {index} about hiring demand.",
            url=f"https://example.com/story-{index}",
        )
        for index in range(count)
    ]


class FakeNewsClient:
    def __init__(self, articles: Optional[List[NewsArticle]] = None, error: Optional[Exception] = None) -> None:
        self.articles = articles or []
        self.error = error
        self.calls: List[tuple] = []

    async def search(self, category: str = "all", region: str = "global") -> List[NewsArticle]:
        self.calls.append((category, region))
        if self.error is not None:
            raise self.error
        return list(self.articles)
