"""
This file defines the core entities for Blurred Citadel.

- NewsArticle is a raw article as returned by the news search API
- ArticleInsights / ProcessedArticle carry the (AI or fallback) analysis attached to an article
- KnowledgeItem and Connection mirror the three knowledge tables (items, tags, connections)
- DocumentAnalysis is the structured summary of an uploaded or pasted document

News and document payloads travel as camelCase JSON (that is what the dashboard and the AI prompt use),
so those models alias their snake_case fields. Knowledge items keep the column names of the database.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Impact = Literal["High", "Medium", "Low"]
EnrichmentSource = Literal["ai", "partial", "fallback"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ─────────────────────────────────────────────
# News
# ─────────────────────────────────────────────
class NewsArticle(CamelModel):
    """A single article from the news search API."""
    title: str
    description: str
    url: str
    source: str = "Unknown"
    published_at: Optional[str] = None

    @property
    def text(self) -> str:
        return f"{self.title} {self.description}"


class Implications(CamelModel):
    short_term: str
    long_term: str


class ArticleInsights(CamelModel):
    key_insights: List[str] = Field(default_factory=list)
    implications: Implications
    relevance_score: int = Field(5, ge=1, le=10)
    workforce_trends: List[str] = Field(default_factory=list)


class ProcessedArticle(NewsArticle):
    """An article with its analysis attached, ready for the dashboard."""
    impact: Impact = "Medium"
    sector: str
    analysis: ArticleInsights
    enriched_by: EnrichmentSource = "fallback"


# ─────────────────────────────────────────────
# Knowledge base
# ─────────────────────────────────────────────
def _as_str(value):
    return str(value) if value is not None else value


class Connection(BaseModel):
    """Directed, scored edge between two knowledge items."""
    source_item_id: str
    target_item_id: str
    connection_strength: float

    ids_as_str = field_validator("source_item_id", "target_item_id", mode="before")(_as_str)


class KnowledgeItem(BaseModel):
    id: str
    title: str
    content: str
    category: str
    date_added: Optional[str] = None
    last_updated: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    connections: List[Connection] = Field(default_factory=list)

    id_as_str = field_validator("id", mode="before")(_as_str)

    @property
    def text(self) -> str:
        return f"{self.title} {self.content}"


class KnowledgeItemCreate(BaseModel):
    """User-submitted knowledge item. Title, content and category are required."""
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    tags: List[str] = Field(default_factory=list)

    @field_validator("title", "content", "category", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, tags: List[str]) -> List[str]:
        cleaned = [tag.strip() for tag in tags if tag and tag.strip()]
        return list(dict.fromkeys(cleaned))


class KnowledgeItemDetail(BaseModel):
    item: KnowledgeItem
    connected_items: List[KnowledgeItem] = Field(default_factory=list)


# ─────────────────────────────────────────────
# Document analysis
# ─────────────────────────────────────────────
class DocumentAnalysis(CamelModel):
    title: str
    summary: str
    category: str = "Uncategorized"
    tags: List[str] = Field(default_factory=list)
    key_stats: List[str] = Field(default_factory=list)
    thought_leadership: List[str] = Field(default_factory=list)
    key_topics: List[str] = Field(default_factory=list)
    sentiment: str = "neutral"


class ExistingDocument(CamelModel):
    id: str
    title: str
    content: str
    category: Optional[str] = None

    id_as_str = field_validator("id", mode="before")(_as_str)


class DocumentConnection(CamelModel):
    document_id: str
    strength: float


class AnalyzeDocumentRequest(CamelModel):
    file_content: str = Field(..., min_length=1)
    existing_documents: List[ExistingDocument] = Field(default_factory=list)


class DocumentAnalysisResult(DocumentAnalysis):
    connections: List[DocumentConnection] = Field(default_factory=list)
    enriched_by: EnrichmentSource = "fallback"


class UploadRejection(BaseModel):
    filename: str
    error: str


class UploadSummary(BaseModel):
    items: List[KnowledgeItem] = Field(default_factory=list)
    rejected: List[UploadRejection] = Field(default_factory=list)
