"""
This module contains the core use cases of Blurred Citadel.

News: articles are fetched for a topic category and region, then every article is enriched concurrently.
Each enrichment is isolated: if the AI call fails or its JSON is unusable, that one article falls back to the
keyword generators and the rest of the batch is unaffected. Partially valid AI answers keep their valid fields.

Knowledge base: items are created (typed in, uploaded, or taken from a news article), and every creation
re-runs connection detection for the new item against the rest of the knowledge base.

All collaborators (news client, analyst, store) are passed in by the caller.
"""

import asyncio
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from src.adapters.documents import UnsupportedDocumentError, extract_text
from src.adapters.knowledge_store import ItemNotFoundError, KnowledgeStore, KnowledgeStoreError
from src.adapters.llm import Analyst
from src.adapters.news import NewsApiClient
from src.core import fallbacks
from src.core.decoding import (
    AnalysisResult,
    ArticleAnalysisPayload,
    Decoded,
    DocumentAnalysisPayload,
    ImplicationsPayload,
    decode_article_analysis,
    decode_document_analysis,
)
from src.core.entities import (
    AnalyzeDocumentRequest,
    ArticleInsights,
    Connection,
    DocumentAnalysis,
    DocumentAnalysisResult,
    DocumentConnection,
    EnrichmentSource,
    Implications,
    KnowledgeItem,
    KnowledgeItemCreate,
    KnowledgeItemDetail,
    NewsArticle,
    ProcessedArticle,
    UploadRejection,
    UploadSummary,
)
from src.core.similarity import detect_connections, score_candidates

from utils.logging_setup import get_logger
logger = get_logger(__name__, log_file="core.log")

DEFAULT_IMPACT = "Medium"
DEFAULT_RELEVANCE = 5
ARTICLE_CATEGORY = "News"


def _source_of(result: Optional[AnalysisResult]) -> EnrichmentSource:
    if not isinstance(result, Decoded):
        return "fallback"
    return "ai" if result.complete else "partial"


# ─────────────────────────────────────────────
# News enrichment
# ─────────────────────────────────────────────
def build_processed_article(
    article: NewsArticle,
    category: str,
    result: Optional[AnalysisResult] = None,
) -> ProcessedArticle:
    """Merge a decoded AI answer with the fallback generators, field by field."""
    payload = result.value if isinstance(result, Decoded) else ArticleAnalysisPayload()
    implications = payload.implications or ImplicationsPayload()

    return ProcessedArticle(
        **article.model_dump(),
        impact=payload.impact or DEFAULT_IMPACT,
        sector=payload.sector or fallbacks.determine_sector(article, category),
        analysis=ArticleInsights(
            key_insights=payload.key_insights or fallbacks.generate_insights(article, category),
            implications=Implications(
                short_term=implications.short_term or fallbacks.generate_short_term_implication(article, category),
                long_term=implications.long_term or fallbacks.generate_long_term_implication(article, category),
            ),
            relevance_score=payload.relevance_score or DEFAULT_RELEVANCE,
            workforce_trends=payload.workforce_trends or fallbacks.generate_trends(article, category),
        ),
        enriched_by=_source_of(result),
    )


async def enrich_article(analyst: Optional[Analyst], article: NewsArticle, category: str) -> ProcessedArticle:
    result = None
    if analyst is not None:
        try:
            raw = await asyncio.to_thread(analyst.analyze_article, article, category)
            result = decode_article_analysis(raw)
        except Exception as e:
            # one bad article must not abort the batch
            logger.warning(f"⚠️ AI analysis failed for '{article.title[:60]}', using fallback: {e}")

    if result is not None and not isinstance(result, Decoded):
        logger.warning(f"⚠️ Unusable AI analysis for '{article.title[:60]}' ({result.reason}), using fallback")
    elif isinstance(result, Decoded) and result.invalid_fields:
        logger.debug(f"Filled invalid fields {result.invalid_fields} from fallback for '{article.title[:60]}'")

    return build_processed_article(article, category, result)


async def get_enriched_news(
    news_client: NewsApiClient,
    analyst: Optional[Analyst],
    category: str = "all",
    region: str = "global",
) -> List[ProcessedArticle]:
    """Fetch and enrich news. NewsApiError propagates; AI problems never do."""
    articles = await news_client.search(category, region)
    if not articles:
        logger.info("📭 No usable articles returned")
        return []

    logger.info(f"🤖 Enriching {len(articles)} articles (AI {'on' if analyst else 'off'})")
    processed = await asyncio.gather(*(enrich_article(analyst, article, category) for article in articles))

    by_source: Dict[str, int] = {}
    for article in processed:
        by_source[article.enriched_by] = by_source.get(article.enriched_by, 0) + 1
    logger.info(f"✅ Enriched {len(processed)} articles: {by_source}")
    return list(processed)


# ─────────────────────────────────────────────
# Document analysis
# ─────────────────────────────────────────────
def build_document_analysis(fallback: DocumentAnalysis, result: Optional[AnalysisResult]) -> DocumentAnalysis:
    payload = result.value if isinstance(result, Decoded) else DocumentAnalysisPayload()
    return DocumentAnalysis(
        title=payload.title or fallback.title,
        summary=payload.summary or fallback.summary,
        category=payload.category or fallback.category,
        tags=payload.tags or fallback.tags,
        key_stats=payload.key_stats or fallback.key_stats,
        thought_leadership=payload.thought_leadership or fallback.thought_leadership,
        key_topics=payload.key_topics or fallback.key_topics,
        sentiment=payload.sentiment or fallback.sentiment,
    )


async def analyze_text(
    analyst: Optional[Analyst],
    name: Optional[str],
    text: str,
) -> Tuple[DocumentAnalysis, EnrichmentSource]:
    fallback = fallbacks.fallback_document_analysis(name, text)
    result = None
    if analyst is not None:
        try:
            raw = await asyncio.to_thread(analyst.analyze_document, text)
            result = decode_document_analysis(raw)
        except Exception as e:
            logger.warning(f"⚠️ AI document analysis failed for '{name or fallback.title}', using fallback: {e}")

    if result is not None and not isinstance(result, Decoded):
        logger.warning(f"⚠️ Unusable AI document analysis ({result.reason}), using fallback")

    return build_document_analysis(fallback, result), _source_of(result)


async def analyze_document(analyst: Optional[Analyst], request: AnalyzeDocumentRequest) -> DocumentAnalysisResult:
    """Structured analysis of pasted document text plus its connections to the supplied documents."""
    analysis, source = await analyze_text(analyst, None, request.file_content)

    scored = score_candidates(
        f"{analysis.title} {request.file_content}",
        ((doc.id, f"{doc.title} {doc.content}") for doc in request.existing_documents),
    )
    logger.info(f"📑 Analysed document '{analysis.title}' ({source}), {len(scored)} connections")
    return DocumentAnalysisResult(
        **analysis.model_dump(),
        connections=[DocumentConnection(document_id=doc_id, strength=strength) for doc_id, strength in scored],
        enriched_by=source,
    )


# ─────────────────────────────────────────────
# Knowledge base
# ─────────────────────────────────────────────
def rebuild_connections(
    store: KnowledgeStore,
    item_id: str,
    pool: Optional[Sequence[KnowledgeItem]] = None,
) -> List[Connection]:
    """Recompute the outgoing connections of one item from scratch and store them."""
    items = list(pool) if pool is not None else store.list_items()
    item = next((candidate for candidate in items if candidate.id == str(item_id)), None)
    if item is None:
        raise ItemNotFoundError(item_id)

    connections = detect_connections(item, items)
    logger.info(f"🔍 Item {item.id}: {len(connections)} connections above threshold out of {len(items) - 1} items")
    return store.replace_connections(item.id, connections)


def rebuild_all_connections(store: KnowledgeStore) -> Dict[str, int]:
    items = store.list_items()
    counts = {}
    for item in items:
        counts[item.id] = len(rebuild_connections(store, item.id, pool=items))
    logger.info(f"🔄 Rebuilt connections for {len(items)} items")
    return counts


def create_knowledge_item(store: KnowledgeStore, payload: KnowledgeItemCreate) -> KnowledgeItem:
    """Store the item, then detect its connections. A failed detection keeps the item, unconnected."""
    item = store.create_item(payload)
    try:
        item.connections = rebuild_connections(store, item.id)
    except KnowledgeStoreError as e:
        logger.warning(f"⚠️ Item {item.id} stored without connections: {e}")
        item.connections = []
    return item


async def ingest_document(
    store: KnowledgeStore,
    analyst: Optional[Analyst],
    filename: str,
    content_type: Optional[str],
    data: bytes,
) -> KnowledgeItem:
    """Uploaded file -> text -> analysis -> stored item with connections."""
    text = extract_text(filename, content_type, data)
    analysis, source = await analyze_text(analyst, filename, text)
    logger.info(f"📥 Ingesting '{filename}' as '{analysis.title}' ({source})")
    return create_knowledge_item(
        store,
        KnowledgeItemCreate(title=analysis.title, content=text, category=analysis.category, tags=analysis.tags),
    )


async def ingest_documents(
    store: KnowledgeStore,
    analyst: Optional[Analyst],
    files: Iterable[Tuple[str, Optional[str], bytes]],
    max_bytes: int,
) -> UploadSummary:
    """Ingest several uploads; unreadable or oversized files are reported per file, not raised."""
    summary = UploadSummary()
    for filename, content_type, data in files:
        if len(data) > max_bytes:
            summary.rejected.append(UploadRejection(filename=filename, error=f"File exceeds {max_bytes} bytes"))
            continue
        try:
            summary.items.append(await ingest_document(store, analyst, filename, content_type, data))
        except UnsupportedDocumentError as e:
            logger.warning(f"⚠️ Rejected upload '{filename}': {e}")
            summary.rejected.append(UploadRejection(filename=filename, error=str(e)))
        except KnowledgeStoreError as e:
            logger.error(f"❌ Could not store upload '{filename}': {e}")
            summary.rejected.append(UploadRejection(filename=filename, error=str(e)))
    logger.info(f"🎉 Upload complete: {len(summary.items)} stored, {len(summary.rejected)} rejected")
    return summary


async def add_article_to_knowledge(
    store: KnowledgeStore,
    analyst: Optional[Analyst],
    article: NewsArticle,
) -> KnowledgeItem:
    """Turn a news article into a knowledge item (description analysed, source URL kept in the content)."""
    analysis, source = await analyze_text(analyst, None, article.description)
    content = f"{article.description}\n\nSource: {article.url}"
    category = analysis.category if source != "fallback" else ARTICLE_CATEGORY
    logger.info(f"📰 Adding article '{article.title[:60]}' to knowledge base ({source})")
    return create_knowledge_item(
        store,
        KnowledgeItemCreate(title=article.title, content=content, category=category, tags=analysis.tags),
    )


def filter_items(items: Iterable[KnowledgeItem], search: str = "", category: str = "all") -> List[KnowledgeItem]:
    """Case-insensitive search over title, content and tags, optionally restricted to one category."""
    needle = (search or "").strip().lower()
    selected = []
    for item in items:
        if category and category != "all" and item.category != category:
            continue
        if needle and not (
            needle in item.title.lower()
            or needle in item.content.lower()
            or any(needle in tag.lower() for tag in item.tags)
        ):
            continue
        selected.append(item)
    return selected


def list_categories(items: Iterable[KnowledgeItem]) -> List[str]:
    return ["all"] + list(dict.fromkeys(item.category for item in items))


def connected_items(item: KnowledgeItem, items: Sequence[KnowledgeItem]) -> List[KnowledgeItem]:
    """Items linked to `item` in either direction, strongest link first."""
    strengths: Dict[str, float] = {}
    for connection in item.connections:
        strengths[connection.target_item_id] = max(
            strengths.get(connection.target_item_id, 0.0), connection.connection_strength
        )
    for other in items:
        for connection in other.connections:
            if connection.target_item_id == item.id:
                strengths[other.id] = max(strengths.get(other.id, 0.0), connection.connection_strength)
    strengths.pop(item.id, None)

    by_id = {other.id: other for other in items}
    ranked = sorted(strengths, key=lambda other_id: strengths[other_id], reverse=True)
    return [by_id[other_id] for other_id in ranked if other_id in by_id]


def get_item_detail(store: KnowledgeStore, item_id: str) -> KnowledgeItemDetail:
    items = store.list_items()
    item = next((candidate for candidate in items if candidate.id == str(item_id)), None)
    if item is None:
        raise ItemNotFoundError(item_id)
    return KnowledgeItemDetail(item=item, connected_items=connected_items(item, items))
