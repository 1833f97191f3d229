"""
This is the FastAPI application for Blurred Citadel.

The app is built by create_app(); external clients are constructed once by build_services() and kept on
app.state, never at import time. Run it with:

    uvicorn src.api.v1.main:create_app --factory

Every error body has the same shape: {"error": "...", "details": ...} (details optional).
"""

from dataclasses import dataclass
from typing import List, Optional

from fastapi import Depends, FastAPI, File, Query, Request, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.adapters.knowledge_store import ItemNotFoundError, KnowledgeStore, KnowledgeStoreError
from src.adapters.llm import Analyst
from src.adapters.news import NewsApiClient, NewsApiError
from src.core import use_cases
from src.core.config import Settings, load_settings
from src.core.entities import (
    AnalyzeDocumentRequest,
    Connection,
    DocumentAnalysisResult,
    KnowledgeItem,
    KnowledgeItemCreate,
    KnowledgeItemDetail,
    NewsArticle,
    ProcessedArticle,
    UploadSummary,
)

from utils.logging_setup import get_logger
logger = get_logger(__name__, log_file="api_v1.log")


@dataclass
class Services:
    settings: Settings
    news_client: NewsApiClient
    analyst: Optional[Analyst] = None
    store: Optional[KnowledgeStore] = None


class StoreNotConfigured(Exception):
    pass


def build_services(settings: Settings) -> Services:
    return Services(
        settings=settings,
        news_client=NewsApiClient(
            settings.news_api_key,
            base_url=settings.news_api_url,
            page_size=settings.news_page_size,
            max_articles=settings.news_max_articles,
            timeout=settings.news_timeout,
        ),
        analyst=Analyst.from_settings(settings),
        store=KnowledgeStore.from_settings(settings),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_store(services: Services = Depends(get_services)) -> KnowledgeStore:
    if services.store is None:
        raise StoreNotConfigured()
    return services.store


def _error(status_code: int, error: str, details=None) -> JSONResponse:
    content = {"error": error}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


async def read_upload(document: UploadFile, max_bytes: int) -> bytes:
    """Read at most max_bytes + 1 bytes, enough for the size check to reject an oversized file."""
    return await document.read(max_bytes + 1)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return _error(422, "Invalid request", jsonable_encoder(exc.errors()))

    @app.exception_handler(StoreNotConfigured)
    async def store_not_configured(request: Request, exc: StoreNotConfigured):
        return _error(503, "Knowledge store is not configured")

    @app.exception_handler(ItemNotFoundError)
    async def item_not_found(request: Request, exc: ItemNotFoundError):
        return _error(404, str(exc))

    @app.exception_handler(KnowledgeStoreError)
    async def store_error(request: Request, exc: KnowledgeStoreError):
        logger.error(f"❌ Knowledge store error on {request.url.path}: {exc}")
        return _error(500, "Knowledge store request failed", str(exc))


def _register_routes(app: FastAPI) -> None:
    # welcome endpoint
    @app.get("/")
    async def root():
        return {
            "message": "Welcome to the Blurred Citadel API",
            "endpoints": {
                "news": "/api/news",
                "knowledge": "/api/knowledge",
                "upload": "/api/upload",
                "analyze_document": "/api/analyze-document",
                "health": "/health",
            },
        }

    # Health check endpoint
    @app.get("/health")
    async def health_check(services: Services = Depends(get_services)):
        """Health check endpoint, also reports which external services are configured."""
        settings = services.settings
        return {
            "status": "healthy",
            "service": "blurred-citadel-api",
            "configured": {
                "news_api": settings.news_configured,
                "openai": services.analyst is not None,
                "supabase": services.store is not None,
            },
        }

    @app.get("/api/news", response_model=List[ProcessedArticle])
    async def get_news(
        category: str = Query("all", max_length=32),
        region: str = Query("global", max_length=32),
        services: Services = Depends(get_services),
    ):
        """
        Fetch enriched news for a topic category and region.

        - **category**: ai, labor, msp, stem, chomsky or all (unknown values behave like all)
        - **region**: global, uk, usa or eu
        """
        try:
            return await use_cases.get_enriched_news(services.news_client, services.analyst, category, region)
        except NewsApiError as e:
            logger.error(f"❌ News API error: {e}")
            return _error(500, "Failed to fetch news", str(e))
        except Exception as e:
            logger.error(f"❌ Error fetching news: {e}", exc_info=True)
            return _error(500, "Failed to fetch news")

    @app.get("/api/knowledge", response_model=List[KnowledgeItem])
    def list_knowledge(
        search: str = "",
        category: str = "all",
        store: KnowledgeStore = Depends(get_store),
    ):
        """List knowledge items, filtered by a search term (title, content, tags) and category."""
        return use_cases.filter_items(store.list_items(), search, category)

    @app.get("/api/knowledge/{item_id}", response_model=KnowledgeItemDetail)
    def get_knowledge_item(item_id: str, store: KnowledgeStore = Depends(get_store)):
        return use_cases.get_item_detail(store, item_id)

    @app.post("/api/knowledge", response_model=KnowledgeItem, status_code=201)
    def create_knowledge_item(payload: KnowledgeItemCreate, store: KnowledgeStore = Depends(get_store)):
        return use_cases.create_knowledge_item(store, payload)

    @app.post("/api/knowledge/from-article", response_model=KnowledgeItem, status_code=201)
    async def create_from_article(
        article: NewsArticle,
        services: Services = Depends(get_services),
        store: KnowledgeStore = Depends(get_store),
    ):
        """Add a news article to the knowledge base."""
        return await use_cases.add_article_to_knowledge(store, services.analyst, article)

    @app.post("/api/knowledge/{item_id}/connections", response_model=List[Connection])
    def rebuild_item_connections(item_id: str, store: KnowledgeStore = Depends(get_store)):
        """Re-run connection detection for one item."""
        return use_cases.rebuild_connections(store, item_id)

    @app.post("/api/upload", response_model=UploadSummary)
    async def upload_documents(
        documents: List[UploadFile] = File(...),
        services: Services = Depends(get_services),
        store: KnowledgeStore = Depends(get_store),
    ):
        """Upload .txt/.md/.pdf documents; each becomes a knowledge item."""
        logger.info(f"📬 Received {len(documents)} uploaded documents")
        max_bytes = services.settings.max_upload_bytes
        files = [(doc.filename or "untitled", doc.content_type, await read_upload(doc, max_bytes)) for doc in documents]
        summary = await use_cases.ingest_documents(store, services.analyst, files, max_bytes)
        if not summary.items:
            return _error(400, "No supported documents uploaded", jsonable_encoder(summary.rejected))
        return summary

    @app.post("/api/analyze-document", response_model=DocumentAnalysisResult)
    async def analyze_document(request: AnalyzeDocumentRequest, services: Services = Depends(get_services)):
        """Analyse document text and score its connections to the supplied existing documents."""
        return await use_cases.analyze_document(services.analyst, request)


def create_app(services: Optional[Services] = None) -> FastAPI:
    if services is None:
        services = build_services(load_settings())

    app = FastAPI(title="Blurred Citadel API", version="1.0.0")
    app.state.services = services
    _register_error_handlers(app)
    _register_routes(app)

    logger.info(
        f"🚀 API ready (news: {services.settings.news_configured}, "
        f"ai: {services.analyst is not None}, store: {services.store is not None})"
    )
    return app
