"""
This is the Streamlit dashboard for Blurred Citadel, a workforce-industry news and knowledge monitor.
The News tab shows enriched articles for a topic category and region, with a detail dialog per article.
The Knowledge Base tab lists curated items with search, category filter, connected items, a form to add
items and a document upload. Services are built once per session from the environment (.env).

Run with: `streamlit run src/app.py`
"""

import asyncio
import os
import sys

import streamlit as st
from pydantic import ValidationError

# Add project root to path so imports work
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.adapters.knowledge_store import KnowledgeStoreError
from src.adapters.news import CATEGORY_QUERIES, REGIONS, NewsApiError
from src.api.v1.main import Services, build_services
from src.core import use_cases
from src.core.config import load_settings
from src.core.entities import KnowledgeItem, KnowledgeItemCreate, ProcessedArticle

from utils.logging_setup import get_logger
logger = get_logger(__name__, log_file="dashboard.log")

CATEGORY_LABELS = {
    "all": "All Workforce News",
    "ai": "AI & Automation",
    "labor": "Labor Market",
    "msp": "MSP / RPO",
    "stem": "STEM Talent",
    "chomsky": "Worker Conditions",
}
REGION_LABELS = {"global": "Global", "uk": "UK", "usa": "USA", "eu": "EU"}
IMPACT_COLOURS = {"High": "#d62728", "Medium": "#ff7f0e", "Low": "#2ca02c"}

# Page Config
st.set_page_config(page_title="Blurred Citadel | Workforce Intelligence", layout="wide", page_icon="🏰")

# Styling
st.markdown("""
    <style>
    .impact-badge {
        color: white;
        padding: 2px 8px;
        border-radius: 12px;
        font-size: 0.8rem;
        font-weight: bold;
    }
    .tag-pill {
        background-color: #1f77b4;
        color: white;
        padding: 4px 10px;
        border-radius: 15px;
        font-size: 0.75rem;
        margin: 2px;
        display: inline-block;
    }
    .trend-pill {
        background-color: #2ca02c;
        color: white;
        padding: 4px 10px;
        border-radius: 15px;
        font-size: 0.75rem;
        margin: 2px;
        display: inline-block;
    }
    </style>
""", unsafe_allow_html=True)


# ─────────────────────────────────────────────
# Services
# ─────────────────────────────────────────────
@st.cache_resource
def get_services() -> Services:
    return build_services(load_settings())


services = get_services()


def pills(values, css_class: str) -> str:
    return " ".join(f"<span class='{css_class}'>{value}</span>" for value in values)


# ─────────────────────────────────────────────
# Data Fetching
# ─────────────────────────────────────────────
@st.cache_data(ttl=900, show_spinner=False)
def load_news(category: str, region: str):
    """Fetch enriched news; cached per (category, region) for 15 minutes."""
    articles = asyncio.run(use_cases.get_enriched_news(services.news_client, services.analyst, category, region))
    return [article.model_dump() for article in articles]


def load_knowledge():
    if services.store is None:
        return []
    return services.store.list_items()


# ─────────────────────────────────────────────
# Dialogs
# ─────────────────────────────────────────────
@st.dialog("Article analysis", width="large")
def show_article(article: ProcessedArticle):
    st.subheader(article.title)
    st.caption(f"{article.source} · {article.published_at or 'date unknown'} · analysis: {article.enriched_by}")
    st.write(article.description)

    col1, col2, col3 = st.columns(3)
    col1.metric("Impact", article.impact)
    col2.metric("Relevance", f"{article.analysis.relevance_score}/10")
    col3.metric("Sector", article.sector)

    st.markdown("**Key Insights**")
    for insight in article.analysis.key_insights:
        st.markdown(f"- {insight}")

    st.markdown("**Implications**")
    st.markdown(f"- *Short term:* {article.analysis.implications.short_term}")
    st.markdown(f"- *Long term:* {article.analysis.implications.long_term}")

    if article.analysis.workforce_trends:
        st.markdown("**Workforce Trends**")
        st.markdown(pills(article.analysis.workforce_trends, "trend-pill"), unsafe_allow_html=True)

    st.markdown(f"[Read the full article]({article.url})")

    if services.store is not None and st.button("➕ Add to Knowledge Base", key=f"add-{article.url}"):
        with st.spinner("Processing article..."):
            try:
                item = asyncio.run(use_cases.add_article_to_knowledge(services.store, services.analyst, article))
                st.success(f"Added '{item.title}' with {len(item.connections)} connections")
            except KnowledgeStoreError as e:
                logger.error(f"❌ Failed to add article: {e}")
                st.error("Failed to process article")


# ─────────────────────────────────────────────
# Sidebar
# ─────────────────────────────────────────────
with st.sidebar:
    st.header("⚙️ Services")
    settings = services.settings
    st.markdown(f"{'✅' if settings.news_configured else '❌'} News API")
    st.markdown(f"{'✅' if services.analyst else '⚠️'} AI enrichment" + ("" if services.analyst else " (fallback only)"))
    st.markdown(f"{'✅' if services.store else '❌'} Knowledge store")

    st.divider()

    st.header("🎛️ News Filters")
    category = st.selectbox(
        "Category", list(CATEGORY_QUERIES), format_func=lambda key: CATEGORY_LABELS.get(key, key)
    )
    region = st.selectbox("Region", list(REGIONS), format_func=lambda key: REGION_LABELS.get(key, key))

    impact_filter = st.multiselect("Impact", ["High", "Medium", "Low"], default=["High", "Medium", "Low"])
    min_relevance = st.slider("Min Relevance Score", 1, 10, 1)

    st.divider()

    if st.button("🔄 Refresh Feed", use_container_width=True):
        st.cache_data.clear()
        st.rerun()


# ─────────────────────────────────────────────
# UI Layout
# ─────────────────────────────────────────────
st.title("🏰 Blurred Citadel")
st.caption("Workforce and recruitment industry intelligence.")

news_tab, knowledge_tab = st.tabs(["📰 News", "🧠 Knowledge Base"])

with news_tab:
    try:
        with st.spinner("Fetching and analysing news..."):
            raw_articles = load_news(category, region)
    except NewsApiError as e:
        logger.error(f"❌ News fetch failed: {e}")
        raw_articles = None
        st.error("Failed to fetch news")

    if raw_articles is not None:
        articles = [ProcessedArticle.model_validate(raw) for raw in raw_articles]
        articles = [
            a for a in articles if a.impact in impact_filter and a.analysis.relevance_score >= min_relevance
        ]
        articles.sort(key=lambda a: a.analysis.relevance_score, reverse=True)

        if not articles:
            st.warning("⚠️ No news matching your filters.")
        else:
            st.subheader(f"{len(articles)} Stories · {CATEGORY_LABELS.get(category, category)} · "
                         f"{REGION_LABELS.get(region, region)}")

        for index, article in enumerate(articles):
            with st.container():
                col1, col2 = st.columns([3, 1])
                with col1:
                    st.markdown(f"#### {article.title}")
                    st.write(article.description)
                    st.caption(f"{article.source} · {article.published_at or ''}")
                with col2:
                    colour = IMPACT_COLOURS.get(article.impact, "#7f7f7f")
                    st.markdown(
                        f"<span class='impact-badge' style='background-color:{colour}'>Impact: {article.impact}</span>",
                        unsafe_allow_html=True,
                    )
                    st.metric("Relevance", f"{article.analysis.relevance_score}/10")
                    st.write(f"🏷️ `{article.sector}`")
                    if st.button("🔎 Details", key=f"details-{index}"):
                        show_article(article)
                st.divider()

with knowledge_tab:
    if services.store is None:
        st.warning("⚠️ Knowledge store is not configured. Set SUPABASE_URL and SUPABASE_KEY.")
    else:
        try:
            items = load_knowledge()
        except KnowledgeStoreError as e:
            logger.error(f"❌ Failed to load knowledge base: {e}")
            items = []
            st.error("Failed to load knowledge base")

        search_col, category_col = st.columns([3, 1])
        search = search_col.text_input("Search knowledge base...")
        kb_category = category_col.selectbox("Category", use_cases.list_categories(items), key="kb-category")
        filtered = use_cases.filter_items(items, search, kb_category)

        list_col, detail_col = st.columns([1, 2])
        with list_col:
            for item in filtered:
                if st.button(item.title, key=f"item-{item.id}", use_container_width=True):
                    st.session_state["selected_item"] = item.id
                if item.tags:
                    st.markdown(pills(item.tags, "tag-pill"), unsafe_allow_html=True)

        with detail_col:
            selected_id = st.session_state.get("selected_item")
            selected = next((item for item in items if item.id == selected_id), None)
            if selected is None:
                st.info("Select an item to view details")
            else:
                st.subheader(selected.title)
                st.caption(f"🏷️ {selected.category} · Last updated: {selected.last_updated or 'unknown'}")
                st.write(selected.content)
                if selected.tags:
                    st.markdown("**Tags**")
                    st.markdown(pills(selected.tags, "tag-pill"), unsafe_allow_html=True)

                st.markdown("**Connected Items**")
                linked = use_cases.connected_items(selected, items)
                if not linked:
                    st.caption("No connections yet.")
                for other in linked:
                    if st.button(f"{other.title} · {other.category}", key=f"linked-{selected.id}-{other.id}"):
                        st.session_state["selected_item"] = other.id
                        st.rerun()

                if st.button("🔗 Re-run connection detection", key=f"rebuild-{selected.id}"):
                    try:
                        connections = use_cases.rebuild_connections(services.store, selected.id)
                    except KnowledgeStoreError as e:
                        logger.error(f"❌ Connection detection failed for {selected.id}: {e}")
                        st.error("Failed to re-run connection detection")
                    else:
                        st.toast(f"Found {len(connections)} connections")
                        st.rerun()

        st.divider()

        # ── Add item ──────────────────────────
        with st.expander("➕ Add Knowledge Item"):
            with st.form("add-item", clear_on_submit=False):
                title = st.text_input("Title")
                content = st.text_area("Content", height=200)
                item_category = st.text_input("Category")
                tags = st.text_input("Tags (comma separated)")
                submitted = st.form_submit_button("Save")

            if submitted:
                try:
                    payload = KnowledgeItemCreate(
                        title=title, content=content, category=item_category, tags=tags.split(",")
                    )
                except ValidationError as e:
                    for error in e.errors():
                        field = ".".join(str(part) for part in error["loc"])
                        st.error(f"{field.capitalize()} is required" if error["type"] == "string_too_short"
                                 else f"{field}: {error['msg']}")
                else:
                    try:
                        item: KnowledgeItem = use_cases.create_knowledge_item(services.store, payload)
                        st.success(f"Saved '{item.title}' with {len(item.connections)} connections")
                    except KnowledgeStoreError as e:
                        logger.error(f"❌ Failed to save knowledge item: {e}")
                        st.error("Failed to save knowledge item")

        # ── Upload ────────────────────────────
        with st.expander("📤 Upload Documents"):
            uploads = st.file_uploader("Documents", type=["txt", "md", "pdf"], accept_multiple_files=True)
            if uploads and st.button("Upload", type="primary"):
                files = [(upload.name, upload.type, upload.getvalue()) for upload in uploads]
                try:
                    with st.spinner("Processing documents..."):
                        summary = asyncio.run(use_cases.ingest_documents(
                            services.store, services.analyst, files, services.settings.max_upload_bytes
                        ))
                except KnowledgeStoreError as e:
                    logger.error(f"❌ Document upload failed: {e}")
                    st.error("Failed to process documents")
                else:
                    for item in summary.items:
                        st.success(f"✅ {item.title}: {len(item.connections)} connections")
                    for rejection in summary.rejected:
                        st.error(f"❌ {rejection.filename}: {rejection.error}")
