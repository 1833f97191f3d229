"""
Seeds an empty knowledge base with a handful of reference items so the dashboard has something to connect.
Items whose title already exists are skipped. Connections are detected for each new item as it is created.
Run it from the root of the project: `python scripts/seed_knowledge.py`.
"""

import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.adapters.knowledge_store import KnowledgeStore, KnowledgeStoreError
from src.core.config import load_settings
from src.core.entities import KnowledgeItemCreate
from src.core.use_cases import create_knowledge_item

from utils.logging_setup import get_logger
logger = get_logger(__name__, log_file="scripts.log")

SEED_ITEMS = [
    KnowledgeItemCreate(
        title="AI Impact on Technical Recruitment",
        content=(
            "Analysis of how AI is transforming technical recruitment processes and changing the way organizations "
            "identify and assess talent. Key areas include automated screening, predictive analytics for candidate "
            "success, and AI-driven interview processes."
        ),
        category="Technology",
        tags=["AI", "recruitment", "automation"],
    ),
    KnowledgeItemCreate(
        title="Remote Work Trends 2024",
        content=(
            "Comprehensive analysis of remote work adoption trends and their impact on workforce management. "
            "Includes data on productivity metrics, collaboration tools, and emerging challenges in virtual team "
            "management."
        ),
        category="Workforce Trends",
        tags=["remote work", "workforce", "trends"],
    ),
    KnowledgeItemCreate(
        title="MSP Market Evolution",
        content=(
            "Deep dive into the changing landscape of Managed Service Provider models. Explores new service delivery "
            "approaches, technology integration, and evolving client expectations in the MSP space."
        ),
        category="MSP",
        tags=["MSP", "service delivery", "market trends"],
    ),
    KnowledgeItemCreate(
        title="Skills Gap Analysis 2024",
        content=(
            "Detailed analysis of current skills gaps in the technology sector, including emerging technical "
            "requirements, training needs, and strategies for addressing skill shortages in the modern workforce."
        ),
        category="Skills",
        tags=["skills", "technology", "training"],
    ),
]


def seed(store: KnowledgeStore) -> int:
    existing = {item.title for item in store.list_items()}
    created = 0
    for payload in SEED_ITEMS:
        if payload.title in existing:
            logger.debug(f"⏭️  Skipping existing item: {payload.title}")
            continue
        item = create_knowledge_item(store, payload)
        logger.info(f"🌱 Seeded '{item.title}' ({len(item.connections)} connections)")
        created += 1
    return created


if __name__ == "__main__":
    store = KnowledgeStore.from_settings(load_settings())
    if store is None:
        logger.error("❌ Knowledge store not configured. Set SUPABASE_URL and SUPABASE_KEY.")
        sys.exit(1)
    try:
        count = seed(store)
    except KnowledgeStoreError as e:
        logger.error(f"❌ Seeding failed: {e}")
        sys.exit(1)
    logger.info(f"✅ Seed complete! Created {count} new items.")
