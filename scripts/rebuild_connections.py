"""
This script recomputes the connections of every knowledge item (or of the ids given on the command line).
Existing connections of each processed item are replaced, so it is safe to run repeatedly, e.g. after bulk imports
or after editing items directly in the database.
Run it from the root of the project: `python scripts/rebuild_connections.py [ITEM_ID ...]` or `PYTHONPATH=. python scripts/rebuild_connections.py`.
"""

import argparse
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.adapters.knowledge_store import ItemNotFoundError, KnowledgeStore, KnowledgeStoreError
from src.core.config import load_settings
from src.core.use_cases import rebuild_all_connections, rebuild_connections

from utils.logging_setup import get_logger
logger = get_logger(__name__, log_file="scripts.log")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Recompute knowledge item connections.")
    parser.add_argument("item_ids", nargs="*", help="Only rebuild these items (default: all)")
    args = parser.parse_args(argv)

    store = KnowledgeStore.from_settings(load_settings())
    if store is None:
        logger.error("❌ Knowledge store not configured. Set SUPABASE_URL and SUPABASE_KEY.")
        return 1

    try:
        if not args.item_ids:
            counts = rebuild_all_connections(store)
            logger.info(f"✅ Rebuilt {sum(counts.values())} connections across {len(counts)} items")
            return 0

        items = store.list_items()
        for item_id in args.item_ids:
            try:
                connections = rebuild_connections(store, item_id, pool=items)
                logger.info(f"✅ {item_id}: {len(connections)} connections")
            except ItemNotFoundError as e:
                logger.error(f"❌ {e}")
    except KnowledgeStoreError as e:
        logger.error(f"❌ Rebuild failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
