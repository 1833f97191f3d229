"""
This module defines the KnowledgeStore class, the adapter over the three Supabase tables that hold the knowledge base:

- knowledge_items: id, title, content, category, date_added, last_updated
- knowledge_tags: knowledge_item_id, tag
- knowledge_connections: source_item_id, target_item_id, connection_strength

Items are returned with their tags and outgoing connections joined in. Connections for a source item are always
replaced as a whole, never patched, because detection recomputes them from scratch.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

import httpx
from postgrest.exceptions import APIError as PostgrestAPIError
from supabase import Client, create_client

from src.core.config import Settings
from src.core.entities import Connection, KnowledgeItem, KnowledgeItemCreate

from utils.logging_setup import get_logger
logger = get_logger(__name__, log_file="adapters.log")

ITEMS_TABLE = "knowledge_items"
TAGS_TABLE = "knowledge_tags"
CONNECTIONS_TABLE = "knowledge_connections"

BackendErrors = (PostgrestAPIError, httpx.HTTPError)


class KnowledgeStoreError(Exception):
    """The data backend rejected or failed a request."""


class ItemNotFoundError(KnowledgeStoreError):
    def __init__(self, item_id: str):
        super().__init__(f"Knowledge item '{item_id}' not found")
        self.item_id = item_id


def build_supabase_client(settings: Settings) -> Optional[Client]:
    if not settings.store_configured:
        logger.warning("⚠️ SUPABASE_URL / SUPABASE_KEY not set, knowledge base disabled")
        return None
    return create_client(settings.supabase_url, settings.supabase_key)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class KnowledgeStore:
    def __init__(self, client: Client):
        self.client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["KnowledgeStore"]:
        client = build_supabase_client(settings)
        return cls(client) if client is not None else None

    def _rows(self, query, action: str) -> List[Dict]:
        try:
            response = query.execute()
        except BackendErrors as e:
            logger.error(f"❌ Error {action}: {e}")
            raise KnowledgeStoreError(f"Error {action}: {e}") from e
        return response.data or []

    # ── Reads ─────────────────────────────────
    def list_items(self) -> List[KnowledgeItem]:
        items = self._rows(self.client.table(ITEMS_TABLE).select("*"), "fetching items")
        tags = self._rows(self.client.table(TAGS_TABLE).select("*"), "fetching tags")
        connections = self._rows(self.client.table(CONNECTIONS_TABLE).select("*"), "fetching connections")

        tags_by_item: Dict[str, List[str]] = {}
        for row in tags:
            tags_by_item.setdefault(str(row["knowledge_item_id"]), []).append(row["tag"])

        connections_by_item: Dict[str, List[Connection]] = {}
        for row in connections:
            connection = Connection.model_validate(row)
            connections_by_item.setdefault(connection.source_item_id, []).append(connection)

        logger.debug(f"list_items: {len(items)} items, {len(tags)} tags, {len(connections)} connections")
        return [
            KnowledgeItem.model_validate({
                **row,
                "tags": tags_by_item.get(str(row["id"]), []),
                "connections": connections_by_item.get(str(row["id"]), []),
            })
            for row in items
        ]

    def get_item(self, item_id: str) -> KnowledgeItem:
        rows = self._rows(self.client.table(ITEMS_TABLE).select("*").eq("id", item_id), f"fetching item {item_id}")
        if not rows:
            raise ItemNotFoundError(item_id)

        tags = self._rows(
            self.client.table(TAGS_TABLE).select("*").eq("knowledge_item_id", item_id), f"fetching tags for {item_id}"
        )
        connections = self._rows(
            self.client.table(CONNECTIONS_TABLE).select("*").eq("source_item_id", item_id),
            f"fetching connections for {item_id}",
        )
        return KnowledgeItem.model_validate({
            **rows[0],
            "tags": [row["tag"] for row in tags],
            "connections": connections,
        })

    def list_connections(self) -> List[Connection]:
        rows = self._rows(self.client.table(CONNECTIONS_TABLE).select("*"), "fetching connections")
        return [Connection.model_validate(row) for row in rows]

    # ── Writes ────────────────────────────────
    def create_item(self, payload: KnowledgeItemCreate) -> KnowledgeItem:
        """Insert the item, then its tags. A failed tag insert is logged and the item is kept without tags."""
        timestamp = _now()
        rows = self._rows(
            self.client.table(ITEMS_TABLE).insert([{
                "title": payload.title,
                "content": payload.content,
                "category": payload.category,
                "date_added": timestamp,
                "last_updated": timestamp,
            }]),
            "creating item",
        )
        if not rows:
            raise KnowledgeStoreError("Error creating item: backend returned no row")
        item = KnowledgeItem.model_validate(rows[0])
        logger.info(f"✨ Created knowledge item {item.id}: '{item.title}'")

        if payload.tags:
            try:
                self._rows(
                    self.client.table(TAGS_TABLE).insert(
                        [{"knowledge_item_id": item.id, "tag": tag} for tag in payload.tags]
                    ),
                    "creating tags",
                )
                item.tags = list(payload.tags)
            except KnowledgeStoreError:
                logger.warning(f"⚠️ Item {item.id} stored without tags")

        return item

    def replace_connections(self, source_item_id: str, connections: List[Connection]) -> List[Connection]:
        """Drop every stored connection from `source_item_id` and write `connections` in their place."""
        self._rows(
            self.client.table(CONNECTIONS_TABLE).delete().eq("source_item_id", source_item_id),
            f"clearing connections for {source_item_id}",
        )
        if connections:
            self._rows(
                self.client.table(CONNECTIONS_TABLE).insert([c.model_dump() for c in connections]),
                f"creating connections for {source_item_id}",
            )
        self._rows(
            self.client.table(ITEMS_TABLE).update({"last_updated": _now()}).eq("id", source_item_id),
            f"touching item {source_item_id}",
        )
        logger.info(f"🔗 Stored {len(connections)} connections for item {source_item_id}")
        return connections
