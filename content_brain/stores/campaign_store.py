"""
Campaign persistence for completed workflows

Only saved campaigns (is_saved) are listed, fetched, favorited or deleted.
"""

import logging
import uuid
from typing import Optional, Protocol

from ..exceptions import StoreError
from ..models import CampaignRecord
from .supabase import SupabaseDB

logger = logging.getLogger(__name__)

CAMPAIGNS_TABLE = "content_generations"
ITEMS_TABLE = "content_items"


class CampaignStore(Protocol):
    async def save_campaign(self, record: CampaignRecord) -> str: ...

    async def get_campaign(self, campaign_id: str) -> Optional[CampaignRecord]: ...

    async def list_campaigns(
        self, limit: int = 50, offset: int = 0, search: str = ""
    ) -> tuple[list[CampaignRecord], int]: ...

    async def set_favorite(self, campaign_id: str, is_favorited: bool) -> Optional[CampaignRecord]: ...

    async def delete_campaign(self, campaign_id: str) -> bool: ...


class InMemoryCampaignStore:
    """Process-local campaign store"""

    def __init__(self):
        self.campaigns: dict[str, CampaignRecord] = {}

    def _saved(self, campaign_id: str) -> Optional[CampaignRecord]:
        record = self.campaigns.get(campaign_id)
        return record if record and record.is_saved else None

    async def save_campaign(self, record: CampaignRecord) -> str:
        campaign_id = str(uuid.uuid4())
        self.campaigns[campaign_id] = record.model_copy(deep=True, update={"id": campaign_id})
        logger.info("✓ Saved campaign '%s' (%s) with %s item(s)", record.campaign_name, campaign_id, len(record.items))
        return campaign_id

    async def get_campaign(self, campaign_id: str) -> Optional[CampaignRecord]:
        record = self._saved(campaign_id)
        return record.model_copy(deep=True) if record else None

    async def list_campaigns(self, limit: int = 50, offset: int = 0, search: str = "") -> tuple[list[CampaignRecord], int]:
        """Saved campaigns, newest first, without their content items"""
        matches = [
            record for record in self.campaigns.values()
            if record.is_saved and search.lower() in record.campaign_name.lower()
        ]
        matches.sort(key=lambda record: record.created_at, reverse=True)
        page = [record.model_copy(deep=True, update={"items": []}) for record in matches[offset:offset + limit]]
        return page, len(matches)

    async def set_favorite(self, campaign_id: str, is_favorited: bool) -> Optional[CampaignRecord]:
        record = self._saved(campaign_id)
        if record is None:
            return None
        record.is_favorited = is_favorited
        return record.model_copy(deep=True)

    async def delete_campaign(self, campaign_id: str) -> bool:
        if self._saved(campaign_id) is None:
            return False
        del self.campaigns[campaign_id]
        logger.info("✓ Deleted campaign %s", campaign_id)
        return True


def campaign_from_row(row: dict, items: Optional[list[dict]] = None) -> CampaignRecord:
    return CampaignRecord.model_validate({**row, "id": str(row["id"]), "items": items or []})


class SupabaseCampaignStore:
    """Campaigns in content_generations, one content_items row per piece"""

    def __init__(self, db: Optional[SupabaseDB] = None):
        self.db = db or SupabaseDB()

    async def save_campaign(self, record: CampaignRecord) -> str:
        client = await self.db.connect()
        payload = record.model_dump(mode="json", exclude={"id", "items"})
        rows = await self.db.execute(client.table(CAMPAIGNS_TABLE).insert([payload]), "save campaign")
        if not rows or "id" not in rows[0]:
            raise StoreError("Failed to save campaign: no id returned")
        campaign_id = str(rows[0]["id"])

        if record.items:
            items = [
                {"content_generation_id": campaign_id, **item.model_dump(mode="json")}
                for item in record.items
            ]
            await self.db.execute(client.table(ITEMS_TABLE).insert(items), "save content items")

        logger.info("✓ Saved campaign '%s' (%s) with %s item(s)", record.campaign_name, campaign_id, len(record.items))
        return campaign_id

    async def get_campaign(self, campaign_id: str) -> Optional[CampaignRecord]:
        client = await self.db.connect()
        rows = await self.db.execute(
            client.table(CAMPAIGNS_TABLE)
            .select("*")
            .eq("id", campaign_id)
            .eq("is_saved", True)
            .limit(1),
            f"get campaign {campaign_id}",
        )
        if not rows:
            return None
        items = await self.db.execute(
            client.table(ITEMS_TABLE)
            .select("content_type,title,content,metadata")
            .eq("content_generation_id", campaign_id),
            f"get content items {campaign_id}",
        )
        return campaign_from_row(rows[0], items)

    async def list_campaigns(self, limit: int = 50, offset: int = 0, search: str = "") -> tuple[list[CampaignRecord], int]:
        client = await self.db.connect()
        query = (
            client.table(CAMPAIGNS_TABLE)
            .select("*", count="exact")
            .eq("is_saved", True)
        )
        if search:
            query = query.ilike("campaign_name", f"%{search}%")
        rows, total = await self.db.count(
            query.order("created_at", desc=True).range(offset, offset + limit - 1),
            "list campaigns",
        )
        return [campaign_from_row(row) for row in rows], total

    async def set_favorite(self, campaign_id: str, is_favorited: bool) -> Optional[CampaignRecord]:
        client = await self.db.connect()
        rows = await self.db.execute(
            client.table(CAMPAIGNS_TABLE)
            .update({"is_favorited": is_favorited})
            .eq("id", campaign_id)
            .eq("is_saved", True),
            f"favorite campaign {campaign_id}",
        )
        return campaign_from_row(rows[0]) if rows else None

    async def delete_campaign(self, campaign_id: str) -> bool:
        """Delete a saved campaign; its content items go with it (ON DELETE CASCADE)"""
        client = await self.db.connect()
        rows = await self.db.execute(
            client.table(CAMPAIGNS_TABLE)
            .delete()
            .eq("id", campaign_id)
            .eq("is_saved", True),
            f"delete campaign {campaign_id}",
        )
        if rows:
            logger.info("✓ Deleted campaign %s", campaign_id)
        return bool(rows)
