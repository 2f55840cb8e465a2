"""
Tests for campaign persistence
"""

from datetime import datetime, timedelta, timezone

import pytest

from content_brain.exceptions import StoreError
from content_brain.models import CampaignRecord, ContentItem
from content_brain.stores import InMemoryCampaignStore, SupabaseCampaignStore, SupabaseDB

from conftest import FakeSupabaseClient


def campaign_record(name: str = "Q3 AP automation", days_ago: int = 0) -> CampaignRecord:
    return CampaignRecord(
        campaign_name=name,
        whitepaper_id="wp-1",
        brief_data={"executive_summary": "Summary"},
        selected_theme={"id": "theme-1-1", "title": "Cost of delay"},
        generated_content={"article": None},
        items=[
            ContentItem(content_type="article", title="Headline", content="Body", metadata={"word_count": 1000}),
            ContentItem(content_type="social_post", title="Twitter Post", content="Short"),
        ],
        created_at=datetime(2025, 6, 30, tzinfo=timezone.utc) - timedelta(days=days_ago),
    )


@pytest.fixture(params=["memory", "supabase"])
def store(request):
    if request.param == "memory":
        return InMemoryCampaignStore()
    return SupabaseCampaignStore(SupabaseDB(client=FakeSupabaseClient()))


class TestCampaignStores:

    @pytest.mark.asyncio
    async def test_save_and_get(self, store):
        campaign_id = await store.save_campaign(campaign_record())
        saved = await store.get_campaign(campaign_id)
        assert saved.id == campaign_id
        assert saved.campaign_name == "Q3 AP automation"
        assert [item.content_type for item in saved.items] == ["article", "social_post"]

    @pytest.mark.asyncio
    async def test_unknown_id(self, store):
        assert await store.get_campaign("missing") is None

    @pytest.mark.asyncio
    async def test_list_newest_first_with_paging(self, store):
        for days_ago, name in enumerate(["Newest", "Middle", "Oldest"]):
            await store.save_campaign(campaign_record(name, days_ago))

        first_page, total = await store.list_campaigns(limit=2)
        second_page, _ = await store.list_campaigns(limit=2, offset=2)

        assert total == 3
        assert [c.campaign_name for c in first_page] == ["Newest", "Middle"]
        assert [c.campaign_name for c in second_page] == ["Oldest"]
        assert all(c.id for c in first_page)

    @pytest.mark.asyncio
    async def test_list_search_is_case_insensitive(self, store):
        await store.save_campaign(campaign_record("Q3 AP automation"))
        await store.save_campaign(campaign_record("Holiday promo"))

        campaigns, total = await store.list_campaigns(search="ap auto")

        assert total == 1
        assert campaigns[0].campaign_name == "Q3 AP automation"

    @pytest.mark.asyncio
    async def test_favorite_toggle(self, store):
        campaign_id = await store.save_campaign(campaign_record())

        assert (await store.set_favorite(campaign_id, True)).is_favorited is True
        assert (await store.get_campaign(campaign_id)).is_favorited is True
        assert (await store.set_favorite(campaign_id, False)).is_favorited is False
        assert await store.set_favorite("missing", True) is None

    @pytest.mark.asyncio
    async def test_delete(self, store):
        campaign_id = await store.save_campaign(campaign_record())

        assert await store.delete_campaign(campaign_id) is True
        assert await store.get_campaign(campaign_id) is None
        assert await store.delete_campaign(campaign_id) is False


class TestSupabaseCampaignStore:

    @pytest.mark.asyncio
    async def test_save_writes_campaign_then_items(self, supabase_client, supabase_db):
        campaign_id = await SupabaseCampaignStore(supabase_db).save_campaign(campaign_record())

        assert supabase_client.executed == [("insert", "content_generations"), ("insert", "content_items")]
        campaign_row = supabase_client.tables["content_generations"][0]
        assert campaign_row["campaign_name"] == "Q3 AP automation"
        assert "items" not in campaign_row
        items = supabase_client.tables["content_items"]
        assert {item["content_generation_id"] for item in items} == {campaign_id}
        assert [item["content_type"] for item in items] == ["article", "social_post"]

    @pytest.mark.asyncio
    async def test_unsaved_rows_are_hidden(self):
        client = FakeSupabaseClient({"content_generations": [
            {**campaign_record().model_dump(mode="json", exclude={"id", "items"}), "id": "7", "is_saved": False},
        ]})
        store = SupabaseCampaignStore(SupabaseDB(client=client))

        assert await store.get_campaign("7") is None
        assert await store.list_campaigns() == ([], 0)
        assert await store.delete_campaign("7") is False

    @pytest.mark.asyncio
    async def test_insert_failure_becomes_store_error(self):
        client = FakeSupabaseClient(failures={("insert", "content_generations")})
        with pytest.raises(StoreError):
            await SupabaseCampaignStore(SupabaseDB(client=client)).save_campaign(campaign_record())
