"""
Tests for the HTTP API
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

import server
from content_brain.content_generator import ContentGenerator
from content_brain.models import MarketingBrief, ResearchDossier, ThemesOutput
from content_brain.prompts import DEFAULT_AGENT_PROMPTS
from content_brain.stores import InMemoryCampaignStore, InMemoryPromptStore

from conftest import CAMPAIGN_INPUT, FakeModelProvider


@pytest.fixture
def provider():
    return FakeModelProvider()


@pytest.fixture
def generator(provider):
    return ContentGenerator(
        prompt_store=InMemoryPromptStore(),
        provider=provider,
        campaign_store=InMemoryCampaignStore(),
        use_search=False,
    )


@pytest.fixture
def client(generator):
    server.app.dependency_overrides[server.get_generator] = lambda: generator
    yield TestClient(server.app)
    server.app.dependency_overrides.clear()


def start(client) -> dict:
    response = client.post("/api/generate-themes", json=CAMPAIGN_INPUT)
    assert response.status_code == 200
    return response.json()


class TestHealth:

    def test_root(self, client):
        assert client.get("/").json()["status"] == "running"

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}


class TestThemeRoutes:

    def test_start(self, client):
        body = start(client)
        assert body["success"] is True
        assert len(body["generatedThemes"]) == 3
        assert body["workflowState"] == {
            "currentStep": "awaiting_theme_selection",
            "needsHumanInput": True,
            "isComplete": False,
        }
        assert body["currentState"]["businessContext"] == CAMPAIGN_INPUT["businessContext"]
        assert body["generationMetadata"]["agentsUsed"] == ["brief-creator", "theme-generator"]

    def test_start_validation_error(self, client):
        response = client.post("/api/generate-themes", json={**CAMPAIGN_INPUT, "targetAudience": " "})
        assert response.status_code == 400
        assert response.json()["errorType"] == "ValidationError"

    def test_select_theme(self, client):
        body = start(client)
        theme = body["generatedThemes"][0]

        response = client.put("/api/generate-themes", json={
            "action": "select_theme",
            "currentState": body["currentState"],
            "selectedThemeId": theme["id"],
        })

        assert response.status_code == 200
        result = response.json()
        assert result["message"] == f'Theme "{theme["title"]}" selected successfully'
        assert result["workflowState"]["currentStep"] == "content_drafting"
        assert result["currentState"]["researchDossier"]["research_summary"]

    def test_unknown_theme_is_404_with_state(self, client):
        body = start(client)
        response = client.put("/api/generate-themes", json={
            "action": "select_theme",
            "currentState": body["currentState"],
            "selectedThemeId": "missing",
        })
        assert response.status_code == 404
        assert response.json()["currentState"]["currentStep"] == "awaiting_theme_selection"

    def test_select_requires_theme_id(self, client):
        body = start(client)
        response = client.put("/api/generate-themes", json={"action": "select_theme", "currentState": body["currentState"]})
        assert response.status_code == 400

    def test_regenerate(self, client):
        body = start(client)
        response = client.put("/api/generate-themes", json={
            "action": "regenerate_themes",
            "currentState": body["currentState"],
        })
        result = response.json()
        assert result["generationMetadata"]["regenerationCount"] == 1
        assert result["currentState"]["previousThemes"] == [body["generatedThemes"]]

    def test_resume_planning_after_theme_failure(self, client, provider):
        themes = provider.responses[ThemesOutput]
        provider.responses[ThemesOutput] = ConnectionError("reset by peer")

        failed = client.post("/api/generate-themes", json=CAMPAIGN_INPUT)
        assert failed.status_code == 502
        current_state = failed.json()["currentState"]
        assert current_state["currentStep"] == "theme_generation"

        provider.responses[ThemesOutput] = themes
        response = client.put("/api/generate-themes", json={
            "action": "resume_planning",
            "currentState": current_state,
        })

        assert response.status_code == 200
        result = response.json()
        assert len(result["generatedThemes"]) == 3
        assert result["workflowState"]["currentStep"] == "awaiting_theme_selection"
        assert result["currentState"]["regenerationCount"] == 0
        assert provider.schemas_called().count(MarketingBrief) == 1

    def test_invalid_action(self, client):
        body = start(client)
        response = client.put("/api/generate-themes", json={"action": "publish", "currentState": body["currentState"]})
        assert response.status_code == 400


class TestContentRoutes:

    def test_generate_content_in_one_call(self, client):
        body = start(client)
        response = client.post("/api/generate-content", json={
            "currentState": body["currentState"],
            "selectedThemeId": body["generatedThemes"][2]["id"],
        })

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["workflow_state"]["isComplete"] is True
        assert len(data["social_posts"]["posts"]) == 3
        assert data["generation_metadata"]["editing_completed"] is True

    def test_agent_failure_is_502_with_resumable_state(self, client, provider):
        body = start(client)
        provider.responses[ResearchDossier] = RuntimeError("overloaded")

        response = client.post("/api/generate-content", json={
            "currentState": body["currentState"],
            "selectedThemeId": body["generatedThemes"][0]["id"],
        })

        assert response.status_code == 502
        error = response.json()
        assert error["errorType"] == "AgentInvocationFailed"
        assert error["currentState"]["currentStep"] == "research"
        assert error["currentState"]["selectedTheme"]["id"] == body["generatedThemes"][0]["id"]

    def test_status(self, client):
        agents = client.get("/api/generate-content").json()["agents"]
        assert len(agents) == 9


class TestAgentPromptRoutes:

    def test_list_and_get(self, client):
        assert len(client.get("/api/agent-prompts").json()) == 9
        assert client.get("/api/agent-prompts", params={"agentId": "agent3"}).json()["agent_name"] == "Deep Researcher"
        assert client.get("/api/agent-prompts", params={"agentId": "nope"}).status_code == 404

    def test_update_bumps_version(self, client):
        response = client.put("/api/agent-prompts", json={"agent_id": "agent1", "system_prompt": "Shorter."})
        assert response.json()["data"]["version"] == 2
        assert response.json()["data"]["system_prompt"] == "Shorter."

    def test_create(self, client):
        response = client.post("/api/agent-prompts", json={
            "agentId": "agent6",
            "agentName": "Email Writer",
            "systemPrompt": "Write emails.",
        })
        assert response.json()["data"]["agent_id"] == "agent6"

    def test_delete_deactivates(self, client):
        assert client.delete("/api/agent-prompts", params={"agentId": "agent2"}).status_code == 200
        assert client.get("/api/agent-prompts", params={"agentId": "agent2"}).status_code == 404


class TestCampaignRoutes:

    def test_save_and_fetch(self, client):
        body = start(client)
        content = client.post("/api/generate-content", json={
            "currentState": body["currentState"],
            "selectedThemeId": body["generatedThemes"][0]["id"],
        }).json()["data"]

        saved = client.post("/api/content-generations/save", json={
            "campaignName": "Q3 launch",
            "whitepaperId": "wp-1",
            "finalResults": content,
        }).json()

        assert saved["itemsCount"] == 6
        campaign = client.get(f"/api/content-generations/{saved['id']}").json()
        assert campaign["campaign_name"] == "Q3 launch"
        assert len(campaign["items"]) == 6

    def test_missing_campaign(self, client):
        assert client.get("/api/content-generations/unknown").status_code == 404

    def test_list_favorite_and_delete(self, client):
        ids = [
            client.post("/api/content-generations/save", json={
                "campaignName": name,
                "finalResults": {"article": None, "linkedin_posts": None, "social_posts": None},
            }).json()["id"]
            for name in ["Spring launch", "Summer launch", "Webinar follow-up"]
        ]

        listing = client.get("/api/content-generations", params={"search": "launch", "limit": 1}).json()
        assert listing["total"] == 2
        assert listing["limit"] == 1
        assert len(listing["campaigns"]) == 1
        assert "items" not in listing["campaigns"][0]

        favorite = client.post(f"/api/content-generations/{ids[0]}/favorite", json={"isFavorited": True})
        assert favorite.json() == {"success": True, "isFavorited": True}
        assert client.get(f"/api/content-generations/{ids[0]}").json()["is_favorited"] is True

        assert client.delete(f"/api/content-generations/{ids[1]}").json() == {"success": True}
        assert client.get("/api/content-generations").json()["total"] == 2

    def test_missing_campaign_actions(self, client):
        assert client.delete("/api/content-generations/unknown").status_code == 404
        assert client.post("/api/content-generations/unknown/favorite", json={"isFavorited": True}).status_code == 404

    def test_list_rejects_bad_paging(self, client):
        assert client.get("/api/content-generations", params={"limit": 0}).status_code == 400


class TestStartup:

    def test_seeds_missing_prompts(self, monkeypatch, provider):
        prompt_store = InMemoryPromptStore(seed_defaults=False)
        generator = ContentGenerator(
            prompt_store=prompt_store,
            provider=provider,
            campaign_store=InMemoryCampaignStore(),
            use_search=False,
        )
        monkeypatch.setattr(server.config, "SEED_DEFAULT_PROMPTS", True)
        monkeypatch.setattr(server, "get_generator", lambda: generator)

        with TestClient(server.app):
            pass

        configs = asyncio.run(prompt_store.list_active_configs())
        assert sorted(c.agent_id for c in configs) == sorted(p["agent_id"] for p in DEFAULT_AGENT_PROMPTS)

    def test_seeding_can_be_disabled(self, monkeypatch, provider):
        prompt_store = InMemoryPromptStore(seed_defaults=False)
        generator = ContentGenerator(
            prompt_store=prompt_store,
            provider=provider,
            campaign_store=InMemoryCampaignStore(),
            use_search=False,
        )
        monkeypatch.setattr(server.config, "SEED_DEFAULT_PROMPTS", False)
        monkeypatch.setattr(server, "get_generator", lambda: generator)

        with TestClient(server.app):
            pass

        assert asyncio.run(prompt_store.list_active_configs()) == []
