"""
Content Generator using LangChain and LangGraph

Main orchestration class wiring prompt store, model provider, whitepaper
search and campaign store into the workflow controller.
"""

import logging
from typing import Optional, Union

from . import config
from .agents import AgentInvoker, ModelProvider
from .controller import WorkflowController
from .models import AgentPromptConfig, CampaignRecord, WorkflowInput, WorkflowState
from .output import build_campaign_record, build_final_output
from .search import ChromaWhitepaperSearch, WhitepaperSearch
from .stores import (
    CampaignStore,
    InMemoryCampaignStore,
    InMemoryPromptStore,
    PromptStore,
    SupabaseCampaignStore,
    SupabasePromptStore,
    seed_default_prompts,
)
from .utils.llm_utils import LangChainModelProvider
from .utils.workflow_visualizer import draw_workflow_graphs

logger = logging.getLogger(__name__)


def supabase_configured() -> bool:
    return bool(config.SUPABASE_URL and config.SUPABASE_SERVICE_ROLE_KEY)


def default_prompt_store() -> PromptStore:
    if supabase_configured():
        return SupabasePromptStore()
    logger.info("Supabase not configured, using in-memory prompt store with default prompts")
    return InMemoryPromptStore()


def default_campaign_store() -> CampaignStore:
    return SupabaseCampaignStore() if supabase_configured() else InMemoryCampaignStore()


def default_searcher() -> Optional[WhitepaperSearch]:
    if config.CHROMA_HOST or config.CHROMA_PATH:
        return ChromaWhitepaperSearch()
    logger.info("Chroma not configured, whitepaper search disabled")
    return None


class ContentGenerator:
    """Main content generator orchestrator"""

    def __init__(
        self,
        prompt_store: Optional[PromptStore] = None,
        provider: Optional[ModelProvider] = None,
        searcher: Optional[WhitepaperSearch] = None,
        campaign_store: Optional[CampaignStore] = None,
        use_search: bool = True,
    ):
        self.prompt_store = prompt_store or default_prompt_store()
        self.provider = provider or LangChainModelProvider()
        self.searcher = searcher if searcher is not None or not use_search else default_searcher()
        self.campaign_store = campaign_store or default_campaign_store()

        self.invoker = AgentInvoker(self.prompt_store, self.provider)
        self.controller = WorkflowController(self.invoker, self.searcher)

    async def seed_prompts(self) -> list[AgentPromptConfig]:
        """Create default prompt configs for agents the prompt store lacks"""
        created = await seed_default_prompts(self.prompt_store)
        if created:
            logger.info("✓ Seeded default prompts for %s", ", ".join(c.agent_id for c in created))
        return created

    async def start(self, payload: Union[dict, WorkflowInput]) -> WorkflowState:
        return await self.controller.start(payload)

    async def resume_planning(self, state: WorkflowState) -> WorkflowState:
        return await self.controller.resume_planning(state)

    async def select_theme(self, state: WorkflowState, theme_id: str) -> WorkflowState:
        return await self.controller.select_theme(state, theme_id)

    async def regenerate_themes(self, state: WorkflowState) -> WorkflowState:
        return await self.controller.regenerate_themes(state)

    async def generate_content(self, state: WorkflowState) -> WorkflowState:
        return await self.controller.generate_content(state)

    async def continue_with_selected_theme(self, state: WorkflowState, theme_id: str) -> WorkflowState:
        return await self.controller.continue_with_selected_theme(state, theme_id)

    def final_output(self, state: WorkflowState, started_at: Optional[float] = None) -> dict:
        return build_final_output(state, started_at)

    async def save_campaign(
        self,
        campaign_name: str,
        final_output: dict,
        whitepaper_id: Optional[str] = None,
        brief_data: Optional[dict] = None,
        selected_theme: Optional[dict] = None,
    ) -> tuple[str, CampaignRecord]:
        """
        Persist a finished campaign and its content items

        Returns:
            Tuple of (campaign id, saved record)
        """
        record = build_campaign_record(campaign_name, final_output, whitepaper_id, brief_data, selected_theme)
        campaign_id = await self.campaign_store.save_campaign(record)
        return campaign_id, record

    async def get_campaign(self, campaign_id: str) -> Optional[CampaignRecord]:
        return await self.campaign_store.get_campaign(campaign_id)

    async def list_campaigns(self, limit: int = 50, offset: int = 0, search: str = "") -> tuple[list[CampaignRecord], int]:
        return await self.campaign_store.list_campaigns(limit=limit, offset=offset, search=search)

    async def set_favorite(self, campaign_id: str, is_favorited: bool) -> Optional[CampaignRecord]:
        return await self.campaign_store.set_favorite(campaign_id, is_favorited)

    async def delete_campaign(self, campaign_id: str) -> bool:
        return await self.campaign_store.delete_campaign(campaign_id)

    def draw_workflow(self, output_dir: str = "."):
        """
        Draw and save the workflow graph visualizations

        Args:
            output_dir: Directory where the graph images will be saved
        """
        paths = draw_workflow_graphs(output_dir, self.controller)
        if paths:
            for path in paths:
                logger.info("✓ Workflow graph saved to: %s", path)
        return paths
