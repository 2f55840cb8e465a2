"""
Prompt-config and campaign stores
"""

from .campaign_store import CampaignStore, InMemoryCampaignStore, SupabaseCampaignStore
from .prompt_store import InMemoryPromptStore, PromptStore, SupabasePromptStore, seed_default_prompts
from .supabase import SupabaseDB

__all__ = [
    "CampaignStore",
    "InMemoryCampaignStore",
    "SupabaseCampaignStore",
    "InMemoryPromptStore",
    "PromptStore",
    "SupabasePromptStore",
    "SupabaseDB",
    "seed_default_prompts",
]
