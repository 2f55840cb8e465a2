"""
Workflow nodes for content generation

Every node receives the current state and returns only the fields it
changes; LangGraph merges the update into the state.
"""

import asyncio
import logging
from typing import Optional

from .agents import AgentInvoker
from .models import (
    AWAITING_THEME_SELECTION,
    COMPLETE,
    CONTENT_DRAFTING,
    CONTENT_EDITING,
    THEME_GENERATION,
    WorkflowState,
)
from .search import WhitepaperSearch, gather_evidence

logger = logging.getLogger(__name__)

WRITERS = [
    ("agent4a", "articles_count"),
    ("agent4b", "linkedin_posts_count"),
    ("agent4c", "social_posts_count"),
]

EDITORS = [
    ("agent5a", "article_output"),
    ("agent5b", "linkedin_output"),
    ("agent5c", "social_output"),
]


async def run_concurrently(invoker: AgentInvoker, agent_ids: list[str], state: WorkflowState) -> dict:
    """
    Invoke several agents against the same state snapshot.

    The first failure cancels the remaining agents and is re-raised on its
    own; nothing is merged unless every agent succeeds.
    """
    try:
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(invoker.invoke(agent_id, state)) for agent_id in agent_ids]
    except ExceptionGroup as eg:
        raise eg.exceptions[0] from None

    update = {}
    for task in tasks:
        update.update(task.result())
    return update


def theme_queries(state: WorkflowState) -> list[str]:
    brief = state.get("marketing_brief") or {}
    persona = brief.get("target_persona") or {}
    return [
        state.get("marketing_goals", ""),
        *brief.get("key_messages", [])[:2],
        *persona.get("pain_points", [])[:2],
        state.get("business_context", ""),
    ]


def research_queries(state: WorkflowState) -> list[str]:
    theme = state.get("selected_theme") or {}
    return [
        theme.get("title", ""),
        theme.get("description", ""),
        *theme.get("why_it_works", []),
        theme.get("detailed_description", ""),
    ]


async def create_brief(state: WorkflowState, invoker: AgentInvoker) -> dict:
    """Agent 1: turn the campaign inputs into a marketing brief"""
    logger.info("[Creating marketing brief...]")
    update = await invoker.invoke("agent1", state)
    return {**update, "current_step": THEME_GENERATION}


async def generate_themes(state: WorkflowState, invoker: AgentInvoker, searcher: Optional[WhitepaperSearch]) -> dict:
    """Agent 2: propose a new set of themes grounded in the whitepaper"""
    logger.info("[Generating themes (round %s)...]", state.get("regeneration_count", 0) + 1)

    evidence, history = await gather_evidence(
        searcher,
        state.get("selected_whitepaper_id"),
        theme_queries(state),
        agent_id="agent2",
    )
    update = await invoker.invoke("agent2", state, {"whitepaperEvidence": evidence})

    logger.info("✓ Generated %s theme(s)", len(update["generated_themes"]))
    return {
        **update,
        "search_history": [*state.get("search_history", []), *history],
        "current_step": AWAITING_THEME_SELECTION,
    }


def await_theme_selection(state: WorkflowState) -> dict:
    """Pause the workflow until the marketer picks or rejects a theme"""
    logger.info("[Waiting for theme selection...]")
    return {
        "selected_theme": None,
        "needs_human_input": True,
        "current_step": AWAITING_THEME_SELECTION,
    }


async def research_theme(state: WorkflowState, invoker: AgentInvoker, searcher: Optional[WhitepaperSearch]) -> dict:
    """Agent 3: build the research dossier for the selected theme"""
    logger.info("[Researching theme '%s'...]", (state.get("selected_theme") or {}).get("title", ""))

    evidence, history = await gather_evidence(
        searcher,
        state.get("selected_whitepaper_id"),
        research_queries(state),
        agent_id="agent3",
    )
    update = await invoker.invoke("agent3", state, {"whitepaperEvidence": evidence})

    return {
        **update,
        "search_history": [*state.get("search_history", []), *history],
        "current_step": CONTENT_DRAFTING,
    }


async def draft_content(state: WorkflowState, invoker: AgentInvoker) -> dict:
    """Agents 4a-4c: draft every requested content type concurrently"""
    agent_ids = [agent_id for agent_id, count_key in WRITERS if state.get(count_key, 0) > 0]
    logger.info("[Drafting content with %s writer(s)...]", len(agent_ids))

    update = await run_concurrently(invoker, agent_ids, state)
    return {**update, "current_step": CONTENT_EDITING}


async def edit_content(state: WorkflowState, invoker: AgentInvoker) -> dict:
    """Agents 5a-5c: edit every drafted content type concurrently"""
    agent_ids = [agent_id for agent_id, draft_key in EDITORS if state.get(draft_key)]
    logger.info("[Editing content with %s editor(s)...]", len(agent_ids))

    update = await run_concurrently(invoker, agent_ids, state)
    logger.info("✓ Content generation complete")
    return {
        **update,
        "current_step": COMPLETE,
        "is_complete": True,
        "needs_human_input": False,
    }
