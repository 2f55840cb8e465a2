"""
LangGraph workflow builders for content generation

The workflow is split at the human-in-the-loop pause into three graphs:
planning (brief and themes), research (selected theme) and content
(drafting and editing). Each graph starts at the node matching the
state's current_step, so a failed phase can be retried on its own.
"""

from typing import Optional

from langgraph.graph import StateGraph, END

from .agents import AgentInvoker
from .models import (
    CONTENT_DRAFTING,
    CONTENT_EDITING,
    RESEARCH,
    THEME_GENERATION,
    WorkflowState,
)
from .nodes import (
    await_theme_selection,
    create_brief,
    draft_content,
    edit_content,
    generate_themes,
    research_theme,
)
from .search import WhitepaperSearch


def build_planning_graph(invoker: AgentInvoker, searcher: Optional[WhitepaperSearch] = None):
    """
    Build and compile the planning graph: brief -> themes -> pause

    Args:
        invoker: Agent invoker used by the nodes
        searcher: Whitepaper search backend (optional)

    Returns:
        Compiled workflow graph
    """
    async def brief_creation(state: WorkflowState) -> dict:
        return await create_brief(state, invoker)

    async def theme_generation(state: WorkflowState) -> dict:
        return await generate_themes(state, invoker, searcher)

    workflow = StateGraph(WorkflowState)

    workflow.add_node("brief_creation", brief_creation)
    workflow.add_node("theme_generation", theme_generation)
    workflow.add_node("await_theme_selection", await_theme_selection)

    # Regeneration re-enters at theme generation with the existing brief
    workflow.set_conditional_entry_point(
        lambda state: "theme_generation" if state.get("current_step") == THEME_GENERATION else "brief_creation",
        {
            "brief_creation": "brief_creation",
            "theme_generation": "theme_generation"
        }
    )

    workflow.add_edge("brief_creation", "theme_generation")
    workflow.add_edge("theme_generation", "await_theme_selection")
    workflow.add_edge("await_theme_selection", END)

    return workflow.compile()


def build_research_graph(invoker: AgentInvoker, searcher: Optional[WhitepaperSearch] = None):
    """Build and compile the research graph run after a theme is selected"""
    async def research(state: WorkflowState) -> dict:
        return await research_theme(state, invoker, searcher)

    workflow = StateGraph(WorkflowState)
    workflow.add_node("research", research)
    workflow.set_entry_point("research")
    workflow.add_edge("research", END)

    return workflow.compile()


def build_content_graph(invoker: AgentInvoker, searcher: Optional[WhitepaperSearch] = None):
    """
    Build and compile the content graph: research -> drafting -> editing

    Entry is routed by current_step so generation resumes from research,
    drafting or editing.
    """
    async def research(state: WorkflowState) -> dict:
        return await research_theme(state, invoker, searcher)

    async def content_drafting(state: WorkflowState) -> dict:
        return await draft_content(state, invoker)

    async def content_editing(state: WorkflowState) -> dict:
        return await edit_content(state, invoker)

    workflow = StateGraph(WorkflowState)

    workflow.add_node("research", research)
    workflow.add_node("content_drafting", content_drafting)
    workflow.add_node("content_editing", content_editing)

    workflow.set_conditional_entry_point(
        lambda state: state.get("current_step", RESEARCH),
        {
            RESEARCH: "research",
            CONTENT_DRAFTING: "content_drafting",
            CONTENT_EDITING: "content_editing"
        }
    )

    workflow.add_edge("research", "content_drafting")
    workflow.add_edge("content_drafting", "content_editing")
    workflow.add_edge("content_editing", END)

    return workflow.compile()
