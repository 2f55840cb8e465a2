"""
Workflow controller: drives the content workflow across the theme pause

The controller is stateless. Every operation takes the full workflow state
produced by the previous one and returns the next full state; on failure
the raised error carries the last state in which every step was fully
merged.
"""

import logging
from typing import Optional, Union

from pydantic import ValidationError as PydanticValidationError

from .agents import AgentInvoker
from .exceptions import ContentBrainError, ThemeNotFound, ValidationError
from .models import (
    AWAITING_THEME_SELECTION,
    BRIEF_CREATION,
    CONTENT_DRAFTING,
    CONTENT_EDITING,
    RESEARCH,
    THEME_GENERATION,
    WORKFLOW_STEPS,
    WorkflowInput,
    WorkflowState,
    create_initial_state,
)
from .search import WhitepaperSearch
from .workflow import build_content_graph, build_planning_graph, build_research_graph

logger = logging.getLogger(__name__)

RESUMABLE_STEPS = (RESEARCH, CONTENT_DRAFTING, CONTENT_EDITING)
PLANNING_STEPS = (BRIEF_CREATION, THEME_GENERATION)


def input_errors(error: PydanticValidationError) -> list[dict]:
    return [
        {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
        for err in error.errors()
    ]


def validate_input(payload: Union[dict, WorkflowInput]) -> WorkflowInput:
    """Validate campaign inputs (camelCase or snake_case keys)"""
    if isinstance(payload, WorkflowInput):
        return payload
    try:
        return WorkflowInput.model_validate(payload)
    except PydanticValidationError as e:
        errors = input_errors(e)
        raise ValidationError(
            "Invalid workflow input: " + "; ".join(f"{err['field']}: {err['message']}" for err in errors),
            errors=errors,
        ) from e


class WorkflowController:
    """Runs the planning, research and content graphs over a workflow state"""

    def __init__(self, invoker: AgentInvoker, searcher: Optional[WhitepaperSearch] = None):
        self.invoker = invoker
        self.searcher = searcher
        self.planning_graph = build_planning_graph(invoker, searcher)
        self.research_graph = build_research_graph(invoker, searcher)
        self.content_graph = build_content_graph(invoker, searcher)

    async def _run(self, graph, state: WorkflowState) -> WorkflowState:
        """Stream a graph run, keeping the last fully merged state for errors"""
        last_state = dict(state)
        try:
            async for values in graph.astream(state, stream_mode="values"):
                last_state = dict(values)
        except ContentBrainError as e:
            e.state = last_state
            logger.error("✗ Workflow failed at %s: %s", last_state.get("current_step"), e.message)
            raise
        return last_state

    @staticmethod
    def check_state(state: WorkflowState) -> WorkflowState:
        """Re-validate a state handed back by a client"""
        state = dict(state)
        try:
            workflow_input = WorkflowInput.model_validate(state)
        except PydanticValidationError as e:
            raise ValidationError("Invalid workflow state", errors=input_errors(e), state=state) from e
        if state.get("current_step") not in WORKFLOW_STEPS:
            raise ValidationError(f"Unknown workflow step: {state.get('current_step')!r}", state=state)
        state.update(workflow_input.model_dump())
        return state

    @staticmethod
    def require_pause(state: WorkflowState, action: str):
        if state.get("current_step") != AWAITING_THEME_SELECTION:
            raise ValidationError(
                f"Cannot {action} at step '{state.get('current_step')}'; "
                f"the workflow must be at '{AWAITING_THEME_SELECTION}'",
                state=state,
            )

    async def start(self, payload: Union[dict, WorkflowInput]) -> WorkflowState:
        """
        Start a new workflow: create the brief and the first set of themes

        Args:
            payload: Campaign inputs

        Returns:
            State paused at awaiting_theme_selection
        """
        workflow_input = validate_input(payload)
        logger.info("[Starting content workflow...]")
        return await self._run(self.planning_graph, create_initial_state(workflow_input))

    async def resume_planning(self, state: WorkflowState) -> WorkflowState:
        """
        Retry a planning run that failed before the theme pause

        A state stopped at theme_generation keeps its brief and only reruns
        theme generation; one stopped at brief_creation reruns both. The
        regeneration counter and previous themes are left as they are.
        """
        state = self.check_state(state)
        if state.get("current_step") not in PLANNING_STEPS:
            raise ValidationError(
                f"Cannot resume planning at step '{state.get('current_step')}'; "
                f"expected one of {', '.join(PLANNING_STEPS)}",
                state=state,
            )
        if state.get("current_step") == THEME_GENERATION and not state.get("marketing_brief"):
            raise ValidationError("No marketing brief to generate themes from", state=state)

        logger.info("[Resuming planning at %s...]", state.get("current_step"))
        return await self._run(self.planning_graph, state)

    async def select_theme(self, state: WorkflowState, theme_id: str) -> WorkflowState:
        """Select one of the generated themes and research it"""
        state = self.check_state(state)
        self.require_pause(state, "select a theme")

        theme = next((t for t in state.get("generated_themes") or [] if t.get("id") == theme_id), None)
        if theme is None:
            raise ThemeNotFound(theme_id, state=state)

        logger.info("✓ Selected theme '%s'", theme.get("title"))
        return await self._run(self.research_graph, {
            **state,
            "selected_theme": theme,
            "needs_human_input": False,
            "current_step": RESEARCH,
        })

    async def regenerate_themes(self, state: WorkflowState) -> WorkflowState:
        """Reject the current themes and generate a new set that avoids them"""
        state = self.check_state(state)
        self.require_pause(state, "regenerate themes")

        regeneration_count = state.get("regeneration_count", 0) + 1
        logger.info("[Regenerating themes (attempt %s)...]", regeneration_count)
        try:
            return await self._run(self.planning_graph, {
                **state,
                "previous_themes": [*state.get("previous_themes", []), state.get("generated_themes") or []],
                "regeneration_count": regeneration_count,
                "selected_theme": None,
                "needs_human_input": False,
                "current_step": THEME_GENERATION,
            })
        except ContentBrainError as e:
            # Nothing merged; the caller can retry from the same pause
            e.state = state
            raise

    async def generate_content(self, state: WorkflowState) -> WorkflowState:
        """Resume from research, drafting or editing and run to completion"""
        state = self.check_state(state)
        if state.get("current_step") not in RESUMABLE_STEPS:
            raise ValidationError(
                f"Cannot generate content at step '{state.get('current_step')}'; "
                f"expected one of {', '.join(RESUMABLE_STEPS)}",
                state=state,
            )
        if not state.get("selected_theme"):
            raise ValidationError("No theme selected", state=state)

        return await self._run(self.content_graph, state)

    async def continue_with_selected_theme(self, state: WorkflowState, theme_id: str) -> WorkflowState:
        """Select a theme and generate all content in one call"""
        state = await self.select_theme(state, theme_id)
        return await self.generate_content(state)
