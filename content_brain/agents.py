"""
Agent invocation: one prompt-config driven model call per workflow step

Each agent is described by an AgentSpec (output schema, the state key it
writes, how its template variables are built from the state). The
AgentInvoker resolves the active prompt config, renders it, calls the
model provider and validates the result before it can reach the state.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

from langchain_core.exceptions import OutputParserException
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .exceptions import (
    AgentInvocationFailed,
    ConfigNotFound,
    ContentBrainError,
    InvalidAgentOutput,
    ValidationError,
)
from .models import (
    ArticleOutput,
    EditedArticleOutput,
    EditedLinkedInOutput,
    EditedSocialOutput,
    LinkedInOutput,
    MarketingBrief,
    ResearchDossier,
    SocialOutput,
    ThemesOutput,
    THEMES_PER_ROUND,
    WorkflowState,
)
from .stores.prompt_store import PromptStore
from .templates import find_placeholders, render_template

logger = logging.getLogger(__name__)


class ModelProvider(Protocol):
    async def complete(
        self,
        model_name: str,
        system_prompt: str,
        user_prompt: str,
        output_schema: type[BaseModel],
    ) -> dict: ...


# --- Template variable builders ---

def cta_url_info(state: WorkflowState) -> str:
    return f" (URL: {state['cta_url']})" if state.get("cta_url") else ""


def why_it_works(theme: dict, separator: str = " | ") -> str:
    reasons = theme.get("why_it_works") or []
    return separator.join(reasons) if reasons else "Not specified"


def format_previous_themes(state: WorkflowState) -> str:
    lines = [
        f"- {theme.get('title', '')}: {theme.get('description', '')}"
        for theme_set in state.get("previous_themes") or []
        for theme in theme_set
    ]
    return "\n".join(lines) if lines else "None"


def format_key_findings(dossier: dict) -> str:
    return "\n".join(
        f"{i}. {finding['claim']} (Evidence: {finding['evidence']}) [Confidence: {finding['confidence']}]"
        for i, finding in enumerate(dossier.get("key_findings", []), 1)
    )


def format_suggested_concepts(dossier: dict) -> str:
    return "\n\n".join(
        f"{i}. {concept['title']}\n"
        f"   Angle: {concept['angle']}\n"
        f"   Why it works: {concept['why_it_works']}\n"
        f"   Key Evidence: {' | '.join(concept.get('key_evidence', []))}\n"
        f"   Direction: {concept['content_direction']}"
        for i, concept in enumerate(dossier.get("suggested_concepts", []), 1)
    )


def format_articles(articles: list[dict]) -> str:
    return "\n\n".join(
        f"ARTICLE {i}:\n"
        f"Headline: {article['headline']}\n"
        f"Subheadline: {article['subheadline']}\n"
        f"Word Count: {article['word_count']}\n"
        f"Body: {article['body']}\n"
        f"Key Takeaways: {' | '.join(article.get('key_takeaways', []))}\n"
        f"SEO Keywords: {', '.join(article.get('seo_keywords', []))}\n"
        f"Call to Action: {article['call_to_action']}\n"
        f"Concept Used: {article['concept_used']}"
        for i, article in enumerate(articles, 1)
    )


def format_linkedin_posts(posts: list[dict]) -> str:
    return "\n\n".join(
        f"POST {i}:\n"
        f"Hook: {post['hook']}\n"
        f"Body: {post['body']}\n"
        f"Call to Action: {post['call_to_action']}\n"
        f"Character Count: {post['character_count']}\n"
        f"Concept Used: {post['concept_used']}"
        for i, post in enumerate(posts, 1)
    )


def format_social_posts(posts: list[dict]) -> str:
    return "\n\n".join(
        f"POST {i} ({post['platform']}):\n"
        f"Content: {post['content']}\n"
        f"Character Count: {post['character_count']}\n"
        f"Visual Suggestion: {post['visual_suggestion']}\n"
        f"Concept Used: {post['concept_used']}"
        for i, post in enumerate(posts, 1)
    )


def campaign_variables(state: WorkflowState) -> dict:
    return {
        "businessContext": state.get("business_context", ""),
        "targetAudience": state.get("target_audience", ""),
        "marketingGoals": state.get("marketing_goals", ""),
        "articlesCount": state.get("articles_count", 0),
        "linkedinPostsCount": state.get("linkedin_posts_count", 0),
        "socialPostsCount": state.get("social_posts_count", 0),
        "ctaType": state.get("cta_type", ""),
        "ctaUrl": state.get("cta_url") or "",
        "ctaUrlInfo": cta_url_info(state),
    }


def brief_variables(state: WorkflowState) -> dict:
    brief = state.get("marketing_brief") or {}
    return {
        "executiveSummary": brief.get("executive_summary") or "Not provided",
        "targetPersona": brief.get("target_persona") or {},
        "campaignObjectives": brief.get("campaign_objectives") or [],
        "keyMessages": brief.get("key_messages") or [],
        "callToAction": brief.get("call_to_action") or {},
        "marketingBrief": brief,
    }


def theme_variables(state: WorkflowState) -> dict:
    theme = state.get("selected_theme") or {}
    return {
        "selectedThemeTitle": theme.get("title", ""),
        "selectedThemeDescription": theme.get("description", ""),
        "selectedThemeWhyItWorks": why_it_works(theme),
        "selectedThemeDetailedDescription": theme.get("detailed_description", ""),
    }


def brief_creator_variables(state: WorkflowState) -> dict:
    return campaign_variables(state)


def theme_generator_variables(state: WorkflowState) -> dict:
    return {
        **campaign_variables(state),
        **brief_variables(state),
        "previousThemes": format_previous_themes(state),
        "themesCount": THEMES_PER_ROUND,
    }


def researcher_variables(state: WorkflowState) -> dict:
    return {
        **campaign_variables(state),
        **brief_variables(state),
        **theme_variables(state),
    }


def writer_variables(state: WorkflowState) -> dict:
    dossier = state.get("research_dossier") or {}
    return {
        **campaign_variables(state),
        **brief_variables(state),
        **theme_variables(state),
        "keyFindingsCount": len(dossier.get("key_findings", [])),
        "keyFindings": format_key_findings(dossier),
        "suggestedConcepts": format_suggested_concepts(dossier),
    }


def article_editor_variables(state: WorkflowState) -> dict:
    articles = (state.get("article_output") or {}).get("articles", [])
    return {
        **campaign_variables(state),
        **brief_variables(state),
        "articlesCount": len(articles),
        "articlesToEdit": format_articles(articles),
    }


def linkedin_editor_variables(state: WorkflowState) -> dict:
    posts = (state.get("linkedin_output") or {}).get("posts", [])
    return {
        **campaign_variables(state),
        **brief_variables(state),
        "linkedinPostsCount": len(posts),
        "postsToEdit": format_linkedin_posts(posts),
    }


def social_editor_variables(state: WorkflowState) -> dict:
    posts = (state.get("social_output") or {}).get("posts", [])
    return {
        **campaign_variables(state),
        **brief_variables(state),
        "socialPostsCount": len(posts),
        "postsToEdit": format_social_posts(posts),
    }


def assign_theme_ids(output: dict, state: WorkflowState) -> dict:
    """Give every theme of this round a unique id when the model left it blank or repeated it"""
    round_number = state.get("regeneration_count", 0) + 1
    seen = set()
    for i, theme in enumerate(output.get("themes", []), 1):
        if not theme.get("id") or theme["id"] in seen:
            theme["id"] = f"theme-{round_number}-{i}"
        seen.add(theme["id"])
    return output


def drafted_count(state_key: str, items_field: str) -> Callable[[WorkflowState], int]:
    def count(state: WorkflowState) -> int:
        return len((state.get(state_key) or {}).get(items_field, []))
    return count


@dataclass
class AgentSpec:
    agent_id: str
    name: str
    output_schema: type[BaseModel]
    state_key: str
    build_variables: Callable[[WorkflowState], dict]
    requires: list[str] = field(default_factory=list)
    items_field: Optional[str] = None
    expected_count: Optional[Callable[[WorkflowState], int]] = None
    postprocess: Optional[Callable[[dict, WorkflowState], dict]] = None


AGENT_SPECS = {
    spec.agent_id: spec
    for spec in [
        AgentSpec(
            agent_id="agent1",
            name="Brief Creator",
            output_schema=MarketingBrief,
            state_key="marketing_brief",
            build_variables=brief_creator_variables,
        ),
        AgentSpec(
            agent_id="agent2",
            name="Theme Generator",
            output_schema=ThemesOutput,
            state_key="generated_themes",
            build_variables=theme_generator_variables,
            requires=["marketing_brief"],
            postprocess=assign_theme_ids,
        ),
        AgentSpec(
            agent_id="agent3",
            name="Deep Researcher",
            output_schema=ResearchDossier,
            state_key="research_dossier",
            build_variables=researcher_variables,
            requires=["marketing_brief", "selected_theme"],
        ),
        AgentSpec(
            agent_id="agent4a",
            name="Article Writer",
            output_schema=ArticleOutput,
            state_key="article_output",
            build_variables=writer_variables,
            requires=["marketing_brief", "selected_theme", "research_dossier"],
            items_field="articles",
            expected_count=lambda state: state.get("articles_count", 0),
        ),
        AgentSpec(
            agent_id="agent4b",
            name="LinkedIn Writer",
            output_schema=LinkedInOutput,
            state_key="linkedin_output",
            build_variables=writer_variables,
            requires=["marketing_brief", "selected_theme", "research_dossier"],
            items_field="posts",
            expected_count=lambda state: state.get("linkedin_posts_count", 0),
        ),
        AgentSpec(
            agent_id="agent4c",
            name="Social Writer",
            output_schema=SocialOutput,
            state_key="social_output",
            build_variables=writer_variables,
            requires=["marketing_brief", "selected_theme", "research_dossier"],
            items_field="posts",
            expected_count=lambda state: state.get("social_posts_count", 0),
        ),
        AgentSpec(
            agent_id="agent5a",
            name="Article Editor",
            output_schema=EditedArticleOutput,
            state_key="edited_article_output",
            build_variables=article_editor_variables,
            requires=["marketing_brief", "article_output"],
            items_field="articles",
            expected_count=drafted_count("article_output", "articles"),
        ),
        AgentSpec(
            agent_id="agent5b",
            name="LinkedIn Editor",
            output_schema=EditedLinkedInOutput,
            state_key="edited_linkedin_output",
            build_variables=linkedin_editor_variables,
            requires=["marketing_brief", "linkedin_output"],
            items_field="posts",
            expected_count=drafted_count("linkedin_output", "posts"),
        ),
        AgentSpec(
            agent_id="agent5c",
            name="Social Editor",
            output_schema=EditedSocialOutput,
            state_key="edited_social_output",
            build_variables=social_editor_variables,
            requires=["marketing_brief", "social_output"],
            items_field="posts",
            expected_count=drafted_count("social_output", "posts"),
        ),
    ]
}


def get_agent_spec(agent_id: str) -> AgentSpec:
    try:
        return AGENT_SPECS[agent_id]
    except KeyError:
        raise ConfigNotFound(agent_id) from None


class AgentInvoker:
    """Runs one agent against a state snapshot and returns its partial state update"""

    def __init__(self, store: PromptStore, provider: ModelProvider):
        self.store = store
        self.provider = provider

    @staticmethod
    def render(agent_id: str, template: str, variables: dict) -> str:
        unknown = [name for name in find_placeholders(template) if name not in variables]
        if unknown:
            raise ValidationError(
                f"Prompt template for {agent_id} references unknown variables: {', '.join(unknown)}",
                errors=unknown,
            )
        return render_template(template, variables)

    @staticmethod
    def validate_output(spec: AgentSpec, raw, state: WorkflowState) -> dict:
        if isinstance(raw, BaseModel):
            raw = raw.model_dump()
        if not isinstance(raw, dict):
            raise InvalidAgentOutput(spec.agent_id, f"expected a JSON object, got {type(raw).__name__}")

        try:
            output = spec.output_schema.model_validate(raw)
        except PydanticValidationError as e:
            raise InvalidAgentOutput(spec.agent_id, str(e)) from e

        if spec.items_field and spec.expected_count:
            expected = spec.expected_count(state)
            actual = len(getattr(output, spec.items_field))
            if actual != expected:
                raise InvalidAgentOutput(
                    spec.agent_id,
                    f"expected {expected} {spec.items_field}, got {actual}",
                )

        return output.model_dump(mode="json")

    async def invoke(self, agent_id: str, state: WorkflowState, extra_variables: Optional[dict] = None) -> dict:
        """
        Invoke an agent

        Args:
            agent_id: Agent identifier (agent1 ... agent5c)
            state: Current workflow state (not modified)
            extra_variables: Additional template variables (e.g. whitepaper evidence)

        Returns:
            Partial state update containing only the agent's output field
        """
        spec = get_agent_spec(agent_id)

        missing = [key for key in spec.requires if not state.get(key)]
        if missing:
            raise ValidationError(f"{spec.name} requires {', '.join(missing)}", errors=missing)

        prompt_config = await self.store.get_active_config(agent_id)
        variables = {**spec.build_variables(state), **(extra_variables or {})}
        system_prompt = self.render(agent_id, prompt_config.system_prompt, variables)
        user_prompt = self.render(agent_id, prompt_config.user_prompt_template, variables)

        logger.info("[%s (%s v%s) calling %s...]", spec.name, agent_id, prompt_config.version, prompt_config.model_name)
        try:
            raw = await self.provider.complete(
                prompt_config.model_name,
                system_prompt,
                user_prompt,
                spec.output_schema,
            )
        except ContentBrainError:
            raise
        except OutputParserException as e:
            logger.error("✗ %s returned unparseable output: %s", spec.name, e)
            raise InvalidAgentOutput(agent_id, str(e)) from e
        except Exception as e:
            logger.error("✗ %s invocation failed: %s", spec.name, e)
            raise AgentInvocationFailed(agent_id, e) from e

        output = self.validate_output(spec, raw, state)
        if spec.postprocess:
            output = spec.postprocess(output, state)

        logger.info("✓ %s complete", spec.name)
        if spec.agent_id == "agent2":
            return {spec.state_key: output["themes"]}
        return {spec.state_key: output}
