"""
Data models and state definitions for the content generation workflow
"""

from datetime import datetime, timezone
from typing import Any, Literal, Optional, TypedDict

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel, to_snake


# Workflow stage tags
BRIEF_CREATION = "brief_creation"
THEME_GENERATION = "theme_generation"
AWAITING_THEME_SELECTION = "awaiting_theme_selection"
RESEARCH = "research"
CONTENT_DRAFTING = "content_drafting"
CONTENT_EDITING = "content_editing"
COMPLETE = "complete"

WORKFLOW_STEPS = [
    BRIEF_CREATION,
    THEME_GENERATION,
    AWAITING_THEME_SELECTION,
    RESEARCH,
    CONTENT_DRAFTING,
    CONTENT_EDITING,
    COMPLETE,
]

THEMES_PER_ROUND = 3
MAX_ARTICLES = 3
MAX_LINKEDIN_POSTS = 10
MAX_SOCIAL_POSTS = 15

CTAType = Literal["contact_us", "download_whitepaper"]
ContentType = Literal["article", "linkedin_post", "social_post"]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# --- Themes and agent outputs ---

class Theme(BaseModel):
    """A candidate content angle generated from the marketing brief"""
    id: str = Field(default="", description="Short unique identifier for the theme (e.g. 'theme-1')")
    title: str = Field(description="Concise theme title")
    description: str = Field(description="One or two sentence description shown to the marketer")
    why_it_works: list[str] = Field(
        min_length=3, max_length=3,
        description="Exactly 3 reasons this theme will resonate with the audience"
    )
    detailed_description: str = Field(description="Detailed brief for the research agent (not shown to the user)")


class TargetPersona(BaseModel):
    demographic: str
    psychographic: str
    pain_points: list[str]
    motivations: list[str]


class ContentStrategy(BaseModel):
    articles: int = Field(ge=0)
    linkedin_posts: int = Field(ge=0)
    social_posts: int = Field(ge=0)


class CallToAction(BaseModel):
    type: str
    message: str
    url: Optional[str] = None


class MarketingBrief(BaseModel):
    """Structured output for agent1 (brief creator)"""
    executive_summary: str = Field(description="Executive summary of the campaign")
    target_persona: TargetPersona = Field(description="Who the campaign speaks to")
    campaign_objectives: list[str] = Field(description="Measurable campaign objectives")
    key_messages: list[str] = Field(description="Key messages every piece of content should carry")
    content_strategy: ContentStrategy = Field(description="Number of pieces per content type")
    call_to_action: CallToAction = Field(description="Call-to-action configuration")


class ThemesOutput(BaseModel):
    """Structured output for agent2 (theme generator)"""
    themes: list[Theme] = Field(
        min_length=THEMES_PER_ROUND, max_length=THEMES_PER_ROUND,
        description=f"Exactly {THEMES_PER_ROUND} distinct content themes"
    )
    search_summary: str = Field(default="", description="Summary of the whitepaper evidence behind the themes")


class KeyFinding(BaseModel):
    claim: str = Field(description="The key claim or finding")
    evidence: str = Field(description="Supporting evidence from the whitepaper")
    confidence: Literal["high", "medium", "low"] = Field(description="Confidence in the evidence")


class SuggestedConcept(BaseModel):
    title: str
    angle: str = Field(description="The unique perspective or angle")
    why_it_works: str = Field(description="Why this concept will resonate with the audience")
    key_evidence: list[str] = Field(
        min_length=3, max_length=3,
        description="Top 3 pieces of whitepaper evidence supporting this concept"
    )
    content_direction: str = Field(description="Guidance for how drafting agents should approach this concept")


class ResearchDossier(BaseModel):
    """Structured output for agent3 (researcher)"""
    key_findings: list[KeyFinding] = Field(
        min_length=6, max_length=8,
        description="Key evidence-backed findings from the whitepaper"
    )
    suggested_concepts: list[SuggestedConcept] = Field(
        min_length=3, max_length=3,
        description="3 content concepts for the drafting agents to choose from"
    )
    research_summary: str = Field(description="How the findings support the concepts")


class Article(BaseModel):
    headline: str = Field(description="Compelling headline for the article")
    subheadline: str = Field(description="Supporting subheadline")
    body: str = Field(description="Main article content (~1000 words)")
    word_count: int = Field(ge=0, description="Word count of the article body")
    key_takeaways: list[str] = Field(min_length=3, max_length=5)
    seo_keywords: list[str] = Field(min_length=3, max_length=8)
    call_to_action: str
    concept_used: str = Field(description="Which suggested concept from the research dossier was used")


class LinkedInPost(BaseModel):
    hook: str = Field(description="Attention-grabbing opening line")
    body: str
    call_to_action: str
    character_count: int = Field(ge=0)
    concept_used: str


class SocialPost(BaseModel):
    platform: Literal["twitter", "facebook", "instagram"]
    content: str = Field(description="Short, punchy content optimized for the platform")
    character_count: int = Field(ge=0)
    visual_suggestion: str
    concept_used: str


class ArticleOutput(BaseModel):
    """Structured output for agent4a (article writer)"""
    articles: list[Article] = Field(min_length=1, max_length=MAX_ARTICLES)
    generation_strategy: str
    whitepaper_utilization: str


class LinkedInOutput(BaseModel):
    """Structured output for agent4b (LinkedIn writer)"""
    posts: list[LinkedInPost] = Field(min_length=1, max_length=MAX_LINKEDIN_POSTS)
    generation_strategy: str
    whitepaper_utilization: str


class SocialOutput(BaseModel):
    """Structured output for agent4c (social writer)"""
    posts: list[SocialPost] = Field(min_length=1, max_length=MAX_SOCIAL_POSTS)
    generation_strategy: str
    whitepaper_utilization: str


class EditedArticleOutput(BaseModel):
    """Structured output for agent5a (article editor)"""
    articles: list[Article] = Field(min_length=1, max_length=MAX_ARTICLES)
    editing_notes: str
    quality_score: float = Field(ge=1, le=10)


class EditedLinkedInOutput(BaseModel):
    """Structured output for agent5b (LinkedIn editor)"""
    posts: list[LinkedInPost] = Field(min_length=1, max_length=MAX_LINKEDIN_POSTS)
    editing_notes: str
    quality_score: float = Field(ge=1, le=10)


class EditedSocialOutput(BaseModel):
    """Structured output for agent5c (social editor)"""
    posts: list[SocialPost] = Field(min_length=1, max_length=MAX_SOCIAL_POSTS)
    editing_notes: str
    quality_score: float = Field(ge=1, le=10)


# --- Prompt configuration ---

class AgentPromptConfig(BaseModel):
    """Versioned prompt pair and model for one agent"""
    agent_id: str
    agent_name: str
    agent_description: str = ""
    model_name: str
    system_prompt: str
    user_prompt_template: str
    status: str = "active"
    version: int = 1
    is_active: bool = True
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


# --- Campaign persistence ---

class ContentItem(BaseModel):
    content_type: ContentType
    title: str
    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class CampaignRecord(BaseModel):
    id: Optional[str] = None
    campaign_name: str
    whitepaper_id: Optional[str] = None
    brief_data: dict[str, Any]
    selected_theme: Optional[dict[str, Any]] = None
    generated_content: dict[str, Any]
    items: list[ContentItem] = Field(default_factory=list)
    is_saved: bool = True
    is_favorited: bool = False
    created_at: datetime = Field(default_factory=utc_now)


# --- Workflow input and state ---

class WorkflowInput(BaseModel):
    """Campaign inputs accepted by the start of the workflow"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    business_context: str
    target_audience: str
    marketing_goals: str
    articles_count: int = Field(default=1, ge=0, le=MAX_ARTICLES)
    linkedin_posts_count: int = Field(default=4, ge=0, le=MAX_LINKEDIN_POSTS)
    social_posts_count: int = Field(default=8, ge=0, le=MAX_SOCIAL_POSTS)
    cta_type: CTAType = "contact_us"
    cta_url: Optional[str] = None
    selected_whitepaper_id: Optional[str] = None

    @field_validator("business_context", "target_audience", "marketing_goals")
    @classmethod
    def must_not_be_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value.strip()


class WorkflowState(TypedDict, total=False):
    """State threaded through every step of the content workflow"""
    business_context: str
    target_audience: str
    marketing_goals: str
    articles_count: int
    linkedin_posts_count: int
    social_posts_count: int
    cta_type: str
    cta_url: Optional[str]
    selected_whitepaper_id: Optional[str]
    marketing_brief: Optional[dict]
    generated_themes: list[dict]
    previous_themes: list[list[dict]]  # One entry per regenerated theme set
    selected_theme: Optional[dict]
    research_dossier: Optional[dict]
    article_output: Optional[dict]
    linkedin_output: Optional[dict]
    social_output: Optional[dict]
    edited_article_output: Optional[dict]
    edited_linkedin_output: Optional[dict]
    edited_social_output: Optional[dict]
    search_history: list[dict]  # {agent_id, query, result_count}
    regeneration_count: int
    current_step: str
    is_complete: bool
    needs_human_input: bool


STATE_KEYS = frozenset(WorkflowState.__annotations__)


def create_initial_state(workflow_input: WorkflowInput) -> WorkflowState:
    """Build the initial workflow state from validated campaign inputs"""
    return {
        **workflow_input.model_dump(),
        "marketing_brief": None,
        "generated_themes": [],
        "previous_themes": [],
        "selected_theme": None,
        "research_dossier": None,
        "article_output": None,
        "linkedin_output": None,
        "social_output": None,
        "edited_article_output": None,
        "edited_linkedin_output": None,
        "edited_social_output": None,
        "search_history": [],
        "regeneration_count": 0,
        "current_step": BRIEF_CREATION,
        "is_complete": False,
        "needs_human_input": False,
    }


def state_to_camel(state: dict) -> dict:
    """Top-level state keys in the camelCase used on the wire"""
    return {to_camel(key): value for key, value in state.items()}


def state_from_camel(payload: dict) -> dict:
    """Inverse of state_to_camel; unknown keys are dropped"""
    state = {}
    for key, value in payload.items():
        snake = to_snake(key)
        if snake in STATE_KEYS:
            state[snake] = value
    return state
