"""
Final output projection and campaign records for completed workflows
"""

import time
from typing import Optional

from .models import CampaignRecord, ContentItem, WorkflowState, utc_now

AGENT_OUTPUTS = [
    ("brief-creator", "marketing_brief"),
    ("theme-generator", "generated_themes"),
    ("deep-researcher", "research_dossier"),
    ("article-writer", "article_output"),
    ("linkedin-writer", "linkedin_output"),
    ("social-writer", "social_output"),
    ("article-editor", "edited_article_output"),
    ("linkedin-editor", "edited_linkedin_output"),
    ("social-editor", "edited_social_output"),
]


def agents_used(state: WorkflowState) -> list[str]:
    return [name for name, key in AGENT_OUTPUTS if state.get(key)]


def build_final_output(state: WorkflowState, started_at: Optional[float] = None) -> dict:
    """
    Project a workflow state into the final content output

    Edited content is used when present, otherwise the drafts. Both
    versions are kept for comparison.

    Args:
        state: Workflow state (normally complete)
        started_at: time.time() when generation started, for processing_time_ms
    """
    processing_time_ms = int((time.time() - started_at) * 1000) if started_at else 0

    return {
        "marketing_brief": state.get("marketing_brief"),
        "selected_theme": state.get("selected_theme"),
        "generated_themes": state.get("generated_themes"),
        "research_dossier": state.get("research_dossier"),
        "article": state.get("edited_article_output") or state.get("article_output"),
        "linkedin_posts": state.get("edited_linkedin_output") or state.get("linkedin_output"),
        "social_posts": state.get("edited_social_output") or state.get("social_output"),
        "original_content": {
            "article": state.get("article_output"),
            "linkedin_posts": state.get("linkedin_output"),
            "social_posts": state.get("social_output"),
        },
        "edited_content": {
            "article": state.get("edited_article_output"),
            "linkedin_posts": state.get("edited_linkedin_output"),
            "social_posts": state.get("edited_social_output"),
        },
        "workflow_state": {
            "currentStep": state.get("current_step"),
            "needsHumanInput": state.get("needs_human_input", False),
            "isComplete": state.get("is_complete", False),
        },
        "generation_metadata": {
            "created_at": utc_now().isoformat(),
            "processing_time_ms": processing_time_ms,
            "agents_used": agents_used(state),
            "whitepaper_chunks_analyzed": len(state.get("search_history") or []),
            "editing_completed": any(
                state.get(key) for key in ("edited_article_output", "edited_linkedin_output", "edited_social_output")
            ),
            "content_quality_scores": {
                "article": (state.get("edited_article_output") or {}).get("quality_score"),
                "linkedin": (state.get("edited_linkedin_output") or {}).get("quality_score"),
                "social": (state.get("edited_social_output") or {}).get("quality_score"),
            },
        },
    }


def build_content_items(final_output: dict) -> list[ContentItem]:
    """One content item per article and post in the final output"""
    items = []

    for article in (final_output.get("article") or {}).get("articles", []):
        items.append(ContentItem(
            content_type="article",
            title=article.get("headline") or "Article",
            content=article.get("body", ""),
            metadata=article,
        ))

    for post in (final_output.get("linkedin_posts") or {}).get("posts", []):
        items.append(ContentItem(
            content_type="linkedin_post",
            title=post.get("hook") or "LinkedIn Post",
            content=post.get("body", ""),
            metadata=post,
        ))

    for post in (final_output.get("social_posts") or {}).get("posts", []):
        items.append(ContentItem(
            content_type="social_post",
            title=f"{post.get('platform', 'social').title()} Post",
            content=post.get("content", ""),
            metadata=post,
        ))

    return items


def build_campaign_record(
    campaign_name: str,
    final_output: dict,
    whitepaper_id: Optional[str] = None,
    brief_data: Optional[dict] = None,
    selected_theme: Optional[dict] = None,
) -> CampaignRecord:
    return CampaignRecord(
        campaign_name=campaign_name,
        whitepaper_id=whitepaper_id,
        brief_data=brief_data or final_output.get("marketing_brief") or {},
        selected_theme=selected_theme or final_output.get("selected_theme"),
        generated_content=final_output,
        items=build_content_items(final_output),
    )
