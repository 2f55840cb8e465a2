"""
FastAPI server for Content Brain
"""

import logging
import time
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from content_brain import config
from content_brain.agents import AGENT_SPECS
from content_brain.content_generator import ContentGenerator
from content_brain.exceptions import (
    AgentInvocationFailed,
    ConfigNotFound,
    ContentBrainError,
    InvalidAgentOutput,
    StoreError,
    ThemeNotFound,
    ValidationError,
)
from content_brain.models import AgentPromptConfig, WorkflowState, state_from_camel, state_to_camel, utc_now
from content_brain.output import agents_used

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger("server")

@asynccontextmanager
async def lifespan(app: FastAPI):
    if config.SEED_DEFAULT_PROMPTS:
        logger.info("[Seeding default agent prompts...]")
        await get_generator().seed_prompts()
    yield


app = FastAPI(title="Content Brain API", lifespan=lifespan)

# CORS middleware for the web frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ERROR_STATUS = [
    (ValidationError, 400),
    (ThemeNotFound, 404),
    (InvalidAgentOutput, 502),
    (AgentInvocationFailed, 502),
    (ConfigNotFound, 500),
    (StoreError, 500),
]


@lru_cache
def get_generator() -> ContentGenerator:
    """Content generator shared by all requests (it keeps no per-request state)"""
    return ContentGenerator()


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ThemeActionRequest(ApiModel):
    action: str
    current_state: dict[str, Any]
    selected_theme_id: Optional[str] = None


class GenerateContentRequest(ApiModel):
    current_state: dict[str, Any]
    selected_theme_id: Optional[str] = None


class AgentPromptCreate(ApiModel):
    agent_id: str = Field(min_length=1)
    agent_name: str = Field(min_length=1)
    agent_description: str = ""
    model_name: str = config.DEFAULT_MODEL
    system_prompt: str = Field(min_length=1)
    user_prompt_template: str = ""


class AgentPromptUpdate(ApiModel):
    agent_id: str = Field(min_length=1)
    agent_name: Optional[str] = None
    agent_description: Optional[str] = None
    model_name: Optional[str] = None
    system_prompt: Optional[str] = Field(default=None, min_length=1)
    user_prompt_template: Optional[str] = None
    status: Optional[str] = None


class SaveCampaignRequest(ApiModel):
    campaign_name: str = Field(min_length=1)
    whitepaper_id: Optional[str] = None
    brief_data: Optional[dict[str, Any]] = None
    selected_theme: Optional[dict[str, Any]] = None
    final_results: dict[str, Any]


class FavoriteRequest(ApiModel):
    is_favorited: bool


def workflow_state_summary(state: WorkflowState) -> dict:
    return {
        "currentStep": state.get("current_step"),
        "needsHumanInput": state.get("needs_human_input", False),
        "isComplete": state.get("is_complete", False),
    }


def error_status(error: ContentBrainError) -> int:
    for error_type, status in ERROR_STATUS:
        if isinstance(error, error_type):
            return status
    return 500


@app.exception_handler(ContentBrainError)
async def content_brain_error_handler(request: Request, exc: ContentBrainError):
    status = error_status(exc)
    logger.error("✗ %s %s failed (%s): %s", request.method, request.url.path, status, exc.message)

    body = {"success": False, "error": exc.message, "errorType": type(exc).__name__}
    if isinstance(exc, ValidationError) and exc.errors:
        body["details"] = exc.errors
    if exc.state is not None:
        body["currentState"] = state_to_camel(exc.state)
    return JSONResponse(status_code=status, content=body)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Invalid input data", "details": details},
    )


@app.get("/")
async def root():
    return {"message": "Content Brain API", "status": "running"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


# --- Theme workflow ---

@app.get("/api/generate-themes")
async def theme_service_status():
    return {
        "service": "Theme Generation API",
        "status": "active",
        "endpoints": {
            "POST": "Create the marketing brief and the first set of themes",
            "PUT": "Handle theme selection or regeneration",
        },
        "updated": utc_now().isoformat(),
    }


@app.post("/api/generate-themes")
async def generate_themes(payload: dict[str, Any], generator: ContentGenerator = Depends(get_generator)):
    """Start a workflow: brief creation then theme generation, paused for selection"""
    logger.info("[Starting theme generation workflow...]")
    state = await generator.start(payload)

    return {
        "success": True,
        "marketingBrief": state.get("marketing_brief"),
        "generatedThemes": state.get("generated_themes"),
        "workflowState": workflow_state_summary(state),
        "currentState": state_to_camel(state),
        "generationMetadata": {
            "createdAt": utc_now().isoformat(),
            "agentsUsed": agents_used(state),
            "searchesPerformed": len(state.get("search_history") or []),
            "regenerationCount": state.get("regeneration_count", 0),
        },
    }


@app.put("/api/generate-themes")
async def theme_action(body: ThemeActionRequest, generator: ContentGenerator = Depends(get_generator)):
    """Select one of the generated themes or regenerate the set"""
    state = state_from_camel(body.current_state)

    if body.action == "select_theme":
        if not body.selected_theme_id:
            raise HTTPException(status_code=400, detail="selectedThemeId is required")

        state = await generator.select_theme(state, body.selected_theme_id)
        return {
            "success": True,
            "message": f'Theme "{state["selected_theme"]["title"]}" selected successfully',
            "selectedTheme": state.get("selected_theme"),
            "workflowState": workflow_state_summary(state),
            "currentState": state_to_camel(state),
        }

    if body.action == "regenerate_themes":
        state = await generator.regenerate_themes(state)
        return {
            "success": True,
            "message": "New themes generated successfully",
            "generatedThemes": state.get("generated_themes"),
            "workflowState": workflow_state_summary(state),
            "currentState": state_to_camel(state),
            "generationMetadata": {
                "regenerationCount": state.get("regeneration_count", 0),
                "searchesPerformed": len(state.get("search_history") or []),
            },
        }

    if body.action == "resume_planning":
        state = await generator.resume_planning(state)
        return {
            "success": True,
            "message": "Themes generated successfully",
            "marketingBrief": state.get("marketing_brief"),
            "generatedThemes": state.get("generated_themes"),
            "workflowState": workflow_state_summary(state),
            "currentState": state_to_camel(state),
        }

    raise HTTPException(
        status_code=400,
        detail="Invalid action. Use 'select_theme', 'regenerate_themes' or 'resume_planning'",
    )


# --- Content workflow ---

@app.get("/api/generate-content")
async def content_service_status():
    return {
        "success": True,
        "message": "Content generation service is running",
        "version": "1.0.0",
        "agents": [f"{spec.agent_id}: {spec.name}" for spec in AGENT_SPECS.values()],
    }


@app.post("/api/generate-content")
async def generate_content(body: GenerateContentRequest, generator: ContentGenerator = Depends(get_generator)):
    """Research (if needed), draft and edit all content, returning the final output"""
    started_at = time.time()
    state = state_from_camel(body.current_state)

    if body.selected_theme_id:
        state = await generator.continue_with_selected_theme(state, body.selected_theme_id)
    else:
        state = await generator.generate_content(state)

    return {
        "success": True,
        "data": generator.final_output(state, started_at),
        "currentState": state_to_camel(state),
    }


# --- Agent prompt configs ---

def prompt_config_response(prompt_config: AgentPromptConfig) -> dict:
    return prompt_config.model_dump(mode="json")


@app.get("/api/agent-prompts")
async def get_agent_prompts(agentId: Optional[str] = None, generator: ContentGenerator = Depends(get_generator)):
    if agentId:
        try:
            prompt_config = await generator.prompt_store.get_active_config(agentId)
        except ConfigNotFound:
            raise HTTPException(status_code=404, detail="Agent not found")
        return prompt_config_response(prompt_config)

    return [prompt_config_response(row) for row in await generator.prompt_store.list_active_configs()]


@app.post("/api/agent-prompts")
async def create_agent_prompt(body: AgentPromptCreate, generator: ContentGenerator = Depends(get_generator)):
    prompt_config = await generator.prompt_store.create_config(AgentPromptConfig(**body.model_dump()))
    return {
        "success": True,
        "message": "Agent prompt created successfully",
        "data": prompt_config_response(prompt_config),
    }


@app.put("/api/agent-prompts")
async def update_agent_prompt(body: AgentPromptUpdate, generator: ContentGenerator = Depends(get_generator)):
    try:
        prompt_config = await generator.prompt_store.update_config(
            body.agent_id,
            body.model_dump(exclude={"agent_id"}, exclude_none=True),
        )
    except ConfigNotFound:
        raise HTTPException(status_code=404, detail="Agent not found")
    return {
        "success": True,
        "message": "Agent prompt updated successfully",
        "data": prompt_config_response(prompt_config),
    }


@app.delete("/api/agent-prompts")
async def deactivate_agent_prompt(agentId: str, generator: ContentGenerator = Depends(get_generator)):
    try:
        prompt_config = await generator.prompt_store.deactivate_config(agentId)
    except ConfigNotFound:
        raise HTTPException(status_code=404, detail="Agent not found")
    return {
        "success": True,
        "message": "Agent prompt deactivated successfully",
        "data": prompt_config_response(prompt_config),
    }


# --- Campaigns ---

@app.post("/api/content-generations/save")
async def save_campaign(body: SaveCampaignRequest, generator: ContentGenerator = Depends(get_generator)):
    campaign_id, record = await generator.save_campaign(
        body.campaign_name,
        body.final_results,
        whitepaper_id=body.whitepaper_id,
        brief_data=body.brief_data,
        selected_theme=body.selected_theme,
    )
    return {
        "success": True,
        "id": campaign_id,
        "itemsCount": len(record.items),
    }


@app.get("/api/content-generations")
async def list_campaigns(
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    search: str = "",
    generator: ContentGenerator = Depends(get_generator),
):
    """Saved campaigns, newest first, optionally filtered by name"""
    campaigns, total = await generator.list_campaigns(limit=limit, offset=offset, search=search.strip())
    return {
        "campaigns": [record.model_dump(mode="json", exclude={"items"}) for record in campaigns],
        "total": total,
        "limit": limit,
        "offset": offset,
    }


@app.get("/api/content-generations/{campaign_id}")
async def get_campaign(campaign_id: str, generator: ContentGenerator = Depends(get_generator)):
    record = await generator.get_campaign(campaign_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Campaign not found")
    return {**record.model_dump(mode="json"), "id": campaign_id}


@app.delete("/api/content-generations/{campaign_id}")
async def delete_campaign(campaign_id: str, generator: ContentGenerator = Depends(get_generator)):
    if not await generator.delete_campaign(campaign_id):
        raise HTTPException(status_code=404, detail="Campaign not found")
    return {"success": True}


@app.post("/api/content-generations/{campaign_id}/favorite")
async def favorite_campaign(campaign_id: str, body: FavoriteRequest, generator: ContentGenerator = Depends(get_generator)):
    record = await generator.set_favorite(campaign_id, body.is_favorited)
    if record is None:
        raise HTTPException(status_code=404, detail="Campaign not found")
    return {"success": True, "isFavorited": record.is_favorited}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("server:app", host="0.0.0.0", port=8000, reload=True)
