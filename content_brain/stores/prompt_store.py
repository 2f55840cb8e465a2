"""
Prompt template store: versioned prompt configs per agent

Only one row per agent_id is active at a time. Edits bump the version
(last writer wins, no conflict detection) and rows are never deleted,
only deactivated.
"""

import logging
from typing import Optional, Protocol

from ..exceptions import ConfigNotFound
from ..models import AgentPromptConfig, utc_now
from ..prompts import default_prompt_configs
from .supabase import SupabaseDB

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({
    "agent_name",
    "agent_description",
    "model_name",
    "system_prompt",
    "user_prompt_template",
    "status",
})

TABLE = "agent_system_prompts"


class PromptStore(Protocol):
    async def get_active_config(self, agent_id: str) -> AgentPromptConfig: ...

    async def list_active_configs(self) -> list[AgentPromptConfig]: ...

    async def create_config(self, prompt_config: AgentPromptConfig) -> AgentPromptConfig: ...

    async def update_config(self, agent_id: str, fields: dict) -> AgentPromptConfig: ...

    async def deactivate_config(self, agent_id: str) -> AgentPromptConfig: ...


def editable_fields(fields: dict) -> dict:
    """Drop keys that an edit may not change (id, version, timestamps...)"""
    return {key: value for key, value in fields.items() if key in EDITABLE_FIELDS and value is not None}


class InMemoryPromptStore:
    """Process-local prompt store, seeded with the default agent prompts"""

    def __init__(self, configs: Optional[list[AgentPromptConfig]] = None, seed_defaults: bool = True):
        self._rows: list[AgentPromptConfig] = []
        if seed_defaults:
            self._rows.extend(default_prompt_configs())
        for prompt_config in configs or []:
            self._insert(prompt_config)

    def _active(self, agent_id: str) -> Optional[AgentPromptConfig]:
        for row in self._rows:
            if row.agent_id == agent_id and row.is_active:
                return row
        return None

    def _insert(self, prompt_config: AgentPromptConfig) -> AgentPromptConfig:
        versions = [row.version for row in self._rows if row.agent_id == prompt_config.agent_id]
        for row in self._rows:
            if row.agent_id == prompt_config.agent_id and row.is_active:
                row.is_active = False
                row.status = "inactive"
        now = utc_now()
        row = prompt_config.model_copy(update={
            "version": max(versions) + 1 if versions else prompt_config.version,
            "is_active": True,
            "status": "active",
            "created_at": now,
            "updated_at": now,
        })
        self._rows.append(row)
        return row

    async def get_active_config(self, agent_id: str) -> AgentPromptConfig:
        row = self._active(agent_id)
        if row is None:
            raise ConfigNotFound(agent_id)
        return row.model_copy()

    async def list_active_configs(self) -> list[AgentPromptConfig]:
        rows = [row.model_copy() for row in self._rows if row.is_active]
        return sorted(rows, key=lambda row: row.agent_id)

    async def create_config(self, prompt_config: AgentPromptConfig) -> AgentPromptConfig:
        row = self._insert(prompt_config)
        logger.info("✓ Created prompt config %s v%s", row.agent_id, row.version)
        return row.model_copy()

    async def update_config(self, agent_id: str, fields: dict) -> AgentPromptConfig:
        row = self._active(agent_id)
        if row is None:
            raise ConfigNotFound(agent_id)
        for key, value in editable_fields(fields).items():
            setattr(row, key, value)
        row.version += 1
        row.updated_at = utc_now()
        logger.info("✓ Updated prompt config %s to v%s", agent_id, row.version)
        return row.model_copy()

    async def deactivate_config(self, agent_id: str) -> AgentPromptConfig:
        row = self._active(agent_id)
        if row is None:
            raise ConfigNotFound(agent_id)
        row.is_active = False
        row.status = "inactive"
        row.updated_at = utc_now()
        logger.info("✓ Deactivated prompt config %s", agent_id)
        return row.model_copy()


class SupabasePromptStore:
    """Prompt store backed by the agent_system_prompts table"""

    def __init__(self, db: Optional[SupabaseDB] = None):
        self.db = db or SupabaseDB()

    async def _fetch_active(self, agent_id: str) -> AgentPromptConfig:
        client = await self.db.connect()
        rows = await self.db.execute(
            client.table(TABLE)
            .select("*")
            .eq("agent_id", agent_id)
            .eq("is_active", True)
            .order("version", desc=True)
            .limit(1),
            f"get prompt config {agent_id}",
        )
        if not rows:
            raise ConfigNotFound(agent_id)
        return AgentPromptConfig.model_validate(rows[0])

    async def get_active_config(self, agent_id: str) -> AgentPromptConfig:
        return await self._fetch_active(agent_id)

    async def list_active_configs(self) -> list[AgentPromptConfig]:
        client = await self.db.connect()
        rows = await self.db.execute(
            client.table(TABLE).select("*").eq("is_active", True).order("agent_id"),
            "list prompt configs",
        )
        return [AgentPromptConfig.model_validate(row) for row in rows]

    async def create_config(self, prompt_config: AgentPromptConfig) -> AgentPromptConfig:
        try:
            current = await self._fetch_active(prompt_config.agent_id)
        except ConfigNotFound:
            current = None

        now = utc_now().isoformat()
        payload = prompt_config.model_dump(mode="json")
        payload.update({
            "version": current.version + 1 if current else 1,
            "is_active": True,
            "status": "active",
            "created_at": now,
            "updated_at": now,
        })

        # The old row stays active until the new one is stored
        client = await self.db.connect()
        rows = await self.db.execute(
            client.table(TABLE).insert(payload),
            f"create prompt config {prompt_config.agent_id}",
        )
        if current:
            await self.db.execute(
                client.table(TABLE)
                .update({"is_active": False, "status": "inactive", "updated_at": now})
                .eq("agent_id", current.agent_id)
                .eq("version", current.version),
                f"deactivate prompt config {current.agent_id} v{current.version}",
            )

        logger.info("✓ Created prompt config %s v%s", prompt_config.agent_id, payload["version"])
        return AgentPromptConfig.model_validate(rows[0] if rows else payload)

    async def update_config(self, agent_id: str, fields: dict) -> AgentPromptConfig:
        current = await self._fetch_active(agent_id)
        payload = {
            **editable_fields(fields),
            "version": current.version + 1,
            "updated_at": utc_now().isoformat(),
        }
        client = await self.db.connect()
        rows = await self.db.execute(
            client.table(TABLE)
            .update(payload)
            .eq("agent_id", agent_id)
            .eq("version", current.version),
            f"update prompt config {agent_id}",
        )
        if not rows:
            raise ConfigNotFound(agent_id)
        logger.info("✓ Updated prompt config %s to v%s", agent_id, payload["version"])
        return AgentPromptConfig.model_validate(rows[0])

    async def deactivate_config(self, agent_id: str) -> AgentPromptConfig:
        client = await self.db.connect()
        rows = await self.db.execute(
            client.table(TABLE)
            .update({"is_active": False, "status": "inactive", "updated_at": utc_now().isoformat()})
            .eq("agent_id", agent_id)
            .eq("is_active", True),
            f"deactivate prompt config {agent_id}",
        )
        if not rows:
            raise ConfigNotFound(agent_id)
        logger.info("✓ Deactivated prompt config %s", agent_id)
        return AgentPromptConfig.model_validate(rows[0])


async def seed_default_prompts(store: PromptStore) -> list[AgentPromptConfig]:
    """Create the default config for every agent that has no active config yet"""
    created = []
    for prompt_config in default_prompt_configs():
        try:
            await store.get_active_config(prompt_config.agent_id)
        except ConfigNotFound:
            created.append(await store.create_config(prompt_config))
    return created
