"""
Error taxonomy for the content generation workflow

Every error raised by the workflow carries the last-known-good workflow
state in ``state`` so callers can retry only the failed phase.
"""

from typing import Any, Optional


class ContentBrainError(Exception):
    """Base class for all workflow errors"""

    def __init__(self, message: str, state: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.state = state


class ValidationError(ContentBrainError):
    """Malformed workflow input, rejected before any model call"""

    def __init__(self, message: str, errors: Optional[list[Any]] = None, state: Optional[dict] = None):
        super().__init__(message, state)
        self.errors = errors or []


class ConfigNotFound(ContentBrainError):
    """No active prompt config exists for an agent"""

    def __init__(self, agent_id: str, state: Optional[dict] = None):
        super().__init__(f"No active prompt configuration for agent '{agent_id}'", state)
        self.agent_id = agent_id


class InvalidAgentOutput(ContentBrainError):
    """A model returned output that does not match the agent's schema"""

    def __init__(self, agent_id: str, message: str, state: Optional[dict] = None):
        super().__init__(f"Invalid output from {agent_id}: {message}", state)
        self.agent_id = agent_id


class AgentInvocationFailed(ContentBrainError):
    """The model provider call failed (network, auth, rate limit...)"""

    def __init__(self, agent_id: str, cause: BaseException, state: Optional[dict] = None):
        super().__init__(f"{agent_id} invocation failed: {cause}", state)
        self.agent_id = agent_id
        self.cause = cause


class ThemeNotFound(ContentBrainError):
    """The selected theme id is not among the generated themes"""

    def __init__(self, theme_id: str, state: Optional[dict] = None):
        super().__init__(f"Theme with ID {theme_id} not found", state)
        self.theme_id = theme_id


class StoreError(ContentBrainError):
    """A prompt-config or campaign store request failed"""
