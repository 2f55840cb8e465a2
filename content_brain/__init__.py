"""
Content Brain: multi-agent marketing content generation with LangGraph
"""

from .content_generator import ContentGenerator
from .controller import WorkflowController
from .exceptions import (
    AgentInvocationFailed,
    ConfigNotFound,
    ContentBrainError,
    InvalidAgentOutput,
    StoreError,
    ThemeNotFound,
    ValidationError,
)

__all__ = [
    "ContentGenerator",
    "WorkflowController",
    "AgentInvocationFailed",
    "ConfigNotFound",
    "ContentBrainError",
    "InvalidAgentOutput",
    "StoreError",
    "ThemeNotFound",
    "ValidationError",
]
