"""
Utility modules for content generation
"""

from .llm_utils import LangChainModelProvider, get_llm
from .workflow_visualizer import draw_workflow_graphs

__all__ = ["LangChainModelProvider", "get_llm", "draw_workflow_graphs"]
