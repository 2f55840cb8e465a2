"""
Workflow visualization utility
"""

import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)


def build_graphs(controller=None) -> dict:
    """Compiled workflow graphs by name; no model or API key is needed to build them"""
    if controller is None:
        from ..agents import AgentInvoker
        from ..controller import WorkflowController
        from ..stores import InMemoryPromptStore
        from .llm_utils import LangChainModelProvider

        controller = WorkflowController(AgentInvoker(InMemoryPromptStore(), LangChainModelProvider()))

    return {
        "planning": controller.planning_graph,
        "research": controller.research_graph,
        "content": controller.content_graph,
    }


def draw_workflow_graphs(output_dir: str = ".", controller=None) -> Optional[list[str]]:
    """
    Generate and save one PNG per workflow graph

    Args:
        output_dir: Directory where the graph images will be saved
        controller: WorkflowController whose graphs are drawn (default: a fresh one)

    Returns:
        Paths to saved graphs or None if failed
    """
    try:
        os.makedirs(output_dir, exist_ok=True)
        paths = []
        for name, graph in build_graphs(controller).items():
            output_path = os.path.join(output_dir, f"{name}_workflow.png")
            with open(output_path, "wb") as f:
                f.write(graph.get_graph().draw_mermaid_png())
            paths.append(output_path)
        return paths

    except Exception as e:
        logger.error("✗ Failed to draw workflow graphs: %s", e)
        logger.error("  Rendering uses the mermaid.ink API; check network access or use draw_mermaid() for text output")
        return None


def workflow_mermaid(controller=None) -> dict:
    """Mermaid source for every workflow graph"""
    return {name: graph.get_graph().draw_mermaid() for name, graph in build_graphs(controller).items()}
