"""
Visualization utilities for the conversation engine graph.
"""
from pathlib import Path
from typing import Any, Optional
from ..utils.logging_config import get_logger

logger = get_logger(__name__)


def visualize_graph(
    graph: Any,
    output_path: str = "conversation_graph.mmd",
    format: str = "mermaid"
) -> Optional[Path]:
    """
    Visualize a compiled LangGraph graph.

    Args:
        graph: The compiled LangGraph graph (e.g. ConversationEngine.graph)
        output_path: Path where to save the visualization
        format: Output format ('png' or 'mermaid')

    Returns:
        Path to the saved visualization file, or None if failed
    """
    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    if format == "mermaid":
        mermaid_code = graph.get_graph().draw_mermaid()
        output_file = output_file.with_suffix(".mmd")
        output_file.write_text(mermaid_code, encoding="utf-8")
        logger.info(f"Mermaid diagram saved to: {output_file}")
        return output_file

    try:
        png_data = graph.get_graph().draw_mermaid_png()
    except Exception as e:
        logger.error(f"PNG rendering failed, use format='mermaid' instead: {e}")
        return None

    output_file = output_file.with_suffix(f".{format}")
    output_file.write_bytes(png_data)
    logger.info(f"Graph visualization saved to: {output_file}")
    return output_file


def print_graph_structure(graph: Any) -> None:
    """
    Print the graph structure as text.

    Args:
        graph: The compiled LangGraph graph
    """
    graph_obj = graph.get_graph()

    print("\n" + "=" * 60)
    print("CONVERSATION FLOW GRAPH STRUCTURE")
    print("=" * 60)

    print("\nNodes:")
    for node in graph_obj.nodes:
        print(f"  - {node}")

    print("\nEdges:")
    for edge in graph_obj.edges:
        print(f"  {edge.source} -> {edge.target}")

    print("\n" + "=" * 60 + "\n")
