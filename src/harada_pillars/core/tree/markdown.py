"""Render annotated subtrees as markdown."""

import io
import math
from collections.abc import Mapping

from harada_pillars.core.tree.index import TreeIndex
from harada_pillars.models.node import NodeStatus, NodeWithProgress

_STATUS_BOX = {
    NodeStatus.DONE: "[x]",
    NodeStatus.IN_PROGRESS: "[ ]",
    NodeStatus.BLOCKED: "[!]",
}


def format_progress(progress: float) -> str:
    """Format a progress value as a whole percentage, rounding halves up."""
    return f"{math.floor(progress * 100 + 0.5)}%"


def render_subtree_as_markdown(
    annotated: Mapping[str, NodeWithProgress],
    *,
    node_id: str,
    max_depth: int | None = None,
    include_descriptions: bool = True,
) -> str:
    """Render a node and its descendants as indented markdown.

    Args:
        annotated: Output of annotate_tree for the tree.
        node_id: The root node to start rendering from.
        max_depth: Max levels below the start node to include (None = unlimited).
        include_descriptions: Whether to include node descriptions.

    Returns:
        Markdown string with bullet-list hierarchy, or "" for an unknown node.
    """
    start = annotated.get(node_id)
    if start is None:
        return ""

    index = TreeIndex(entry.node for entry in annotated.values())
    start_level = start.node.level

    out = io.StringIO()
    stack = [start]
    while stack:
        entry = stack.pop()
        node = entry.node
        relative_depth = node.level - start_level
        indent = "    " * relative_depth

        box = _STATUS_BOX[node.status]
        line = f"{indent}- {box} {node.title} ({format_progress(entry.progress)})"
        if entry.inherited_blocked:
            line += " [blocked by ancestor]"
        out.write(line + "\n")

        if include_descriptions and node.description:
            for desc_line in node.description.split("\n"):
                out.write(f"{indent}  > {desc_line}\n")

        children = index.children_of(node.id)
        if max_depth is not None and relative_depth >= max_depth:
            # Truncation indicator when children are cut off by max_depth
            if children:
                child_indent = "    " * (relative_depth + 1)
                noun = "child" if len(children) == 1 else "children"
                out.write(f"{child_indent}- ... ({len(children)} more {noun}, id={node.id})\n")
            continue

        stack.extend(annotated[c.id] for c in reversed(children))

    return out.getvalue()
