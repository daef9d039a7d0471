"""Viewport normalization for preview rendering."""
from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Mapping

from yys_flow.diagram.node_access import NodeView

logger = logging.getLogger(__name__)

VIEWPORT_PADDING = 80.0


def normalize_for_preview(document: Any, padding: float = VIEWPORT_PADDING) -> Any:
    """Shift node coordinates so the diagram's bounding box starts at *padding*.

    Nodes are positioned by their center; the top-left bound of each node is
    derived from its resolved size. Documents already within one unit of the
    target frame are returned unchanged (the same object), which makes the
    operation idempotent.
    """
    doc: Mapping[str, Any] = document if isinstance(document, Mapping) else {}
    nodes = doc.get("nodes")
    edges = doc.get("edges")
    if not isinstance(nodes, list) or not nodes:
        return {"nodes": [], "edges": edges if isinstance(edges, list) else []}

    min_x = math.inf
    min_y = math.inf
    for node in nodes:
        bound = NodeView.from_raw(node).top_left()
        min_x = min(min_x, bound.x)
        min_y = min(min_y, bound.y)

    # Bounds of extreme but finite coordinates can overflow to infinity.
    if not (math.isfinite(min_x) and math.isfinite(min_y)):
        logger.debug("Preview bounds are not finite", extra={"node_count": len(nodes)})
        return document

    offset_x = padding - min_x
    offset_y = padding - min_y
    if abs(offset_x) < 1 and abs(offset_y) < 1:
        logger.debug("Preview frame already normalized", extra={"node_count": len(nodes)})
        return document

    shifted: List[Dict[str, Any]] = []
    for node in nodes:
        view = NodeView.from_raw(node)
        pos = view.position
        shifted.append({**view.raw, "x": pos.x + offset_x, "y": pos.y + offset_y})
    return {**doc, "nodes": shifted}
