"""Resolve the canonical {nodes, edges} document from a diagram payload."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping

logger = logging.getLogger(__name__)


def _list_or_empty(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _select_active_file(file_list: List[Any], active_file_id: Any) -> Any:
    if isinstance(active_file_id, str):
        for item in file_list:
            if isinstance(item, Mapping) and item.get("id") == active_file_id:
                return item
    logger.debug("Active file %r not found, using first of %d files", active_file_id, len(file_list))
    return file_list[0]


def extract_graph_data(value: Any) -> Dict[str, List[Any]]:
    """Return ``{"nodes": [...], "edges": [...]}`` for any JSON value.

    Accepts both a plain graph document and the multi-file container
    ``{"fileList": [{"id", "graphRawData"}], "activeFileId"}``. Never raises.
    """
    if not isinstance(value, Mapping):
        return {"nodes": [], "edges": []}

    file_list = value.get("fileList")
    if isinstance(file_list, list) and file_list:
        selected = _select_active_file(file_list, value.get("activeFileId"))
        raw = selected.get("graphRawData") if isinstance(selected, Mapping) else None
        if isinstance(raw, Mapping):
            return {
                "nodes": _list_or_empty(raw.get("nodes")),
                "edges": _list_or_empty(raw.get("edges")),
            }

    return {
        "nodes": _list_or_empty(value.get("nodes")),
        "edges": _list_or_empty(value.get("edges")),
    }
