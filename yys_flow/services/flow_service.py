"""Flow-diagram preparation for rendering and for the editor.

Two entry points share the same extraction step:

- ``prepare_preview``: what the article renderer gets (rewritten asset URLs,
  re-centered viewport).
- ``inspect_flow``: what the editor shows next to the diagram (asset issues
  and team-composition warnings).
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from yys_flow.diagram.assets import AssetRenderPolicy, collect_asset_issues, rewrite_asset_urls
from yys_flow.diagram.extractor import extract_graph_data
from yys_flow.diagram.group_rules import (
    DEFAULT_GROUP_RULES_CONFIG,
    GroupRulesConfig,
    load_rules_config,
    validate_group_rules,
)
from yys_flow.diagram.preview import normalize_for_preview
from yys_flow.schemas import FlowReport
from yys_flow.utils.config import settings

logger = logging.getLogger(__name__)

BLOCKING_ISSUE_CODES = frozenset({"FILE_URL", "BLOB_URL"})


def resolve_rules(path: Optional[str] = None) -> GroupRulesConfig:
    """Rules from *path*, else from ``settings.rules_config_path``, else the defaults."""
    rules_path = path if path is not None else settings.rules_config_path
    if not rules_path:
        return DEFAULT_GROUP_RULES_CONFIG
    return load_rules_config(rules_path)


def prepare_preview(
    raw: Any,
    *,
    base_url: Optional[str] = None,
    policy: Optional[AssetRenderPolicy] = None,
    padding: Optional[float] = None,
) -> Dict[str, Any]:
    graph = extract_graph_data(raw)
    rewritten = rewrite_asset_urls(
        graph,
        base_url if base_url is not None else settings.base_url,
        policy or settings.asset_policy,
    )
    prepared = normalize_for_preview(rewritten, padding if padding is not None else settings.preview_padding)
    logger.info(
        "Prepared flow preview",
        extra={"node_count": len(prepared["nodes"]), "edge_count": len(prepared["edges"])},
    )
    return prepared


def inspect_flow(
    raw: Any,
    *,
    base_url: Optional[str] = None,
    rules: Optional[GroupRulesConfig] = None,
) -> FlowReport:
    graph = extract_graph_data(raw)
    issues = collect_asset_issues(graph, base_url if base_url is not None else settings.base_url)
    warnings = validate_group_rules(graph, rules or DEFAULT_GROUP_RULES_CONFIG)
    report = FlowReport(
        issues=issues,
        warnings=warnings,
        node_count=len(graph["nodes"]),
        edge_count=len(graph["edges"]),
        has_blocking_issues=any(issue.code in BLOCKING_ISSUE_CODES for issue in issues),
    )
    if report.has_blocking_issues:
        logger.warning(
            "Flow diagram references local-only assets",
            extra={"urls": [issue.url for issue in issues if issue.code in BLOCKING_ISSUE_CODES]},
        )
    logger.info(
        "Inspected flow diagram",
        extra={"issue_count": len(issues), "warning_count": len(warnings)},
    )
    return report
