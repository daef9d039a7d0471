"""Pydantic schemas for API."""
from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from yys_flow.diagram.assets import AssetIssue
from yys_flow.diagram.group_rules import RuleWarning


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FlowReport(_CamelModel):
    issues: List[AssetIssue]
    warnings: List[RuleWarning]
    node_count: int
    edge_count: int
    has_blocking_issues: bool


class PreviewRequest(_CamelModel):
    graph: Any = None
    base_url: Optional[str] = None
    policy: Optional[Literal["degrade", "strict"]] = None
    padding: Optional[float] = None


class PreviewResponse(_CamelModel):
    graph: Any


class InspectRequest(_CamelModel):
    graph: Any = None
    base_url: Optional[str] = None
