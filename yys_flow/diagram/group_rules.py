"""Team-composition rules for grouped selector nodes.

Authors cluster ``assetSelector`` nodes into groups (one team slot each) via
``properties.meta.groupId``. Each group's picks are split into shikigami and
yuhun by inference, then checked against a rule set: shikigami/yuhun
blacklist pairs, shikigami pairs that should not share a team, and the
requirement that a team carry at least one fire (onibi) supplier.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from yys_flow.diagram.node_access import NodeView, Selection
from yys_flow.utils.file_utils import read_json_file

logger = logging.getLogger(__name__)

SELECTOR_NODE_TYPE = "assetSelector"
SHIKIGAMI = "shikigami"
YUHUN = "yuhun"

# Avatar path fragments used when a node carries no explicit library tag.
_AVATAR_LIBRARY_HINTS: Tuple[Tuple[str, str], ...] = (
    ("/Yuhun/", YUHUN),
    ("/Shikigami/", SHIKIGAMI),
)

RuleWarningCode = Literal["SHIKIGAMI_YUHUN_BLACKLIST", "SHIKIGAMI_CONFLICT", "MISSING_FIRE_SHIKIGAMI"]

MISSING_FIRE_MESSAGE = "规则提示：当前分组未检测到鬼火式神，建议补充供火位。"


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ShikigamiYuhunBlacklistRule(_FrozenModel):
    shikigami: str
    yuhun: str
    message: Optional[str] = None


class ShikigamiConflictRule(_FrozenModel):
    left: str
    right: str
    message: Optional[str] = None


class GroupRulesConfig(_FrozenModel):
    version: int = 1
    fire_shikigami_whitelist: Tuple[str, ...] = Field(default=(), alias="fireShikigamiWhitelist")
    shikigami_yuhun_blacklist: Tuple[ShikigamiYuhunBlacklistRule, ...] = Field(
        default=(), alias="shikigamiYuhunBlacklist"
    )
    shikigami_conflict_pairs: Tuple[ShikigamiConflictRule, ...] = Field(default=(), alias="shikigamiConflictPairs")


class RuleWarning(_FrozenModel):
    code: RuleWarningCode
    group_id: str = Field(alias="groupId")
    node_ids: Tuple[str, ...] = Field(alias="nodeIds")
    message: str


class RulesConfigError(ValueError):
    """Raised when a rules file cannot be read or does not match the schema."""

    def __init__(self, message: str, path: str):
        super().__init__(message)
        self.path = path


DEFAULT_GROUP_RULES_CONFIG = GroupRulesConfig(
    version=1,
    fire_shikigami_whitelist=("辉夜姬", "因幡辉夜姬", "追月神", "座敷童子", "千姬", "帝释天", "食灵"),
    shikigami_yuhun_blacklist=(
        ShikigamiYuhunBlacklistRule(shikigami="辉夜姬", yuhun="破势", message="规则冲突：辉夜姬通常不建议携带破势。"),
    ),
    shikigami_conflict_pairs=(
        ShikigamiConflictRule(left="千姬", right="腹肌清姬", message="规则冲突：千姬与腹肌清姬不建议同队。"),
        ShikigamiConflictRule(left="千姬", right="蝮骨清姬", message="规则冲突：千姬与蝮骨清姬不建议同队。"),
    ),
)


def load_rules_config(path: str) -> GroupRulesConfig:
    """Load a camelCase JSON rules file."""
    try:
        payload = read_json_file(path)
    except (OSError, ValueError) as exc:
        raise RulesConfigError(f"Cannot read rules config: {exc}", path) from exc
    try:
        config = GroupRulesConfig.model_validate(payload)
    except ValidationError as exc:
        raise RulesConfigError(f"Invalid rules config: {exc}", path) from exc
    logger.info(
        "Loaded group rules config",
        extra={
            "path": path,
            "version": config.version,
            "blacklist_rules": len(config.shikigami_yuhun_blacklist),
            "conflict_rules": len(config.shikigami_conflict_pairs),
        },
    )
    return config


# -- category inference ------------------------------------------------------


def library_from_tag(selection: Selection) -> str:
    return selection.library_tag


def library_from_avatar(selection: Selection) -> str:
    for fragment, library in _AVATAR_LIBRARY_HINTS:
        if fragment in selection.avatar:
            return library
    return ""


def library_from_entry(selection: Selection) -> str:
    return selection.entry_library


_LIBRARY_CHAIN = (library_from_tag, library_from_avatar, library_from_entry)


def infer_library(selection: Selection) -> str:
    """First non-empty answer of: explicit tag, avatar path, entry field."""
    for source in _LIBRARY_CHAIN:
        library = source(selection)
        if library:
            return library
    return ""


# -- grouping ----------------------------------------------------------------


@dataclass
class GroupSnapshot:
    node_ids: List[str] = field(default_factory=list)
    shikigami_names: List[str] = field(default_factory=list)
    yuhun_names: List[str] = field(default_factory=list)
    unclassified_names: List[str] = field(default_factory=list)


def collect_groups(nodes: Any) -> Dict[str, GroupSnapshot]:
    """Group selector nodes by groupId, in first-seen order."""
    groups: Dict[str, GroupSnapshot] = {}
    if not isinstance(nodes, list):
        return groups
    for node in nodes:
        view = NodeView.from_raw(node)
        if view.type != SELECTOR_NODE_TYPE:
            continue
        selection = view.selection
        if not selection.group_id or not selection.name:
            continue

        snapshot = groups.setdefault(selection.group_id, GroupSnapshot())
        if view.id is not None:
            snapshot.node_ids.append(str(view.id))
        library = infer_library(selection)
        if library == SHIKIGAMI:
            snapshot.shikigami_names.append(selection.name)
        elif library == YUHUN:
            snapshot.yuhun_names.append(selection.name)
        else:
            snapshot.unclassified_names.append(selection.name)
    return groups


# -- evaluation --------------------------------------------------------------


def _warning(code: RuleWarningCode, group_id: str, snapshot: GroupSnapshot, message: str) -> RuleWarning:
    return RuleWarning(code=code, group_id=group_id, node_ids=tuple(snapshot.node_ids), message=message)


def _evaluate_group(group_id: str, snapshot: GroupSnapshot, config: GroupRulesConfig) -> List[RuleWarning]:
    warnings: List[RuleWarning] = []

    for rule in config.shikigami_yuhun_blacklist:
        if rule.shikigami in snapshot.shikigami_names and rule.yuhun in snapshot.yuhun_names:
            message = rule.message or f"规则冲突：{rule.shikigami} 不建议携带 {rule.yuhun}。"
            warnings.append(_warning("SHIKIGAMI_YUHUN_BLACKLIST", group_id, snapshot, message))

    for rule in config.shikigami_conflict_pairs:
        if rule.left in snapshot.shikigami_names and rule.right in snapshot.shikigami_names:
            message = rule.message or f"规则冲突：{rule.left} 与 {rule.right} 不建议同队。"
            warnings.append(_warning("SHIKIGAMI_CONFLICT", group_id, snapshot, message))

    if snapshot.shikigami_names:
        whitelist = set(config.fire_shikigami_whitelist)
        if not any(name in whitelist for name in snapshot.shikigami_names):
            warnings.append(_warning("MISSING_FIRE_SHIKIGAMI", group_id, snapshot, MISSING_FIRE_MESSAGE))

    return warnings


def validate_group_rules(
    document: Any,
    config: GroupRulesConfig = DEFAULT_GROUP_RULES_CONFIG,
) -> List[RuleWarning]:
    """Evaluate *config* against every group in *document*.

    Pure and total: malformed nodes are skipped, neither argument is mutated.
    """
    nodes = document.get("nodes") if isinstance(document, Mapping) else None
    warnings: List[RuleWarning] = []
    for group_id, snapshot in collect_groups(nodes).items():
        warnings.extend(_evaluate_group(group_id, snapshot, config))
    return warnings
