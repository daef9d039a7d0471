import copy
import json

import pytest

from yys_flow.diagram.group_rules import (
    DEFAULT_GROUP_RULES_CONFIG,
    GroupRulesConfig,
    RulesConfigError,
    collect_groups,
    infer_library,
    load_rules_config,
    validate_group_rules,
)
from yys_flow.diagram.node_access import NodeView


def _selector(node_id, group_id, name, library=None, avatar=None, entry_library=None):
    selected = {"name": name}
    if avatar is not None:
        selected["avatar"] = avatar
    if entry_library is not None:
        selected["library"] = entry_library
    properties = {"meta": {"groupId": group_id}, "selectedAsset": selected}
    if library is not None:
        properties["assetLibrary"] = library
    return {"id": node_id, "type": "assetSelector", "x": 0, "y": 0, "properties": properties}


def _graph(*nodes):
    return {"nodes": list(nodes), "edges": []}


def _codes(warnings):
    return [w.code for w in warnings]


def test_blacklisted_yuhun_on_shikigami():
    graph = _graph(
        _selector("n1", "g1", "辉夜姬", library="shikigami"),
        _selector("n2", "g1", "破势", library="yuhun"),
    )
    warnings = validate_group_rules(graph)
    assert _codes(warnings) == ["SHIKIGAMI_YUHUN_BLACKLIST"]
    assert warnings[0].group_id == "g1"
    assert warnings[0].node_ids == ("n1", "n2")
    assert warnings[0].message == "规则冲突：辉夜姬通常不建议携带破势。"


def test_conflicting_shikigami_pair():
    graph = _graph(
        _selector("n1", "g1", "千姬", library="shikigami"),
        _selector("n2", "g1", "腹肌清姬", library="shikigami"),
    )
    assert _codes(validate_group_rules(graph)) == ["SHIKIGAMI_CONFLICT"]


def test_missing_fire_shikigami():
    graph = _graph(_selector("n1", "g1", "大天狗", library="shikigami"))
    warnings = validate_group_rules(graph)
    assert _codes(warnings) == ["MISSING_FIRE_SHIKIGAMI"]
    assert warnings[0].node_ids == ("n1",)


def test_no_coverage_warning_without_shikigami():
    graph = _graph(_selector("n1", "g1", "破势", library="yuhun"))
    assert validate_group_rules(graph) == []
    empty_whitelist = GroupRulesConfig(fire_shikigami_whitelist=())
    assert validate_group_rules(graph, empty_whitelist) == []


def test_warnings_are_independent_and_ordered():
    graph = _graph(
        _selector("n1", "g1", "辉夜姬", library="shikigami"),
        _selector("n2", "g1", "破势", library="yuhun"),
        _selector("n3", "g2", "千姬", library="shikigami"),
        _selector("n4", "g2", "蝮骨清姬", library="shikigami"),
        _selector("n5", "g3", "酒吞童子", library="shikigami"),
    )
    warnings = validate_group_rules(graph)
    assert [(w.group_id, w.code) for w in warnings] == [
        ("g1", "SHIKIGAMI_YUHUN_BLACKLIST"),
        ("g2", "SHIKIGAMI_CONFLICT"),
        ("g3", "MISSING_FIRE_SHIKIGAMI"),
    ]


def test_multiple_warnings_for_one_group():
    config = GroupRulesConfig.model_validate(
        {
            "version": 2,
            "fireShikigamiWhitelist": ["座敷童子"],
            "shikigamiYuhunBlacklist": [{"shikigami": "茨木童子", "yuhun": "针女"}],
            "shikigamiConflictPairs": [{"left": "茨木童子", "right": "酒吞童子"}],
        }
    )
    graph = _graph(
        _selector("a", "g", "茨木童子", library="shikigami"),
        _selector("b", "g", "酒吞童子", library="shikigami"),
        _selector("c", "g", "针女", library="yuhun"),
    )
    warnings = validate_group_rules(graph, config)
    assert _codes(warnings) == ["SHIKIGAMI_YUHUN_BLACKLIST", "SHIKIGAMI_CONFLICT", "MISSING_FIRE_SHIKIGAMI"]
    # generated default messages when the rule has none
    assert warnings[0].message == "规则冲突：茨木童子 不建议携带 针女。"
    assert warnings[1].message == "规则冲突：茨木童子 与 酒吞童子 不建议同队。"
    assert all(w.node_ids == ("a", "b", "c") for w in warnings)


def test_library_inference_chain():
    by_tag = NodeView.from_raw(_selector("n", "g", "x", library="yuhun", avatar="/assets/Shikigami/a.png")).selection
    by_avatar = NodeView.from_raw(_selector("n", "g", "x", avatar="/assets/Yuhun/poshi.png")).selection
    by_entry = NodeView.from_raw(_selector("n", "g", "x", entry_library="shikigami")).selection
    unknown = NodeView.from_raw(_selector("n", "g", "x", avatar="/assets/misc/a.png")).selection
    assert infer_library(by_tag) == "yuhun"
    assert infer_library(by_avatar) == "yuhun"
    assert infer_library(by_entry) == "shikigami"
    assert infer_library(unknown) == ""


def test_grouping_skips_ineligible_nodes():
    graph = _graph(
        _selector("n1", "g1", "辉夜姬", library="shikigami"),
        _selector("n2", "", "破势", library="yuhun"),
        _selector("n3", "g1", "   ", library="yuhun"),
        {**_selector("n4", "g1", "破势", library="yuhun"), "type": "rect"},
        _selector("n5", "g1", "神秘", library="unknown"),
        "garbage",
        None,
    )
    groups = collect_groups(graph["nodes"])
    assert list(groups) == ["g1"]
    assert groups["g1"].node_ids == ["n1", "n5"]
    assert groups["g1"].shikigami_names == ["辉夜姬"]
    assert groups["g1"].yuhun_names == []
    assert groups["g1"].unclassified_names == ["神秘"]
    assert validate_group_rules(graph) == []


def test_validation_is_total_and_pure():
    assert validate_group_rules(None) == []
    assert validate_group_rules({"nodes": "x"}) == []
    graph = _graph(_selector("n1", "g1", "大天狗", library="shikigami"))
    before = copy.deepcopy(graph)
    config_before = DEFAULT_GROUP_RULES_CONFIG.model_dump()
    validate_group_rules(graph)
    assert graph == before
    assert DEFAULT_GROUP_RULES_CONFIG.model_dump() == config_before


def test_warning_serializes_with_camel_case_keys():
    graph = _graph(_selector("n1", "g1", "大天狗", library="shikigami"))
    dumped = validate_group_rules(graph)[0].model_dump(by_alias=True)
    assert dumped["groupId"] == "g1"
    assert dumped["nodeIds"] == ("n1",)


def test_load_rules_config(tmp_path):
    path = tmp_path / "rules.json"
    path.write_text(
        json.dumps({"version": 3, "fireShikigamiWhitelist": ["食灵"], "shikigamiConflictPairs": []}),
        encoding="utf-8",
    )
    config = load_rules_config(str(path))
    assert config.version == 3
    assert config.fire_shikigami_whitelist == ("食灵",)
    assert config.shikigami_yuhun_blacklist == ()


def test_load_rules_config_errors(tmp_path):
    with pytest.raises(RulesConfigError):
        load_rules_config(str(tmp_path / "missing.json"))
    bad = tmp_path / "bad.json"
    bad.write_text('{"fireShikigamiWhitelist": "not-a-list"}', encoding="utf-8")
    with pytest.raises(RulesConfigError) as excinfo:
        load_rules_config(str(bad))
    assert excinfo.value.path == str(bad)
