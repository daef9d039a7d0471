from yys_flow.diagram.node_access import NodeView, to_number


def test_to_number_coercion():
    assert to_number(3, 0) == 3.0
    assert to_number("12.5", 0) == 12.5
    assert to_number(" 7 ", 0) == 7.0
    assert to_number("", 4) == 4
    assert to_number("abc", 4) == 4
    assert to_number(True, 4) == 4
    assert to_number(float("nan"), 4) == 4
    assert to_number("inf", 4) == 4
    assert to_number(None, 4) == 4
    assert to_number(10**400, 4) == 4
    assert to_number("1_000", 4) == 4


def test_view_of_non_mapping_node_is_empty():
    view = NodeView.from_raw("not a node")
    assert view.id is None
    assert view.type == ""
    assert view.position.x == 0 and view.position.y == 0
    assert view.size.width == 180 and view.size.height == 100
    assert view.selection.group_id == ""


def test_size_prefers_direct_field_then_style_then_properties():
    node = {"width": 10, "properties": {"style": {"width": 20, "height": 30}, "width": 40, "height": 50}}
    size = NodeView.from_raw(node).size
    assert (size.width, size.height) == (10, 30)


def test_present_but_unparsable_size_falls_back_to_default():
    node = {"width": "wide", "properties": {"style": {"width": 20}}}
    assert NodeView.from_raw(node).size.width == 180


def test_selection_fields_are_trimmed():
    node = {
        "properties": {
            "assetLibrary": " shikigami ",
            "meta": {"groupId": " team-1 "},
            "selectedAsset": {"name": " 千姬 ", "avatar": "/assets/Shikigami/sp/x.png", "library": 3},
        }
    }
    selection = NodeView.from_raw(node).selection
    assert selection.group_id == "team-1"
    assert selection.name == "千姬"
    assert selection.library_tag == "shikigami"
    assert selection.entry_library == ""
