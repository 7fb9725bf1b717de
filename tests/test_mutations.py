"""Tests for the pure tree mutations.

Tests coverage for:
- src/blockforge/document/mutations.py
"""

from __future__ import annotations

import copy

import pytest

from blockforge.document import mutations
from blockforge.document.ids import IdFactory
from blockforge.document.model import collect_ids, document_from_dicts, document_to_dicts, find_node, iter_nodes
from tests.utils import make_container, make_node, sample_document, shape


@pytest.fixture
def doc():
    return sample_document()


@pytest.fixture
def flat():
    return [make_node("a"), make_node("b"), make_node("c")]


class TestInsert:
    """Tests for insert()."""

    def test_insert_at_root_position(self, flat):
        result = mutations.insert(flat, make_node("x"), None, 1)
        assert shape(result) == ["a", "x", "b", "c"]

    def test_insert_appends_without_position(self, flat):
        result = mutations.insert(flat, make_node("x"))
        assert shape(result) == ["a", "b", "c", "x"]

    @pytest.mark.parametrize(("position", "expected"), [(-5, 0), (99, 3)])
    def test_position_is_clamped(self, flat, position, expected):
        result = mutations.insert(flat, make_node("x"), None, position)
        assert [n.id for n in result].index("x") == expected

    def test_insert_into_nested_parent(self, doc):
        result = mutations.insert(doc, make_node("p0"), "body", 0)
        assert shape(result[0].children[1].children) == ["p0", "p1", "p2"]

    def test_insert_into_leaf_creates_children(self, doc):
        result = mutations.insert(doc, make_node("x"), "footer")
        assert shape([result[1]]) == [("footer", ["x"])]

    def test_insert_into_empty_container(self, doc):
        result = mutations.insert(doc, make_node("x"), "empty", 0)
        assert find_node(result, "empty").children == [make_node("x")]

    def test_missing_parent_is_noop(self, doc):
        assert mutations.insert(doc, make_node("x"), "missing") is doc

    def test_duplicate_id_is_noop(self, doc):
        assert mutations.insert(doc, make_node("p1")) is doc

    def test_duplicate_id_inside_subtree_is_noop(self, doc):
        node = make_container("fresh", make_node("footer"))
        assert mutations.insert(doc, node) is doc

    def test_input_untouched(self, doc):
        before = copy.deepcopy(doc)
        mutations.insert(doc, make_node("x"), "body", 1)
        assert doc == before

    def test_stores_private_copy(self, flat):
        node = make_node("x", text="original")
        result = mutations.insert(flat, node)
        node.settings["text"] = "changed"
        assert find_node(result, "x").settings["text"] == "original"


class TestUpdate:
    """Tests for update() and set_settings()."""

    def test_replaces_settings(self, doc):
        result = mutations.update(doc, "title", {"settings": {"text": "Hi"}})
        assert find_node(result, "title").settings == {"text": "Hi"}

    def test_flags(self, doc):
        result = mutations.update(doc, "p1", {"locked": True, "hidden": True})
        node = find_node(result, "p1")
        assert node.locked and node.hidden

    def test_children_preserved(self, doc):
        result = mutations.update(doc, "body", {"settings": {"gap": 4}})
        assert shape(find_node(result, "body").children) == ["p1", "p2"]

    def test_id_is_ignored(self, doc):
        result = mutations.update(doc, "p1", {"id": "renamed", "type": "quote"})
        node = find_node(result, "p1")
        assert node.type == "quote"
        assert find_node(result, "renamed") is None

    def test_only_id_is_noop(self, doc):
        assert mutations.update(doc, "p1", {"id": "renamed"}) is doc

    def test_unknown_field_raises(self, doc):
        with pytest.raises(TypeError, match="Unknown node fields"):
            mutations.update(doc, "p1", {"colour": "red"})

    def test_missing_node_is_noop(self, doc):
        assert mutations.update(doc, "missing", {"type": "quote"}) is doc

    def test_children_reordered(self, doc):
        body = find_node(doc, "body")
        result = mutations.update(doc, "body", {"children": list(reversed(body.children))})
        assert shape(find_node(result, "body").children) == ["p2", "p1"]

    def test_children_replaced_with_new_nodes(self, doc):
        result = mutations.update(doc, "body", {"children": [make_node("p9")]})
        assert collect_ids(result) == collect_ids(doc) - {"p1", "p2"} | {"p9"}

    @pytest.mark.parametrize(
        "children",
        [
            [make_node("footer")],
            [make_node("body")],
            [make_container("wrap", make_node("title"))],
            [make_node("x"), make_node("x")],
        ],
    )
    def test_children_with_taken_ids_is_noop(self, doc, children):
        assert mutations.update(doc, "body", {"children": children}) is doc

    def test_untouched_subtrees_are_shared(self, doc):
        result = mutations.update(doc, "p1", {"settings": {"text": "uno"}})
        assert result[1] is doc[1]
        assert result[0].children[0] is doc[0].children[0]
        assert result[0].children[1].children[1] is doc[0].children[1].children[1]
        assert result[0] is not doc[0]

    def test_set_settings_merges(self, doc):
        result = mutations.set_settings(doc, "title", {"text": "Hi", "align": "center"})
        assert find_node(result, "title").settings == {"text": "Hi", "level": 2, "align": "center"}
        assert find_node(doc, "title").settings == {"text": "Hello", "level": 2}

    def test_set_settings_missing_node(self, doc):
        assert mutations.set_settings(doc, "missing", {"a": 1}) is doc


class TestRemove:
    """Tests for remove()."""

    def test_remove_leaf(self, doc):
        result = mutations.remove(doc, "p1")
        assert shape(find_node(result, "body").children) == ["p2"]

    def test_remove_subtree(self, doc):
        result = mutations.remove(doc, "page")
        assert shape(result) == ["footer"]
        assert collect_ids(result) == {"footer"}

    def test_remove_missing_is_noop(self, doc):
        assert mutations.remove(doc, "missing") is doc

    def test_removing_last_child_keeps_empty_list(self):
        doc = [make_container("box", make_node("only"))]
        result = mutations.remove(doc, "only")
        assert result[0].children == []


class TestMove:
    """Tests for move()."""

    def test_move_forward_within_root(self, flat):
        result = mutations.move(flat, "a", None, 2)
        assert shape(result) == ["b", "c", "a"]

    def test_move_backward_within_root(self, flat):
        result = mutations.move(flat, "c", None, 0)
        assert shape(result) == ["c", "a", "b"]

    def test_move_into_container(self, doc):
        result = mutations.move(doc, "footer", "body", 1)
        assert shape(find_node(result, "body").children) == ["p1", "footer", "p2"]
        assert shape(result) == [("page", ["title", ("body", ["p1", "footer", "p2"]), ("empty", [])])]

    def test_move_out_to_root(self, doc):
        result = mutations.move(doc, "p2", None, 0)
        assert shape(result)[0] == "p2"
        assert shape(find_node(result, "body").children) == ["p1"]

    def test_move_into_empty_container(self, doc):
        result = mutations.move(doc, "title", "empty", 0)
        assert shape(find_node(result, "empty").children) == ["title"]

    def test_move_to_current_position_is_noop(self, flat):
        assert mutations.move(flat, "b", None, 1) is flat
        assert mutations.move(flat, "c", None, None) is flat

    def test_move_into_self_rejected(self, doc):
        assert mutations.move(doc, "body", "body", 0) is doc

    def test_move_into_descendant_rejected(self, doc):
        assert mutations.move(doc, "page", "body", 0) is doc

    def test_missing_node_is_noop(self, doc):
        assert mutations.move(doc, "missing", None, 0) is doc

    def test_missing_target_is_noop(self, doc):
        assert mutations.move(doc, "p1", "missing", 0) is doc

    def test_subtree_travels_intact(self, doc):
        result = mutations.move(doc, "body", None, None)
        moved = result[-1]
        assert moved == find_node(doc, "body")
        assert sorted(collect_ids(result)) == sorted(collect_ids(doc))

    def test_input_untouched(self, doc):
        before = copy.deepcopy(doc)
        mutations.move(doc, "p1", None, 0)
        assert doc == before


class TestDuplicate:
    """Tests for duplicate() and duplicate_with_id()."""

    def test_clone_inserted_after_original(self, flat):
        result, clone_id = mutations.duplicate_with_id(flat, "a")
        assert [n.id for n in result][0] == "a"
        assert result[1].id == clone_id
        assert [n.id for n in result][2:] == ["b", "c"]

    def test_clone_matches_apart_from_ids(self, doc):
        result, clone_id = mutations.duplicate_with_id(doc, "body")
        clone = find_node(result, clone_id)
        original = find_node(doc, "body")
        assert [n.type for n in clone.depth_first()] == [n.type for n in original.depth_first()]
        assert [n.settings for n in clone.depth_first()] == [n.settings for n in original.depth_first()]

    def test_clone_ids_are_fresh(self, doc):
        result = mutations.duplicate(doc, "page")
        ids = [n.id for n in iter_nodes(result)]
        assert len(ids) == len(set(ids))
        assert len(ids) == 2 * len(collect_ids(doc)) - 1

    def test_clone_settings_are_independent(self, doc):
        result, clone_id = mutations.duplicate_with_id(doc, "title")
        find_node(result, clone_id).settings["text"] = "changed"
        assert find_node(result, "title").settings["text"] == "Hello"

    def test_missing_node(self, doc):
        result, clone_id = mutations.duplicate_with_id(doc, "missing")
        assert result is doc
        assert clone_id is None
        assert mutations.duplicate(doc, "missing") is doc

    def test_uses_id_factory(self, doc):
        result, clone_id = mutations.duplicate_with_id(doc, "p1", IdFactory(prefix="copy", include_type=True))
        assert clone_id.startswith("copy-paragraph-")
        assert shape(find_node(result, "body").children) == ["p1", clone_id, "p2"]


class TestProperties:
    """Whole-document properties that must hold for any edit."""

    def test_serialization_round_trip_after_edits(self, doc):
        edited = mutations.duplicate(doc, "body")
        edited = mutations.move(edited, "footer", "empty", 0)
        edited = mutations.set_settings(edited, "p2", {"text": "deux"})
        assert document_from_dicts(document_to_dicts(edited)) == edited

    @pytest.mark.parametrize("node_id", ["page", "title", "body", "p1", "empty", "footer"])
    def test_duplicate_keeps_ids_unique(self, doc, node_id):
        result = mutations.duplicate(doc, node_id)
        ids = [n.id for n in iter_nodes(result)]
        assert len(ids) == len(set(ids))

    @pytest.mark.parametrize(
        ("node_id", "target"),
        [("page", "page"), ("page", "title"), ("page", "p2"), ("body", "p1"), ("empty", "empty")],
    )
    def test_never_moves_into_own_subtree(self, doc, node_id, target):
        assert mutations.move(doc, node_id, target, 0) is doc
