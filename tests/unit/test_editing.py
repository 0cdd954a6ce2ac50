"""Unit tests for document editing operations."""

import pytest

from proposal_engine.document import (
    count_nodes,
    edit_block_text,
    find_node,
    move_block,
    update_form_field,
)
from proposal_engine.errors import DocumentEditError


def _child_ids(node):
    return [c.id for c in node.children]


class TestLookup:
    """Tests for tree traversal helpers."""

    def test_find_nested(self, document):
        node = find_node(document.blocks, "intro")
        assert node.depth == 2
        assert node.text.startswith("We install")

    def test_find_missing(self, document):
        assert find_node(document.blocks, "nope") is None

    def test_count(self, document):
        assert count_nodes(document.blocks) == 6


class TestEditBlockText:
    """Tests for text edits."""

    def test_edit_returns_new_document(self, document):
        edited = edit_block_text(document, "intro", "Rewritten introduction.")

        assert find_node(edited.blocks, "intro").text == "Rewritten introduction."
        assert find_node(document.blocks, "intro").text.startswith("We install")
        assert edited.metadata.version == document.metadata.version + 1
        assert edited.metadata.last_modified >= document.metadata.last_modified

    def test_other_nodes_unchanged(self, document):
        edited = edit_block_text(document, "intro", "x")
        assert find_node(edited.blocks, "submission") == find_node(document.blocks, "submission")
        assert edited.stage_outputs == document.stage_outputs

    def test_unknown_block(self, document):
        with pytest.raises(DocumentEditError, match="not found"):
            edit_block_text(document, "missing", "x")

    def test_non_editable_block(self, document):
        intro = find_node(document.blocks, "intro").model_copy(update={"editable": False})
        overview = document.blocks[0].children[0]
        overview = overview.model_copy(update={"children": [intro, overview.children[1]]})
        root = document.blocks[0].model_copy(
            update={"children": [overview, *document.blocks[0].children[1:]]}
        )
        locked = document.model_copy(update={"blocks": [root]})

        with pytest.raises(DocumentEditError, match="not editable"):
            edit_block_text(locked, "intro", "x")


class TestMoveBlock:
    """Tests for sibling reordering."""

    def test_move_down(self, document):
        moved = move_block(document, "intro", "down")
        overview = find_node(moved.blocks, "overview")

        assert _child_ids(overview) == ["submission", "intro"]
        assert moved.metadata.version == 2

    def test_move_up_swaps_order_values(self, document):
        before = {n.id: n.order for n in document.blocks[0].children}
        moved = move_block(document, "forms", "up")
        root = moved.blocks[0]

        assert _child_ids(root) == ["forms", "overview", "sf1449"]
        assert root.children[0].order == before["overview"]
        assert root.children[1].order == before["forms"]

    def test_children_travel_with_node(self, document):
        moved = move_block(document, "overview", "down")
        assert _child_ids(moved.blocks[0]) == ["forms", "overview", "sf1449"]
        assert _child_ids(moved.blocks[0].children[1]) == ["intro", "submission"]

    @pytest.mark.parametrize(
        "block_id,direction",
        [("intro", "up"), ("submission", "down"), ("title", "up"), ("sf1449", "down")],
    )
    def test_boundary_moves_rejected(self, document, block_id, direction):
        with pytest.raises(DocumentEditError, match="cannot move"):
            move_block(document, block_id, direction)

    def test_unknown_direction(self, document):
        with pytest.raises(DocumentEditError):
            move_block(document, "intro", "sideways")

    def test_unknown_block(self, document):
        with pytest.raises(DocumentEditError, match="not found"):
            move_block(document, "missing", "up")


class TestUpdateFormField:
    """Tests for form field edits."""

    def test_update_text_field(self, document):
        edited = update_form_field(document, "sf1449", "f1", "Carolina Interiors LLC")
        fields = find_node(edited.blocks, "sf1449").metadata.form_fields

        assert fields[0].value == "Carolina Interiors LLC"
        assert fields[1].value == ""
        assert edited.metadata.version == 2

    def test_select_accepts_option(self, document):
        edited = update_form_field(document, "sf1449", "f2", "Small")
        assert find_node(edited.blocks, "sf1449").metadata.form_fields[1].value == "Small"

    def test_select_rejects_unknown_option(self, document):
        with pytest.raises(DocumentEditError, match="not an option"):
            update_form_field(document, "sf1449", "f2", "Medium")

    def test_select_can_be_cleared(self, document):
        edited = update_form_field(document, "sf1449", "f2", "")
        assert find_node(edited.blocks, "sf1449").metadata.form_fields[1].value == ""

    def test_unknown_field(self, document):
        with pytest.raises(DocumentEditError, match="Field f9 not found"):
            update_form_field(document, "sf1449", "f9", "x")

    def test_not_a_form(self, document):
        with pytest.raises(DocumentEditError, match="not a form"):
            update_form_field(document, "intro", "f1", "x")

    def test_edits_chain(self, document):
        edited = update_form_field(document, "sf1449", "f1", "A")
        edited = edit_block_text(edited, "intro", "B")
        edited = move_block(edited, "intro", "down")

        assert edited.metadata.version == 4
        assert find_node(edited.blocks, "sf1449").metadata.form_fields[0].value == "A"
        assert find_node(edited.blocks, "intro").text == "B"
