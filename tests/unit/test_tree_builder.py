"""Unit tests for flat-block to document-tree assembly."""

import pytest

from proposal_engine.document import count_nodes, flatten_tree
from proposal_engine.errors import AssemblyError
from proposal_engine.models import BlockType, ContentBlock
from proposal_engine.pipeline.tree_builder import (
    DEFAULT_ROOT_ID,
    DEFAULT_ROOT_TEXT,
    build_document_tree,
)

from tests.factories import form, heading, text


def _assert_depths(node, depth=0):
    assert node.depth == depth
    for child in node.children:
        _assert_depths(child, depth + 1)


def _all_nodes(tree):
    return flatten_tree(tree)


class TestBasicShape:
    """Tests for the documented placement rules."""

    def test_heading_sections_and_form(self, response_blocks):
        tree = build_document_tree(response_blocks)

        assert len(tree) == 1
        root = tree[0]
        assert root.text == "Title"
        assert root.depth == 0
        assert [c.text for c in root.children] == ["Sec A", "Sec B", "SF-1449 Solicitation Form"]

        sec_a, sec_b, sf = root.children
        assert sec_a.type == BlockType.HEADING2
        assert sec_a.depth == 1
        assert [c.text for c in sec_a.children] == ["a1"]
        assert sec_a.children[0].depth == 2
        assert sec_b.children == []
        assert sf.type == BlockType.FORM
        assert sf.depth == 1

    def test_empty_h2_section_is_kept(self, response_blocks):
        # "Sec B" has no children of its own; the form goes to the root instead
        root = build_document_tree(response_blocks)[0]
        sec_b = next(n for n in _all_nodes([root]) if n.text == "Sec B")
        assert sec_b.children == []
        assert sec_b.depth == 1

    def test_text_goes_under_innermost_heading(self):
        blocks = [
            heading(1, "Root"),
            heading(2, "Technical"),
            text("overview"),
            heading(3, "Specs"),
            text("spec detail"),
            heading(2, "Pricing"),
            text("price"),
        ]
        root = build_document_tree(blocks)[0]

        technical, pricing = root.children
        assert [c.text for c in technical.children] == ["overview", "Specs"]
        specs = technical.children[1]
        assert [c.text for c in specs.children] == ["spec detail"]
        assert specs.children[0].depth == 3
        assert [c.text for c in pricing.children] == ["price"]

    def test_h2_closes_open_h3(self):
        blocks = [heading(1, "R"), heading(2, "A"), heading(3, "A.1"), heading(2, "B"), text("b")]
        root = build_document_tree(blocks)[0]

        b = root.children[1]
        assert b.text == "B"
        assert [c.text for c in b.children] == ["b"]

    def test_h3_without_h2_goes_under_root(self):
        blocks = [heading(1, "R"), heading(3, "Orphan"), text("t")]
        root = build_document_tree(blocks)[0]

        assert [c.text for c in root.children] == ["Orphan"]
        assert root.children[0].children[0].text == "t"

    def test_form_inside_section_is_lifted_to_root(self):
        blocks = [
            heading(1, "R"),
            heading(2, "Forms"),
            heading(3, "Attachments"),
            form("SF-1449"),
            text("after form"),
        ]
        root = build_document_tree(blocks)[0]

        assert [c.text for c in root.children] == ["Forms", "SF-1449"]
        attachments = root.children[0].children[0]
        # Text still follows the open H3
        assert [c.text for c in attachments.children] == ["after form"]

    def test_text_before_any_heading_under_root(self):
        blocks = [heading(1, "R"), text("intro"), heading(2, "A")]
        root = build_document_tree(blocks)[0]
        assert [c.text for c in root.children] == ["intro", "A"]

    def test_blocks_before_h1_attach_to_root(self):
        blocks = [text("preamble"), heading(2, "Early"), heading(1, "R"), text("body")]
        root = build_document_tree(blocks)[0]

        assert root.text == "R"
        # The H1 resets the open section, so "body" is a direct child
        assert [c.text for c in root.children] == ["preamble", "Early", "body"]


class TestSynthesizedRoot:
    """Tests for inputs without an H1."""

    def test_root_is_synthesized(self):
        blocks = [heading(2, "A"), text("a"), form("F")]
        tree = build_document_tree(blocks)

        root = tree[0]
        assert root.id == DEFAULT_ROOT_ID
        assert root.text == DEFAULT_ROOT_TEXT
        assert root.type == BlockType.HEADING1
        assert [c.text for c in root.children] == ["A", "F"]

    def test_node_count_is_input_plus_one(self):
        blocks = [heading(2, "A"), text("a"), heading(3, "A.1"), text("b"), form("F")]
        assert count_nodes(build_document_tree(blocks)) == len(blocks) + 1

    def test_generated_ids_do_not_clash_with_root(self):
        blocks = [text("x", block_id="root"), text("y")]
        root = build_document_tree(blocks)[0]

        ids = [n.id for n in _all_nodes([root])]
        assert len(ids) == len(set(ids))
        assert ids[0] == DEFAULT_ROOT_ID


class TestValidation:
    """Tests for rejected inputs."""

    def test_multiple_h1_rejected(self):
        with pytest.raises(AssemblyError, match="at most one H1"):
            build_document_tree([heading(1, "A"), text("a"), heading(1, "B")])

    def test_form_without_fields_rejected(self):
        bad_form = ContentBlock(type=BlockType.FORM, text="SF-1449")
        with pytest.raises(AssemblyError, match="no form field metadata"):
            build_document_tree([heading(1, "R"), bad_form])

    def test_assembly_error_names_assembly_stage(self):
        with pytest.raises(AssemblyError) as exc_info:
            build_document_tree([heading(1, "A"), heading(1, "B")])
        assert exc_info.value.stage.value == "assembly"


class TestInvariants:
    """Structural properties that hold for any valid input."""

    @pytest.mark.parametrize(
        "blocks",
        [
            [heading(1, "R"), heading(2, "A"), text("1"), heading(3, "A.1"), text("2"), form("F"), text("3")],
            [text("0"), heading(3, "X"), heading(2, "Y"), form("F1"), form("F2"), text("z")],
            [heading(2, "A"), heading(2, "B"), heading(2, "C")],
            [form("F")],
        ],
    )
    def test_depth_invariant(self, blocks):
        for root in build_document_tree(blocks):
            _assert_depths(root)

    @pytest.mark.parametrize(
        "blocks",
        [
            [heading(1, "R"), heading(2, "A"), form("F1"), heading(3, "B"), form("F2")],
            [heading(2, "A"), heading(3, "B"), form("F")],
        ],
    )
    def test_forms_are_root_children(self, blocks):
        root = build_document_tree(blocks)[0]
        forms = [n for n in _all_nodes([root]) if n.type == BlockType.FORM]
        assert forms
        assert all(f in root.children for f in forms)

    def test_children_keep_input_order(self):
        blocks = [heading(1, "R")] + [text(str(i)) for i in range(10)]
        root = build_document_tree(blocks)[0]

        assert [c.text for c in root.children] == [str(i) for i in range(10)]
        orders = [c.order for c in root.children]
        assert orders == sorted(orders)

    def test_single_h1_gives_single_root_with_every_block(self, response_blocks):
        tree = build_document_tree(response_blocks)
        assert len(tree) == 1
        assert sorted(n.text for n in _all_nodes(tree)) == sorted(b.text for b in response_blocks)

    def test_missing_and_duplicate_ids_are_made_unique(self):
        blocks = [heading(1, "R", "dup"), text("a", "dup"), text("b"), text("c", "dup")]
        ids = [n.id for n in _all_nodes(build_document_tree(blocks))]

        assert ids[0] == "dup"
        assert len(set(ids)) == len(ids)
        assert "block-2" in ids

    def test_builder_is_pure(self, response_blocks):
        first = build_document_tree(response_blocks)
        second = build_document_tree(response_blocks)
        assert first == second

    def test_order_is_reading_position(self):
        blocks = [
            heading(1, "R").model_copy(update={"order": 7}),
            heading(2, "A").model_copy(update={"order": 0}),
            text("a").model_copy(update={"order": 0}),
            form("F").model_copy(update={"order": 3}),
        ]
        root = build_document_tree(blocks)[0]

        assert root.order == 0
        assert [c.order for c in root.children] == [1, 3]
        assert root.children[0].children[0].order == 2

    def test_order_follows_synthesized_root(self):
        root = build_document_tree([heading(2, "A"), text("a")])[0]

        assert root.order == 0
        assert root.children[0].order == 1
        assert root.children[0].children[0].order == 2
