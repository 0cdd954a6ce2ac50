"""Flat block list to nested document tree.

``build_document_tree`` is a pure function. It folds over the ordered blocks
once, assigning each block a parent according to heading level, then
materialises frozen ``DocumentNode`` objects with structural depth.

Placement rules:
- the first H1 is the root; without one a default root is synthesised
- H2 opens a section under the root and closes any open H3
- H3 opens a subsection under the open H2, or under the root if none
- Text goes under the innermost open heading
- Form always goes directly under the root

Node ``order`` is the block's position in the flat list, with a synthesised
root at 0 and the blocks after it. Any ``order`` the model put on a block is
replaced so sibling moves swap distinct values.
"""

from functools import reduce
from typing import NamedTuple, Optional, Sequence

import structlog

from proposal_engine.errors import AssemblyError
from proposal_engine.models.document import DocumentNode
from proposal_engine.models.enums import BlockType
from proposal_engine.models.stages import ContentBlock

logger = structlog.get_logger(__name__)

DEFAULT_ROOT_TEXT = "RFQ Response"
DEFAULT_ROOT_ID = "root"

# Parent index used for the synthesised root
_SYNTHETIC = -1


class _FoldState(NamedTuple):
    root: int
    h2: Optional[int] = None
    h3: Optional[int] = None
    parents: tuple[Optional[int], ...] = ()


def _place(state: _FoldState, item: tuple[int, ContentBlock]) -> _FoldState:
    index, block = item

    if index == state.root:
        return state._replace(h2=None, h3=None, parents=state.parents + (None,))

    if block.type == BlockType.HEADING2:
        return state._replace(h2=index, h3=None, parents=state.parents + (state.root,))

    if block.type == BlockType.HEADING3:
        parent = state.h2 if state.h2 is not None else state.root
        return state._replace(h3=index, parents=state.parents + (parent,))

    if block.type == BlockType.FORM:
        return state._replace(parents=state.parents + (state.root,))

    # Text
    if state.h3 is not None:
        parent = state.h3
    elif state.h2 is not None:
        parent = state.h2
    else:
        parent = state.root
    return state._replace(parents=state.parents + (parent,))


def _validate(blocks: Sequence[ContentBlock]) -> int:
    """Check assembly preconditions and return the root index."""
    h1_positions = [i for i, b in enumerate(blocks) if b.type == BlockType.HEADING1]
    if len(h1_positions) > 1:
        raise AssemblyError(
            f"Expected at most one H1 block, found {len(h1_positions)} "
            f"at positions {h1_positions}"
        )

    for i, block in enumerate(blocks):
        if block.type == BlockType.FORM and (
            block.metadata is None or not block.metadata.form_fields
        ):
            raise AssemblyError(
                f"Form block '{block.id or i}' at position {i} has no form field metadata"
            )

    return h1_positions[0] if h1_positions else _SYNTHETIC


def _unique_ids(blocks: Sequence[ContentBlock], offset: int) -> list[str]:
    """Fill missing ids and disambiguate duplicates, keeping first occurrences."""
    taken: set[str] = {DEFAULT_ROOT_ID} if offset else set()
    ids = []
    for i, block in enumerate(blocks):
        candidate = block.id or f"block-{i + offset}"
        if candidate in taken:
            suffix = i + offset
            while f"{candidate}-{suffix}" in taken:
                suffix += 1
            candidate = f"{candidate}-{suffix}"
        taken.add(candidate)
        ids.append(candidate)
    return ids


def build_document_tree(blocks: Sequence[ContentBlock]) -> list[DocumentNode]:
    """Assemble ordered flat blocks into a single-rooted tree.

    Args:
        blocks: Blocks in reading order, as produced by the writing stage.

    Returns:
        A list holding exactly one root node.

    Raises:
        AssemblyError: If there is more than one H1 or a Form block has no
            field metadata.
    """
    root = _validate(blocks)
    synthesized = root == _SYNTHETIC
    offset = 1 if synthesized else 0

    state = reduce(_place, enumerate(blocks), _FoldState(root=root))
    ids = _unique_ids(blocks, offset)

    children_of: dict[int, list[int]] = {}
    for index, parent in enumerate(state.parents):
        if parent is not None:
            children_of.setdefault(parent, []).append(index)

    def materialize(index: int, depth: int) -> DocumentNode:
        block = blocks[index]
        return DocumentNode(
            id=ids[index],
            type=block.type,
            text=block.text,
            order=index + offset,
            editable=block.editable,
            metadata=block.metadata,
            depth=depth,
            children=[materialize(child, depth + 1) for child in children_of.get(index, [])],
        )

    if synthesized:
        root_node = DocumentNode(
            id=DEFAULT_ROOT_ID,
            type=BlockType.HEADING1,
            text=DEFAULT_ROOT_TEXT,
            order=0,
            depth=0,
            children=[materialize(child, 1) for child in children_of.get(_SYNTHETIC, [])],
        )
    else:
        root_node = materialize(root, 0)

    logger.debug(
        "document_tree_built",
        input_blocks=len(blocks),
        synthesized_root=synthesized,
        root_children=len(root_node.children),
    )
    return [root_node]
