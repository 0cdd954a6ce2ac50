"""Editor operations on a generated document.

Nodes are immutable, so every edit rebuilds the path from the root to the
changed node and returns a new GeneratedDocument with its version bumped.
"""

from datetime import datetime, timezone
from typing import Callable, Iterator, Literal, Optional, Sequence

import structlog

from proposal_engine.errors import DocumentEditError
from proposal_engine.models.document import DocumentNode, GeneratedDocument
from proposal_engine.models.enums import BlockType, FieldInputType

logger = structlog.get_logger(__name__)

Direction = Literal["up", "down"]


def iter_nodes(nodes: Sequence[DocumentNode]) -> Iterator[DocumentNode]:
    """Pre-order traversal."""
    for node in nodes:
        yield node
        yield from iter_nodes(node.children)


def flatten_tree(nodes: Sequence[DocumentNode]) -> list[DocumentNode]:
    return list(iter_nodes(nodes))


def count_nodes(nodes: Sequence[DocumentNode]) -> int:
    return sum(1 for _ in iter_nodes(nodes))


def find_node(nodes: Sequence[DocumentNode], block_id: str) -> Optional[DocumentNode]:
    for node in iter_nodes(nodes):
        if node.id == block_id:
            return node
    return None


def _require(document: GeneratedDocument, block_id: str) -> DocumentNode:
    node = find_node(document.blocks, block_id)
    if node is None:
        raise DocumentEditError(f"Block not found: {block_id}")
    return node


def _transform_siblings(
    nodes: list[DocumentNode],
    block_id: str,
    fn: Callable[[list[DocumentNode], int], list[DocumentNode]],
) -> Optional[list[DocumentNode]]:
    """Apply ``fn`` to the sibling list holding ``block_id``; None if absent."""
    for index, node in enumerate(nodes):
        if node.id == block_id:
            return fn(nodes, index)

    for index, node in enumerate(nodes):
        children = _transform_siblings(node.children, block_id, fn)
        if children is not None:
            updated = list(nodes)
            updated[index] = node.model_copy(update={"children": children})
            return updated

    return None


def _replace_node(
    document: GeneratedDocument,
    block_id: str,
    update: Callable[[DocumentNode], DocumentNode],
) -> GeneratedDocument:
    def apply(siblings: list[DocumentNode], index: int) -> list[DocumentNode]:
        updated = list(siblings)
        updated[index] = update(siblings[index])
        return updated

    blocks = _transform_siblings(list(document.blocks), block_id, apply)
    if blocks is None:
        raise DocumentEditError(f"Block not found: {block_id}")
    return _bump(document, blocks)


def _bump(document: GeneratedDocument, blocks: list[DocumentNode]) -> GeneratedDocument:
    metadata = document.metadata.model_copy(update={
        "version": document.metadata.version + 1,
        "last_modified": datetime.now(timezone.utc),
    })
    return document.model_copy(update={"blocks": blocks, "metadata": metadata})


def edit_block_text(document: GeneratedDocument, block_id: str, text: str) -> GeneratedDocument:
    """Replace the text of one block."""
    node = _require(document, block_id)
    if not node.editable:
        raise DocumentEditError(f"Block {block_id} is not editable")

    logger.debug("block_text_edited", block_id=block_id, chars=len(text))
    return _replace_node(document, block_id, lambda n: n.model_copy(update={"text": text}))


def move_block(document: GeneratedDocument, block_id: str, direction: Direction) -> GeneratedDocument:
    """Swap a block with its previous or next sibling.

    Raises:
        DocumentEditError: If the block is unknown or already at that end.
    """
    if direction not in ("up", "down"):
        raise DocumentEditError(f"Unknown direction: {direction}")
    _require(document, block_id)

    def swap(siblings: list[DocumentNode], index: int) -> list[DocumentNode]:
        target = index - 1 if direction == "up" else index + 1
        if target < 0 or target >= len(siblings):
            raise DocumentEditError(f"Block {block_id} cannot move {direction}")
        updated = list(siblings)
        a, b = siblings[index], siblings[target]
        updated[target] = a.model_copy(update={"order": b.order})
        updated[index] = b.model_copy(update={"order": a.order})
        return updated

    blocks = _transform_siblings(list(document.blocks), block_id, swap)
    logger.debug("block_moved", block_id=block_id, direction=direction)
    return _bump(document, blocks)


def update_form_field(
    document: GeneratedDocument,
    block_id: str,
    field_id: str,
    value: str,
) -> GeneratedDocument:
    """Set the value of one field of a Form block."""
    node = _require(document, block_id)
    if node.type != BlockType.FORM or node.metadata is None:
        raise DocumentEditError(f"Block {block_id} is not a form")
    if not node.editable:
        raise DocumentEditError(f"Block {block_id} is not editable")

    fields = list(node.metadata.form_fields)
    for index, field in enumerate(fields):
        if field.id == field_id:
            break
    else:
        raise DocumentEditError(f"Field {field_id} not found in form {block_id}")

    if (
        field.type == FieldInputType.SINGLE_SELECT
        and field.options
        and value
        and value not in field.options
    ):
        raise DocumentEditError(
            f"Value '{value}' is not an option of field {field_id}: {field.options}"
        )

    fields[index] = field.model_copy(update={"value": value})
    metadata = node.metadata.model_copy(update={"form_fields": fields})

    logger.debug("form_field_updated", block_id=block_id, field_id=field_id)
    return _replace_node(document, block_id, lambda n: n.model_copy(update={"metadata": metadata}))
