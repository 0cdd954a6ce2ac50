"""Operations on assembled documents."""

from .editing import (
    count_nodes,
    edit_block_text,
    find_node,
    flatten_tree,
    iter_nodes,
    move_block,
    update_form_field,
)

__all__ = [
    "count_nodes",
    "edit_block_text",
    "find_node",
    "flatten_tree",
    "iter_nodes",
    "move_block",
    "update_form_field",
]
