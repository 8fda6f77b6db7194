"""Core data model and pure tree utilities for treestatelib.

Nothing in this package holds session state; the store and the
controller build on top of it.
"""

from .node import TreeNode, FlattenedNode
from .state import SelectionState, CheckboxState, TreeState
from .traversal import (
    flatten_tree,
    find_node_by_id,
    build_node_index,
    build_parent_map,
    get_ancestor_ids,
    get_descendant_ids,
    get_all_node_ids,
    detect_cycle,
)
from .selection import (
    select_subtree,
    deselect_subtree,
    propagate_selection_upward,
)
from .filtering import filter_tree, label_matcher, search_tree

__all__ = [
    "TreeNode",
    "FlattenedNode",
    "SelectionState",
    "CheckboxState",
    "TreeState",
    "flatten_tree",
    "find_node_by_id",
    "build_node_index",
    "build_parent_map",
    "get_ancestor_ids",
    "get_descendant_ids",
    "get_all_node_ids",
    "detect_cycle",
    "select_subtree",
    "deselect_subtree",
    "propagate_selection_upward",
    "filter_tree",
    "label_matcher",
    "search_tree",
]
