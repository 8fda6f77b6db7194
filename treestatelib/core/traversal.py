"""Stateless traversal utilities for treestatelib.

Every function takes the hierarchy (and, where needed, state sets) as
explicit arguments and returns fresh values. None of them keep state
between calls, so results are always restartable.
"""

from typing import Collection, Dict, List, Mapping, Optional, Set

from .node import FlattenedNode, TreeNode
from .state import SelectionState


def flatten_tree(nodes: List[TreeNode],
                 expanded_nodes: Collection[str],
                 depth: int = 0,
                 selection_states: Optional[Mapping[str, SelectionState]] = None,
                 loading_nodes: Optional[Collection[str]] = None) -> List[FlattenedNode]:
    """Flatten a hierarchy into display order.

    Depth-first pre-order: a node's children follow it immediately if and
    only if the node is expanded and has at least one child. Collapsed
    subtrees contribute only their root.

    Args:
        nodes: Sibling nodes to flatten (usually the roots)
        expanded_nodes: Ids of expanded nodes
        depth: Depth assigned to ``nodes`` (roots are 0)
        selection_states: Optional derived tri-state map for the flags
        loading_nodes: Optional ids currently showing a loading indicator

    Returns:
        List of FlattenedNode in display order
    """
    states = selection_states or {}
    loading = loading_nodes or ()
    result: List[FlattenedNode] = []

    def _flatten(siblings: List[TreeNode], level: int) -> None:
        for node in siblings:
            is_expanded = node.id in expanded_nodes
            result.append(FlattenedNode(
                node=node,
                depth=level,
                is_expanded=is_expanded,
                selection_state=states.get(node.id, SelectionState.UNSELECTED),
                is_loading=node.id in loading,
            ))
            if is_expanded and node.children:
                _flatten(node.children, level + 1)

    _flatten(nodes, depth)
    return result


def find_node_by_id(node_id: str, nodes: List[TreeNode]) -> Optional[TreeNode]:
    """Depth-first search in document order; the first match wins.

    O(size of hierarchy). Callers doing repeated lookups against the same
    hierarchy should use ``build_node_index`` once instead.
    """
    for node in nodes:
        if node.id == node_id:
            return node
        if node.children:
            found = find_node_by_id(node_id, node.children)
            if found is not None:
                return found
    return None


def build_node_index(nodes: List[TreeNode]) -> Dict[str, TreeNode]:
    """Build an id -> node side index for one hierarchy version.

    The first occurrence in document order wins, so lookups agree with
    ``find_node_by_id``.
    """
    index: Dict[str, TreeNode] = {}
    stack = list(reversed(nodes))
    while stack:
        node = stack.pop()
        if node.id in index:
            continue
        index[node.id] = node
        stack.extend(reversed(node.children))
    return index


def build_parent_map(nodes: List[TreeNode],
                     parent_id: Optional[str] = None) -> Dict[str, str]:
    """Map every non-root node id to the id of its immediate parent.

    Args:
        nodes: Sibling nodes (roots on the outermost call)
        parent_id: Id of the parent of ``nodes``; None for roots

    Returns:
        Dictionary of child id -> parent id
    """
    parent_map: Dict[str, str] = {}
    for node in nodes:
        if parent_id is not None:
            parent_map[node.id] = parent_id
        if node.children:
            parent_map.update(build_parent_map(node.children, node.id))
    return parent_map


def get_ancestor_ids(node_id: str, nodes: List[TreeNode]) -> List[str]:
    """Return ancestor ids ordered from nearest to farthest.

    Roots and unknown ids have no ancestors and yield an empty list.
    """
    parent_map = build_parent_map(nodes)
    ancestors: List[str] = []
    seen: Set[str] = {node_id}
    current = node_id
    while current in parent_map:
        current = parent_map[current]
        if current in seen:
            # Malformed input (id cycle); stop rather than loop forever
            break
        seen.add(current)
        ancestors.append(current)
    return ancestors


def get_descendant_ids(node: TreeNode) -> List[str]:
    """Return every descendant id of ``node`` in pre-order (node excluded)."""
    descendants: List[str] = []
    for child in node.children:
        descendants.append(child.id)
        descendants.extend(get_descendant_ids(child))
    return descendants


def get_all_node_ids(nodes: List[TreeNode]) -> List[str]:
    """Return every id in the hierarchy in pre-order."""
    ids: List[str] = []
    for node in nodes:
        ids.append(node.id)
        ids.extend(get_descendant_ids(node))
    return ids


def detect_cycle(nodes: List[TreeNode]) -> bool:
    """Check a hierarchy for back-edges.

    Maintains a recursion stack of ids. Only revisiting an id that is
    still on the current stack counts as a cycle; an id reused across
    disjoint branches (a DAG-shaped input) is not reported here.
    Does not mutate and does not repair.

    Returns:
        True if a cycle was found, False otherwise
    """
    visited: Set[str] = set()
    on_stack: Set[str] = set()

    def _has_cycle(node: TreeNode) -> bool:
        if node.id in on_stack:
            return True
        if node.id in visited:
            return False
        visited.add(node.id)
        on_stack.add(node.id)
        for child in node.children:
            if _has_cycle(child):
                return True
        on_stack.discard(node.id)
        return False

    return any(_has_cycle(node) for node in nodes)
