"""High-level API for treestatelib.

This module provides simple, functional interfaces for common tree
operations. These functions wrap the object-oriented API (TreeNode,
TreeConfig, TreeExplorerController) for ease of use in simple cases.
"""

from typing import Any, Dict, Iterable, List, Mapping

from .config import TreeConfig
from .controller import TreeExplorerController
from .core.filtering import search_tree
from .core.node import TreeNode


def build_tree(data: Iterable[Mapping[str, Any]],
               id_key: str = 'id',
               children_key: str = 'children') -> List[TreeNode]:
    """Build root TreeNodes from nested mappings.

    Args:
        data: Root mappings, each with an id and an optional children list
        id_key: Key holding the node id
        children_key: Key holding the child mappings

    Returns:
        List of root TreeNodes

    Example:
        >>> roots = build_tree([{'id': 'a', 'name': 'A', 'children': [{'id': 'b'}]}])
        >>> roots[0].children[0].id
        'b'
    """
    return [TreeNode.from_dict(item, id_key=id_key, children_key=children_key) for item in data]


def _walk(nodes: Iterable[TreeNode], depth: int = 0):
    for node in nodes:
        yield node, depth
        if node.children:
            yield from _walk(node.children, depth + 1)


def count_nodes(nodes: Iterable[TreeNode]) -> int:
    """Count every node in the hierarchy (shared subtrees count per occurrence).

    Example:
        >>> count_nodes(build_tree([{'id': 'a', 'children': [{'id': 'b'}]}]))
        2
    """
    count = 0
    for _ in _walk(nodes):
        count += 1
    return count


def get_leaf_nodes(nodes: Iterable[TreeNode]) -> List[TreeNode]:
    """Get all leaf nodes in document order."""
    return [node for node, _ in _walk(nodes) if node.is_leaf()]


def get_max_depth(nodes: Iterable[TreeNode]) -> int:
    """Depth of the deepest node (roots are 0); -1 for an empty hierarchy."""
    return max((depth for _, depth in _walk(nodes)), default=-1)


def get_tree_stats(nodes: Iterable[TreeNode]) -> Dict[str, Any]:
    """Get statistics about a hierarchy.

    Args:
        nodes: Root nodes

    Returns:
        Dictionary with tree statistics

    Example:
        >>> stats = get_tree_stats(roots)
        >>> print(f"Total nodes: {stats['total_nodes']}")
        >>> print(f"Leaf nodes: {stats['leaf_nodes']}")
    """
    stats: Dict[str, Any] = {
        'total_nodes': 0,
        'leaf_nodes': 0,
        'max_depth': 0,
        'depths': {}
    }

    for node, depth in _walk(nodes):
        stats['total_nodes'] += 1

        if node.is_leaf():
            stats['leaf_nodes'] += 1

        stats['max_depth'] = max(stats['max_depth'], depth)

        if depth not in stats['depths']:
            stats['depths'][depth] = 0
        stats['depths'][depth] += 1

    # Every non-root node is the child of exactly one internal node
    stats['internal_nodes'] = stats['total_nodes'] - stats['leaf_nodes']
    stats['average_branching'] = (
        (stats['total_nodes'] - stats['depths'].get(0, 0)) / stats['internal_nodes']
        if stats['internal_nodes'] > 0 else 0
    )

    return stats


def create_controller(data: Iterable[Mapping[str, Any]],
                      id_key: str = 'id',
                      children_key: str = 'children',
                      **config_overrides: Any) -> TreeExplorerController:
    """Build a hierarchy from mappings and bind it to a controller.

    The configuration is ``TreeConfig.default()`` with ``config_overrides``
    applied.

    Example:
        >>> tree = create_controller(data, preselected_nodes=['readme'])
        >>> tree.get_selected_node_ids()
        ['readme']
    """
    config = TreeConfig.default(**config_overrides)
    return TreeExplorerController(build_tree(data, id_key=id_key, children_key=children_key), config)


__all__ = [
    'build_tree',
    'count_nodes',
    'get_leaf_nodes',
    'get_max_depth',
    'get_tree_stats',
    'search_tree',
    'create_controller',
]
