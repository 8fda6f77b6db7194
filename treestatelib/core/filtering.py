"""Hierarchy filtering and substring search.

Filtering returns a pruned copy of the hierarchy: nodes that satisfy the
predicate, plus the ancestors needed to reach them. The input nodes are
never modified.
"""

from typing import Callable, List

from .node import TreeNode

NodePredicate = Callable[[TreeNode], bool]


def filter_tree(nodes: List[TreeNode], predicate: NodePredicate) -> List[TreeNode]:
    """Prune a hierarchy down to matches and their ancestors.

    - A matching node is kept; its children are filtered recursively and
      only its matching descendants (with their ancestors) remain.
    - A non-matching node is kept only if at least one descendant matches,
      and then carries the filtered child list, not the full one.
    - A non-matching node with no matching descendant is dropped.

    Args:
        nodes: Sibling nodes to filter
        predicate: Callable returning True for matching nodes

    Returns:
        New list of (copied) TreeNodes
    """
    filtered: List[TreeNode] = []
    for node in nodes:
        children = filter_tree(list(node.children), predicate) if node.children else []
        if predicate(node):
            filtered.append(node.with_children(children))
        elif children:
            filtered.append(node.with_children(children))
    return filtered


def label_matcher(term: str, label_property: str) -> NodePredicate:
    """Build a case-insensitive substring predicate on a label attribute.

    Only string labels can match; no fuzzy matching and no tokenization.
    """
    needle = term.lower()

    def _matches(node: TreeNode) -> bool:
        value = node.get(label_property)
        return isinstance(value, str) and needle in value.lower()

    return _matches


def search_tree(nodes: List[TreeNode], term: str, label_property: str) -> List[TreeNode]:
    """Filter ``nodes`` to those whose label contains ``term``.

    Example:
        >>> tree = [TreeNode('a', name='Alpha', children=[TreeNode('b', name='Beta')])]
        >>> [n.id for n in search_tree(tree, 'bet', 'name')]
        ['a']
    """
    return filter_tree(nodes, label_matcher(term, label_property))
