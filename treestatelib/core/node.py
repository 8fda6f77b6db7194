"""TreeNode envelope for treestatelib.

A TreeNode is intentionally kept simple - it's a data container with an
identity, an ordered child sequence and an opaque attribute bag. How the
attributes are interpreted (label, icon, category) is decided by the
TreeConfig, never by the node itself.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from .state import SelectionState


class TreeNode:
    """One entry in a hierarchy.

    The node owns its children exclusively. The engine treats nodes as
    read-only: filtering produces copies through ``with_children`` and
    never mutates the original.

    Example:
        >>> docs = TreeNode('docs', name='Documents', type='folder',
        ...                 children=[TreeNode('cv', name='cv.pdf', type='file')])
        >>> docs.is_leaf()
        False
        >>> docs['name']
        'Documents'
    """

    __slots__ = ('id', 'children', 'attributes')

    def __init__(self,
                 id: str,
                 children: Optional[Iterable['TreeNode']] = None,
                 **attributes: Any):
        """Initialize a TreeNode.

        Args:
            id: Identifier, unique across the whole hierarchy
            children: Optional ordered child nodes
            **attributes: Arbitrary named attributes (label, type, ...)
        """
        self.id = id
        self.children: Tuple['TreeNode', ...] = tuple(children) if children else ()
        self.attributes: Dict[str, Any] = dict(attributes)

    @classmethod
    def from_dict(cls,
                  data: Mapping[str, Any],
                  id_key: str = 'id',
                  children_key: str = 'children') -> 'TreeNode':
        """Build a node (and its subtree) from a nested mapping.

        Args:
            data: Mapping holding the id, an optional child list and attributes
            id_key: Key holding the node id
            children_key: Key holding the list of child mappings

        Returns:
            The root TreeNode of the converted subtree

        Raises:
            KeyError: If a mapping has no id
        """
        attributes = {
            key: value for key, value in data.items()
            if key not in (id_key, children_key)
        }
        children = [
            cls.from_dict(child, id_key=id_key, children_key=children_key)
            for child in data.get(children_key) or ()
        ]
        node = cls(str(data[id_key]), children=children)
        node.attributes = attributes
        return node

    def is_leaf(self) -> bool:
        """A node with an empty or absent child sequence is a leaf."""
        return not self.children

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    def get(self, key: str, default: Any = None) -> Any:
        """Return attribute ``key`` or ``default`` when it is absent."""
        return self.attributes.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.attributes[key]

    def __contains__(self, key: str) -> bool:
        return key in self.attributes

    def with_children(self, children: Iterable['TreeNode']) -> 'TreeNode':
        """Return a copy of this node carrying a different child sequence."""
        copy = TreeNode(self.id, children=children)
        copy.attributes = dict(self.attributes)
        return copy

    def to_dict(self, children_key: str = 'children') -> Dict[str, Any]:
        """Convert back to a nested mapping (inverse of ``from_dict``)."""
        data: Dict[str, Any] = {'id': self.id}
        data.update(self.attributes)
        if self.children:
            data[children_key] = [child.to_dict(children_key) for child in self.children]
        return data

    def __repr__(self) -> str:
        """Detailed representation for debugging."""
        return f"{self.__class__.__name__}(id={self.id!r}, children={len(self.children)})"

    def __eq__(self, other: object) -> bool:
        """Nodes are equal if they have the same identifier."""
        if not isinstance(other, TreeNode):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on identifier for use in sets and dicts."""
        return hash(self.id)


@dataclass(frozen=True)
class FlattenedNode:
    """A TreeNode paired with its display depth and state flags.

    FlattenedNodes are an ephemeral projection: recomputed on demand,
    never mutated, never persisted.
    """

    node: TreeNode
    depth: int
    is_expanded: bool = False
    selection_state: SelectionState = SelectionState.UNSELECTED
    is_loading: bool = False

    @property
    def id(self) -> str:
        return self.node.id

    @property
    def has_children(self) -> bool:
        return self.node.has_children
