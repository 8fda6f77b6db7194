"""Tree state store for treestatelib.

The TreeStateStore owns one TreeState and funnels every mutation through
the operations below, so the tri-state invariant cannot be bypassed by
editing the sets directly. It is independent of any particular hierarchy
and can be reused across trees.

Tri-state recomputation is explicit: selection mutations leave the derived
map stale until ``recompute_selection_states`` is called, which lets a
caller batch a multi-step gesture into a single O(n) pass.
"""

from typing import Dict, FrozenSet, Iterable, List, Optional

from .core.node import TreeNode
from .core.selection import deselect_subtree, propagate_selection_upward, select_subtree
from .core.state import SelectionState, TreeState


class TreeStateStore:
    """Holds expansion, selection and loading state for one tree session.

    All operations are total. Ids are opaque caller-controlled strings and
    are not validated against any hierarchy; unknown ids are absorbed.

    Not thread-safe: a store is meant for a single logical owner mutating
    state serially. Callers sharing one across workers must serialize
    access themselves.

    Example:
        store = TreeStateStore()
        store.select_node_with_descendants(node)
        store.recompute_selection_states(roots)
        store.get_node_selection_state(node.id)
    """

    def __init__(self, state: Optional[TreeState] = None):
        """Initialize the store.

        Args:
            state: Optional initial state; copied, never shared
        """
        self._state = state.copy() if state is not None else TreeState()
        self._version = 0

    @property
    def version(self) -> int:
        """Counter bumped by every mutating operation."""
        return self._version

    def _touch(self) -> None:
        self._version += 1

    # Expansion

    def expand_node(self, node_id: str) -> None:
        """Mark a node expanded. Children keep their own expansion flags."""
        self._state.expanded_nodes.add(node_id)
        self._touch()

    def collapse_node(self, node_id: str) -> None:
        """Mark a node collapsed. Descendants' flags persist for re-expansion."""
        self._state.expanded_nodes.discard(node_id)
        self._touch()

    def expand_all(self, all_ids: Iterable[str]) -> None:
        """Replace the expanded set with ``all_ids``."""
        self._state.expanded_nodes = set(all_ids)
        self._touch()

    def collapse_all(self) -> None:
        self._state.expanded_nodes = set()
        self._touch()

    def toggle_expansion(self, node_id: str) -> bool:
        """Flip a node's expansion.

        Returns:
            The resulting expanded state
        """
        if self.is_node_expanded(node_id):
            self.collapse_node(node_id)
            return False
        self.expand_node(node_id)
        return True

    # Selection

    def select_node_with_descendants(self, node: TreeNode) -> None:
        """Select a node and its whole subtree; recompute afterwards."""
        select_subtree(node, self._state.selected_nodes)
        self._touch()

    def deselect_node_with_descendants(self, node: TreeNode) -> None:
        """Deselect a node and its whole subtree; recompute afterwards."""
        deselect_subtree(node, self._state.selected_nodes)
        self._touch()

    def toggle_node_selection(self, node: TreeNode) -> bool:
        """Cascade-select or cascade-deselect ``node`` depending on membership.

        Returns:
            True if the node is now selected
        """
        if self.is_node_selected(node.id):
            self.deselect_node_with_descendants(node)
            return False
        self.select_node_with_descendants(node)
        return True

    def select_nodes(self, node_ids: Iterable[str]) -> None:
        """Add ids to the selected set without cascading."""
        self._state.selected_nodes.update(node_ids)
        self._touch()

    def deselect_nodes(self, node_ids: Iterable[str]) -> None:
        """Remove ids from the selected set without cascading."""
        self._state.selected_nodes.difference_update(node_ids)
        self._touch()

    def recompute_selection_states(self, root_nodes: List[TreeNode]) -> None:
        """Rebuild the derived tri-state map for a hierarchy.

        Seeds every selected id as SELECTED, then propagates upward. Must be
        called after any selection mutation before the derived map or the
        selected set is trusted.
        """
        selected = set(self._state.selected_nodes)
        states = {node_id: SelectionState.SELECTED for node_id in selected}
        propagate_selection_upward(root_nodes, selected, states)
        self._state.selected_nodes = selected
        self._state.selection_state = states
        self._touch()

    def clear_selection(self) -> None:
        """Empty the selection and the derived map (no recompute needed)."""
        self._state.selected_nodes = set()
        self._state.selection_state = {}
        self._touch()

    # Loading indicators

    def set_node_loading(self, node_id: str, is_loading: bool) -> None:
        """Add or remove a display-only loading flag."""
        if is_loading:
            self._state.loading_nodes.add(node_id)
        else:
            self._state.loading_nodes.discard(node_id)
        self._touch()

    # Snapshots

    def get_snapshot(self) -> TreeState:
        """Return a deep copy of the current state."""
        return self._state.copy()

    def restore_snapshot(self, snapshot: TreeState) -> None:
        """Replace the current state with a copy of ``snapshot``."""
        self._state = snapshot.copy()
        self._touch()

    def reset_state(self) -> None:
        self._state = TreeState()
        self._touch()

    # Queries

    def is_node_expanded(self, node_id: str) -> bool:
        return node_id in self._state.expanded_nodes

    def is_node_selected(self, node_id: str) -> bool:
        return node_id in self._state.selected_nodes

    def is_node_loading(self, node_id: str) -> bool:
        return node_id in self._state.loading_nodes

    def get_node_selection_state(self, node_id: str) -> SelectionState:
        return self._state.selection_state.get(node_id, SelectionState.UNSELECTED)

    def get_selected_node_ids(self) -> List[str]:
        return sorted(self._state.selected_nodes)

    def get_expanded_node_ids(self) -> List[str]:
        return sorted(self._state.expanded_nodes)

    def get_loading_node_ids(self) -> List[str]:
        return sorted(self._state.loading_nodes)

    @property
    def expanded_nodes(self) -> FrozenSet[str]:
        return frozenset(self._state.expanded_nodes)

    @property
    def selected_nodes(self) -> FrozenSet[str]:
        return frozenset(self._state.selected_nodes)

    @property
    def loading_nodes(self) -> FrozenSet[str]:
        return frozenset(self._state.loading_nodes)

    @property
    def selection_states(self) -> Dict[str, SelectionState]:
        """Copy of the derived id -> SelectionState map."""
        return dict(self._state.selection_state)

    def __repr__(self) -> str:
        return (
            f"TreeStateStore(expanded={len(self._state.expanded_nodes)}, "
            f"selected={len(self._state.selected_nodes)}, "
            f"loading={len(self._state.loading_nodes)}, version={self._version})"
        )
