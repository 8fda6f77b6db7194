"""Selection cascade and tri-state propagation.

Downward cascade (``select_subtree`` / ``deselect_subtree``) is an explicit
user action. Upward propagation (``propagate_selection_upward``) is the
automatic consistency step that keeps the selected set and the derived
tri-state map in agreement:

- SELECTED iff all children are SELECTED
- PARTIAL iff some child is SELECTED or PARTIAL but not all are SELECTED
- UNSELECTED iff no child is SELECTED or PARTIAL

These functions mutate the set/map passed to them, as documented on each.
"""

from typing import Dict, List, MutableSet

from .node import TreeNode
from .state import SelectionState


def select_subtree(node: TreeNode, selected: MutableSet[str]) -> None:
    """Add ``node.id`` and every descendant id to ``selected`` (mutated)."""
    selected.add(node.id)
    for child in node.children:
        select_subtree(child, selected)


def deselect_subtree(node: TreeNode, selected: MutableSet[str]) -> None:
    """Remove ``node.id`` and every descendant id from ``selected`` (mutated)."""
    selected.discard(node.id)
    for child in node.children:
        deselect_subtree(child, selected)


def propagate_selection_upward(nodes: List[TreeNode],
                               selected: MutableSet[str],
                               states: Dict[str, SelectionState]) -> None:
    """Derive interior tri-states bottom-up.

    Post-order: each interior node is computed from its children's states,
    which the recursive call has already written into ``states``. The
    interior node's id is added to ``selected`` when it derives SELECTED
    and discarded otherwise, so after the call ``selected`` holds exactly
    the ids whose derived state is SELECTED.

    Leaves missing from ``states`` default to UNSELECTED. Callers seed
    ``states`` with SELECTED for the ids already in ``selected``.

    Args:
        nodes: Sibling nodes (roots on the outermost call)
        selected: Selected id set (mutated)
        states: Derived state map (mutated)
    """
    for node in nodes:
        if not node.children:
            states.setdefault(node.id, SelectionState.UNSELECTED)
            continue

        propagate_selection_upward(node.children, selected, states)

        selected_children = 0
        partial_children = 0
        for child in node.children:
            child_state = states.get(child.id, SelectionState.UNSELECTED)
            if child_state is SelectionState.SELECTED:
                selected_children += 1
            elif child_state is SelectionState.PARTIAL:
                partial_children += 1

        if selected_children == len(node.children):
            states[node.id] = SelectionState.SELECTED
            selected.add(node.id)
        elif selected_children or partial_children:
            states[node.id] = SelectionState.PARTIAL
            selected.discard(node.id)
        else:
            states[node.id] = SelectionState.UNSELECTED
            selected.discard(node.id)
