"""State types shared by the store, the controller and the utilities."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Set


class SelectionState(Enum):
    """Derived tri-state of a node.

    PARTIAL denotes a node whose descendants are inconsistently selected.
    """
    UNSELECTED = "unselected"
    SELECTED = "selected"
    PARTIAL = "partial"


class CheckboxState(Enum):
    """How a presentation layer should draw a node's checkbox."""
    CHECKED = "checked"
    INDETERMINATE = "indeterminate"
    UNCHECKED = "unchecked"

    @classmethod
    def from_selection_state(cls, state: SelectionState) -> 'CheckboxState':
        if state is SelectionState.SELECTED:
            return cls.CHECKED
        if state is SelectionState.PARTIAL:
            return cls.INDETERMINATE
        return cls.UNCHECKED


@dataclass
class TreeState:
    """Mutable session state for one tree.

    ``selection_state`` is derived and never authoritative: it can always
    be recomputed from ``selected_nodes`` and the hierarchy.
    """

    expanded_nodes: Set[str] = field(default_factory=set)
    selected_nodes: Set[str] = field(default_factory=set)
    loading_nodes: Set[str] = field(default_factory=set)
    selection_state: Dict[str, SelectionState] = field(default_factory=dict)

    def copy(self) -> 'TreeState':
        """Return a deep copy (ids are immutable strings, so copying the
        containers is enough)."""
        return TreeState(
            expanded_nodes=set(self.expanded_nodes),
            selected_nodes=set(self.selected_nodes),
            loading_nodes=set(self.loading_nodes),
            selection_state=dict(self.selection_state),
        )
