"""Change notifications emitted by the TreeExplorerController.

Notifications are plain dataclasses handed to optional callbacks collected
in a TreeEvents bundle. The engine does not impose any dispatch mechanism;
a presentation layer wires the callbacks to whatever it uses.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from .core.node import TreeNode


@dataclass(frozen=True)
class ExpandEvent:
    """A node was expanded.

    ``needs_children`` is True when the node had no children recorded at
    notification time; lazy data providers use it as their cue to fetch
    children and hand the controller an updated hierarchy.
    """
    node_id: str
    node: TreeNode
    needs_children: bool = False


@dataclass(frozen=True)
class CollapseEvent:
    node_id: str
    node: TreeNode


@dataclass(frozen=True)
class SelectionChangeEvent:
    """The selected set changed; ids and nodes are in document order."""
    selected_ids: List[str] = field(default_factory=list)
    selected_nodes: List[TreeNode] = field(default_factory=list)


@dataclass(frozen=True)
class MenuAction:
    """A context-menu action forwarded verbatim; the engine never interprets it."""
    node_id: str
    action: str
    data: Any = None


@dataclass(frozen=True)
class MenuActionEvent:
    action: MenuAction
    node: TreeNode


@dataclass(frozen=True)
class NodeClickEvent:
    node: TreeNode
    event: Any = None
    double: bool = False


@dataclass(frozen=True)
class LoadingChangeEvent:
    """A node's transient loading indicator was set or cleared."""
    node_id: str
    is_loading: bool


@dataclass
class TreeEvents:
    """Optional callbacks for every notification the controller emits."""
    expand: Optional[Callable[[ExpandEvent], None]] = None
    collapse: Optional[Callable[[CollapseEvent], None]] = None
    selection_change: Optional[Callable[[SelectionChangeEvent], None]] = None
    menu_action: Optional[Callable[[MenuActionEvent], None]] = None
    node_click: Optional[Callable[[NodeClickEvent], None]] = None
    node_double_click: Optional[Callable[[NodeClickEvent], None]] = None
    loading_change: Optional[Callable[[LoadingChangeEvent], None]] = None

    def emit(self, name: str, payload: Any) -> None:
        """Invoke callback ``name`` with ``payload`` if one is registered."""
        callback = getattr(self, name)
        if callback is not None:
            callback(payload)


@dataclass(frozen=True)
class SelectionResult:
    """Outcome of a selection toggle.

    ``accepted`` is False for a LookupMiss (unknown id) and for a rejected
    selection of an unselectable node; ``reason`` carries the
    user-facing reason in the latter case.
    """
    node_id: str
    accepted: bool
    is_selected: bool
    reason: Optional[str] = None
    selected_ids: List[str] = field(default_factory=list)
    selected_nodes: List[TreeNode] = field(default_factory=list)
