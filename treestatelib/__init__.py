"""TreeStateLib - Rendering-independent tree state engine.

TreeStateLib holds the session state of a hierarchical explorer
(expansion, tri-state selection, transient loading indicators, search)
and computes the flattened display projection a presentation layer
renders. It never draws anything itself.

Layers:
━━━━━━━━━━━━━━━━━━━━━━━━━━
Pure utilities:
    from treestatelib.core import flatten_tree, filter_tree
State:
    from treestatelib import TreeStateStore
Session:
    from treestatelib import TreeExplorerController, TreeConfig
━━━━━━━━━━━━━━━━━━━━━━━━━━
"""

__version__ = "0.1.0"

from .core import (
    CheckboxState,
    FlattenedNode,
    SelectionState,
    TreeNode,
    TreeState,
)
from .config import (
    ContextMenuItem,
    DisabledType,
    LoadingBehavior,
    TreeConfig,
)
from .store import TreeStateStore
from .controller import TreeExplorerController
from .events import (
    CollapseEvent,
    ExpandEvent,
    LoadingChangeEvent,
    MenuAction,
    MenuActionEvent,
    NodeClickEvent,
    SelectionChangeEvent,
    SelectionResult,
    TreeEvents,
)
from .error_policies import (
    CollectIssuesPolicy,
    IgnorePolicy,
    InvalidConfigError,
    StructuralIssue,
    StructuralPolicy,
    StructuralWarning,
    WarnPolicy,
)
from .scheduling import AsyncioScheduler, Scheduler, ThreadingScheduler
from .api import build_tree, create_controller

__all__ = [
    "__version__",
    "TreeNode",
    "FlattenedNode",
    "SelectionState",
    "CheckboxState",
    "TreeState",
    "TreeConfig",
    "DisabledType",
    "LoadingBehavior",
    "ContextMenuItem",
    "TreeStateStore",
    "TreeExplorerController",
    "TreeEvents",
    "ExpandEvent",
    "CollapseEvent",
    "SelectionChangeEvent",
    "SelectionResult",
    "MenuAction",
    "MenuActionEvent",
    "NodeClickEvent",
    "LoadingChangeEvent",
    "StructuralWarning",
    "StructuralIssue",
    "StructuralPolicy",
    "WarnPolicy",
    "CollectIssuesPolicy",
    "IgnorePolicy",
    "InvalidConfigError",
    "Scheduler",
    "AsyncioScheduler",
    "ThreadingScheduler",
    "build_tree",
    "create_controller",
]
