"""Tree explorer controller for treestatelib.

The controller binds one root hierarchy and one TreeConfig to a
TreeStateStore, computes the display projection (filtered, then
flattened) and exposes the operation surface a presentation layer drives.
It owns the per-node loading timers and emits change notifications
through a TreeEvents bundle.
"""

import threading
from typing import Any, Dict, Iterable, List, Optional

from cachetools import LRUCache

from .config import ContextMenuItem, DisabledType, TreeConfig
from .core.filtering import search_tree
from .core.node import FlattenedNode, TreeNode
from .core.state import CheckboxState, SelectionState
from .core.traversal import build_node_index, detect_cycle, flatten_tree
from .error_policies import (
    CYCLE,
    OVERLAPPING_RULES,
    SCHEDULING,
    InvalidConfigError,
    StructuralIssue,
    StructuralPolicy,
    WarnPolicy,
)
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
from .scheduling import ScheduledTask, Scheduler, default_scheduler
from .store import TreeStateStore


class _PendingLoad:
    """A loading-indicator clear that is still owed for one node."""

    __slots__ = ('node_id', 'task')

    def __init__(self, node_id: str):
        self.node_id = node_id
        self.task: Optional[ScheduledTask] = None

    def cancel(self) -> None:
        if self.task is not None:
            self.task.cancel()


class TreeExplorerController:
    """
    Binds a hierarchy and a configuration to a TreeStateStore.

    Lookups that miss (ids absent from the current hierarchy) return empty,
    False or None results; nothing here raises except an invalid
    configuration at bind time.

    Example:
        roots = [TreeNode.from_dict(d) for d in data]
        with TreeExplorerController(roots, TreeConfig.default()) as tree:
            tree.toggle_expansion('docs')
            for row in tree.get_projection():
                print('  ' * row.depth + tree.get_label(row.node))
    """

    def __init__(self,
                 root_data: Iterable[TreeNode],
                 config: Optional[TreeConfig] = None,
                 store: Optional[TreeStateStore] = None,
                 scheduler: Optional[Scheduler] = None,
                 events: Optional[TreeEvents] = None,
                 policy: Optional[StructuralPolicy] = None,
                 cache_size: int = 128):
        """
        Initialize the controller.

        Args:
            root_data: Root nodes of the hierarchy
            config: Tree configuration (defaults to ``TreeConfig()``)
            store: State store to drive; a fresh one is created if omitted
            scheduler: Scheduler for loading timers; picked lazily with
                ``default_scheduler()`` on first use if omitted
            events: Callbacks for change notifications
            policy: How structural issues are surfaced (WarnPolicy default)
            cache_size: Number of projections kept in the LRU cache

        Raises:
            InvalidConfigError: If ``config.validate()`` reports errors
        """
        self.config = config if config is not None else TreeConfig()
        self.store = store if store is not None else TreeStateStore()
        self.events = events if events is not None else TreeEvents()
        self.policy = policy if policy is not None else WarnPolicy()
        self._scheduler = scheduler
        self._pending_loads: Dict[str, _PendingLoad] = {}
        # Timer callbacks may run on another thread (ThreadingScheduler)
        self._loading_lock = threading.Lock()
        self._search_term = ''
        self._closed = False

        self._root_data: List[TreeNode] = []
        self._index: Dict[str, TreeNode] = {}
        self._has_cycle = False
        self._data_version = 0

        self._projection_cache: LRUCache = LRUCache(maxsize=cache_size)
        self.cache_hits = 0
        self.cache_misses = 0

        self._check_config()
        self._bind(root_data)
        if self.config.preselected_nodes:
            self._apply_selection(self.config.preselected_nodes)
        self._recompute()

    # Binding

    def _check_config(self) -> None:
        errors = self.config.validate()
        if errors:
            raise InvalidConfigError("Invalid tree configuration: " + "; ".join(errors))
        if self.config.has_overlapping_rules:
            self._report(StructuralIssue(
                kind=OVERLAPPING_RULES,
                message="Both selectable_types and disabled_types are configured; "
                        "selectable_types governs and disabled_types is ignored",
            ))

    def _bind(self, root_data: Iterable[TreeNode]) -> None:
        self._root_data = list(root_data or [])
        self._has_cycle = detect_cycle(self._root_data)
        if self._has_cycle:
            self._report(StructuralIssue(
                kind=CYCLE,
                message="Cycle detected in tree hierarchy; selection states are not "
                        "recomputed and expanding nodes on the cycle will not terminate",
            ))
        self._index = build_node_index(self._root_data)
        self._data_version += 1

    def _report(self, issue: StructuralIssue) -> None:
        self.policy.handle(issue)

    def _recompute(self) -> None:
        # Propagation recurses through children and cannot finish on a cycle
        if not self._has_cycle:
            self.store.recompute_selection_states(self._root_data)

    @property
    def root_data(self) -> List[TreeNode]:
        return list(self._root_data)

    @property
    def data_version(self) -> int:
        """Counter bumped every time a hierarchy is bound."""
        return self._data_version

    def set_root_data(self, root_data: Iterable[TreeNode]) -> None:
        """Bind a new version of the hierarchy from the data provider.

        Expansion, selection and loading state are kept by id; selection
        states are recomputed against the new hierarchy.
        """
        self._bind(root_data)
        self._recompute()

    # Projection

    @property
    def search_term(self) -> str:
        return self._search_term

    def set_search_term(self, term: Optional[str]) -> None:
        self._search_term = term or ''

    def get_projection(self) -> List[FlattenedNode]:
        """Compute the flattened display projection.

        With a non-blank search term the hierarchy is first pruned to the
        matches and their ancestors. The result is memoised until the
        hierarchy, the store or the search term changes.

        Returns:
            List of FlattenedNode in display order
        """
        term = self._search_term.strip()
        key = (self._data_version, self.store.version, term)
        cached = self._projection_cache.get(key)
        if cached is not None:
            self.cache_hits += 1
            return list(cached)

        self.cache_misses += 1
        nodes = self._root_data
        expanded = self.store.expanded_nodes
        if term:
            nodes = search_tree(nodes, term, self.config.label_property)
            if self.config.expand_search_matches:
                # In a pruned tree every node that still has children leads to a match
                expanded = expanded | {
                    node.id for node in build_node_index(nodes).values() if node.children
                }

        projection = flatten_tree(
            nodes,
            expanded,
            selection_states=self.store.selection_states,
            loading_nodes=self.store.loading_nodes,
        )
        self._projection_cache[key] = tuple(projection)
        return projection

    def get_cache_stats(self) -> dict:
        """
        Get projection cache statistics for monitoring and debugging.
        """
        total_requests = self.cache_hits + self.cache_misses
        hit_rate = self.cache_hits / total_requests if total_requests > 0 else 0

        return {
            'cache_hits': self.cache_hits,
            'cache_misses': self.cache_misses,
            'hit_rate': hit_rate,
            'cache_size': len(self._projection_cache),
            'max_size': self._projection_cache.maxsize,
        }

    def clear_cache(self) -> None:
        self._projection_cache.clear()
        self.cache_hits = 0
        self.cache_misses = 0

    # Lookups

    def find_node(self, node_id: str) -> Optional[TreeNode]:
        """Return the node with ``node_id`` (first in document order) or None."""
        return self._index.get(node_id)

    def is_node_expanded(self, node_id: str) -> bool:
        return self.store.is_node_expanded(node_id)

    def is_node_loading(self, node_id: str) -> bool:
        return self.store.is_node_loading(node_id)

    def get_node_selection_state(self, node_id: str) -> SelectionState:
        return self.store.get_node_selection_state(node_id)

    def get_checkbox_state(self, node_id: str) -> CheckboxState:
        return CheckboxState.from_selection_state(self.get_node_selection_state(node_id))

    def get_label(self, node: TreeNode) -> str:
        return self.config.get_label(node)

    def get_icon(self, node: TreeNode) -> str:
        return self.config.get_icon(node)

    def get_context_menu_items(self) -> List[ContextMenuItem]:
        if not self.config.show_context_menu:
            return []
        return self.config.get_context_menu_items()

    # Selectability

    def _matching_disabled_type(self, node: TreeNode, category: Any) -> Optional[DisabledType]:
        for entry in self.config.disabled_types or ():
            if entry.matches(node, category):
                return entry
        return None

    def is_selectable(self, node: TreeNode) -> bool:
        """Apply the allow-list, else the deny-list, else allow everything."""
        category = self.config.get_category(node)
        if self.config.selectable_types:
            return category in self.config.selectable_types
        if self.config.disabled_types:
            return self._matching_disabled_type(node, category) is None
        return True

    def get_disabled_reason(self, node: TreeNode) -> Optional[str]:
        """User-facing reason why ``node`` cannot be selected, or None.

        Deny-list rejections surface the first matching entry's reason.
        """
        category = self.config.get_category(node)
        if self.config.selectable_types:
            if category in self.config.selectable_types:
                return None
            return f"{category} items cannot be selected"
        entry = self._matching_disabled_type(node, category) if self.config.disabled_types else None
        return entry.reason if entry is not None else None

    # Selection

    def get_selected_node_ids(self) -> List[str]:
        """Selected ids present in the current hierarchy, in document order."""
        return [node_id for node_id in self._index if self.store.is_node_selected(node_id)]

    def get_selected_nodes(self) -> List[TreeNode]:
        return [self._index[node_id] for node_id in self.get_selected_node_ids()]

    def toggle_selection(self, node_id: str) -> SelectionResult:
        """Cascade-toggle a node's selection.

        Selecting cascades to the whole subtree; deselecting cascades the
        same way. Selecting a node that is not selectable is rejected with
        no state change and no notification. Deselecting is always allowed.

        Returns:
            SelectionResult describing the outcome
        """
        node = self.find_node(node_id)
        if node is None:
            return SelectionResult(node_id=node_id, accepted=False, is_selected=False)

        if self.store.is_node_selected(node_id):
            self.store.deselect_node_with_descendants(node)
        elif not self.is_selectable(node):
            return SelectionResult(
                node_id=node_id,
                accepted=False,
                is_selected=False,
                reason=self.get_disabled_reason(node),
                selected_ids=self.get_selected_node_ids(),
                selected_nodes=self.get_selected_nodes(),
            )
        else:
            self.store.select_node_with_descendants(node)

        self._recompute()
        event = self._emit_selection_change()
        return SelectionResult(
            node_id=node_id,
            accepted=True,
            is_selected=self.store.is_node_selected(node_id),
            selected_ids=event.selected_ids,
            selected_nodes=event.selected_nodes,
        )

    def _apply_selection(self, node_ids: Iterable[str]) -> None:
        for node_id in node_ids:
            node = self.find_node(node_id)
            if node is not None:
                self.store.select_node_with_descendants(node)
            else:
                # Kept so the id resolves once the provider supplies the node
                self.store.select_nodes([node_id])

    def select_nodes(self, node_ids: Iterable[str]) -> None:
        """Programmatically cascade-select ``node_ids``; no selectability gate."""
        self._apply_selection(node_ids)
        self._recompute()
        self._emit_selection_change()

    def deselect_nodes(self, node_ids: Iterable[str]) -> None:
        for node_id in node_ids:
            node = self.find_node(node_id)
            if node is not None:
                self.store.deselect_node_with_descendants(node)
            else:
                self.store.deselect_nodes([node_id])
        self._recompute()
        self._emit_selection_change()

    def clear_selection(self) -> None:
        self.store.clear_selection()
        self._recompute()
        self._emit_selection_change()

    def _emit_selection_change(self) -> SelectionChangeEvent:
        selected_ids = self.get_selected_node_ids()
        event = SelectionChangeEvent(
            selected_ids=selected_ids,
            selected_nodes=[self._index[node_id] for node_id in selected_ids],
        )
        self.events.emit('selection_change', event)
        return event

    # Expansion

    def toggle_expansion(self, node_id: str) -> bool:
        """Flip a node's expansion.

        Returns:
            The resulting expanded state (False for unknown ids)
        """
        if self.find_node(node_id) is None:
            return False
        if self.store.is_node_expanded(node_id):
            self.collapse_node(node_id)
            return False
        return self.expand_node(node_id)

    def expand_node(self, node_id: str) -> bool:
        """Expand a node, start its loading indicator and notify.

        A node without recorded children is still expanded; the expand
        event flags ``needs_children`` so a lazy provider can load them.

        Returns:
            True if the node exists and is now expanded
        """
        node = self.find_node(node_id)
        if node is None:
            return False
        self.store.expand_node(node_id)
        if node.has_children and self.config.loading_enabled:
            self._start_loading(node_id)
        self.events.emit('expand', ExpandEvent(
            node_id=node_id,
            node=node,
            needs_children=not node.has_children,
        ))
        return True

    def collapse_node(self, node_id: str) -> bool:
        """Collapse a node, cancel its loading timer and notify.

        Returns:
            True if the node exists
        """
        node = self.find_node(node_id)
        if node is None:
            return False
        self._stop_loading(node_id)
        self.store.collapse_node(node_id)
        self.events.emit('collapse', CollapseEvent(node_id=node_id, node=node))
        return True

    def expand_all(self) -> None:
        """Expand every node in the hierarchy. No loading indicators."""
        self.store.expand_all(self._index.keys())

    def collapse_all(self) -> None:
        with self._loading_lock:
            loading_ids = list(self._pending_loads)
        for node_id in loading_ids:
            self._stop_loading(node_id)
        self.store.collapse_all()

    # Loading indicators

    def _get_scheduler(self) -> Scheduler:
        if self._scheduler is None:
            self._scheduler = default_scheduler()
        return self._scheduler

    def _start_loading(self, node_id: str) -> None:
        """Show the loading indicator and schedule its removal.

        The timer is scheduled before any state changes, so a scheduler
        that cannot run (no event loop, for instance) leaves the node
        expanded without an indicator and reports a StructuralIssue.
        """
        scheduler = self._get_scheduler()
        pending = _PendingLoad(node_id)
        with self._loading_lock:
            # Held while scheduling so the callback cannot run before registration
            try:
                pending.task = scheduler.schedule(
                    self.config.loading_behavior.duration_seconds,
                    lambda: self._finish_loading(pending),
                )
            except RuntimeError as e:
                failure: Optional[RuntimeError] = e
                previous = None
            else:
                failure = None
                previous = self._pending_loads.get(node_id)
                self._pending_loads[node_id] = pending
                self.store.set_node_loading(node_id, True)

        if failure is not None:
            self._report(StructuralIssue(
                kind=SCHEDULING,
                message=f"Loading indicator for {node_id!r} not shown: {failure}",
                node_ids=(node_id,),
            ))
            return
        if previous is not None:
            previous.cancel()
        self.events.emit('loading_change', LoadingChangeEvent(node_id=node_id, is_loading=True))

    def _finish_loading(self, pending: _PendingLoad) -> None:
        with self._loading_lock:
            # A newer expand (or a collapse) replaced this timer
            if self._pending_loads.get(pending.node_id) is not pending:
                return
            del self._pending_loads[pending.node_id]
            self.store.set_node_loading(pending.node_id, False)
        self.events.emit('loading_change',
                         LoadingChangeEvent(node_id=pending.node_id, is_loading=False))

    def _stop_loading(self, node_id: str) -> None:
        with self._loading_lock:
            pending = self._pending_loads.pop(node_id, None)
            was_loading = self.store.is_node_loading(node_id)
            if was_loading:
                self.store.set_node_loading(node_id, False)
        if pending is not None:
            pending.cancel()
        if was_loading:
            self.events.emit('loading_change', LoadingChangeEvent(node_id=node_id, is_loading=False))

    @property
    def pending_loading_count(self) -> int:
        return len(self._pending_loads)

    # Pass-through notifications

    def handle_menu_action(self, node_id: str, action: str, data: Any = None) -> Optional[MenuAction]:
        """Forward a context-menu action verbatim; None for unknown ids."""
        node = self.find_node(node_id)
        if node is None:
            return None
        menu_action = MenuAction(node_id=node_id, action=action, data=data)
        self.events.emit('menu_action', MenuActionEvent(action=menu_action, node=node))
        return menu_action

    def handle_node_click(self, node_id: str, event: Any = None) -> Optional[NodeClickEvent]:
        node = self.find_node(node_id)
        if node is None:
            return None
        click = NodeClickEvent(node=node, event=event)
        self.events.emit('node_click', click)
        return click

    def handle_node_double_click(self, node_id: str, event: Any = None) -> Optional[NodeClickEvent]:
        node = self.find_node(node_id)
        if node is None:
            return None
        click = NodeClickEvent(node=node, event=event, double=True)
        self.events.emit('node_double_click', click)
        return click

    # Lifecycle

    def close(self) -> None:
        """Cancel every outstanding loading timer. Safe to call twice."""
        with self._loading_lock:
            outstanding = list(self._pending_loads.values())
            self._pending_loads.clear()
        for pending in outstanding:
            pending.cancel()
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> 'TreeExplorerController':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"TreeExplorerController(nodes={len(self._index)}, "
            f"search_term={self._search_term!r}, store={self.store!r})"
        )
