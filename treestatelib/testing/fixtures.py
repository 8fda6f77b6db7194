"""Test fixtures for treestatelib consumers.

These fixtures provide deterministic control over loading timers and a
way to verify the tri-state invariant from the outside, without relying
on implementation details of the store.
"""

import heapq
import itertools
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..core.node import TreeNode
from ..core.state import SelectionState
from ..scheduling import ScheduledTask, Scheduler
from ..store import TreeStateStore


class _ManualTask(ScheduledTask):

    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self._cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler(Scheduler):
    """Scheduler driven by a virtual clock.

    Nothing fires until ``advance`` moves the clock past a task's due
    time. Tasks due at the same instant fire in scheduling order.

    Example:
        scheduler = ManualScheduler()
        tree = TreeExplorerController(roots, TreeConfig.default(), scheduler=scheduler)
        tree.toggle_expansion('docs')
        scheduler.advance(1.0)
        assert not tree.is_node_loading('docs')
    """

    def __init__(self):
        self.now = 0.0
        self._queue: List[Tuple[float, int, _ManualTask]] = []
        self._counter = itertools.count()

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        task = _ManualTask(self.now + delay, callback)
        heapq.heappush(self._queue, (task.due, next(self._counter), task))
        return task

    def advance(self, seconds: float) -> int:
        """Move the clock forward and run every task that became due.

        Returns:
            Number of callbacks that ran
        """
        target = self.now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, task = heapq.heappop(self._queue)
            self.now = due
            if task.cancelled():
                continue
            task.fired = True
            task.callback()
            ran += 1
        self.now = target
        return ran

    @property
    def pending_count(self) -> int:
        """Number of scheduled tasks that are neither cancelled nor fired."""
        return sum(1 for _, _, task in self._queue if not task.cancelled())


class TreeStateTestHelper:
    """Public test fixture for checking a store against a hierarchy.

    Example:
        helper = TreeStateTestHelper(controller.store, roots)
        assert helper.find_violations() == []
    """

    def __init__(self, store: TreeStateStore, root_nodes: List[TreeNode]):
        self._store = store
        self._roots = root_nodes

    def find_violations(self) -> List[str]:
        """Check the tri-state rule and the selected-set invariant.

        Returns:
            Human-readable violations (empty if the state is consistent)
        """
        violations: List[str] = []
        states = self._store.selection_states
        selected = self._store.selected_nodes

        def _check(node: TreeNode) -> None:
            state = states.get(node.id, SelectionState.UNSELECTED)
            if (state is SelectionState.SELECTED) != (node.id in selected):
                violations.append(
                    f"{node.id}: derived {state.value} but "
                    f"{'in' if node.id in selected else 'not in'} selected set"
                )
            if not node.children:
                return
            child_states = [states.get(c.id, SelectionState.UNSELECTED) for c in node.children]
            if all(s is SelectionState.SELECTED for s in child_states):
                expected = SelectionState.SELECTED
            elif any(s is not SelectionState.UNSELECTED for s in child_states):
                expected = SelectionState.PARTIAL
            else:
                expected = SelectionState.UNSELECTED
            if state is not expected:
                violations.append(f"{node.id}: derived {state.value}, expected {expected.value}")
            for child in node.children:
                _check(child)

        for root in self._roots:
            _check(root)
        return violations

    def get_summary(self) -> Dict[str, Any]:
        """Returns high-level state counts for testing."""
        states = self._store.selection_states
        return {
            'expanded_count': len(self._store.expanded_nodes),
            'selected_count': len(self._store.selected_nodes),
            'loading_count': len(self._store.loading_nodes),
            'partial_count': sum(1 for s in states.values() if s is SelectionState.PARTIAL),
        }


def make_node(node_id: str, *children: TreeNode, **attributes: Any) -> TreeNode:
    """Shorthand for building test hierarchies: ``make_node('a', make_node('b'))``."""
    attributes.setdefault('name', node_id.upper())
    return TreeNode(node_id, children=list(children), **attributes)


def sample_tree() -> List[TreeNode]:
    """The hierarchy A{B, C{D, E}} with names 'A'..'E'."""
    return [
        make_node('a',
                  make_node('b'),
                  make_node('c', make_node('d'), make_node('e'))),
    ]


def sample_file_tree() -> List[TreeNode]:
    """A small file-explorer hierarchy with typed nodes."""
    return [
        make_node('root',
                  make_node('docs',
                            make_node('readme', name='README.md', type='document'),
                            make_node('guide', name='Guide.pdf', type='document'),
                            name='Documents', type='folder'),
                  make_node('src',
                            make_node('main', name='main.py', type='code'),
                            make_node('util', name='utils.py', type='code'),
                            make_node('cfg', name='settings.json', type='config'),
                            name='Source', type='folder'),
                  make_node('photo', name='photo.png', type='image'),
                  name='Project', type='folder'),
    ]


def random_tree(rng, max_depth: int = 4, max_children: int = 4,
                prefix: Optional[str] = None) -> List[TreeNode]:
    """Build a random hierarchy with unique ids using ``rng`` (a random.Random)."""
    counter = itertools.count()

    def _build(depth: int) -> TreeNode:
        node_id = f"{prefix or 'n'}{next(counter)}"
        child_count = rng.randint(0, max_children) if depth < max_depth else 0
        return make_node(node_id, *[_build(depth + 1) for _ in range(child_count)])

    return [_build(0) for _ in range(rng.randint(1, 3))]
