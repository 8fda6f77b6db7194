"""Tests for transient loading indicators and their timers."""

import asyncio
import threading
import time

import pytest

from treestatelib import (
    AsyncioScheduler,
    CollectIssuesPolicy,
    LoadingBehavior,
    ThreadingScheduler,
    TreeConfig,
    TreeExplorerController,
)
from treestatelib.error_policies import SCHEDULING


@pytest.fixture
def controller(tree, recorder, scheduler):
    return TreeExplorerController(
        tree, TreeConfig.default(), events=recorder.bundle(), scheduler=scheduler,
    )


def loading_events(recorder):
    return [(event.node_id, event.is_loading) for event in recorder.of('loading_change')]


class TestLoadingTimers:

    def test_expand_sets_flag_until_duration_elapses(self, controller, recorder, scheduler):
        controller.toggle_expansion('a')
        assert controller.is_node_loading('a')
        assert controller.get_projection()[0].is_loading
        assert scheduler.pending_count == 1

        scheduler.advance(0.999)
        assert controller.is_node_loading('a')

        scheduler.advance(0.002)
        assert not controller.is_node_loading('a')
        assert not controller.get_projection()[0].is_loading
        assert loading_events(recorder) == [('a', True), ('a', False)]

    def test_leaf_expansion_does_not_load(self, controller, scheduler):
        controller.toggle_expansion('b')
        assert not controller.is_node_loading('b')
        assert scheduler.pending_count == 0

    def test_disabled_loading(self, tree, scheduler):
        controller = TreeExplorerController(tree, TreeConfig(), scheduler=scheduler)
        controller.toggle_expansion('a')
        assert not controller.is_node_loading('a')
        assert scheduler.pending_count == 0

    def test_show_on_expand_off(self, tree, scheduler):
        config = TreeConfig.default(loading_behavior=LoadingBehavior(show_on_expand=False))
        controller = TreeExplorerController(tree, config, scheduler=scheduler)
        controller.toggle_expansion('a')
        assert not controller.is_node_loading('a')

    def test_custom_duration(self, tree, scheduler):
        config = TreeConfig.default(loading_behavior=LoadingBehavior(duration=250))
        controller = TreeExplorerController(tree, config, scheduler=scheduler)
        controller.toggle_expansion('a')
        scheduler.advance(0.25)
        assert not controller.is_node_loading('a')

    def test_collapse_cancels_timer(self, controller, recorder, scheduler):
        controller.toggle_expansion('a')
        controller.toggle_expansion('a')

        assert not controller.is_node_loading('a')
        assert scheduler.pending_count == 0
        assert scheduler.advance(5) == 0
        assert loading_events(recorder) == [('a', True), ('a', False)]

    def test_stale_timer_does_not_clear_reexpanded_node(self, controller, scheduler):
        controller.toggle_expansion('a')
        scheduler.advance(0.5)
        controller.toggle_expansion('a')
        scheduler.advance(0.1)
        controller.toggle_expansion('a')

        # The first timer would have fired at t=1.0
        scheduler.advance(0.5)
        assert controller.is_node_loading('a')

        scheduler.advance(0.6)
        assert not controller.is_node_loading('a')

    def test_repeated_expand_restarts_timer(self, controller, scheduler):
        controller.expand_node('a')
        scheduler.advance(0.5)
        controller.expand_node('a')
        assert scheduler.pending_count == 1

        scheduler.advance(0.6)
        assert controller.is_node_loading('a')
        scheduler.advance(0.5)
        assert not controller.is_node_loading('a')

    def test_independent_nodes(self, controller, scheduler):
        controller.expand_node('a')
        scheduler.advance(0.5)
        controller.expand_node('c')

        scheduler.advance(0.6)
        assert not controller.is_node_loading('a')
        assert controller.is_node_loading('c')
        assert controller.pending_loading_count == 1

    def test_collapse_all_clears_everything(self, controller, scheduler):
        controller.expand_node('a')
        controller.expand_node('c')

        controller.collapse_all()

        assert controller.store.get_loading_node_ids() == []
        assert scheduler.pending_count == 0
        assert controller.pending_loading_count == 0

    def test_expand_all_does_not_load(self, controller, scheduler):
        controller.expand_all()
        assert controller.store.get_loading_node_ids() == []
        assert scheduler.pending_count == 0

    def test_close_cancels_outstanding_timers(self, controller, scheduler):
        controller.expand_node('a')
        controller.expand_node('c')

        controller.close()

        assert scheduler.pending_count == 0
        assert scheduler.advance(5) == 0
        controller.close()

    def test_unusable_scheduler_leaves_no_stuck_flag(self, tree, recorder):
        # No running event loop here, so the asyncio scheduler cannot schedule
        policy = CollectIssuesPolicy()
        controller = TreeExplorerController(
            tree, TreeConfig.default(), events=recorder.bundle(),
            scheduler=AsyncioScheduler(), policy=policy,
        )

        assert controller.toggle_expansion('a') is True
        assert controller.is_node_expanded('a')
        assert not controller.is_node_loading('a')
        assert controller.pending_loading_count == 0
        assert loading_events(recorder) == []
        assert [issue.kind for issue in policy.issues] == [SCHEDULING]
        assert policy.issues[0].node_ids == ('a',)


@pytest.mark.slow
class TestAsyncioLoading:
    """Real event-loop timers."""

    @pytest.mark.asyncio
    async def test_flag_clears_on_the_loop(self, tree):
        config = TreeConfig.default(loading_behavior=LoadingBehavior(duration=20))
        controller = TreeExplorerController(tree, config, scheduler=AsyncioScheduler())

        controller.toggle_expansion('a')
        assert controller.is_node_loading('a')

        await asyncio.sleep(0.2)
        assert not controller.is_node_loading('a')

    @pytest.mark.asyncio
    async def test_default_scheduler_uses_running_loop(self, tree):
        config = TreeConfig.default(loading_behavior=LoadingBehavior(duration=20))
        with TreeExplorerController(tree, config) as controller:
            controller.toggle_expansion('a')
            await asyncio.sleep(0.2)
            assert not controller.is_node_loading('a')

    @pytest.mark.asyncio
    async def test_collapse_cancels_loop_timer(self, tree, recorder):
        config = TreeConfig.default(loading_behavior=LoadingBehavior(duration=20))
        controller = TreeExplorerController(
            tree, config, events=recorder.bundle(), scheduler=AsyncioScheduler(),
        )

        controller.toggle_expansion('a')
        controller.toggle_expansion('a')
        await asyncio.sleep(0.2)

        assert loading_events(recorder) == [('a', True), ('a', False)]


class DelayedFirstLookup(dict):
    """Pending-load table whose first lookup off the main thread stalls.

    Widens the gap between a timer callback reading its entry and acting
    on it, so the main thread can re-expand the node inside that gap.
    """

    def __init__(self, delay):
        super().__init__()
        self.delay = delay
        self.entered = threading.Event()

    def get(self, key, default=None):
        value = super().get(key, default)
        if threading.current_thread() is not threading.main_thread() and not self.entered.is_set():
            self.entered.set()
            time.sleep(self.delay)
        return value


@pytest.mark.slow
class TestThreadedLoading:
    """Timer callbacks running on ThreadingScheduler threads."""

    def test_stale_callback_cannot_clear_reexpanded_node(self, tree):
        config = TreeConfig.default(loading_behavior=LoadingBehavior(duration=200))
        controller = TreeExplorerController(tree, config, scheduler=ThreadingScheduler())
        controller._pending_loads = DelayedFirstLookup(delay=0.3)

        controller.toggle_expansion('a')
        first_timer = controller._pending_loads['a'].task._timer
        assert controller._pending_loads.entered.wait(timeout=2)

        # Collapse and re-expand while the first callback is mid-flight
        controller.toggle_expansion('a')
        controller.toggle_expansion('a')
        first_timer.join(timeout=2)

        assert controller.pending_loading_count == 1
        assert controller.is_node_loading('a')
        controller.close()

    def test_flag_clears_on_timer_thread(self, tree, recorder):
        config = TreeConfig.default(loading_behavior=LoadingBehavior(duration=100))
        with TreeExplorerController(tree, config, events=recorder.bundle(),
                                    scheduler=ThreadingScheduler()) as controller:
            controller.toggle_expansion('a')
            timer = controller._pending_loads['a'].task._timer
            timer.join(timeout=2)

            assert not controller.is_node_loading('a')
            assert controller.pending_loading_count == 0
            assert loading_events(recorder) == [('a', True), ('a', False)]
