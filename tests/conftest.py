"""Shared pytest fixtures for the treestatelib test suite."""

import sys
from pathlib import Path
from typing import Any, List, Tuple

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from treestatelib.events import TreeEvents  # noqa: E402
from treestatelib.testing import ManualScheduler, sample_file_tree, sample_tree  # noqa: E402


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "slow: waits on real timers or runs large property checks"
    )


class EventRecorder:
    """Collects every notification a controller emits, in order."""

    NAMES = (
        'expand', 'collapse', 'selection_change', 'menu_action',
        'node_click', 'node_double_click', 'loading_change',
    )

    def __init__(self):
        self.received: List[Tuple[str, Any]] = []

    def bundle(self) -> TreeEvents:
        return TreeEvents(**{name: self._recorder(name) for name in self.NAMES})

    def _recorder(self, name):
        def _record(payload):
            self.received.append((name, payload))
        return _record

    def of(self, name: str) -> List[Any]:
        return [payload for kind, payload in self.received if kind == name]

    def clear(self) -> None:
        self.received.clear()


@pytest.fixture
def recorder():
    return EventRecorder()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def tree():
    """A{B, C{D, E}}"""
    return sample_tree()


@pytest.fixture
def file_tree():
    return sample_file_tree()
