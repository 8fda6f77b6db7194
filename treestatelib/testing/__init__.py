"""Testing utilities for treestatelib consumers."""

from .fixtures import (
    ManualScheduler,
    TreeStateTestHelper,
    make_node,
    random_tree,
    sample_file_tree,
    sample_tree,
)

__all__ = [
    'ManualScheduler',
    'TreeStateTestHelper',
    'make_node',
    'random_tree',
    'sample_file_tree',
    'sample_tree',
]
