#!/usr/bin/env python3
"""
Loading indicators on an asyncio event loop.

Expanding a node with children shows a transient loading indicator that
clears itself after the configured duration. A lazy data provider reacts
to expand events flagged ``needs_children`` by supplying children and
rebinding the hierarchy.
"""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path for development
sys.path.insert(0, str(Path(__file__).parent.parent))

from treestatelib import (
    AsyncioScheduler,
    LoadingBehavior,
    TreeConfig,
    TreeEvents,
    TreeExplorerController,
    TreeNode,
)


class LazyProvider:
    """Fabricates children for a node the first time it is expanded."""

    def __init__(self):
        self.roots = [
            TreeNode('root', name='Remote share', children=[TreeNode('inbox', name='Inbox')]),
        ]
        self.controller = None

    def on_expand(self, event):
        if not event.needs_children:
            return
        print(f"  provider: loading children of {event.node_id!r}")
        children = [TreeNode(f"{event.node_id}-{i}", name=f"Message {i}") for i in range(3)]
        self.roots = [self._replace(node, event.node_id, children) for node in self.roots]
        self.controller.set_root_data(self.roots)

    def _replace(self, node, node_id, children):
        if node.id == node_id:
            return node.with_children(children)
        return node.with_children([self._replace(c, node_id, children) for c in node.children])


def show(tree):
    for row in tree.get_projection():
        flag = ' (loading)' if row.is_loading else ''
        print(f"  {'  ' * row.depth}{tree.get_label(row.node)}{flag}")


async def main():
    """Expand nodes and watch the loading indicators clear."""
    provider = LazyProvider()
    config = TreeConfig.default(loading_behavior=LoadingBehavior(duration=300))
    events = TreeEvents(
        expand=provider.on_expand,
        loading_change=lambda e: print(f"  loading {e.node_id!r}: {e.is_loading}"),
    )

    with TreeExplorerController(provider.roots, config, events=events,
                                scheduler=AsyncioScheduler()) as tree:
        provider.controller = tree

        print("Expanding the share:")
        tree.toggle_expansion('root')
        show(tree)

        await asyncio.sleep(0.4)
        print("\nAfter 400 ms:")
        show(tree)

        print("\nExpanding Inbox (children fetched lazily):")
        tree.toggle_expansion('inbox')
        show(tree)


if __name__ == "__main__":
    asyncio.run(main())
