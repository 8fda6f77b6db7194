#!/usr/bin/env python3
"""
Basic usage example for TreeStateLib.

This example demonstrates:
- Building a hierarchy from nested dictionaries
- Expanding nodes and rendering the flattened projection
- Tri-state selection with a deny-list
- Filtering the projection with a search term
"""

import sys
from pathlib import Path

# Add parent directory to path for development
sys.path.insert(0, str(Path(__file__).parent.parent))

from treestatelib import DisabledType, TreeConfig, TreeEvents, TreeExplorerController
from treestatelib.api import build_tree
from treestatelib.core import CheckboxState

DATA = [
    {'id': 'project', 'name': 'Project', 'type': 'folder', 'children': [
        {'id': 'docs', 'name': 'Documents', 'type': 'folder', 'children': [
            {'id': 'readme', 'name': 'README.md', 'type': 'document'},
            {'id': 'guide', 'name': 'Guide.pdf', 'type': 'document'},
        ]},
        {'id': 'src', 'name': 'Source', 'type': 'folder', 'children': [
            {'id': 'main', 'name': 'main.py', 'type': 'code'},
            {'id': 'settings', 'name': 'settings.json', 'type': 'config'},
        ]},
    ]},
]

MARKS = {
    CheckboxState.CHECKED: '[x]',
    CheckboxState.INDETERMINATE: '[-]',
    CheckboxState.UNCHECKED: '[ ]',
}


def render(tree: TreeExplorerController, title: str) -> None:
    """Print the current projection as an indented outline."""
    print(f"\n{title}")
    print("-" * 50)
    for row in tree.get_projection():
        marker = '-' if row.is_expanded else ('+' if row.has_children else ' ')
        checkbox = MARKS[tree.get_checkbox_state(row.id)]
        print(f"{'  ' * row.depth}{marker} {checkbox} {tree.get_label(row.node)} "
              f"({tree.get_icon(row.node)})")


def main():
    """Walk through a short explorer session."""
    config = TreeConfig.default(
        disabled_types=[DisabledType('config', 'Configuration files are managed centrally')],
        loading_behavior=None,
    )
    events = TreeEvents(
        selection_change=lambda event: print(f"  -> selected: {event.selected_ids}"),
    )

    with TreeExplorerController(build_tree(DATA), config, events=events) as tree:
        render(tree, "Initial projection")

        tree.toggle_expansion('project')
        tree.toggle_expansion('docs')
        render(tree, "After expanding Project and Documents")

        print("\nSelecting README.md and Guide.pdf:")
        tree.toggle_selection('readme')
        tree.toggle_selection('guide')
        render(tree, "Documents is now fully selected, Project partially")

        print("\nTrying to select settings.json:")
        result = tree.toggle_selection('settings')
        print(f"  accepted={result.accepted} reason={result.reason!r}")

        tree.expand_all()
        tree.set_search_term('py')
        render(tree, "Search for 'py'")


if __name__ == "__main__":
    main()
