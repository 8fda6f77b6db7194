"""Configuration system for treestatelib.

This module defines how callers describe the meaning of generic node
attributes (label, icon, category), which nodes may be selected, which
nodes start selected, and how transient loading indicators behave.

Every dynamic lookup is driven either by an attribute name or by a
resolver function supplied here; nodes are never inspected by reflection.
"""

from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .core.node import TreeNode

NodeResolver = Callable[[TreeNode], Any]
NodeMatcher = Callable[[TreeNode], bool]


DEFAULT_ICON_MAP: Dict[str, str] = {
    'folder': 'folder',
    'file': 'description',
    'document': 'article',
    'image': 'image',
    'config': 'settings',
    'executable': 'launch',
    'archive': 'archive',
    'video': 'video_file',
    'audio': 'audio_file',
    'code': 'code',
    'text': 'text_snippet',
}

FOLDER_ICON = 'folder'
LEAF_ICON = 'description'

DEFAULT_LOADING_DURATION = 1000  # milliseconds


def default_icon_resolver(node: TreeNode) -> str:
    """Map a node's ``type`` attribute to an icon name.

    Nodes without a type are treated as folders when they have children
    and as plain files otherwise.
    """
    node_type = node.get('type') or ('folder' if node.has_children else 'file')
    return DEFAULT_ICON_MAP.get(str(node_type).lower(), LEAF_ICON)


@dataclass(frozen=True)
class DisabledType:
    """Deny-list entry: nodes of ``type`` cannot be selected, for ``reason``.

    ``matcher`` replaces the category equality test when supplied.
    """
    type: Any
    reason: str
    matcher: Optional[NodeMatcher] = None

    def matches(self, node: TreeNode, category: Any) -> bool:
        if self.matcher is not None:
            return bool(self.matcher(node))
        return self.type == category


@dataclass(frozen=True)
class LoadingBehavior:
    """Transient loading indicator shown when a node with children expands.

    A zero (or None) duration falls back to the 1000 ms default.
    """
    show_on_expand: bool = True
    duration: Optional[float] = DEFAULT_LOADING_DURATION  # milliseconds

    @property
    def duration_seconds(self) -> float:
        return (self.duration or DEFAULT_LOADING_DURATION) / 1000.0


@dataclass(frozen=True)
class ContextMenuItem:
    """A context-menu entry; the engine forwards ``action`` verbatim."""
    id: str
    action: str
    label: str
    icon: Optional[str] = None
    disabled: bool = False
    separator: bool = False


DEFAULT_CONTEXT_MENU_ITEMS: Tuple[ContextMenuItem, ...] = (
    ContextMenuItem(id='rename', action='rename', label='Rename', icon='edit'),
    ContextMenuItem(id='delete', action='delete', label='Delete', icon='delete'),
    ContextMenuItem(id='properties', action='properties', label='Properties', icon='info'),
)


@dataclass(frozen=True)
class TreeConfig:
    """Complete, immutable configuration for a tree session.

    Selectability rules:
    - If ``selectable_types`` is non-empty it alone governs (allow-list).
    - Otherwise ``disabled_types`` applies (deny-list, first match wins).
    - Absent both, every node is selectable.

    A bare ``TreeConfig()`` leaves ``loading_behavior`` unset, so loading
    indicators are off. Use ``TreeConfig.default()`` (indicators on at
    1000 ms) or pass a ``LoadingBehavior`` to get them; they are then shown
    on expand unless ``show_on_expand`` is False.
    """

    # Attribute interpretation
    label_property: str = 'name'
    icon_property: Optional[str] = None
    icon_resolver: Optional[NodeResolver] = None
    category_property: str = 'type'
    category_resolver: Optional[NodeResolver] = None

    # Selection rules
    selectable_types: Optional[Sequence[Any]] = None
    disabled_types: Optional[Sequence[DisabledType]] = None
    preselected_nodes: Optional[Sequence[str]] = None

    # Presentation hints (not interpreted by the engine)
    show_checkboxes: bool = True
    show_context_menu: bool = True
    context_menu_items: Optional[Sequence[ContextMenuItem]] = None

    # Loading indicator; None disables it
    loading_behavior: Optional[LoadingBehavior] = None

    # Search: also expand ancestors of matches in the projection
    expand_search_matches: bool = False

    @classmethod
    def default(cls, **overrides: Any) -> 'TreeConfig':
        """Create the stock configuration used by most explorers.

        Loading indicators are on (1000 ms), icons come from
        ``default_icon_resolver`` and the default context menu is used.

        Args:
            **overrides: Field values replacing the defaults

        Returns:
            TreeConfig with the stock values and the given overrides
        """
        base = cls(
            label_property='name',
            icon_property='type',
            icon_resolver=default_icon_resolver,
            show_checkboxes=True,
            show_context_menu=True,
            loading_behavior=LoadingBehavior(show_on_expand=True, duration=DEFAULT_LOADING_DURATION),
            context_menu_items=DEFAULT_CONTEXT_MENU_ITEMS,
        )
        return replace(base, **overrides)

    # Accessors

    def get_label_value(self, node: TreeNode) -> Any:
        """Raw value of the configured label attribute (used by search)."""
        return node.get(self.label_property)

    def get_label(self, node: TreeNode) -> str:
        """Display label: the label attribute, else the id, else 'Unnamed'."""
        value = self.get_label_value(node)
        if value:
            return str(value)
        return node.id or 'Unnamed'

    def get_icon(self, node: TreeNode) -> str:
        if self.icon_resolver is not None:
            return self.icon_resolver(node)
        if self.icon_property:
            icon_value = node.get(self.icon_property)
            if icon_value:
                return DEFAULT_ICON_MAP.get(str(icon_value).lower(), LEAF_ICON)
        return FOLDER_ICON if node.has_children else LEAF_ICON

    def get_category(self, node: TreeNode) -> Any:
        """Category used by the selectability rules.

        Falls back to a structural category ('folder' / 'file') when the
        configured attribute is absent.
        """
        if self.category_resolver is not None:
            return self.category_resolver(node)
        value = node.get(self.category_property)
        if value is not None:
            return value
        return 'folder' if node.has_children else 'file'

    def get_context_menu_items(self) -> List[ContextMenuItem]:
        if self.context_menu_items is None:
            return list(DEFAULT_CONTEXT_MENU_ITEMS)
        return list(self.context_menu_items)

    @property
    def loading_enabled(self) -> bool:
        return self.loading_behavior is not None and self.loading_behavior.show_on_expand

    @property
    def has_overlapping_rules(self) -> bool:
        """True when both an allow-list and a deny-list were supplied."""
        return bool(self.selectable_types) and bool(self.disabled_types)

    def validate(self) -> List[str]:
        """Validate configuration for consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not self.label_property:
            errors.append("label_property cannot be empty")

        if not self.category_property and self.category_resolver is None:
            errors.append("category_property or category_resolver is required")

        for entry in self.disabled_types or ():
            if not isinstance(entry, DisabledType):
                errors.append(f"disabled_types entries must be DisabledType, got {type(entry).__name__}")
            elif not entry.reason:
                errors.append(f"disabled type {entry.type!r} needs a reason")

        if self.preselected_nodes is not None and isinstance(self.preselected_nodes, str):
            errors.append("preselected_nodes must be a sequence of ids, not a string")

        if self.loading_behavior is not None and (self.loading_behavior.duration or 0) < 0:
            errors.append("loading duration cannot be negative")

        return errors
