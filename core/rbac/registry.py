"""
DesignOS: Tab Registry

Static catalog of navigable sections ("tabs") and the icon names
they may reference. Built once at startup, read-only afterwards.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Iterator, Optional, Tuple

from core.rbac.errors import DuplicateTabError, InvalidTabError


# =====================================================
# ICONS
# =====================================================

@dataclass(frozen=True)
class IconRef:
    name: str
    slug: str


ICONS: Dict[str, IconRef] = {
    ref.name: ref
    for ref in (
        IconRef("LayoutDashboard", "layout-dashboard"),
        IconRef("Package", "package"),
        IconRef("PenSquare", "pen-square"),
        IconRef("Workflow", "workflow"),
        IconRef("Sparkles", "sparkles"),
        IconRef("KanbanSquare", "kanban-square"),
        IconRef("View", "view"),
        IconRef("ShieldAlert", "shield-alert"),
        IconRef("Users", "users"),
        IconRef("Target", "target"),
        IconRef("ClipboardList", "clipboard-list"),
        IconRef("Beaker", "beaker"),
        IconRef("Bot", "bot"),
        IconRef("BookUser", "book-user"),
    )
}

DEFAULT_ICON = ICONS["Package"]


def get_icon(name: Optional[str]) -> IconRef:
    """
    Resolve a symbolic icon name. Unknown names get DEFAULT_ICON.
    """
    return ICONS.get(name or "", DEFAULT_ICON)


# =====================================================
# PATH HELPERS
# =====================================================

def path_segments(path: str) -> Tuple[str, ...]:
    """
    "/kit/42/?q=1" -> ("kit", "42")
    """

    path = (path or "").split("?", 1)[0].split("#", 1)[0]
    return tuple(part for part in path.split("/") if part)


def is_segment_prefix(prefix: str, path: str) -> bool:
    head = path_segments(prefix)
    segments = path_segments(path)
    return segments[:len(head)] == head


# =====================================================
# TAB DEFINITION
# =====================================================

@dataclass(frozen=True)
class TabDefinition:
    id: str
    label: str
    path: str
    icon: str
    roles: FrozenSet[str] = field(default_factory=frozenset)
    class_name: Optional[str] = None

    def __post_init__(self):
        if not self.id:
            raise InvalidTabError("Tab id must not be empty")
        if not self.path or not self.path.startswith("/"):
            raise InvalidTabError(
                f"Tab {self.id!r} needs an absolute route path, got {self.path!r}"
            )
        if not isinstance(self.roles, frozenset):
            object.__setattr__(self, "roles", frozenset(self.roles))

    @property
    def icon_ref(self) -> IconRef:
        return get_icon(self.icon)

    def allows(self, role) -> bool:
        return role in self.roles

    def matches(self, path: str) -> bool:
        return is_segment_prefix(self.path, path)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "path": self.path,
            "icon": self.icon_ref.slug,
            "class_name": self.class_name,
        }


# =====================================================
# REGISTRY
# =====================================================

class TabRegistry:

    def __init__(self, tabs: Iterable[TabDefinition]):

        ordered = []
        by_id: Dict[str, TabDefinition] = {}

        for tab in tabs:
            if tab.id in by_id:
                raise DuplicateTabError(tab.id)
            by_id[tab.id] = tab
            ordered.append(tab)

        self._tabs: Tuple[TabDefinition, ...] = tuple(ordered)
        self._by_id = by_id

    def list_all(self) -> Tuple[TabDefinition, ...]:
        return self._tabs

    def get(self, tab_id: str) -> Optional[TabDefinition]:
        return self._by_id.get(tab_id)

    def find_by_path(self, path: str) -> Optional[TabDefinition]:
        """
        Catalog entry owning `path`; the longest matching tab path wins.
        """

        best = None
        best_depth = -1
        for tab in self._tabs:
            depth = len(path_segments(tab.path))
            if depth > best_depth and tab.matches(path):
                best = tab
                best_depth = depth
        return best

    def get_icon(self, name: Optional[str]) -> IconRef:
        return get_icon(name)

    def __iter__(self) -> Iterator[TabDefinition]:
        return iter(self._tabs)

    def __len__(self) -> int:
        return len(self._tabs)
