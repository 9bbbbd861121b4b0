"""
DesignOS: Role-based access control

Usage:
    from core.rbac import load_access_control
    access = load_access_control()
    access.resolver.get_allowed_tabs("admin")
"""

from .errors import (  # noqa: F401
    AccessConfigError,
    DuplicateTabError,
    InvalidTabError,
    RoleHierarchyError,
    UnknownRoleError,
)
from .hierarchy import RoleHierarchy  # noqa: F401
from .registry import DEFAULT_ICON, IconRef, TabDefinition, TabRegistry, get_icon  # noqa: F401
from .resolver import PermissionResolver, tab_capability  # noqa: F401
from .catalog import AccessControl, build_access_control, load_access_control  # noqa: F401

__all__ = [
    "AccessConfigError",
    "DuplicateTabError",
    "InvalidTabError",
    "RoleHierarchyError",
    "UnknownRoleError",
    "RoleHierarchy",
    "DEFAULT_ICON",
    "IconRef",
    "TabDefinition",
    "TabRegistry",
    "get_icon",
    "PermissionResolver",
    "tab_capability",
    "AccessControl",
    "build_access_control",
    "load_access_control",
]
