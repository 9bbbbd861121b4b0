"""
DesignOS: Permission Resolver

Pure lookups answering what a role may see or do.
Inputs are the immutable RoleHierarchy and TabRegistry; grant sets
are computed once at construction.

Unknown roles never raise here: they see nothing.
"""

from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

from core.rbac.errors import UnknownRoleError
from core.rbac.hierarchy import RoleHierarchy
from core.rbac.registry import TabDefinition, TabRegistry
from core.utils.logging_utils import get_component_logger


logger = get_component_logger("PermissionResolver", component="access")

TAB_CAPABILITY_PREFIX = "tab:"


def tab_capability(tab_id: str) -> str:
    return f"{TAB_CAPABILITY_PREFIX}{tab_id}"


class PermissionResolver:

    def __init__(
        self,
        hierarchy: RoleHierarchy,
        registry: TabRegistry,
        capabilities: Optional[Mapping[str, Iterable[str]]] = None,
        role_labels: Optional[Mapping[str, str]] = None
    ):
        """
        Args:
            hierarchy: closed role set and its order
            registry: tab catalog
            capabilities: capability -> roles granted it (tab:<id> is implicit)
            role_labels: role -> display label
        """

        self.hierarchy = hierarchy
        self.registry = registry
        self._labels = dict(role_labels or {})

        grants: Dict[str, set] = {role: set() for role in hierarchy.roles}

        for tab in registry.list_all():
            for role in tab.roles:
                if role in grants:
                    grants[role].add(tab_capability(tab.id))

        for capability, roles in (capabilities or {}).items():
            for role in roles:
                if role in grants:
                    grants[role].add(capability)

        self._grants: Dict[str, FrozenSet[str]] = {
            role: frozenset(values) for role, values in grants.items()
        }

        self._tabs_by_role: Dict[str, Tuple[TabDefinition, ...]] = {
            role: tuple(tab for tab in registry.list_all() if tab.allows(role))
            for role in hierarchy.roles
        }

    # =====================================================
    # TABS
    # =====================================================

    def get_allowed_tabs(self, role: Optional[str]) -> Tuple[TabDefinition, ...]:
        if role is None:
            return ()

        tabs = self._tabs_by_role.get(role)
        if tabs is None:
            logger.warning(f"Role {role!r} is not part of the hierarchy; no tabs visible")
            return ()

        return tabs

    def can_access_tab(self, role: Optional[str], tab_id: str) -> bool:
        return any(tab.id == tab_id for tab in self.get_allowed_tabs(role))

    def first_allowed_tab(self, role: Optional[str]) -> Optional[TabDefinition]:
        tabs = self.get_allowed_tabs(role)
        return tabs[0] if tabs else None

    def default_route(self, role: Optional[str]) -> Optional[str]:
        tab = self.first_allowed_tab(role)
        return tab.path if tab else None

    # =====================================================
    # ROUTES
    # =====================================================

    def can_access_route(self, role: Optional[str], path: str) -> bool:
        return any(tab.matches(path) for tab in self.get_allowed_tabs(role))

    def is_protected_route(self, path: str) -> bool:
        return self.registry.find_by_path(path) is not None

    # =====================================================
    # CAPABILITIES
    # =====================================================

    def capabilities_for(self, role: Optional[str]) -> FrozenSet[str]:
        if role is None:
            return frozenset()
        return self._grants.get(role, frozenset())

    def is_authorized(self, role: Optional[str], capability: str) -> bool:
        return capability in self.capabilities_for(role)

    # =====================================================
    # HIERARCHY
    # =====================================================

    def has_minimum_role(self, role: Optional[str], minimum: str) -> bool:
        if role is None:
            return False

        try:
            return self.hierarchy.is_at_least(role, minimum)
        except UnknownRoleError as e:
            logger.error(f"Role comparison failed ({role!r} vs {minimum!r}): {e}")
            return False

    def role_label(self, role: Optional[str]) -> str:
        if role is None:
            return ""
        return self._labels.get(role, role)

    def effective_role(self, role: Optional[str], super_admin: bool = False) -> Optional[str]:
        """
        Super admins without an explicit role act as the top role.
        """

        if role is None and super_admin:
            return self.hierarchy.highest
        return role
