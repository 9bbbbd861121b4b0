"""
DesignOS: Access Catalog

Builds the RoleHierarchy, TabRegistry and PermissionResolver from the
access configuration (config/access.yaml).

A tab or capability may name its roles explicitly (`roles`) or give a
floor (`min_role`), expanded through the hierarchy. Every role named
must exist; configuration defects abort startup.
"""

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple

from config.system_loader import get_access_config
from core.rbac.errors import AccessConfigError, RoleHierarchyError
from core.rbac.hierarchy import RoleHierarchy
from core.rbac.registry import TabDefinition, TabRegistry
from core.rbac.resolver import PermissionResolver
from core.utils.logging_utils import get_component_logger


logger = get_component_logger("AccessCatalog", component="access")


@dataclass(frozen=True)
class AccessControl:
    hierarchy: RoleHierarchy
    registry: TabRegistry
    resolver: PermissionResolver


# =====================================================
# PARSING HELPERS
# =====================================================

def _parse_roles(entries) -> Tuple[Tuple[str, ...], Dict[str, str]]:
    if not entries:
        raise RoleHierarchyError("access config defines no roles")

    ids = []
    labels = {}
    for entry in entries:
        if isinstance(entry, str):
            role_id, label = entry, entry
        else:
            role_id = entry.get("id")
            label = entry.get("label", role_id)
        ids.append(role_id)
        labels[role_id] = label

    return tuple(ids), labels


def _expand_roles(hierarchy: RoleHierarchy, entry: Mapping, owner: str) -> frozenset:
    """
    Resolve `roles` / `min_role` of a tab or capability entry.
    """

    has_roles = "roles" in entry
    has_min = "min_role" in entry

    if has_roles and has_min:
        raise AccessConfigError(f"{owner}: set either 'roles' or 'min_role', not both")

    if has_min:
        return frozenset(hierarchy.at_least(entry["min_role"]))

    roles = entry.get("roles") or []
    for role in roles:
        # raises UnknownRoleError for roles outside the hierarchy
        hierarchy.rank(role)
    return frozenset(roles)


# =====================================================
# BUILD
# =====================================================

def build_access_control(config: Mapping) -> AccessControl:

    try:
        role_ids, labels = _parse_roles(config.get("roles"))
        hierarchy = RoleHierarchy(role_ids)

        tabs = []
        for entry in config.get("tabs") or []:
            tab_id = entry.get("id")
            tabs.append(TabDefinition(
                id=tab_id,
                label=entry.get("label", tab_id),
                path=entry.get("path", ""),
                icon=entry.get("icon", ""),
                roles=_expand_roles(hierarchy, entry, f"tab {tab_id!r}"),
                class_name=entry.get("class_name"),
            ))

        registry = TabRegistry(tabs)

        capabilities = {
            name: _expand_roles(hierarchy, entry or {}, f"capability {name!r}")
            for name, entry in (config.get("capabilities") or {}).items()
        }

        resolver = PermissionResolver(
            hierarchy,
            registry,
            capabilities=capabilities,
            role_labels=labels
        )

    except AccessConfigError:
        logger.exception("Invalid access configuration")
        raise

    logger.info(
        f"Access catalog ready: {len(hierarchy)} roles, {len(registry)} tabs, "
        f"{len(capabilities)} capabilities"
    )

    return AccessControl(hierarchy=hierarchy, registry=registry, resolver=resolver)


def load_access_control(config: Optional[Mapping] = None) -> AccessControl:
    return build_access_control(config if config is not None else get_access_config())
