"""
DesignOS: Per-application access state

Holds the access catalog, the session table and routing settings.
Stored in app.extensions["designos"]; nothing here is module-global.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Mapping, Optional, Tuple

from flask import current_app

from core.rbac.catalog import AccessControl
from core.rbac.registry import is_segment_prefix
from core.session.gate import DEFAULT_GRACE_PERIOD, GateRoutes
from core.session.store import DEFAULT_REVOCATION_TTL, SessionStore

EXTENSION_KEY = "designos"

DEFAULT_PUBLIC_PATHS = ("/login", "/forbidden", "/no-access", "/auth-loading", "/health")
DEFAULT_IGNORED_PREFIXES = ("/static", "/favicon.ico", "/auth", "/api")
DEFAULT_COOKIE_NAME = "designos_auth"


@dataclass
class AppAccess:
    access: AccessControl
    sessions: SessionStore
    routes: GateRoutes = field(default_factory=GateRoutes)
    public_paths: FrozenSet[str] = frozenset(DEFAULT_PUBLIC_PATHS)
    ignored_prefixes: Tuple[str, ...] = DEFAULT_IGNORED_PREFIXES
    cookie_name: str = DEFAULT_COOKIE_NAME
    grace_period: float = DEFAULT_GRACE_PERIOD

    @property
    def resolver(self):
        return self.access.resolver

    def is_public(self, path: str) -> bool:
        if path in self.public_paths:
            return True
        return any(is_segment_prefix(prefix, path) for prefix in self.ignored_prefixes)


def build_app_access(
    access: AccessControl,
    settings: Optional[Mapping] = None,
    scheduler=None
) -> AppAccess:
    settings = settings or {}
    session_cfg = settings.get("session", {}) or {}
    route_cfg = settings.get("routes", {}) or {}

    routes = GateRoutes.from_settings(route_cfg)
    grace_period = float(session_cfg.get("no_access_grace_seconds", DEFAULT_GRACE_PERIOD))

    sessions = SessionStore(
        access.resolver,
        scheduler=scheduler,
        grace_period=grace_period,
        routes=routes,
        revocation_ttl=float(session_cfg.get("revocation_ttl_seconds", DEFAULT_REVOCATION_TTL)),
    )

    return AppAccess(
        access=access,
        sessions=sessions,
        routes=routes,
        public_paths=frozenset(route_cfg.get("public", DEFAULT_PUBLIC_PATHS)),
        ignored_prefixes=tuple(route_cfg.get("ignored_prefixes", DEFAULT_IGNORED_PREFIXES)),
        cookie_name=session_cfg.get("auth_cookie_name", DEFAULT_COOKIE_NAME),
        grace_period=grace_period,
    )


def get_app_access() -> AppAccess:
    return current_app.extensions[EXTENSION_KEY]
