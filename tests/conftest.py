"""
Pytest configuration.

JWT_SECRET must exist before api.auth.jwt_handler is imported, and file
logging is switched off so test runs do not write log files.
"""

import copy
import os

os.environ.setdefault("JWT_SECRET", "designos-test-secret-0123456789abcdef")
os.environ.setdefault("DESIGNOS_LOG_TO_FILE", "false")

import pytest  # noqa: E402

from core.rbac import (  # noqa: E402
    PermissionResolver,
    RoleHierarchy,
    TabDefinition,
    TabRegistry,
    build_access_control,
)


SCENARIO_ROLES = ("viewer", "producer", "core", "admin")

SCENARIO_CONFIG = {
    "roles": [
        {"id": "viewer", "label": "Viewer"},
        {"id": "producer", "label": "Producer"},
        {"id": "core", "label": "Core"},
        {"id": "admin", "label": "Admin"},
    ],
    "tabs": [
        {"id": "dashboard", "label": "Dashboard", "path": "/dashboard",
         "icon": "LayoutDashboard", "min_role": "viewer"},
        {"id": "kit", "label": "Kit", "path": "/kit", "icon": "Package",
         "min_role": "producer"},
        {"id": "agent", "label": "Agent", "path": "/agent", "icon": "Bot",
         "min_role": "core"},
    ],
    "capabilities": {
        "agent:run": {"min_role": "core"},
        "manage:roles": {"roles": ["admin"]},
    },
}


class _ManualHandle:

    def __init__(self, due, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True

    @property
    def active(self):
        return not (self.cancelled or self.fired)


class ManualScheduler:
    """Scheduler driven by an explicit clock instead of timer threads."""

    def __init__(self):
        self.now = 0.0
        self.handles = []

    def schedule(self, delay, callback):
        handle = _ManualHandle(self.now + delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self):
        return [h for h in self.handles if h.active]

    def advance(self, seconds):
        self.now += seconds
        due = sorted(
            (h for h in self.handles if h.active and h.due <= self.now),
            key=lambda h: h.due
        )
        for handle in due:
            if handle.active:
                handle.fired = True
                handle.callback()


@pytest.fixture
def scenario_config():
    return copy.deepcopy(SCENARIO_CONFIG)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def hierarchy():
    return RoleHierarchy(SCENARIO_ROLES)


@pytest.fixture
def registry():
    return TabRegistry([
        TabDefinition("dashboard", "Dashboard", "/dashboard", "LayoutDashboard",
                      roles=frozenset(SCENARIO_ROLES)),
        TabDefinition("kit", "Kit", "/kit", "Package",
                      roles=frozenset({"producer", "core", "admin"})),
        TabDefinition("agent", "Agent", "/agent", "Bot",
                      roles=frozenset({"core", "admin"})),
    ])


@pytest.fixture
def resolver(hierarchy, registry):
    return PermissionResolver(
        hierarchy,
        registry,
        capabilities={"agent:run": ["core", "admin"]},
        role_labels={"viewer": "Viewer", "admin": "Admin"}
    )


@pytest.fixture
def scenario_access():
    return build_access_control(SCENARIO_CONFIG)


@pytest.fixture
def app(scenario_access, scheduler):
    from api import create_app

    flask_app = create_app(
        access=scenario_access,
        settings={"session": {"no_access_grace_seconds": 5}},
        scheduler=scheduler
    )
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()
