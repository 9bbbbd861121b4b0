"""
DesignOS: Session Gate

Per-session state machine applying resolver decisions to one session:

    unauthenticated -> authenticating -> authorized(role) | no_access
    authorized(role) -> authorized(new role) | no_access   (re-resolved per request)
    any -> terminated (logout, or no_access grace period elapsed)
    terminated -> unauthenticated (next request)

Entering no_access arms a one-shot grace timer that terminates the
session; leaving no_access (or logging out) cancels it.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping, Optional, Tuple

from core.rbac.registry import TabDefinition
from core.rbac.resolver import PermissionResolver
from core.session.scheduler import TimerScheduler
from core.utils.logging_utils import get_component_logger


logger = get_component_logger("SessionGate", component="session")

DEFAULT_GRACE_PERIOD = 5.0


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHORIZED = "authorized"
    NO_ACCESS = "no_access"
    TERMINATED = "terminated"


@dataclass(frozen=True)
class SessionContext:
    session_id: Optional[str]
    state: SessionState
    role: Optional[str] = None
    tabs: Tuple[TabDefinition, ...] = ()
    default_route: Optional[str] = None

    @property
    def authorized(self) -> bool:
        return self.state is SessionState.AUTHORIZED


@dataclass(frozen=True)
class GateRoutes:
    login: str = "/login"
    auth_loading: str = "/auth-loading"
    no_access: str = "/no-access"
    forbidden: str = "/forbidden"

    @classmethod
    def from_settings(cls, routes: Optional[Mapping] = None) -> "GateRoutes":
        routes = routes or {}
        defaults = cls()
        return cls(
            login=routes.get("login", defaults.login),
            auth_loading=routes.get("auth_loading", defaults.auth_loading),
            no_access=routes.get("no_access", defaults.no_access),
            forbidden=routes.get("forbidden", defaults.forbidden),
        )


class SessionGate:

    def __init__(
        self,
        resolver: PermissionResolver,
        session_id: Optional[str] = None,
        scheduler=None,
        grace_period: float = DEFAULT_GRACE_PERIOD,
        on_terminate: Optional[Callable[[Optional[str]], None]] = None,
        routes: Optional[GateRoutes] = None,
        on_release: Optional[Callable[[Optional[str]], None]] = None
    ):
        """
        Args:
            resolver: permission resolver shared by all sessions
            session_id: id of the owning session (token jti)
            scheduler: object with schedule(delay, callback) -> handle.cancel()
            grace_period: seconds spent in no_access before termination
            on_terminate: called with session_id once the session terminates
            routes: login / loading / no-access / forbidden routes
            on_release: called with session_id when verification fails
        """

        self.resolver = resolver
        self.session_id = session_id
        self.scheduler = scheduler or TimerScheduler()
        self.grace_period = grace_period
        self.on_terminate = on_terminate
        self.routes = routes or GateRoutes()
        self.on_release = on_release

        self._lock = threading.Lock()
        self._state = SessionState.UNAUTHENTICATED
        self._role: Optional[str] = None
        self._tabs: Tuple[TabDefinition, ...] = ()
        self._timer = None
        self._closed = False

    # =====================================================
    # STATE
    # =====================================================

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    @property
    def role(self) -> Optional[str]:
        with self._lock:
            return self._role

    @property
    def termination_pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    @property
    def context(self) -> SessionContext:
        with self._lock:
            return self._snapshot()

    def _snapshot(self) -> SessionContext:
        default_route = self._tabs[0].path if self._tabs else None
        return SessionContext(
            session_id=self.session_id,
            state=self._state,
            role=self._role,
            tabs=self._tabs,
            default_route=default_route,
        )

    def _move(self, state: SessionState, role: Optional[str] = None, tabs=()):
        previous = self._state
        self._state = state
        self._role = role
        self._tabs = tuple(tabs)

        if previous is not state:
            logger.info(
                f"Session {self.session_id}: {previous.value} -> {state.value}"
                + (f" (role={role})" if role else "")
            )

    # =====================================================
    # TIMER
    # =====================================================

    def _arm_timer(self):
        if self._timer is not None:
            return
        self._timer = self.scheduler.schedule(self.grace_period, self._expire)

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _expire(self):
        with self._lock:
            if self._timer is None or self._state is not SessionState.NO_ACCESS:
                return
            self._timer = None
            self._close()

        logger.warning(
            f"Session {self.session_id}: no access after {self.grace_period}s, terminated"
        )
        self._notify_terminated()

    def _close(self):
        self._closed = True
        self._move(SessionState.TERMINATED)

    def _notify_terminated(self):
        if self.on_terminate is not None:
            self.on_terminate(self.session_id)

    # =====================================================
    # TRANSITIONS
    # =====================================================

    def resolve(self, role: Optional[str], super_admin: bool = False) -> SessionContext:
        """
        Re-evaluate the session for a verified role.
        A role of None (not yet known) keeps the session authenticating.
        """

        with self._lock:

            if self._closed:
                self._move(SessionState.UNAUTHENTICATED)
                return self._snapshot()

            role = self.resolver.effective_role(role, super_admin)

            if role is None:
                self._cancel_timer()
                self._move(SessionState.AUTHENTICATING)
                return self._snapshot()

            tabs = self.resolver.get_allowed_tabs(role)

            if tabs:
                self._cancel_timer()
                self._move(SessionState.AUTHORIZED, role, tabs)
            else:
                self._move(SessionState.NO_ACCESS, role)
                self._arm_timer()

            return self._snapshot()

    def fail_verification(self) -> SessionContext:
        """
        Token invalid or expired: back to unauthenticated, never no_access.
        The owner is told the gate can be released.
        """

        with self._lock:
            self._cancel_timer()
            self._move(SessionState.UNAUTHENTICATED)
            snapshot = self._snapshot()

        if self.on_release is not None:
            self.on_release(self.session_id)

        return snapshot

    def logout(self) -> SessionContext:

        with self._lock:
            self._cancel_timer()
            already_closed = self._closed
            if not already_closed:
                self._close()
            snapshot = self._snapshot()

        if not already_closed:
            self._notify_terminated()

        return snapshot

    # =====================================================
    # ROUTING
    # =====================================================

    def landing_route(self, context: Optional[SessionContext] = None) -> str:
        """
        Where a session in the given (or current) state belongs.
        """

        if context is None:
            context = self.context

        if context.state is SessionState.AUTHORIZED:
            return context.default_route
        if context.state is SessionState.AUTHENTICATING:
            return self.routes.auth_loading
        if context.state is SessionState.NO_ACCESS:
            return self.routes.no_access
        return self.routes.login

    def can_access(self, path: str) -> bool:
        context = self.context
        if not context.authorized:
            return False
        return self.resolver.can_access_route(context.role, path)
