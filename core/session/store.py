"""
DesignOS: Session Store

Application-scoped table of SessionGate objects keyed by session id.
Each gate belongs to exactly one session. Terminated session ids are
revoked so their tokens stop verifying; a revocation is kept for
revocation_ttl seconds, after which every token of that session has
expired anyway. Gates whose token fails verification are released.
"""

import threading
import time
from typing import Callable, Dict, Optional

from core.rbac.resolver import PermissionResolver
from core.session.gate import DEFAULT_GRACE_PERIOD, GateRoutes, SessionGate
from core.session.scheduler import TimerScheduler
from core.utils.logging_utils import get_component_logger


logger = get_component_logger("SessionStore", component="session")

# refresh tokens live 7 days by default
DEFAULT_REVOCATION_TTL = 7 * 24 * 3600.0


class SessionStore:

    def __init__(
        self,
        resolver: PermissionResolver,
        scheduler=None,
        grace_period: float = DEFAULT_GRACE_PERIOD,
        routes: Optional[GateRoutes] = None,
        revocation_ttl: float = DEFAULT_REVOCATION_TTL,
        clock: Callable[[], float] = time.monotonic
    ):
        self.resolver = resolver
        self.scheduler = scheduler or TimerScheduler()
        self.grace_period = grace_period
        self.routes = routes or GateRoutes()
        self.revocation_ttl = revocation_ttl
        self.clock = clock

        self._lock = threading.Lock()
        self._gates: Dict[str, SessionGate] = {}
        # session id -> moment the revocation can be forgotten
        self._revoked: Dict[str, float] = {}

    def gate_for(self, session_id: str) -> SessionGate:
        with self._lock:
            gate = self._gates.get(session_id)
            if gate is None:
                gate = SessionGate(
                    self.resolver,
                    session_id=session_id,
                    scheduler=self.scheduler,
                    grace_period=self.grace_period,
                    on_terminate=self._revoke,
                    routes=self.routes,
                    on_release=self.release,
                )
                self._gates[session_id] = gate
            return gate

    def get(self, session_id: str) -> Optional[SessionGate]:
        with self._lock:
            return self._gates.get(session_id)

    def is_revoked(self, session_id: Optional[str]) -> bool:
        if not session_id:
            return False
        with self._lock:
            self._prune_revoked()
            return session_id in self._revoked

    def logout(self, session_id: str) -> None:
        gate = self.gate_for(session_id)
        gate.logout()

    def release(self, session_id: Optional[str]) -> None:
        """
        Forget the gate of a session whose token no longer verifies.
        """

        if not session_id:
            return
        with self._lock:
            released = self._gates.pop(session_id, None)
        if released is not None:
            logger.debug(f"Session {session_id} released")

    def _revoke(self, session_id: Optional[str]) -> None:
        if not session_id:
            return
        with self._lock:
            self._prune_revoked()
            self._revoked[session_id] = self.clock() + self.revocation_ttl
            self._gates.pop(session_id, None)
        logger.info(f"Session {session_id} revoked")

    def _prune_revoked(self) -> None:
        now = self.clock()
        stale = [sid for sid, until in self._revoked.items() if until <= now]
        for sid in stale:
            del self._revoked[sid]

    @property
    def revoked_count(self) -> int:
        with self._lock:
            self._prune_revoked()
            return len(self._revoked)

    def __len__(self) -> int:
        with self._lock:
            return len(self._gates)
