from .gate import (  # noqa: F401
    DEFAULT_GRACE_PERIOD,
    GateRoutes,
    SessionContext,
    SessionGate,
    SessionState,
)
from .scheduler import TimerHandle, TimerScheduler  # noqa: F401
from .store import SessionStore  # noqa: F401

__all__ = [
    "DEFAULT_GRACE_PERIOD",
    "GateRoutes",
    "SessionContext",
    "SessionGate",
    "SessionState",
    "TimerHandle",
    "TimerScheduler",
    "SessionStore",
]
