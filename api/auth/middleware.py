"""
DesignOS: Auth Middleware

Provides:
- Token extraction (Bearer header, then session cookie)
- Per-request session evaluation through the SessionGate
- Page guard (redirects: login / auth-loading / no-access / forbidden)
- require_auth / require_role / require_capability decorators for JSON APIs

The role always comes from the verified token, never from the client.
"""

from functools import wraps
from urllib.parse import urlencode

from flask import g, jsonify, redirect, request

from api.auth.jwt_handler import (
    verify_token,
    TokenExpiredError,
    InvalidTokenError
)
from api.state import get_app_access
from core.session.gate import SessionState
from core.utils.logging_utils import get_component_logger


logger = get_component_logger("AuthMiddleware", component="api")


# ============================================================
# EXTRACT TOKEN
# ============================================================

def _extract_token():
    """
    Bearer token from Authorization header, else the session cookie.
    """

    auth_header = request.headers.get("Authorization")

    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header.split(" ", 1)[1].strip()
        if token:
            return token

    cookie_value = request.cookies.get(get_app_access().cookie_name)
    return cookie_value or None


# ============================================================
# VERIFY + RESOLVE SESSION
# ============================================================

def _authenticate_request():
    """
    Verifies the token, re-resolves the session and attaches it to g.

    Returns (context, error_message). context is None when the request
    is unauthenticated.
    """

    if "session_context" in g:
        return g.session_context, g.get("auth_error")

    state = get_app_access()
    g.session_context = None
    g.auth_error = None

    token = _extract_token()
    if not token:
        g.auth_error = "Authorization token required"
        return None, g.auth_error

    try:
        payload = verify_token(token, expected_type="access")

    except TokenExpiredError as e:
        gate = state.sessions.get(e.session_id) if e.session_id else None
        if gate is not None:
            gate.fail_verification()
        logger.info(f"Rejected expired token for session {e.session_id}")
        g.auth_error = str(e)
        return None, g.auth_error

    except InvalidTokenError as e:
        logger.info(f"Rejected token: {e}")
        g.auth_error = str(e)
        return None, g.auth_error

    session_id = payload["jti"]
    if state.sessions.is_revoked(session_id):
        g.auth_error = "Session has been terminated."
        return None, g.auth_error

    gate = state.sessions.gate_for(session_id)
    context = gate.resolve(
        payload.get("role"),
        super_admin=bool(payload.get("super_admin"))
    )

    g.user = {
        "user_id": payload.get("user_id"),
        "username": payload.get("username"),
        "role": context.role,
        "super_admin": bool(payload.get("super_admin")),
        "session_id": session_id
    }
    g.session_gate = gate
    g.session_context = context

    return context, None


def current_context():
    context, _ = _authenticate_request()
    return context


# ============================================================
# PAGE GUARD
# ============================================================

def _forbidden_url(routes, path, role):
    query = urlencode({
        "from": path,
        "reason": "insufficient-permissions",
        "role": role or ""
    })
    return f"{routes.forbidden}?{query}"


def guard_page_request():
    """
    before_request hook for page routes.
    Returns a redirect response, or None to let the request through.
    """

    state = get_app_access()
    path = request.path

    if state.is_public(path):
        return None

    context, _ = _authenticate_request()
    routes = state.routes

    if context is None:
        return redirect(routes.login)

    if not context.authorized or path == "/":
        return redirect(g.session_gate.landing_route(context))

    resolver = state.resolver
    if resolver.is_protected_route(path) and not resolver.can_access_route(context.role, path):
        logger.info(f"Role {context.role!r} denied {path}")
        return redirect(_forbidden_url(routes, path, context.role))

    return None


def install_session_gate(app):
    app.before_request(guard_page_request)


# ============================================================
# REQUIRE AUTH
# ============================================================

def require_auth(f):
    """
    Ensures the request carries a valid, non-revoked session token.
    """

    @wraps(f)
    def decorated(*args, **kwargs):

        context, error = _authenticate_request()

        if context is None or context.state is SessionState.UNAUTHENTICATED:
            return jsonify({"error": error or "Session is not authenticated"}), 401

        return f(*args, **kwargs)

    return decorated


def _require(check, message):

    def decorator(f):

        @wraps(f)
        def decorated(*args, **kwargs):

            context, error = _authenticate_request()

            if context is None or context.state is SessionState.UNAUTHENTICATED:
                return jsonify({"error": error or "Session is not authenticated"}), 401

            if not context.role:
                return jsonify({"error": "Role not resolved yet"}), 403

            if not check(get_app_access().resolver, context.role):
                return jsonify({"error": message}), 403

            return f(*args, **kwargs)

        return decorated

    return decorator


# ============================================================
# REQUIRE ROLE
# ============================================================

def require_role(minimum_role):
    """
    Ensures the session role is at least `minimum_role` in the hierarchy.
    """

    return _require(
        lambda resolver, role: resolver.has_minimum_role(role, minimum_role),
        "Insufficient permissions"
    )


# ============================================================
# REQUIRE CAPABILITY
# ============================================================

def require_capability(capability):
    """
    Ensures the session role is granted `capability`.
    """

    return _require(
        lambda resolver, role: resolver.is_authorized(role, capability),
        f"Missing capability: {capability}"
    )
