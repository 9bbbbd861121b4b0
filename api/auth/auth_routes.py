"""
Auth Routes.

Endpoints:
- POST /auth/refresh
- POST /auth/logout
- GET  /auth/me

Credentials are checked by the external identity provider, which issues
the tokens; this service only verifies, refreshes and terminates them.
"""

from flask import g, jsonify, request

from api.auth import auth_blueprint
from api.auth.middleware import require_auth
from api.auth.jwt_handler import (
    create_access_token,
    verify_token,
    InvalidTokenError,
    TokenExpiredError
)
from api.state import get_app_access
from core.utils.logging_utils import get_component_logger


logger = get_component_logger("AuthRoutes", component="api")


@auth_blueprint.route("/refresh", methods=["POST"])
def refresh():
    data = request.get_json(silent=True) or {}
    refresh_token = (data.get("refresh_token") or "").strip()
    if not refresh_token:
        return jsonify({"error": "refresh_token is required"}), 400

    try:
        payload = verify_token(refresh_token, expected_type="refresh")
    except (TokenExpiredError, InvalidTokenError) as exc:
        return jsonify({"error": str(exc)}), 401

    session_id = payload["jti"]
    if get_app_access().sessions.is_revoked(session_id):
        return jsonify({"error": "Session has been terminated."}), 401

    access_token = create_access_token(
        user_id=payload.get("user_id"),
        username=payload.get("username"),
        role=payload.get("role"),
        super_admin=bool(payload.get("super_admin")),
        session_id=session_id,
    )
    return jsonify({"access_token": access_token}), 200


@auth_blueprint.route("/logout", methods=["POST"])
@require_auth
def logout():
    state = get_app_access()
    session_id = g.user["session_id"]

    state.sessions.logout(session_id)
    logger.info(f"User {g.user['username']} logged out (session {session_id})")

    response = jsonify({"status": "ok", "redirect": state.routes.login})
    response.delete_cookie(state.cookie_name)
    return response, 200


@auth_blueprint.route("/me", methods=["GET"])
@require_auth
def me():
    resolver = get_app_access().resolver
    return jsonify(
        {
            "user": {
                "id": g.user["user_id"],
                "username": g.user["username"],
                "role": g.user["role"],
                "role_label": resolver.role_label(g.user["role"]),
                "super_admin": g.user["super_admin"],
            }
        }
    ), 200
