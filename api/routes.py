"""
Application API routes.

Includes:
- health
- landing pages (login / auth-loading / forbidden / no-access)
- one page stub per catalog tab (guarded by the session gate)
- navigation / session / access / capability APIs (JWT protected)
- role listing (capability protected) and role preview (top role only)
"""

from flask import g, jsonify, request

from api.auth.middleware import current_context, require_auth, require_capability, require_role
from api.state import get_app_access


def _tab_page(tab):

    def view(subpath=None):
        return jsonify({
            "page": tab.id,
            "label": tab.label,
            "path": request.path,
            "icon": tab.icon_ref.slug,
        })

    view.__name__ = f"tab_{tab.id}"
    return view


def _context_payload(context, resolver):
    return {
        "session_id": context.session_id,
        "state": context.state.value,
        "role": context.role,
        "role_label": resolver.role_label(context.role),
        "default_route": context.default_route,
        "tabs": [tab.id for tab in context.tabs],
    }


def register_routes(app):
    state = app.extensions["designos"]

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok", "service": "DesignOS API"})

    # --------------------------------------------------------
    # Landing pages
    # --------------------------------------------------------

    @app.route(state.routes.login, methods=["GET"])
    def login_page():
        return jsonify({
            "page": "login",
            "message": "Sign in with the identity provider to obtain a session token."
        })

    @app.route(state.routes.auth_loading, methods=["GET"])
    def auth_loading_page():
        return jsonify({
            "page": "auth-loading",
            "message": "Session found; waiting for the role to be assigned."
        })

    @app.route(state.routes.forbidden, methods=["GET"])
    def forbidden_page():
        resolver = get_app_access().resolver
        context = current_context()
        role = context.role if context else None

        fallback = None
        first_tab = resolver.first_allowed_tab(role)
        if first_tab is not None:
            fallback = {"path": first_tab.path, "label": first_tab.label}

        return jsonify({
            "page": "forbidden",
            "from": request.args.get("from"),
            "reason": request.args.get("reason"),
            "role": role,
            "role_label": resolver.role_label(role),
            "fallback": fallback,
        }), 403

    @app.route(state.routes.no_access, methods=["GET"])
    def no_access_page():
        access = get_app_access()
        context = current_context()
        role = context.role if context else None

        return jsonify({
            "page": "no-access",
            "role": role,
            "role_label": access.resolver.role_label(role),
            "logout_after_seconds": access.grace_period,
            "logout": "/auth/logout",
        })

    # --------------------------------------------------------
    # Tab pages
    # --------------------------------------------------------

    for tab in state.access.registry.list_all():
        view = _tab_page(tab)
        app.add_url_rule(tab.path, endpoint=view.__name__, view_func=view, methods=["GET"])
        app.add_url_rule(
            f"{tab.path.rstrip('/')}/<path:subpath>",
            endpoint=f"{view.__name__}_sub",
            view_func=view,
            methods=["GET"]
        )

    # --------------------------------------------------------
    # Session APIs
    # --------------------------------------------------------

    @app.route("/api/navigation", methods=["GET"])
    @require_auth
    def navigation():
        context = g.session_context
        return jsonify({
            "role": context.role,
            "default_route": context.default_route,
            "tabs": [tab.to_dict() for tab in context.tabs],
        })

    @app.route("/api/session", methods=["GET"])
    @require_auth
    def session_info():
        resolver = get_app_access().resolver
        return jsonify(_context_payload(g.session_context, resolver))

    @app.route("/api/access", methods=["GET"])
    @require_auth
    def access_check():
        path = (request.args.get("path") or "").strip()
        if not path:
            return jsonify({"error": "path query parameter required"}), 400

        allowed = g.session_gate.can_access(path)
        return jsonify({"path": path, "allowed": allowed})

    @app.route("/api/capabilities", methods=["GET"])
    @require_auth
    def capabilities():
        resolver = get_app_access().resolver
        role = g.session_context.role
        return jsonify({
            "role": role,
            "capabilities": sorted(resolver.capabilities_for(role)),
        })

    # --------------------------------------------------------
    # Admin APIs
    # --------------------------------------------------------

    @app.route("/api/roles", methods=["GET"])
    @require_capability("manage:roles")
    def list_roles():
        resolver = get_app_access().resolver
        hierarchy = resolver.hierarchy
        return jsonify({
            "roles": [
                {
                    "id": role,
                    "rank": hierarchy.rank(role),
                    "label": resolver.role_label(role),
                    "tabs": [tab.id for tab in resolver.get_allowed_tabs(role)],
                }
                for role in hierarchy.roles
            ]
        })

    @app.route("/api/roles/<role_id>", methods=["GET"])
    @require_role(state.access.hierarchy.highest)
    def preview_role(role_id):
        resolver = get_app_access().resolver
        if role_id not in resolver.hierarchy:
            return jsonify({"error": f"Unknown role: {role_id}"}), 404

        tabs = resolver.get_allowed_tabs(role_id)
        return jsonify({
            "id": role_id,
            "label": resolver.role_label(role_id),
            "default_route": resolver.default_route(role_id),
            "tabs": [tab.to_dict() for tab in tabs],
            "capabilities": sorted(resolver.capabilities_for(role_id)),
        })
