"""
Tests for the request-routing middleware and session APIs.

Requirements:
- Public paths are served without a session
- No / invalid / revoked token -> 302 to /login (pages) or 401 JSON (APIs)
- Token without role -> /auth-loading
- Role without tabs -> /no-access, session terminated after the grace period
- "/" -> first allowed tab
- Tab the role may not see -> /forbidden with from / reason / role
"""

from datetime import timedelta
from urllib.parse import parse_qs, urlparse

from api.auth.jwt_handler import create_access_token, create_refresh_token


def _bearer(role, session_id="sess-1", **kwargs):
    token = create_access_token("u1", "ana", role, session_id=session_id, **kwargs)
    return {"Authorization": f"Bearer {token}"}


def _location(response):
    return urlparse(response.headers["Location"])


# ============================================================
# PAGE GUARD
# ============================================================

def test_health_is_public(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.get_json()["status"] == "ok"


def test_page_without_token_redirects_to_login(client):
    r = client.get("/dashboard")
    assert r.status_code == 302
    assert _location(r).path == "/login"


def test_invalid_token_redirects_to_login(client):
    r = client.get("/dashboard", headers={"Authorization": "Bearer nope"})
    assert r.status_code == 302
    assert _location(r).path == "/login"


def test_expired_token_redirects_to_login(client):
    r = client.get("/dashboard", headers=_bearer("admin", expires_in=timedelta(seconds=-5)))
    assert _location(r).path == "/login"


def test_missing_role_redirects_to_auth_loading(client):
    r = client.get("/dashboard", headers=_bearer(None))
    assert r.status_code == 302
    assert _location(r).path == "/auth-loading"


def test_root_redirects_to_first_allowed_tab(client):
    r = client.get("/", headers=_bearer("producer"))
    assert r.status_code == 302
    assert _location(r).path == "/dashboard"


def test_allowed_tab_is_served(client):
    r = client.get("/kit/42", headers=_bearer("producer"))
    assert r.status_code == 200
    body = r.get_json()
    assert body["page"] == "kit"
    assert body["path"] == "/kit/42"


def test_denied_tab_redirects_to_forbidden(client):
    r = client.get("/agent", headers=_bearer("viewer"))
    assert r.status_code == 302

    location = _location(r)
    assert location.path == "/forbidden"
    assert parse_qs(location.query) == {
        "from": ["/agent"],
        "reason": ["insufficient-permissions"],
        "role": ["viewer"],
    }


def test_similar_prefix_is_not_a_tab(client):
    r = client.get("/kitchen", headers=_bearer("producer"))
    assert r.status_code == 404


def test_ignored_prefixes_match_whole_segments(app):
    state = app.extensions["designos"]
    assert state.is_public("/auth/logout")
    assert state.is_public("/static/app.css")
    assert state.is_public("/favicon.ico")
    assert not state.is_public("/authoring")
    assert not state.is_public("/apiary")
    assert not state.is_public("/static-kit")


def test_tab_sharing_a_prefix_with_an_ignored_path_is_guarded(scenario_config, scheduler):
    from api import create_app
    from core.rbac import build_access_control

    scenario_config["tabs"].append({
        "id": "authoring", "label": "Authoring", "path": "/authoring",
        "icon": "Bot", "roles": ["admin"],
    })
    client = create_app(
        access=build_access_control(scenario_config),
        settings={},
        scheduler=scheduler
    ).test_client()

    r = client.get("/authoring")
    assert r.status_code == 302
    assert _location(r).path == "/login"

    r = client.get("/authoring", headers=_bearer("viewer"))
    assert r.status_code == 302
    assert _location(r).path == "/forbidden"

    assert client.get("/authoring", headers=_bearer("admin")).status_code == 200


def test_token_from_cookie(client):
    token = create_access_token("u1", "ana", "admin", session_id="cookie-1")
    client.set_cookie("designos_auth", token)
    r = client.get("/agent")
    assert r.status_code == 200


def test_forbidden_page_offers_first_allowed_tab(client):
    r = client.get("/forbidden?from=/agent&reason=insufficient-permissions",
                   headers=_bearer("viewer"))
    assert r.status_code == 403
    body = r.get_json()
    assert body["role"] == "viewer"
    assert body["role_label"] == "Viewer"
    assert body["from"] == "/agent"
    assert body["fallback"] == {"path": "/dashboard", "label": "Dashboard"}


# ============================================================
# NO ACCESS
# ============================================================

def test_role_without_tabs_goes_to_no_access_then_logs_out(client, scheduler):
    headers = _bearer("guest", session_id="sess-guest")

    r = client.get("/dashboard", headers=headers)
    assert _location(r).path == "/no-access"

    r = client.get("/no-access", headers=headers)
    assert r.get_json()["logout_after_seconds"] == 5

    scheduler.advance(5)

    r = client.get("/dashboard", headers=headers)
    assert _location(r).path == "/login"


def test_no_access_session_rescued_by_role_change(client, scheduler):
    client.get("/dashboard", headers=_bearer("guest", session_id="sess-r"))
    scheduler.advance(3)

    r = client.get("/kit", headers=_bearer("admin", session_id="sess-r"))
    assert r.status_code == 200

    scheduler.advance(10)
    r = client.get("/kit", headers=_bearer("admin", session_id="sess-r"))
    assert r.status_code == 200


# ============================================================
# JSON APIS
# ============================================================

def test_api_without_token_returns_401(client):
    r = client.get("/api/navigation")
    assert r.status_code == 401
    assert "error" in r.get_json()


def test_navigation_lists_tabs_in_catalog_order(client):
    r = client.get("/api/navigation", headers=_bearer("admin"))
    assert r.status_code == 200
    body = r.get_json()
    assert [tab["id"] for tab in body["tabs"]] == ["dashboard", "kit", "agent"]
    assert body["tabs"][0]["icon"] == "layout-dashboard"
    assert body["default_route"] == "/dashboard"


def test_session_reflects_role_change_on_next_request(client):
    r = client.get("/api/session", headers=_bearer("viewer", session_id="sess-5"))
    assert r.get_json()["tabs"] == ["dashboard"]

    r = client.get("/api/session", headers=_bearer("admin", session_id="sess-5"))
    body = r.get_json()
    assert body["state"] == "authorized"
    assert body["tabs"] == ["dashboard", "kit", "agent"]


def test_session_reports_no_access_state(client):
    r = client.get("/api/session", headers=_bearer("guest"))
    body = r.get_json()
    assert body["state"] == "no_access"
    assert body["tabs"] == []
    assert body["default_route"] is None


def test_access_check(client):
    headers = _bearer("producer")
    assert client.get("/api/access?path=/kit/42", headers=headers).get_json()["allowed"] is True
    assert client.get("/api/access?path=/kitchen", headers=headers).get_json()["allowed"] is False
    assert client.get("/api/access", headers=headers).status_code == 400


def test_capabilities(client):
    body = client.get("/api/capabilities", headers=_bearer("core")).get_json()
    assert "agent:run" in body["capabilities"]
    assert "manage:roles" not in body["capabilities"]


def test_roles_require_capability(client):
    assert client.get("/api/roles", headers=_bearer("core")).status_code == 403
    assert client.get("/api/roles", headers=_bearer(None)).status_code == 403

    r = client.get("/api/roles", headers=_bearer("admin"))
    assert r.status_code == 200
    roles = r.get_json()["roles"]
    assert [role["id"] for role in roles] == ["viewer", "producer", "core", "admin"]
    assert [role["rank"] for role in roles] == [0, 1, 2, 3]


# ============================================================
# AUTH ROUTES
# ============================================================

def test_expired_token_releases_session(app, client):
    sessions = app.extensions["designos"].sessions
    assert client.get("/kit", headers=_bearer("admin", session_id="sess-old")).status_code == 200
    assert sessions.get("sess-old") is not None

    r = client.get("/kit", headers=_bearer(
        "admin", session_id="sess-old", expires_in=timedelta(seconds=-5)
    ))
    assert _location(r).path == "/login"
    assert sessions.get("sess-old") is None


def test_logout_revokes_token(client):
    headers = _bearer("admin", session_id="sess-out")
    assert client.get("/kit", headers=headers).status_code == 200

    r = client.post("/auth/logout", headers=headers)
    assert r.status_code == 200
    assert r.get_json()["redirect"] == "/login"

    assert _location(client.get("/kit", headers=headers)).path == "/login"
    assert client.get("/api/session", headers=headers).status_code == 401


def test_refresh_keeps_session_id(client):
    refresh_token = create_refresh_token("u1", "ana", "producer", session_id="sess-ref")
    r = client.post("/auth/refresh", json={"refresh_token": refresh_token})
    assert r.status_code == 200

    access = r.get_json()["access_token"]
    body = client.get("/api/session", headers={"Authorization": f"Bearer {access}"}).get_json()
    assert body["session_id"] == "sess-ref"
    assert body["role"] == "producer"


def test_refresh_refused_after_logout(client):
    client.post("/auth/logout", headers=_bearer("admin", session_id="sess-gone"))
    refresh_token = create_refresh_token("u1", "ana", "admin", session_id="sess-gone")
    r = client.post("/auth/refresh", json={"refresh_token": refresh_token})
    assert r.status_code == 401


def test_refresh_requires_token(client):
    assert client.post("/auth/refresh", json={}).status_code == 400


def test_me(client):
    r = client.get("/auth/me", headers=_bearer("admin"))
    assert r.status_code == 200
    assert r.get_json()["user"]["role_label"] == "Admin"


def test_role_preview_limited_to_top_role(client):
    assert client.get("/api/roles/viewer", headers=_bearer("core")).status_code == 403

    r = client.get("/api/roles/producer", headers=_bearer("admin"))
    assert r.status_code == 200
    body = r.get_json()
    assert body["default_route"] == "/dashboard"
    assert [tab["id"] for tab in body["tabs"]] == ["dashboard", "kit"]

    assert client.get("/api/roles/guest", headers=_bearer("admin")).status_code == 404
