"""
DesignOS: Authentication Module

Provides:
- JWT creation & verification
- Session gate middleware
- Role / capability decorators
- Auth routes blueprint

Usage:
    from api.auth import auth_blueprint, require_capability
"""

from flask import Blueprint

# Blueprint
auth_blueprint = Blueprint("auth", __name__)

# Import submodules so they register automatically
from . import auth_routes  # noqa: F401,E402
from .jwt_handler import create_access_token, create_refresh_token, verify_token  # noqa: F401,E402
from .middleware import (  # noqa: F401,E402
    install_session_gate,
    require_auth,
    require_capability,
    require_role,
)

__all__ = [
    "auth_blueprint",
    "create_access_token",
    "create_refresh_token",
    "verify_token",
    "install_session_gate",
    "require_auth",
    "require_capability",
    "require_role",
]
