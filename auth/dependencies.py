"""
auth/dependencies.py -- FastAPI Depends() helpers.

require_principal() is the capability check in front of GET /whoAmI. It
accepts only an Authorization: Bearer <jwt> header, verifies it, and confirms
the subject still exists in the UserStore. The route handler never runs for a
rejected caller, so AuthGateway.who_am_i() can assume a validated Principal.

Session tokens are NOT accepted here -- they are checked by POST /auth via
the gateway.

The getters below read collaborators off app.state, where the lifespan in
api/main.py wires them.
"""

from __future__ import annotations

from fastapi import Request

from auth.errors import BearerAuthError
from auth.gateway import AuthGateway
from auth.models import Principal
from auth.signup import SignupService
from auth.store import UserStore
from auth.tokens import decode_access_token


def get_user_store(request: Request) -> UserStore:
    return request.app.state.user_store


def get_gateway(request: Request) -> AuthGateway:
    return request.app.state.gateway


def get_signup_service(request: Request) -> SignupService:
    return request.app.state.signup


def try_get_principal(request: Request) -> Principal | None:
    """Return the Principal behind a valid Bearer header, or None. Never raises."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    payload = decode_access_token(auth_header[7:])
    if payload is None:
        return None
    user = get_user_store(request).get_by_id(payload["sub"])
    if user is None:
        return None
    return Principal(subject=user.id, username=user.username)


def require_principal(request: Request) -> Principal:
    """Require a bearer-authenticated caller. Raises BearerAuthError (401) otherwise.

    Use as a FastAPI dependency:
        @router.get("/whoAmI")
        def who_am_i(principal: Principal = Depends(require_principal)): ...
    """
    principal = try_get_principal(request)
    if principal is None:
        raise BearerAuthError()
    return principal
