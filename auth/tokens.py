"""
auth/tokens.py -- Bearer JWTs for capability-gated endpoints.

Session tokens (auth/sessions.py) and bearer tokens are separate mechanisms:
  Session tokens: opaque uuid4 strings held server-side, checked by POST /auth.
  Bearer tokens:  self-contained HS256 JWTs (python-jose) signed with
                  SECRET_KEY, checked by the guard in auth/dependencies.py
                  before GET /whoAmI runs.

Tokens carry sub (user id), username, and exp. Verification returns None on
any failure -- the guard turns that into a 401.

Layer rule: no imports from api/. Import from core/ is allowed -- core/ is the
kernel and has no reverse dependencies.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from core.config import get_settings

logger = logging.getLogger("sessiongate.auth")

_ALGORITHM = "HS256"


def create_access_token(user_id: str, username: str, expire_seconds: int = 0) -> str:
    """Encode a signed JWT for user_id.

    Args:
        user_id:        UserRecord.id, stored as the JWT subject claim.
        username:       Carried for display; the guard re-resolves by id.
        expire_seconds: Token lifetime. If 0 (default), uses
                        Settings.token_expire_seconds.
    """
    settings = get_settings()
    duration = expire_seconds if expire_seconds > 0 else settings.token_expire_seconds
    expire = datetime.now(timezone.utc) + timedelta(seconds=duration)
    payload = {
        "sub": user_id,
        "username": username,
        "exp": expire,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str) -> dict | None:
    """Decode and verify a JWT. Returns the payload dict or None on any failure."""
    try:
        payload = jwt.decode(token, get_settings().secret_key, algorithms=[_ALGORITHM])
    except JWTError:
        return None
    if not payload.get("sub") or "username" not in payload:
        return None
    return payload
