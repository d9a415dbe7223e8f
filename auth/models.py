"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Dataclasses own domain
shape; stores, services, and routes do the work.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class UserRecord:
    """An account created by signup.

    id is an opaque uuid4 hex string assigned by the store. The password never
    lives here -- the bcrypt digest is kept in a separate credentials table
    keyed by id, so a UserRecord can be returned to clients as-is.
    """

    username: str
    email: str
    id: str | None = None
    created_at: str | None = None


@dataclass
class IdentityRecord:
    """Lightweight username/email mirror consulted by login and session checks.

    user_id links back to the UserRecord that owns this identity. The mirror
    is written in the same transaction as the account itself.
    """

    user_id: str
    username: str
    email: str


@dataclass(frozen=True)
class SessionInfo:
    """Identity bound to a session token. Frozen: a session never changes owner."""

    user_id: str
    username: str
    email: str


@dataclass
class NewUser:
    """Signup input. password is plaintext and must never be persisted or logged."""

    username: str
    email: str
    password: str

    def __repr__(self) -> str:
        return f"NewUser(username={self.username!r}, email={self.email!r}, password='***')"


@dataclass(frozen=True)
class Principal:
    """Caller identity established from a verified bearer token.

    subject is the user id carried in the JWT "sub" claim.
    """

    subject: str
    username: str
