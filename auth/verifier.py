"""
auth/verifier.py -- Username/password verification with timing equalization.

Always runs bcrypt whether or not the user exists. An attacker cannot
enumerate valid usernames by measuring response time:
  - unknown username: bcrypt runs against the hasher's dummy digest
  - wrong password:   bcrypt runs against the real digest
Both cases raise the same InvalidCredentials.
"""

from __future__ import annotations

import logging

from auth.errors import InvalidCredentials
from auth.models import UserRecord
from auth.passwords import PasswordHasher
from auth.store import UserStore

logger = logging.getLogger("sessiongate.auth")


class CredentialVerifier:
    def __init__(self, user_store: UserStore, hasher: PasswordHasher) -> None:
        self.user_store = user_store
        self.hasher = hasher

    def verify(self, username: str, password: str) -> UserRecord:
        """Return the matching UserRecord or raise InvalidCredentials."""
        user = self.user_store.get_by_username(username)
        digest = self.user_store.get_password_digest(user.id) if user is not None else None
        if user is None or digest is None:
            # Equalize timing -- do NOT return early before running bcrypt
            self.hasher.verify(password, self.hasher.dummy_digest)
            logger.info("Credential check failed for %r: unknown user", username)
            raise InvalidCredentials()
        if not self.hasher.verify(password, digest):
            logger.info("Credential check failed for %r: password mismatch", username)
            raise InvalidCredentials()
        return user
