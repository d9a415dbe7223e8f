"""
auth/passwords.py -- Salted password digests (bcrypt, direct usage).

Bcrypt is the right choice for low-entropy secrets because its cost factor
makes brute force expensive. Each call to hash() draws a fresh random salt,
so two digests of the same password differ while both still verify. The salt
and cost are embedded in the digest string ($2b$<cost>$<salt><hash>), so the
credentials table stores one opaque value per user.

Using bcrypt directly rather than passlib[bcrypt]: passlib's wrap-bug
detection hashes a password longer than 72 bytes, which bcrypt 4.x rejects.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import logging

import bcrypt

logger = logging.getLogger("sessiongate.auth")

# bcrypt only reads the first 72 bytes of its input. Longer passwords are
# rejected at signup instead of being silently truncated.
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """Derive and verify bcrypt digests at a configurable cost.

    Usage:
        hasher = PasswordHasher(rounds=12)
        digest = hasher.hash("longpass1")
        hasher.verify("longpass1", digest)   # True
    """

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds
        # Timing equalization dummy. Computed once so the first unknown-user
        # login is not measurably faster or slower than later ones.
        self._dummy_digest = self.hash("sessiongate_timing_dummy")

    @property
    def dummy_digest(self) -> str:
        return self._dummy_digest

    def hash(self, password: str) -> str:
        """Return a bcrypt digest of password using a freshly generated salt."""
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, password: str, digest: str | None) -> bool:
        """Return True if password matches digest.

        bcrypt.checkpw recomputes the hash with the embedded salt and compares
        in constant time. Malformed, empty, or missing digests return False
        rather than raising, as do passwords bcrypt refuses (over 72 bytes).
        """
        if not digest:
            return False
        try:
            return bcrypt.checkpw(password.encode("utf-8"), digest.encode("utf-8"))
        except ValueError as exc:
            logger.debug("bcrypt rejected verification input: %s", exc)
            return False
