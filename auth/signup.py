"""
auth/signup.py -- Account creation.

sign_up() validates the request, hashes the password, and hands the user
record plus digest to UserStore.create_account(), which writes the user row,
the credential row, and the identity mirror in a single transaction. If any
of the three inserts fails none of them persist.

Duplicate usernames are checked up front for a clean 409. Two concurrent
signups for the same name can both pass that check; the UNIQUE constraints
then reject the loser with IntegrityError, which is mapped to the same error.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from auth.errors import UsernameTaken, ValidationError
from auth.models import NewUser, UserRecord
from auth.passwords import MAX_PASSWORD_BYTES, PasswordHasher
from auth.store import UserStore

logger = logging.getLogger("sessiongate.auth")

_MAX_FIELD_LENGTH = 255


class SignupService:
    def __init__(self, user_store: UserStore, hasher: PasswordHasher, min_password_length: int = 8) -> None:
        self.user_store = user_store
        self.hasher = hasher
        self.min_password_length = min_password_length

    def sign_up(self, new_user: NewUser) -> UserRecord:
        """Create an account and return its record (no password field).

        Raises ValidationError for malformed input and UsernameTaken when the
        username is already registered.
        """
        self._validate(new_user)
        username = new_user.username.strip()
        email = new_user.email.strip()

        if self.user_store.get_by_username(username) is not None:
            raise UsernameTaken()

        digest = self.hasher.hash(new_user.password)
        try:
            record = self.user_store.create_account(UserRecord(username=username, email=email), digest)
        except IntegrityError as exc:
            logger.info("Signup for %r rejected by unique constraint", username)
            raise UsernameTaken() from exc

        logger.info("Created user %r (%s)", record.username, record.id)
        return record

    def _validate(self, new_user: NewUser) -> None:
        username = (new_user.username or "").strip()
        email = (new_user.email or "").strip()
        password = new_user.password or ""

        if not username:
            raise ValidationError("username must not be empty.")
        if len(username) > _MAX_FIELD_LENGTH:
            raise ValidationError(f"username must be at most {_MAX_FIELD_LENGTH} characters.")
        if "@" not in email or email.startswith("@") or email.endswith("@"):
            raise ValidationError("email must be a valid address.")
        if len(email) > _MAX_FIELD_LENGTH:
            raise ValidationError(f"email must be at most {_MAX_FIELD_LENGTH} characters.")
        if len(password) < self.min_password_length:
            raise ValidationError(f"password must be at least {self.min_password_length} characters.")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"password must be at most {MAX_PASSWORD_BYTES} bytes.")
