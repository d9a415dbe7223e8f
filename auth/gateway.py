"""
auth/gateway.py -- Login, session authorization, and identity lookup.

Client lifecycle:

    Anonymous --login()--> Authenticated(token) --authorize() fails--> Anonymous

login() and authorize() both re-read the identity mirror by username after
their primary check. For login this is a second lookup after the credential
check; for authorize it catches users deleted after their session was issued.
Either miss is reported as UserNotFound.

The gateway returns identities, not HTTP responses. The route layer copies
them into the X-UserId / X-User / X-Email headers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from auth.errors import InvalidCredentials, Unauthenticated, UserNotFound
from auth.models import Principal, SessionInfo
from auth.sessions import SessionStore
from auth.store import UserStore
from auth.verifier import CredentialVerifier

logger = logging.getLogger("sessiongate.auth")


@dataclass(frozen=True)
class LoginResult:
    token: str
    identity: SessionInfo


class AuthGateway:
    """Orchestrates CredentialVerifier, UserStore, and SessionStore.

    All collaborators are injected; the gateway holds no state of its own.
    """

    def __init__(self, verifier: CredentialVerifier, user_store: UserStore, sessions: SessionStore) -> None:
        self.verifier = verifier
        self.user_store = user_store
        self.sessions = sessions

    def login(self, username: str, password: str) -> LoginResult:
        """Verify credentials and mint a new session.

        Raises UserNotFound for a bad username/password pair and when the
        identity mirror has no row for the verified user.
        """
        try:
            user = self.verifier.verify(username, password)
        except InvalidCredentials as exc:
            raise UserNotFound() from exc

        identity = self.user_store.find_identity(user.username)
        if identity is None:
            logger.warning("Login for %r verified but identity record is missing", user.username)
            raise UserNotFound()

        info = SessionInfo(user_id=identity.user_id, username=identity.username, email=identity.email)
        token = self.sessions.create(info)
        logger.info("Login succeeded for %r", info.username)
        return LoginResult(token=token, identity=info)

    def authorize(self, token: str | None) -> SessionInfo:
        """Resolve a session token to the current identity of its user.

        Raises Unauthenticated if the token was never issued (or has expired),
        UserNotFound if the user behind it no longer exists.
        """
        info = self.sessions.resolve(token)
        if info is None:
            raise Unauthenticated()

        identity = self.user_store.find_identity(info.username)
        if identity is None:
            logger.info("Session for %r refers to a user that no longer exists", info.username)
            raise UserNotFound()
        return SessionInfo(user_id=identity.user_id, username=identity.username, email=identity.email)

    def who_am_i(self, principal: Principal) -> str:
        """Echo the subject of an already-validated principal."""
        return principal.subject
