"""Unit tests for auth/verifier.py and auth/gateway.py.

Covers the client lifecycle Anonymous -> Authenticated(token) -> Anonymous:
  - CredentialVerifier: success, unknown user, wrong password, missing digest
  - login: token minted, identity returned, failures surface as UserNotFound
  - login: missing identity mirror row -> UserNotFound, no session created
  - authorize: valid token, never-issued token (Unauthenticated), deleted user
  - who_am_i: echoes the principal's subject
  - N concurrent logins by distinct users -> N distinct resolvable tokens
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from auth.errors import InvalidCredentials, Unauthenticated, UserNotFound
from auth.models import NewUser, Principal, SessionInfo
from auth.verifier import CredentialVerifier


class TestCredentialVerifier:
    def test_valid_credentials_return_record(self, user_store, hasher, alice):
        verifier = CredentialVerifier(user_store, hasher)
        assert verifier.verify("alice", "longpass1") == alice

    def test_unknown_user(self, user_store, hasher):
        with pytest.raises(InvalidCredentials):
            CredentialVerifier(user_store, hasher).verify("ghost", "whatever1")

    def test_wrong_password(self, user_store, hasher, alice):
        with pytest.raises(InvalidCredentials):
            CredentialVerifier(user_store, hasher).verify("alice", "wrongpass1")

    def test_unknown_user_still_runs_bcrypt(self, user_store, hasher, monkeypatch):
        calls = []
        original = hasher.verify

        def spy(password, digest):
            calls.append(digest)
            return original(password, digest)

        monkeypatch.setattr(hasher, "verify", spy)
        with pytest.raises(InvalidCredentials):
            CredentialVerifier(user_store, hasher).verify("ghost", "whatever1")
        assert calls == [hasher.dummy_digest]

    def test_usernames_are_case_sensitive(self, user_store, hasher, alice):
        with pytest.raises(InvalidCredentials):
            CredentialVerifier(user_store, hasher).verify("ALICE", "longpass1")


class TestLogin:
    def test_login_returns_token_and_identity(self, gateway, sessions, alice):
        result = gateway.login("alice", "longpass1")
        expected = SessionInfo(user_id=alice.id, username="alice", email="a@x.com")
        assert result.identity == expected
        assert sessions.resolve(result.token) == expected

    def test_each_login_issues_new_token(self, gateway, sessions, alice):
        tokens = {gateway.login("alice", "longpass1").token for _ in range(3)}
        assert len(tokens) == 3
        assert len(sessions) == 3

    def test_unknown_user_is_user_not_found(self, gateway, sessions):
        with pytest.raises(UserNotFound) as info:
            gateway.login("ghost", "whatever1")
        assert info.value.message == "The user doesn't exist"
        assert len(sessions) == 0

    def test_wrong_password_is_user_not_found(self, gateway, sessions, alice):
        with pytest.raises(UserNotFound):
            gateway.login("alice", "wrongpass1")
        assert len(sessions) == 0

    def test_missing_identity_record_fails_login(self, gateway, sessions, user_store, alice):
        user_store.remove_identity("alice")
        with pytest.raises(UserNotFound):
            gateway.login("alice", "longpass1")
        assert len(sessions) == 0


class TestAuthorize:
    def test_valid_token(self, gateway, alice):
        token = gateway.login("alice", "longpass1").token
        identity = gateway.authorize(token)
        assert identity == SessionInfo(user_id=alice.id, username="alice", email="a@x.com")

    @pytest.mark.parametrize("token", [None, "", "00000000-0000-4000-8000-000000000000", "garbage"])
    def test_never_issued_token(self, gateway, alice, token):
        with pytest.raises(Unauthenticated) as info:
            gateway.authorize(token)
        assert info.value.status_code == 403
        assert info.value.message == "Please go to login and provide Login/Password"

    def test_deleted_user_fails_with_user_not_found(self, gateway, user_store, alice):
        token = gateway.login("alice", "longpass1").token
        user_store.delete_user(alice.id)
        with pytest.raises(UserNotFound):
            gateway.authorize(token)

    def test_cleared_store_returns_to_anonymous(self, gateway, sessions, alice):
        token = gateway.login("alice", "longpass1").token
        sessions.clear()
        with pytest.raises(Unauthenticated):
            gateway.authorize(token)

    def test_invalidated_token(self, gateway, sessions, alice):
        token = gateway.login("alice", "longpass1").token
        sessions.invalidate(token)
        with pytest.raises(Unauthenticated):
            gateway.authorize(token)


def test_who_am_i_echoes_subject(gateway):
    assert gateway.who_am_i(Principal(subject="abc123", username="alice")) == "abc123"


def test_concurrent_logins_by_distinct_users(gateway, signup_service, sessions):
    n = 12
    for i in range(n):
        signup_service.sign_up(NewUser(username=f"user{i}", email=f"user{i}@x.com", password=f"password{i}"))

    with ThreadPoolExecutor(max_workers=6) as pool:
        results = list(pool.map(lambda i: gateway.login(f"user{i}", f"password{i}"), range(n)))

    assert len({r.token for r in results}) == n
    assert len(sessions) == n
    for i, result in enumerate(results):
        assert gateway.authorize(result.token).username == f"user{i}"
