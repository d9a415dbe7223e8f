"""
auth/store.py -- SQLAlchemy Core persistence layer for accounts.

Pattern: Repository + Data Mapper.
UserStore is the repository; _row_to_user / _row_to_identity are the mappers.
Services and routes never touch SQL directly.

Three tables:
  users             -- UserRecord (no password column)
  user_credentials  -- bcrypt digest keyed by user id
  identities        -- username/email mirror read by login and /auth

create_account() writes all three in one transaction: a failure on any
insert rolls back the others, so an account never exists without its
credentials or its mirror row.

Security:
  All queries use bound parameters. No f-strings in SQL.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, ForeignKey, MetaData, String, Table, Text, create_engine, event, select, text
from sqlalchemy.engine import Engine

from auth.models import IdentityRecord, UserRecord

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", String(32), primary_key=True),  # uuid4 hex
    Column("username", String(255), nullable=False, unique=True),
    Column("email", String(255), nullable=False),
    Column("created_at", String(32), nullable=False),
)

_credentials = Table(
    "user_credentials",
    _metadata,
    Column("user_id", String(32), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("password", Text, nullable=False),  # bcrypt digest, never plaintext
)

_identities = Table(
    "identities",
    _metadata,
    Column("user_id", String(32), primary_key=True),
    Column("username", String(255), nullable=False, unique=True),
    Column("email", String(255), nullable=False),
)


# ---------------------------------------------------------------------------
# SQLite connection setup
# ---------------------------------------------------------------------------


def _set_sqlite_pragmas(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode and foreign key enforcement.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")
    dbapi_conn.execute("PRAGMA foreign_keys=ON")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return uuid.uuid4().hex


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for user records, credential digests, and the identity mirror.

    Usage:
        store = UserStore("sqlite:///:memory:")
        user = store.create_account(UserRecord(username="alice", email="a@x.com"), digest)
        store.get_by_username("alice")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_sqlite_pragmas)
        _metadata.create_all(self.engine)

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        with self.engine.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar() == 1

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def create_account(self, user: UserRecord, password_digest: str) -> UserRecord:
        """Insert user, credential digest, and identity mirror atomically.

        engine.begin() commits on success and rolls back if any insert raises.
        Raises sqlalchemy.exc.IntegrityError when the username already exists
        in users or identities; callers translate that into a conflict.
        """
        record = UserRecord(
            id=user.id or _new_id(),
            username=user.username,
            email=user.email,
            created_at=_now_iso(),
        )
        with self.engine.begin() as conn:
            conn.execute(
                _users.insert().values(
                    id=record.id,
                    username=record.username,
                    email=record.email,
                    created_at=record.created_at,
                )
            )
            conn.execute(_credentials.insert().values(user_id=record.id, password=password_digest))
            conn.execute(
                _identities.insert().values(user_id=record.id, username=record.username, email=record.email)
            )
        return record

    def get_by_username(self, username: str) -> UserRecord | None:
        """Look up a user by exact username (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.username == username)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: str) -> UserRecord | None:
        """Look up a user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def list_users(self) -> list[UserRecord]:
        """Return all users ordered by username.

        Maintenance helper used by tests; no route lists accounts.
        """
        with self.engine.connect() as conn:
            rows = conn.execute(_users.select().order_by(_users.c.username)).fetchall()
        return [_row_to_user(r) for r in rows]

    def delete_user(self, user_id: str) -> bool:
        """Delete a user with its credentials and mirror row.

        Sessions already issued for the user stay in the session store; the
        next /auth call fails with UserNotFound because the mirror lookup misses.
        Returns True if a user row was deleted.
        """
        with self.engine.begin() as conn:
            conn.execute(_credentials.delete().where(_credentials.c.user_id == user_id))
            conn.execute(_identities.delete().where(_identities.c.user_id == user_id))
            result = conn.execute(_users.delete().where(_users.c.id == user_id))
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    def get_password_digest(self, user_id: str) -> str | None:
        """Return the stored bcrypt digest for user_id, or None if absent."""
        with self.engine.connect() as conn:
            return conn.execute(
                select(_credentials.c.password).where(_credentials.c.user_id == user_id)
            ).scalar()

    # ------------------------------------------------------------------
    # Identity mirror
    # ------------------------------------------------------------------

    def add_identity(self, identity: IdentityRecord) -> None:
        """Insert a mirror row on its own, without a user or credential row.

        Maintenance helper for tests that need a mirror row out of step with
        the users table; signup always goes through create_account.
        """
        with self.engine.begin() as conn:
            conn.execute(
                _identities.insert().values(
                    user_id=identity.user_id,
                    username=identity.username,
                    email=identity.email,
                )
            )

    def find_identity(self, username: str) -> IdentityRecord | None:
        """Look up the mirror row for username. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_identities.select().where(_identities.c.username == username)).fetchone()
        return _row_to_identity(row) if row is not None else None

    def remove_identity(self, username: str) -> bool:
        """Delete the mirror row for username. Returns True if a row was removed.

        Maintenance helper; tests use it to simulate a mirror row vanishing
        between the credential check and the identity lookup.
        """
        with self.engine.begin() as conn:
            result = conn.execute(_identities.delete().where(_identities.c.username == username))
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> UserRecord:
    return UserRecord(
        id=row.id,
        username=row.username,
        email=row.email,
        created_at=row.created_at,
    )


def _row_to_identity(row) -> IdentityRecord:
    return IdentityRecord(
        user_id=row.user_id,
        username=row.username,
        email=row.email,
    )
