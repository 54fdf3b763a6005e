"""Queries on the users and refresh_tokens tables."""

from __future__ import annotations

import sqlite3
import uuid
from datetime import datetime, timezone

from workoutapi.db import NotFoundError
from workoutapi.models import RefreshToken, User

_USER_COLUMNS = "id, created_at, updated_at, last_name, first_name, username, email, password"
_TOKEN_COLUMNS = "token, created_at, updated_at, user_id, expires_at, revoked_at"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class UserStore:
    """Create, read, update and delete users."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def create(
        self,
        last_name: str,
        first_name: str,
        username: str,
        email: str,
        password: str,
    ) -> User:
        """Store a user; ``password`` is expected to be already hashed."""
        user_id = uuid.uuid4()
        now = _now()
        self._conn.execute(
            f"INSERT INTO users ({_USER_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (user_id, now, now, last_name, first_name, username, email, password),
        )
        return self.get(user_id)

    def delete(self, user_id: uuid.UUID) -> None:
        self._conn.execute("DELETE FROM users WHERE id = ?", (user_id,))

    def get(self, user_id: uuid.UUID) -> User:
        row = self._conn.execute(
            f"SELECT {_USER_COLUMNS} FROM users WHERE id = ?", (user_id,)
        ).fetchone()
        if row is None:
            raise NotFoundError(f"user {user_id} not found")
        return User(**dict(row))

    def get_by_email(self, email: str) -> User:
        row = self._conn.execute(
            f"SELECT {_USER_COLUMNS} FROM users WHERE email = ?", (email,)
        ).fetchone()
        if row is None:
            raise NotFoundError(f"no user with email {email!r}")
        return User(**dict(row))

    def update(
        self,
        user_id: uuid.UUID,
        last_name: str,
        first_name: str,
        username: str,
        email: str,
        password: str,
    ) -> User:
        cursor = self._conn.execute(
            "UPDATE users SET last_name = ?, first_name = ?, username = ?, email = ?, "
            "updated_at = ?, password = ? WHERE id = ?",
            (last_name, first_name, username, email, _now(), password, user_id),
        )
        if cursor.rowcount == 0:
            raise NotFoundError(f"user {user_id} not found")
        return self.get(user_id)


class RefreshTokenStore:
    """Issue, look up and revoke refresh tokens."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def _get(self, token: str) -> RefreshToken:
        row = self._conn.execute(
            f"SELECT {_TOKEN_COLUMNS} FROM refresh_tokens WHERE token = ?", (token,)
        ).fetchone()
        if row is None:
            raise NotFoundError("refresh token not found")
        return RefreshToken(**dict(row))

    def create(self, token: str, user_id: uuid.UUID, expires_at: datetime) -> RefreshToken:
        now = _now()
        self._conn.execute(
            "INSERT INTO refresh_tokens (token, created_at, updated_at, user_id, expires_at) "
            "VALUES (?, ?, ?, ?, ?)",
            (token, now, now, user_id, expires_at),
        )
        return self._get(token)

    def user_for_token(self, token: str) -> User:
        """Return the owner of a token that is neither revoked nor expired."""
        rows = self._conn.execute(
            "SELECT users.id AS id, users.created_at AS created_at, "
            "users.updated_at AS updated_at, users.last_name AS last_name, "
            "users.first_name AS first_name, users.username AS username, "
            "users.email AS email, users.password AS password, "
            "refresh_tokens.expires_at AS expires_at "
            "FROM users JOIN refresh_tokens ON users.id = refresh_tokens.user_id "
            "WHERE refresh_tokens.token = ? AND refresh_tokens.revoked_at IS NULL",
            (token,),
        )
        now = _now()
        for row in rows:
            fields = dict(row)
            if fields.pop("expires_at") > now:
                return User(**fields)
        raise NotFoundError("no valid refresh token")

    def revoke(self, token: str) -> RefreshToken:
        now = _now()
        cursor = self._conn.execute(
            "UPDATE refresh_tokens SET revoked_at = ?, updated_at = ? WHERE token = ?",
            (now, now, token),
        )
        if cursor.rowcount == 0:
            raise NotFoundError("refresh token not found")
        return self._get(token)