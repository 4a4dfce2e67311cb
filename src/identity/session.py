"""Server-side sessions.

The ``sessions`` table is the only source of truth for whether a token is
valid. The cookie carries an opaque random token; only its SHA-256 digest is
stored, and logout marks the row revoked instead of deleting it.
"""

import hashlib
import secrets
from datetime import UTC, datetime, timedelta

import structlog
from sqlalchemy import Column, DateTime, Engine, ForeignKey, Integer, String, Table, insert, select, update

from identity.account import accounts
from shared.db import metadata, transaction

logger = structlog.get_logger(__name__)

sessions = Table(
    "sessions",
    metadata,
    Column("token_digest", String(64), primary_key=True),
    Column("account_id", Integer, ForeignKey(accounts.c.id), nullable=False, index=True),
    Column("issued_at", DateTime(timezone=True), nullable=False),
    Column("expires_at", DateTime(timezone=True), nullable=False),
    Column("revoked_at", DateTime(timezone=True)),
)


def _digest(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value if value.tzinfo else value.replace(tzinfo=UTC)


class SessionStore:
    def __init__(self, engine: Engine, ttl: timedelta = timedelta(hours=24)):
        self.engine = engine
        self.ttl = ttl

    def issue(self, account_id: int) -> str:
        token = secrets.token_urlsafe(32)
        now = datetime.now(UTC)
        with transaction(self.engine) as conn:
            conn.execute(
                insert(sessions).values(
                    token_digest=_digest(token),
                    account_id=account_id,
                    issued_at=now,
                    expires_at=now + self.ttl,
                )
            )

        logger.info("Session issued", account_id=account_id)
        return token

    def revoke(self, token: str) -> bool:
        """Revoke a session. Returns False when the token was unknown or already revoked."""
        with transaction(self.engine) as conn:
            result = conn.execute(
                update(sessions)
                .where(sessions.c.token_digest == _digest(token), sessions.c.revoked_at.is_(None))
                .values(revoked_at=datetime.now(UTC))
            )
        return result.rowcount > 0


class SessionIdentityResolver:
    """Resolve a session token to an account id, or ``None`` for anonymous."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def resolve(self, token: str | None) -> int | None:
        if not token:
            return None

        with transaction(self.engine) as conn:
            row = conn.execute(
                select(sessions.c.account_id, sessions.c.expires_at, sessions.c.revoked_at).where(
                    sessions.c.token_digest == _digest(token)
                )
            ).first()

        if row is None or row.revoked_at is not None:
            return None
        if _as_utc(row.expires_at) <= datetime.now(UTC):
            logger.debug("Expired session presented", account_id=row.account_id)
            return None
        return row.account_id
