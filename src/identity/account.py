"""Customer accounts — registration, credential checks, password changes and lookups."""

from dataclasses import dataclass

import structlog
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from sqlalchemy import Column, Engine, Integer, String, Table, Text, insert, select, update
from sqlalchemy.exc import IntegrityError

from shared.db import metadata, transaction
from shared.errors import AccountNotFound, InvalidCredentials, UsernameTaken

logger = structlog.get_logger(__name__)

accounts = Table(
    "accounts",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(150), nullable=False, unique=True),
    Column("password_hash", String(255), nullable=False),
    Column("phone_number", String(50), nullable=False),
    Column("email_id", String(255), nullable=False),
    Column("address", Text),
)


@dataclass(frozen=True)
class Account:
    id: int
    username: str
    phone_number: str
    email_id: str
    address: str | None = None


class AccountService:
    def __init__(self, engine: Engine, hasher: PasswordHasher | None = None):
        self.engine = engine
        self.hasher = hasher or PasswordHasher()

    def register(
        self,
        username: str,
        password: str,
        phone_number: str,
        email_id: str,
        address: str | None = None,
    ) -> Account:
        values = {
            "username": username,
            "password_hash": self.hasher.hash(password),
            "phone_number": phone_number,
            "email_id": email_id,
            "address": address,
        }
        try:
            with transaction(self.engine) as conn:
                account_id = conn.execute(insert(accounts).values(**values)).inserted_primary_key[0]
        except IntegrityError as exc:
            raise UsernameTaken(f"Username {username!r} is already registered") from exc

        logger.info("Account registered", account_id=account_id, username=username)
        return Account(
            id=account_id,
            username=username,
            phone_number=phone_number,
            email_id=email_id,
            address=address,
        )

    def exists(self, username: str) -> bool:
        with transaction(self.engine) as conn:
            row = conn.execute(select(accounts.c.id).where(accounts.c.username == username)).first()
        return row is not None

    def authenticate(self, username: str, password: str) -> int:
        """Return the account id when the password matches."""
        with transaction(self.engine) as conn:
            row = conn.execute(
                select(accounts.c.id, accounts.c.password_hash).where(accounts.c.username == username)
            ).first()

        if row is None:
            logger.info("Login for unknown username", username=username)
            raise InvalidCredentials()

        try:
            self.hasher.verify(row.password_hash, password)
        except (VerificationError, InvalidHashError) as exc:
            logger.info("Login with wrong password", account_id=row.id)
            raise InvalidCredentials() from exc

        return row.id

    def details(self, username: str) -> Account:
        """Public lookup by username."""
        with transaction(self.engine) as conn:
            row = conn.execute(select(accounts).where(accounts.c.username == username)).first()

        if row is None:
            raise AccountNotFound(f"User {username!r} not found")
        return _to_account(row)

    def change_password(self, account_id: int, old_password: str, new_password: str) -> None:
        with transaction(self.engine) as conn:
            current = conn.execute(
                select(accounts.c.password_hash).where(accounts.c.id == account_id).with_for_update()
            ).scalar_one_or_none()
            if current is None:
                raise AccountNotFound(f"Account {account_id} not found")

            try:
                self.hasher.verify(current, old_password)
            except (VerificationError, InvalidHashError) as exc:
                logger.info("Password change with wrong password", account_id=account_id)
                raise InvalidCredentials() from exc

            conn.execute(
                update(accounts).where(accounts.c.id == account_id).values(password_hash=self.hasher.hash(new_password))
            )

        logger.info("Password changed", account_id=account_id)

    def profile(self, account_id: int) -> Account:
        with transaction(self.engine) as conn:
            row = conn.execute(select(accounts).where(accounts.c.id == account_id)).first()

        if row is None:
            raise AccountNotFound(f"Account {account_id} not found")
        return _to_account(row)


def _to_account(row) -> Account:
    return Account(
        id=row.id,
        username=row.username,
        phone_number=row.phone_number,
        email_id=row.email_id,
        address=row.address,
    )
