"""Storage handle, schema management and transaction scope.

Every service receives an ``Engine`` built by :func:`build_engine` through its
constructor. Work against the store happens inside :func:`transaction`, which
commits on success, rolls back on any error, and turns lock contention, pool
exhaustion and dropped connections into
:class:`~shared.errors.TransientStorageFailure`. Other storage errors propagate
unchanged.
"""

from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from sqlalchemy import Connection, Engine, MetaData, Table, create_engine, event, make_url
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import DisconnectionError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from shared.config import DatabaseSettings
from shared.errors import TransientStorageFailure

logger = structlog.get_logger(__name__)

# All bounded contexts register their tables here
metadata = MetaData()


def _is_in_memory(uri: str) -> bool:
    database = make_url(uri).database
    return not database or database == ":memory:" or "mode=memory" in uri


def _sqlite_engine(settings: DatabaseSettings) -> Engine:
    # Each pooled connection would open its own private in-memory database
    if _is_in_memory(settings.uri):
        raise ValueError(f"In-memory SQLite is not supported, use a file: {settings.uri}")

    engine = create_engine(
        settings.uri,
        echo=settings.echo,
        pool_size=settings.pool_size,
        pool_timeout=settings.pool_timeout,
        connect_args={"timeout": settings.lock_timeout, "check_same_thread": False},
    )

    # Take the write lock at BEGIN; a transaction never upgrades from read to write
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def _postgresql_engine(settings: DatabaseSettings) -> Engine:
    timeout_ms = int(settings.lock_timeout * 1000)
    return create_engine(
        settings.uri,
        echo=settings.echo,
        pool_size=settings.pool_size,
        pool_timeout=settings.pool_timeout,
        pool_pre_ping=True,
        connect_args={
            "connect_timeout": max(1, int(settings.pool_timeout)),
            "options": f"-c lock_timeout={timeout_ms} -c statement_timeout={timeout_ms * 2}",
        },
    )


def build_engine(settings: DatabaseSettings) -> Engine:
    """Create the engine for the configured database with bounded waits."""
    if settings.uri.startswith("sqlite"):
        engine = _sqlite_engine(settings)
    elif settings.uri.startswith("postgresql"):
        engine = _postgresql_engine(settings)
    else:
        raise ValueError(f"Unsupported database: {settings.uri}")

    logger.debug("Database engine created", dialect=engine.dialect.name)
    return engine


def insert_for(conn: Connection, table: Table) -> postgresql.Insert | sqlite.Insert:
    """Dialect-specific INSERT that supports ``on_conflict_do_update``."""
    if conn.dialect.name == "postgresql":
        return postgresql.insert(table)
    if conn.dialect.name == "sqlite":
        return sqlite.insert(table)
    raise NotImplementedError(f"Upsert is not supported on {conn.dialect.name}")


# SQLSTATEs worth a retry: lock_not_available, query_canceled, serialization_failure, deadlock_detected
TRANSIENT_PGCODES = frozenset({"55P03", "57014", "40001", "40P01"})
TRANSIENT_MESSAGES = ("database is locked", "database table is locked", "busy", "timeout", "timed out")


def is_transient(exc: OperationalError) -> bool:
    """Whether the failure is contention or a dropped connection rather than a broken statement."""
    if exc.connection_invalidated:
        return True

    pgcode = getattr(exc.orig, "pgcode", None) or getattr(exc.orig, "sqlstate", None)
    if pgcode:
        # Class 08 is connection exceptions
        return pgcode in TRANSIENT_PGCODES or pgcode.startswith("08")

    message = str(exc.orig).lower()
    return any(marker in message for marker in TRANSIENT_MESSAGES)


@contextmanager
def transaction(engine: Engine, connection: Connection | None = None) -> Iterator[Connection]:
    """Yield a connection inside a transaction.

    When ``connection`` is given the caller already owns a transaction and it
    is reused as is; commit and rollback stay with the caller.
    """
    if connection is not None:
        yield connection
        return

    try:
        with engine.begin() as conn:
            yield conn
    except (PoolTimeoutError, DisconnectionError) as exc:
        logger.warning("Storage unavailable", error=str(exc))
        raise TransientStorageFailure(str(exc)) from exc
    except OperationalError as exc:
        if not is_transient(exc):
            logger.error("Storage operation failed", error=str(exc))
            raise
        logger.warning("Storage busy", error=str(exc))
        raise TransientStorageFailure(str(exc)) from exc


def setup_db(engine: Engine) -> None:
    """Create all tables"""
    _load_tables()
    metadata.create_all(engine)


def drop_db(engine: Engine) -> None:
    """Drop all tables"""
    _load_tables()
    metadata.drop_all(engine)


def _load_tables() -> None:
    # Importing the modules registers their tables on ``metadata``
    import catalogue.product  # noqa: F401
    import identity.account  # noqa: F401
    import identity.session  # noqa: F401
    import ordering.cart.cart  # noqa: F401
    import ordering.order.order  # noqa: F401
    import reviews.rating  # noqa: F401
