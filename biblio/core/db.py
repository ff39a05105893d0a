#!/usr/bin/env python

"""
    Engine and session setup for Biblio.

    Every write runs inside a `Session.begin()` block. On PostgreSQL the
    stores take row locks with `SELECT ... FOR UPDATE`; SQLite ignores
    FOR UPDATE, so there every transaction is opened with
    `BEGIN IMMEDIATE`, which takes the database write lock up front and
    makes concurrent writers queue behind it. Either way a lock wait is
    bounded by `LOCK_TIMEOUT`.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import logging
from sqlalchemy import create_engine, event
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker
from biblio.configs import DB_URI, DEBUG, LOCK_RETRIES, LOCK_TIMEOUT
from biblio.models import Base
from biblio.core.exceptions import BiblioError, StorageError

logger = logging.getLogger(__name__)


def _enable_sqlite_locking(engine):
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # hand transaction control to SQLAlchemy's "begin" event
        dbapi_connection.isolation_level = None
        dbapi_connection.execute("PRAGMA foreign_keys=ON")

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def make_engine(uri=DB_URI, lock_timeout=LOCK_TIMEOUT, **kwargs):
    """Builds an engine whose lock waits end after `lock_timeout` ms with
    an OperationalError, which `run_in_transaction` retries.
    """
    engine_kwargs = {'echo': DEBUG}
    if uri.startswith('sqlite'):
        engine_kwargs['connect_args'] = {
            'check_same_thread': False,
            'timeout': lock_timeout / 1000,
        }
        if uri in ('sqlite://', 'sqlite:///:memory:'):
            # one shared connection, or every checkout sees an empty database
            engine_kwargs['poolclass'] = StaticPool
    else:
        engine_kwargs['client_encoding'] = 'utf8'
        engine_kwargs['pool_pre_ping'] = True
        engine_kwargs['connect_args'] = {
            'options': f'-c lock_timeout={lock_timeout}',
        }
    engine_kwargs.update(kwargs)
    engine = create_engine(uri, **engine_kwargs)
    if uri.startswith('sqlite'):
        _enable_sqlite_locking(engine)
    return engine


def make_session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init(engine):
    """Creates the tables and returns a session factory bound to `engine`."""
    Base.metadata.create_all(bind=engine)
    logger.info(f"Database ready: {engine.url!r}")
    return make_session_factory(engine)


def run_in_transaction(session_factory, operation, *args, retries=LOCK_RETRIES, **kwargs):
    """Runs `operation(session, *args, **kwargs)` in one transaction.

    The transaction commits when `operation` returns and rolls back on
    any exception. Lock timeouts, deadlocks and serialization failures
    (OperationalError) rerun the whole operation up to `retries` times,
    then surface as StorageError. Business errors propagate untouched.
    """
    name = getattr(operation, '__name__', 'operation').lstrip('_')
    last_error = None
    for attempt in range(1, max(retries, 1) + 1):
        try:
            with session_factory.begin() as session:
                return operation(session, *args, **kwargs)
        except BiblioError:
            raise
        except OperationalError as e:
            last_error = e
            logger.warning(
                f"{name}: transaction conflict on attempt {attempt}/{retries}: {e}")
        except SQLAlchemyError as e:
            logger.exception(f"{name}: storage failure")
            raise StorageError(f"{name} failed: storage error") from e
    logger.error(f"{name}: giving up after {retries} attempts")
    raise StorageError(f"{name} failed: database busy, try again") from last_error
