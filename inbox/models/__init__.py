from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from ..config import DATABASE_URL


def _serialize_sqlite_writers(engine):
    """Take the SQLite write lock when a transaction begins.

    SQLite ignores SELECT ... FOR UPDATE, so check-then-write sequences only
    stay atomic across connections if each transaction starts IMMEDIATE.
    """
    @event.listens_for(engine.sync_engine, 'connect')
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        # hand transaction control to the begin listener below
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute('PRAGMA journal_mode=WAL')
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()

    @event.listens_for(engine.sync_engine, 'begin')
    def _begin_immediate(conn):
        conn.exec_driver_sql('BEGIN IMMEDIATE')


def make_engine(url: str):
    if not url.startswith('sqlite'):
        return create_async_engine(url, future=True, echo=False)
    if ':memory:' in url:
        # every session shares the one connection; fit for single-caller tests only
        return create_async_engine(url, future=True, echo=False, poolclass=StaticPool,
                                   connect_args={'check_same_thread': False})
    engine = create_async_engine(url, future=True, echo=False,
                                 connect_args={'check_same_thread': False, 'timeout': 30})
    _serialize_sqlite_writers(engine)
    return engine


engine = make_engine(DATABASE_URL)
AsyncSessionLocal = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
Base = declarative_base()

# Import models to register tables
from .users import User  # noqa: F401,E402
from .conversations import Conversation  # noqa: F401,E402
from .messages import Message  # noqa: F401,E402
from .message_hides import MessageHide  # noqa: F401,E402
from .deletion_markers import DeletionMarker  # noqa: F401,E402
from .read_receipts import ReadReceipt  # noqa: F401,E402
from .rate_limits import RateLimitBucket  # noqa: F401,E402
from .alerts import Alert  # noqa: F401,E402
from .reports import DMReport  # noqa: F401,E402
from .blocks import BlockedUser  # noqa: F401,E402
from .reactions import Reaction  # noqa: F401,E402
