"""
core/db.py -- SQLAlchemy engine construction shared by UserStore and SocialStore.

SQLite gets two tweaks: connections may cross threads (route handlers run
on FastAPI's threadpool), and every new connection switches to WAL so
readers never block the single writer. Any other URL is passed through
untouched.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine


def _enable_wal(dbapi_conn, connection_record) -> None:
    # PRAGMAs are per-connection; the pool does not carry them over.
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def make_engine(db_url: str) -> Engine:
    """Create an Engine for `db_url`, applying SQLite connection settings."""
    is_sqlite = db_url.startswith("sqlite")
    engine = create_engine(db_url, connect_args={"check_same_thread": False} if is_sqlite else {})
    if is_sqlite:
        event.listen(engine, "connect", _enable_wal)
    return engine
