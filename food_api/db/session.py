"""
db/session.py – Engine factory + Session helper.

One Engine per database URL, cached for the process lifetime.
db_session() is a contextmanager that commits, rolls back or closes for you.
"""
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker


# ── Engine cache (1 engine / database url) ────────────────────────────────────

_engines: dict[str, Engine] = {}
_session_factories: dict[str, sessionmaker] = {}


def get_engine(database_url: str) -> Engine:
    if database_url not in _engines:
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=False,
        )

        # WAL lets readers proceed while the seeder writes
        @event.listens_for(engine, "connect")
        def set_pragmas(conn, _):
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA synchronous=NORMAL")
            conn.execute("PRAGMA foreign_keys=ON")

        _engines[database_url] = engine
        _session_factories[database_url] = sessionmaker(bind=engine, expire_on_commit=False)
    return _engines[database_url]


def get_session_factory(database_url: str) -> sessionmaker:
    get_engine(database_url)
    return _session_factories[database_url]


def ensure_database_dir(database_url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    database = make_url(database_url).database
    if database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)


def dispose_all() -> None:
    for engine in _engines.values():
        engine.dispose()
    _engines.clear()
    _session_factories.clear()


@contextmanager
def db_session(database_url: str) -> Generator[Session, None, None]:
    """Context manager returning a Session, auto commit/rollback/close."""
    factory = get_session_factory(database_url)
    session: Session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
