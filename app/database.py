from collections.abc import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from app.config import get_settings

_database_url = get_settings().database_url
_is_sqlite = _database_url.startswith("sqlite")

engine = create_engine(
    _database_url,
    connect_args={"check_same_thread": False} if _is_sqlite else {},
)


def configure_sqlite(sqlite_engine: Engine) -> None:
    """Make pysqlite honour SAVEPOINTs inside one outer transaction.

    pysqlite's own transaction handling commits at the first RELEASE, so it is
    switched off and SQLAlchemy emits BEGIN itself.
    """

    @event.listens_for(sqlite_engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        # trade -> activity foreign keys; wait out concurrent syncs
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA busy_timeout=30000")
        cursor.close()

    @event.listens_for(sqlite_engine, "begin")
    def _on_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN")


if _is_sqlite:
    configure_sqlite(engine)


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency for FastAPI routes; one session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
