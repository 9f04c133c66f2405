from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
import logging

from lorebook.core.config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE clauses unless this is set per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(url: str, echo: bool = False, **kwargs) -> Engine:
    """
    Builds an engine for the given database URL.

    SQLite connections are made usable outside the creating thread and get
    foreign key enforcement switched on, so image cascades and parent
    ``SET NULL`` behave the same as on a server database.
    """
    connect_args = kwargs.pop("connect_args", {})
    is_sqlite = url.startswith("sqlite")
    if is_sqlite:
        connect_args.setdefault("check_same_thread", False)

    db_engine = create_engine(url, echo=echo, connect_args=connect_args, **kwargs)
    if is_sqlite:
        event.listen(db_engine, "connect", _enable_sqlite_foreign_keys)
    return db_engine


logger.debug(f"Configuring database engine for {settings.DATABASE_URL.split('@')[-1]}")

try:
    engine = create_db_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
except Exception as e:
    logger.error(f"Failed to create SQLAlchemy engine or configure session: {e}", exc_info=True)
    raise


def init_db(bind: Engine = None):
    """Creates every table known to the models package."""
    import lorebook.models  # noqa: F401  registers the mappers on Base

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database schema is up to date.")


def get_db():
    """
    Provides a database session for one command or batch run.
    Ensures the session is always closed, even if errors occur.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
