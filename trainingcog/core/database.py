"""Database connection and session management."""
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from trainingcog.core.config import SQLALCHEMY_DATABASE_URL

Base = declarative_base()


def make_engine(url: str) -> Engine:
    """Engine for ``url``. SQLite gets thread sharing and enforced foreign keys."""
    if not url.startswith("sqlite"):
        return create_engine(url)

    sqlite_engine = create_engine(url, connect_args={"check_same_thread": False})

    @event.listens_for(sqlite_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return sqlite_engine


engine = make_engine(SQLALCHEMY_DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine = engine):
    """Create any missing tables."""
    # Models must be imported so their tables are registered on Base
    import trainingcog.models  # noqa: F401
    Base.metadata.create_all(bind=bind)


def get_db():
    """Yields a session per request and closes it afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
