"""Database configuration and connection setup"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from appointly.config.settings import get_settings

settings = get_settings()


def _engine_options(database_url: str) -> dict:
    """Pool options per backend; SQLite (tests, local dev) shares one connection"""
    if database_url.startswith("sqlite"):
        return {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }
    return {
        "poolclass": QueuePool,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_pre_ping": True,
    }


# Create database engine with connection pooling
engine = create_engine(
    settings.DATABASE_URL,
    echo=False,
    **_engine_options(settings.DATABASE_URL),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Database dependency for FastAPI"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables():
    """Create all database tables that do not exist yet"""
    from appointly.models import Base

    Base.metadata.create_all(bind=engine)


def drop_tables():
    """Drop all database tables (tests and local resets only)"""
    from appointly.models import Base

    Base.metadata.drop_all(bind=engine)


if __name__ == "__main__":
    create_tables()
    print("Database tables created successfully!")
