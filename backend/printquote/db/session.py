"""
Database session management
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
import logging

from printquote.core.settings import settings
from printquote.db.base import Base

logger = logging.getLogger(__name__)

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    # SQLite connections are shared across FastAPI's threadpool
    connect_args["check_same_thread"] = False

engine = create_engine(
    settings.DATABASE_URL,
    echo=False,  # Set to True for SQL query logging
    pool_pre_ping=True,  # Verify connections before using
    connect_args=connect_args,
)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """Create all tables that don't exist yet"""
    from printquote import models  # noqa: F401  (registers tables on Base)

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")


def get_db():
    """
    Dependency for getting database session

    Usage in FastAPI endpoints:
        @router.get("/options")
        def get_options(db: Session = Depends(get_db)):
            return db.query(MaterialCatalogItem).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
