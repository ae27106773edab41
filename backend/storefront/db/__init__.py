import os
import sys
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import NullPool
from storefront.config import settings
from storefront.utils.log import get_logger

log = get_logger("storefront")


def make_engine(url: str):
    """
    Build an engine for `url`. Connections are not pooled: every session opens
    its own connection and tears it down when closed.
    """
    connect_args = {}
    if url.startswith("sqlite"):
        # sessions are opened and closed from different threadpool workers
        connect_args["check_same_thread"] = False
    return create_engine(url, future=True, echo=False, poolclass=NullPool, connect_args=connect_args)


DATABASE_URL = settings.DATABASE_URL
engine = make_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

def init_db(reset: bool = None):
    """
    Initialize DB schema.

    Behavior:
      - If `reset` is true, drop & recreate tables.
      - If `reset` is None, reset when RESET_DB is set or when we detect pytest running,
        so tests run against a clean DB.
      - Otherwise, leave existing tables in place. Columns added since a table was first
        created are brought in by the schema migrations (scripts/migrate.py), not here.
    """
    # ensure models are imported so metadata is populated
    import storefront.models.product  # noqa: F401
    import storefront.models.order  # noqa: F401

    if reset is None:
        running_pytest = "pytest" in sys.modules or any(
            k.upper().startswith("PYTEST") for k in os.environ.keys()
        )
        reset = settings.RESET_DB or running_pytest

    if reset:
        log.info("Resetting database (RESET_DB set or pytest detected)...")
        Base.metadata.drop_all(bind=engine)

    Base.metadata.create_all(bind=engine)
    log.info("Database initialized.")

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
