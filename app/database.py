# app/database.py
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session

from app.core.config import get_settings

settings = get_settings()

# ---------------------------------------------------------
# Postgres connection (via pooler)
#
# - sslmode=require   : enforce SSL when running in the cloud
# - pool_size=1       : keep only 1 connection to the pooler
# - max_overflow=0    : do not open extra connections beyond the pool
# - pool_pre_ping=True: validate connections before using them
#
# SQLite (local dev / tests) skips the pool tuning and only needs
# check_same_thread=False because FastAPI runs sync routes in a threadpool.
# ---------------------------------------------------------


def build_engine(db_url: str, echo: bool = False) -> Engine:
    """
    Create an engine with per-dialect connection settings.
    """
    if db_url.startswith("sqlite"):
        return create_engine(
            db_url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )

    # Append sslmode=require if it is not already present
    if settings.DATABASE_SSL_REQUIRED and "sslmode=" not in db_url:
        if "?" in db_url:
            db_url = db_url + "&sslmode=require"
        else:
            db_url = db_url + "?sslmode=require"

    return create_engine(
        db_url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=1,
        max_overflow=0,
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)


def create_db_and_tables(bind: Engine | None = None) -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    SQLModel.metadata.create_all(bind or engine)


def get_session():
    """
    FastAPI dependency that yields a SQLModel Session.

    Usage:

        from fastapi import Depends

        @router.get("/example")
        def example_endpoint(session: Session = Depends(get_session)):
            ...
    """
    with Session(engine) as session:
        yield session
