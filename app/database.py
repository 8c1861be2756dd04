import logging

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from app.core.config import Settings


logger = logging.getLogger(__name__)


def _connect_args(settings: Settings) -> dict:
    """Timeouts por operação, conforme o driver."""
    url = settings.sqlalchemy_url
    timeout = settings.db_operation_timeout

    if url.startswith("mysql"):
        return {
            "connect_timeout": timeout,
            "read_timeout": timeout,
            "write_timeout": timeout,
        }
    if url.startswith("postgresql"):
        return {
            "connect_timeout": timeout,
            "options": f"-c statement_timeout={timeout * 1000}",
        }
    if url.startswith("sqlite"):
        return {"check_same_thread": False, "timeout": timeout}
    return {}


def create_db_engine(settings: Settings) -> Engine:
    url = settings.sqlalchemy_url
    kwargs = {
        "pool_pre_ping": True,
        "connect_args": _connect_args(settings),
    }

    if not url.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_recycle=settings.db_pool_recycle,
        )

    engine = create_engine(url, **kwargs)
    logger.info(
        "Engine do banco criada",
        extra={"dialect": engine.dialect.name, "pool_size": settings.db_pool_size},
    )
    return engine


def create_db_and_tables(engine: Engine) -> None:
    # importa os modelos para registrar as tabelas no metadata
    from app.models import booking, user  # noqa: F401

    SQLModel.metadata.create_all(engine)


def check_connection(engine: Engine) -> None:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    logger.info("Conectado ao banco", extra={"dialect": engine.dialect.name})


def get_session(request: Request):
    with Session(request.app.state.engine) as session:
        yield session
