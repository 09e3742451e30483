"""
Configuração das conexões aos bancos de dados das OPCOs.
"""
from contextlib import contextmanager
from typing import Iterator
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from app.core.config import settings

# Base para os modelos
Base = declarative_base()


def create_tenant_engine(database_url: str) -> Engine:
    """
    Cria o engine SQLAlchemy de uma OPCO.

    SQLite (usado em testes) não aceita parâmetros de pool.
    """
    if database_url.startswith("sqlite"):
        return create_engine(database_url, echo=settings.debug)

    return create_engine(
        database_url,
        echo=settings.debug,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    """Cria a factory de sessões de uma OPCO."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def session_scope(session_factory: sessionmaker) -> Iterator[Session]:
    """
    Abre uma sessão só de leitura e garante o fecho.
    Uso: `with session_scope(binding.session_factory) as db: ...`
    """
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
