"""
Fixtures compartilhadas: SQLite em memória, mailer falso e TestClient.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from app.core.config import Settings
from app.core.errors import MailDeliveryError
from app.database import create_db_and_tables
from app.main import create_app


class FakeMailer:
    """Guarda os e-mails em memória em vez de falar com o SMTP."""

    def __init__(self):
        self.sent = []
        self.fail = False
        self.verified = False

    def verify(self):
        self.verified = True

    def send_password_reset(self, to, reset_link):
        if self.fail:
            raise MailDeliveryError()
        self.sent.append({"to": to, "link": reset_link})


def make_settings(**overrides) -> Settings:
    values = dict(
        frontend_url="http://localhost:5173",
        port=3001,
        email_user="suporte@barbearia.com",
        email_pass="senha-smtp",
        database_url="sqlite://",
        smtp_verify_on_startup=False,
        log_level="WARNING",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings_factory():
    return make_settings


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def file_engine(tmp_path):
    """SQLite em arquivo: uma conexão por thread, para testes de concorrência."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'agendamento.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def app(settings, engine, mailer):
    return create_app(settings, engine=engine, mailer=mailer)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client
