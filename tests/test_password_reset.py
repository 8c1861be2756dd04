"""Tests for reset-token issuance and consumption."""

import threading
from datetime import datetime, timedelta

import pytest
from sqlalchemy import DateTime
from sqlmodel import Session, select

from app.core.errors import ExpiredTokenError, InvalidTokenError, UserNotFoundError, ValidationError
from app.core.security import verify_password
from app.models.user import User
from app.services import accounts, password_reset


NOW = datetime(2024, 6, 11, 10, 0, 0)


@pytest.fixture
def user(session):
    return accounts.register(session, "Ana", "ana@x.com", "secret1")


def reload(session, email="ana@x.com") -> User:
    session.expire_all()
    return session.exec(select(User).where(User.email == email)).one()


class TestIssueToken:

    def test_unknown_email(self, session):
        with pytest.raises(UserNotFoundError):
            password_reset.issue_token(session, "ninguem@x.com")

    def test_persists_token_and_expiry(self, session, user):
        ticket = password_reset.issue_token(session, "ana@x.com", now=NOW)

        assert len(ticket.token) == 64  # 32 bytes em hex
        assert ticket.expires_at == NOW + timedelta(hours=1)

        stored = reload(session)
        assert stored.reset_token == ticket.token
        assert stored.reset_expires == ticket.expires_at
        assert stored.reset_expires.tzinfo is None

    def test_expiry_column_stores_naive_utc(self):
        column_type = User.__table__.c.reset_expires.type
        assert isinstance(column_type, DateTime)
        assert column_type.timezone is False

    def test_tokens_are_unique(self, session, user):
        first = password_reset.issue_token(session, "ana@x.com")
        second = password_reset.issue_token(session, "ana@x.com")
        assert first.token != second.token

    def test_reissue_invalidates_previous_token(self, session, user):
        first = password_reset.issue_token(session, "ana@x.com", now=NOW)
        password_reset.issue_token(session, "ana@x.com", now=NOW)

        with pytest.raises(InvalidTokenError):
            password_reset.consume_token(session, first.token, "novaSenha", now=NOW)

    def test_custom_ttl(self, session, user):
        ticket = password_reset.issue_token(session, "ana@x.com", ttl=timedelta(minutes=5), now=NOW)
        assert ticket.expires_at == NOW + timedelta(minutes=5)


class TestConsumeToken:

    def test_success_changes_password_and_clears_token(self, session, user):
        ticket = password_reset.issue_token(session, "ana@x.com", now=NOW)

        password_reset.consume_token(session, ticket.token, "novaSenha", now=NOW)

        stored = reload(session)
        assert stored.reset_token is None
        assert stored.reset_expires is None
        assert verify_password("novaSenha", stored.password)
        assert not verify_password("secret1", stored.password)

    def test_single_use(self, session, user):
        ticket = password_reset.issue_token(session, "ana@x.com", now=NOW)
        password_reset.consume_token(session, ticket.token, "novaSenha", now=NOW)

        with pytest.raises(InvalidTokenError):
            password_reset.consume_token(session, ticket.token, "outraSenha", now=NOW)

    def test_unknown_token(self, session, user):
        with pytest.raises(InvalidTokenError):
            password_reset.consume_token(session, "nao-existe", "novaSenha", now=NOW)

    def test_one_second_before_expiry_succeeds(self, session, user):
        ticket = password_reset.issue_token(session, "ana@x.com", now=NOW)

        password_reset.consume_token(
            session, ticket.token, "novaSenha", now=ticket.expires_at - timedelta(seconds=1)
        )

        assert reload(session).reset_token is None

    def test_one_second_after_expiry_fails_and_keeps_token(self, session, user):
        ticket = password_reset.issue_token(session, "ana@x.com", now=NOW)

        with pytest.raises(ExpiredTokenError):
            password_reset.consume_token(
                session, ticket.token, "novaSenha", now=ticket.expires_at + timedelta(seconds=1)
            )

        stored = reload(session)
        assert stored.reset_token == ticket.token
        assert verify_password("secret1", stored.password)

    def test_missing_password(self, session, user):
        ticket = password_reset.issue_token(session, "ana@x.com", now=NOW)
        with pytest.raises(ValidationError):
            password_reset.consume_token(session, ticket.token, "", now=NOW)

    def test_short_password_rejected_before_consuming(self, session, user):
        ticket = password_reset.issue_token(session, "ana@x.com", now=NOW)

        with pytest.raises(ValidationError):
            password_reset.consume_token(session, ticket.token, "123", now=NOW)

        assert reload(session).reset_token == ticket.token

    def test_concurrent_consumption_only_one_wins(self, file_engine):
        with Session(file_engine) as session:
            accounts.register(session, "Ana", "ana@x.com", "secret1")
            ticket = password_reset.issue_token(session, "ana@x.com", now=NOW)

        workers = 4
        barrier = threading.Barrier(workers)
        results = []
        lock = threading.Lock()

        def attempt(i):
            with Session(file_engine) as session:
                barrier.wait()
                try:
                    password_reset.consume_token(session, ticket.token, f"senha-{i}", now=NOW)
                    outcome = "ok"
                except InvalidTokenError:
                    outcome = "invalid"
            with lock:
                results.append(outcome)

        threads = [threading.Thread(target=attempt, args=(i,)) for i in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count("ok") == 1
        assert results.count("invalid") == workers - 1


def test_build_reset_link():
    link = password_reset.build_reset_link("http://localhost:5173/", "abc123")
    assert link == "http://localhost:5173/reset-password/abc123"
