"""Ciclo de vida do token de redefinição de senha.

Cada usuário tem no máximo um token ativo: emitir um novo sobrescreve o
anterior. O consumo é um UPDATE condicional, de modo que só uma requisição
consegue usar o mesmo token.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import update
from sqlmodel import Session, select

from app.core.errors import ExpiredTokenError, InvalidTokenError, UserNotFoundError, ValidationError
from app.core.security import generate_reset_token, get_password_hash, utcnow
from app.models.user import User
from app.services.accounts import get_user_by_email, validate_password


logger = logging.getLogger(__name__)

RESET_TOKEN_TTL = timedelta(hours=1)


@dataclass(frozen=True)
class ResetTicket:
    token: str
    expires_at: datetime


def build_reset_link(frontend_url: str, token: str) -> str:
    return f"{frontend_url.rstrip('/')}/reset-password/{token}"


def issue_token(
    session: Session,
    email: str,
    ttl: timedelta = RESET_TOKEN_TTL,
    now: Optional[datetime] = None,
) -> ResetTicket:
    user = get_user_by_email(session, email)
    if not user:
        raise UserNotFoundError()

    now = now or utcnow()
    ticket = ResetTicket(token=generate_reset_token(), expires_at=now + ttl)

    user.reset_token = ticket.token
    user.reset_expires = ticket.expires_at
    session.add(user)
    session.commit()

    logger.info("Token de redefinição emitido", extra={"userId": user.id})
    return ticket


def consume_token(
    session: Session,
    token: str,
    new_password: Optional[str],
    min_password_length: int = 6,
    now: Optional[datetime] = None,
) -> None:
    if not new_password:
        raise ValidationError("Nova senha é obrigatória.")
    validate_password(new_password, min_password_length)

    user = session.exec(select(User).where(User.reset_token == token)).first()
    if not user:
        raise InvalidTokenError()

    user_id = user.id
    now = now or utcnow()
    if user.reset_expires is None or now > user.reset_expires:
        logger.warning("Token de redefinição expirado", extra={"userId": user_id})
        raise ExpiredTokenError()

    hashed_password = get_password_hash(new_password)

    # compare-and-swap: só limpa se o token ainda for o mesmo e estiver válido
    result = session.exec(
        update(User)
        .where(
            User.id == user_id,
            User.reset_token == token,
            User.reset_expires >= now,
        )
        .values(password=hashed_password, reset_token=None, reset_expires=None)
    )
    session.commit()

    if result.rowcount != 1:
        logger.warning("Token consumido por outra requisição", extra={"userId": user_id})
        raise InvalidTokenError()

    logger.info("Senha redefinida", extra={"userId": user_id})
