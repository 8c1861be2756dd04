"""Cadastro e verificação de credenciais.

Regras de negócio sem dependência de HTTP: os erros de domínio levantados
aqui são traduzidos para status pelos handlers da aplicação.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.core.errors import (
    EmailAlreadyRegisteredError,
    UserNotFoundError,
    ValidationError,
    WrongPasswordError,
)
from app.core.security import get_password_hash, verify_password
from app.models.user import User


logger = logging.getLogger(__name__)


def validate_password(password: str, min_length: int) -> None:
    """Política de senha: apenas comprimento mínimo (padrão 6)."""
    if len(password) < min_length:
        raise ValidationError(f"A senha deve ter pelo menos {min_length} caracteres.")


def get_user_by_email(session: Session, email: str) -> User | None:
    return session.exec(select(User).where(User.email == email)).first()


def register(
    session: Session,
    name: str,
    email: str,
    password: str,
    min_password_length: int = 6,
) -> User:
    """Cria o usuário com a senha em hash.

    Raises:
        ValidationError: senha abaixo do comprimento mínimo
        EmailAlreadyRegisteredError: e-mail já existe (índice único)
    """
    validate_password(password, min_password_length)

    db_user = User(
        name=name,
        email=email,
        password=get_password_hash(password),
    )

    session.add(db_user)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        logger.warning("Cadastro recusado: e-mail já cadastrado")
        raise EmailAlreadyRegisteredError()

    session.refresh(db_user)
    logger.info("Usuário cadastrado", extra={"userId": db_user.id})
    return db_user


def verify(session: Session, email: str, password: str) -> User:
    """Confere e-mail e senha.

    Raises:
        UserNotFoundError: e-mail desconhecido
        WrongPasswordError: senha não confere
    """
    user = get_user_by_email(session, email)
    if not user:
        raise UserNotFoundError()

    if not verify_password(password, user.password):
        raise WrongPasswordError()

    return user
