import secrets
from datetime import datetime, timezone

from passlib.context import CryptContext


# =========================
# HASH DE SENHA
# =========================

BCRYPT_ROUNDS = 10

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=BCRYPT_ROUNDS,
)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


# =========================
# TOKEN DE REDEFINIÇÃO
# =========================

# 32 bytes = 256 bits de entropia
RESET_TOKEN_BYTES = 32


def generate_reset_token() -> str:
    return secrets.token_hex(RESET_TOKEN_BYTES)


def utcnow() -> datetime:
    """Horário UTC sem tzinfo (as colunas DATETIME não guardam fuso)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
