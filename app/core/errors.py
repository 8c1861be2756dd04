"""Erros de domínio.

Os serviços levantam estas exceções; os handlers registrados em
``app.main`` traduzem cada uma para ``{"error": message}`` com o status
correspondente.
"""

from sqlalchemy.exc import SQLAlchemyError, TimeoutError as PoolTimeoutError


class DomainError(Exception):
    status_code = 500
    message = "Erro interno no servidor."

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


# =========================
# 400
# =========================

class ValidationError(DomainError):
    status_code = 400
    message = "Todos os campos são obrigatórios."


class TokenError(DomainError):
    status_code = 400


class InvalidTokenError(TokenError):
    message = "Token inválido ou já utilizado."


class ExpiredTokenError(TokenError):
    message = "Token expirado."


# =========================
# 401 / 404 / 409
# =========================

class UnauthorizedError(DomainError):
    status_code = 401
    message = "Não autorizado."


class WrongPasswordError(UnauthorizedError):
    message = "Senha incorreta."


class NotFoundError(DomainError):
    status_code = 404
    message = "Não encontrado."


class UserNotFoundError(NotFoundError):
    message = "Usuário não encontrado."


class ConflictError(DomainError):
    status_code = 409
    message = "Registro já existe."


class EmailAlreadyRegisteredError(ConflictError):
    message = "E-mail já cadastrado."


class SlotConflictError(ConflictError):
    message = "Horário já reservado."


# =========================
# INFRA (banco / e-mail)
# =========================

class TransientInfraError(DomainError):
    status_code = 500


class StoreUnavailableError(TransientInfraError):
    pass


class StoreTimeoutError(TransientInfraError):
    message = "Tempo limite excedido. Tente novamente."


class MailDeliveryError(TransientInfraError):
    pass


# mensagens de timeout dos drivers (PyMySQL, psycopg2)
TIMEOUT_MARKERS = (
    "timed out",
    "timeout expired",
    "statement timeout",
)

# query_canceled no Postgres (statement_timeout)
PG_QUERY_CANCELED = "57014"


def translate_store_error(exc: SQLAlchemyError) -> TransientInfraError:
    if isinstance(exc, PoolTimeoutError):
        return StoreTimeoutError()

    orig = getattr(exc, "orig", None)
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate == PG_QUERY_CANCELED:
        return StoreTimeoutError()

    text = str(orig if orig is not None else exc).lower()
    if any(marker in text for marker in TIMEOUT_MARKERS):
        return StoreTimeoutError()
    return StoreUnavailableError()
