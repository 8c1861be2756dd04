import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import Request


# .env na raiz do projeto
env_path = Path(__file__).resolve().parent.parent.parent / ".env"


# =========================
# VARIÁVEIS OBRIGATÓRIAS
# =========================

REQUIRED_ENV = [
    "DB_HOST",
    "DB_USER",
    "DB_PASS",
    "EMAIL_USER",
    "EMAIL_PASS",
    "FRONTEND_URL",
    "PORT",
]

# dispensadas quando DATABASE_URL é informada
DB_ENV = {"DB_HOST", "DB_USER", "DB_PASS"}


class ConfigurationError(RuntimeError):
    def __init__(self, missing: Optional[list[str]] = None, invalid: Optional[dict[str, str]] = None):
        self.missing = missing or []
        self.invalid = invalid or {}

        problems = []
        if self.missing:
            problems.append(f"Variáveis faltando no .env: {', '.join(self.missing)}")
        if self.invalid:
            values = ", ".join(f"{key}={value!r}" for key, value in self.invalid.items())
            problems.append(f"Valores numéricos inválidos no .env: {values}")
        super().__init__("; ".join(problems))


def _as_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _as_number(env, key: str, default: str, cast=int):
    raw = env.get(key) or default
    try:
        return cast(raw.strip())
    except ValueError:
        raise ConfigurationError(invalid={key: raw})


@dataclass
class Settings:
    frontend_url: str
    port: int
    email_user: str
    email_pass: str

    database_url: Optional[str] = None
    db_host: Optional[str] = None
    db_user: Optional[str] = None
    db_pass: Optional[str] = None
    db_name: str = "agendamento_db"
    db_driver: str = "mysql+pymysql"

    # pool (connectionLimit original = 10)
    db_pool_size: int = 10
    db_max_overflow: int = 5
    db_pool_timeout: float = 10.0
    db_pool_recycle: int = 300
    db_operation_timeout: int = 10

    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 465
    smtp_use_ssl: bool = True
    smtp_timeout: float = 30.0
    smtp_verify_on_startup: bool = True
    email_from_name: str = "Suporte"

    password_min_length: int = 6
    reset_token_ttl_minutes: int = 60
    booking_enforce_closed_days: bool = False

    log_level: str = "INFO"
    log_format: str = "text"

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"{self.db_driver}://{self.db_user}:{self.db_pass}"
            f"@{self.db_host}/{self.db_name}"
        )

    @property
    def email_from(self) -> str:
        return f"{self.email_from_name} <{self.email_user}>"

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        env = os.environ if environ is None else environ

        required = list(REQUIRED_ENV)
        if env.get("DATABASE_URL"):
            required = [key for key in required if key not in DB_ENV]

        missing = [key for key in required if not env.get(key)]
        if missing:
            raise ConfigurationError(missing)

        return cls(
            frontend_url=env["FRONTEND_URL"].rstrip("/"),
            port=_as_number(env, "PORT", ""),
            email_user=env["EMAIL_USER"],
            email_pass=env["EMAIL_PASS"],
            database_url=env.get("DATABASE_URL") or None,
            db_host=env.get("DB_HOST"),
            db_user=env.get("DB_USER"),
            db_pass=env.get("DB_PASS"),
            db_name=env.get("DB_NAME", "agendamento_db"),
            db_driver=env.get("DB_DRIVER", "mysql+pymysql"),
            db_pool_size=_as_number(env, "DB_POOL_SIZE", "10"),
            db_max_overflow=_as_number(env, "DB_MAX_OVERFLOW", "5"),
            db_pool_timeout=_as_number(env, "DB_POOL_TIMEOUT", "10", float),
            db_pool_recycle=_as_number(env, "DB_POOL_RECYCLE", "300"),
            db_operation_timeout=_as_number(env, "DB_OPERATION_TIMEOUT", "10"),
            smtp_host=env.get("SMTP_HOST", "smtp.gmail.com"),
            smtp_port=_as_number(env, "SMTP_PORT", "465"),
            smtp_use_ssl=_as_bool(env.get("SMTP_USE_SSL"), True),
            smtp_timeout=_as_number(env, "SMTP_TIMEOUT", "30", float),
            smtp_verify_on_startup=_as_bool(env.get("SMTP_VERIFY_ON_STARTUP"), True),
            email_from_name=env.get("EMAIL_FROM_NAME", "Suporte"),
            password_min_length=_as_number(env, "PASSWORD_MIN_LENGTH", "6"),
            reset_token_ttl_minutes=_as_number(env, "RESET_TOKEN_TTL_MINUTES", "60"),
            booking_enforce_closed_days=_as_bool(env.get("BOOKING_ENFORCE_CLOSED_DAYS"), False),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            log_format=env.get("LOG_FORMAT", "text").lower(),
        )


@lru_cache
def load_settings() -> Settings:
    load_dotenv(dotenv_path=env_path)
    return Settings.from_env()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
