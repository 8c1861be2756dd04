import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import ConfigurationError, Settings, load_settings
from app.core.errors import DomainError, TransientInfraError, translate_store_error
from app.core.logging import setup_logging
from app.database import check_connection, create_db_and_tables, create_db_engine
from app.routers import auth, bookings, users
from app.services.mailer import Mailer


logger = logging.getLogger(__name__)

INTERNAL_ERROR = "Erro interno no servidor."


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables(app.state.engine)
    check_connection(app.state.engine)

    if app.state.settings.smtp_verify_on_startup:
        app.state.mailer.verify()

    logger.info("Servidor pronto", extra={"port": app.state.settings.port})
    yield

    if app.state.owns_engine:
        app.state.engine.dispose()


# =========================
# HANDLERS DE ERRO
# =========================

def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        if isinstance(exc, TransientInfraError):
            logger.error(f"Falha de infraestrutura em {request.url.path}: {exc.__cause__ or exc}")
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return error_response(400, "Dados da requisição inválidos.")

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return error_response(404, "Rota não encontrada.")
        if exc.status_code == 405:
            return error_response(405, "Método não permitido.")
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(SQLAlchemyError)
    async def store_error_handler(request: Request, exc: SQLAlchemyError):
        err = translate_store_error(exc)
        logger.exception(f"Erro no banco em {request.url.path}", exc_info=exc)
        return error_response(err.status_code, err.message)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Erro não tratado em {request.url.path}", exc_info=exc)
        return error_response(500, INTERNAL_ERROR)


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[Engine] = None,
    mailer: Optional[Mailer] = None,
) -> FastAPI:
    if settings is None:
        settings = load_settings()

    setup_logging(settings.log_level, settings.log_format)

    app = FastAPI(title="Barbearia - Agendamento", lifespan=lifespan)

    app.state.settings = settings
    app.state.owns_engine = engine is None
    app.state.engine = engine or create_db_engine(settings)
    app.state.mailer = mailer or Mailer(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(users.router)
    app.include_router(auth.router)
    app.include_router(bookings.router)

    @app.get("/")
    def root():
        return {"message": "API de agendamento funcionando 🚀"}

    return app


# `uvicorn app.main:app`: criado no primeiro acesso, para que importar
# o módulo (testes, scripts) não exija um .env completo
def __getattr__(name: str):
    if name == "app":
        app = create_app()
        globals()["app"] = app
        return app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def main():
    import uvicorn

    try:
        settings = load_settings()
    except ConfigurationError as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error(str(e))
        sys.exit(1)

    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
