from datetime import timedelta

from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.config import Settings, get_settings
from app.core.errors import ValidationError
from app.database import get_session
from app.models.user import (
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
    UserPublic,
)
from app.services import accounts, password_reset
from app.services.mailer import Mailer, get_mailer

router = APIRouter(prefix="/api", tags=["auth"])


# =========================
# LOGIN
# =========================
@router.post("/login")
def login(
    credentials: LoginRequest,
    session: Session = Depends(get_session),
):
    if not credentials.email or not credentials.password:
        raise ValidationError("E-mail e senha são obrigatórios.")

    user = accounts.verify(session, credentials.email, credentials.password)

    # nunca devolve o hash
    public = UserPublic(id=user.id, name=user.name, email=user.email)
    return {"user": public.model_dump()}


# =========================
# RECUPERAÇÃO DE SENHA
# =========================
@router.post("/forgot-password")
def forgot_password(
    payload: ForgotPasswordRequest,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
    mailer: Mailer = Depends(get_mailer),
):
    if not payload.email:
        raise ValidationError("E-mail é obrigatório.")

    ticket = password_reset.issue_token(
        session,
        payload.email,
        ttl=timedelta(minutes=settings.reset_token_ttl_minutes),
    )

    reset_link = password_reset.build_reset_link(settings.frontend_url, ticket.token)
    mailer.send_password_reset(payload.email, reset_link)

    return {"message": "E-mail de recuperação enviado com sucesso."}


# =========================
# REDEFINIR SENHA
# =========================
@router.post("/reset-password/{token}")
def reset_password(
    token: str,
    payload: ResetPasswordRequest,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    if not payload.newPassword:
        raise ValidationError("Nova senha é obrigatória.")

    password_reset.consume_token(
        session,
        token,
        payload.newPassword,
        min_password_length=settings.password_min_length,
    )

    return {"message": "Senha redefinida com sucesso!"}
