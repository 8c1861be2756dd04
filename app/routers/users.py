from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.config import Settings, get_settings
from app.core.errors import ValidationError
from app.database import get_session
from app.models.user import UserCreate
from app.services import accounts

router = APIRouter(prefix="/api", tags=["users"])


@router.post("/cadastrar", status_code=status.HTTP_201_CREATED)
def create_user(
    user: UserCreate,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    if not user.name or not user.email or not user.password:
        raise ValidationError("Todos os campos são obrigatórios.")

    accounts.register(
        session,
        name=user.name,
        email=user.email,
        password=user.password,
        min_password_length=settings.password_min_length,
    )

    return {"message": "Cadastro realizado com sucesso!"}
