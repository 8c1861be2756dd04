from typing import Optional

from pydantic import NaiveDatetime
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field


class UserBase(SQLModel):
    name: str
    email: str = Field(index=True, unique=True, max_length=255)


class User(UserBase, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)

    # hash bcrypt
    password: str

    # reset_token e reset_expires: ambos preenchidos ou ambos nulos
    reset_token: Optional[str] = Field(default=None, unique=True, max_length=64)
    # UTC sem fuso (DATETIME simples no MySQL)
    reset_expires: Optional[NaiveDatetime] = Field(default=None, sa_type=DateTime(timezone=False))


class UserPublic(SQLModel):
    id: int
    name: str
    email: str


# =========================
# CORPOS DAS REQUISIÇÕES
# campos opcionais: a ausência vira 400, não 422
# =========================

class UserCreate(SQLModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(SQLModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ForgotPasswordRequest(SQLModel):
    email: Optional[str] = None


class ResetPasswordRequest(SQLModel):
    newPassword: Optional[str] = None
