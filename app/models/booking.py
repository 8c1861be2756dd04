import datetime as dt
from enum import Enum
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


class ServiceName(str, Enum):
    CORTE = "Corte"
    BARBA = "Barba"
    CORTE_BARBA = "Corte + Barba"


class Booking(SQLModel, table=True):
    __tablename__ = "bookings"
    # um horário por (data, hora, serviço); a violação é o sinal de conflito
    __table_args__ = (
        UniqueConstraint("date", "time", "service", name="uq_bookings_slot"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    name: str
    phone: str = Field(max_length=32)
    service: str = Field(max_length=32)

    date: dt.date = Field(index=True)
    # "HH:MM"
    time: str = Field(max_length=5)


class BookingCreate(SQLModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    service: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
