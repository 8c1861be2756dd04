from typing import Dict, Optional

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.config import Settings, get_settings
from app.core.errors import ValidationError
from app.database import get_session
from app.models.booking import BookingCreate
from app.services import bookings


router = APIRouter(prefix="/api", tags=["bookings"])


# =========================
# CRIAR AGENDAMENTO
# =========================
@router.post("/agendar", status_code=status.HTTP_201_CREATED)
def create_booking(
    booking: BookingCreate,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    bookings.try_reserve(
        session,
        booking,
        enforce_closed_days=settings.booking_enforce_closed_days,
    )
    return {"message": "Agendamento realizado com sucesso!"}


# =========================
# HORÁRIOS DISPONÍVEIS (dia + serviço)
# GET /api/horarios?date=2024-06-11&service=Corte
# =========================
@router.get("/horarios")
def get_available_times(
    date: Optional[str] = None,
    service: Optional[str] = None,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> Dict:
    if not date or not service:
        raise ValidationError("Data e serviço são obrigatórios.")

    day = bookings.parse_date(date)
    service_name = bookings.parse_service(service)

    times = bookings.available_times(
        session,
        day,
        service_name,
        enforce_closed_days=settings.booking_enforce_closed_days,
    )

    return {
        "date": day.isoformat(),
        "service": service_name.value,
        "times": times,
    }
