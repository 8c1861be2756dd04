import logging
from datetime import date, datetime, time, timedelta
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.core.errors import SlotConflictError, ValidationError
from app.models.booking import Booking, BookingCreate, ServiceName


logger = logging.getLogger(__name__)


# grade de meia em meia hora, 09:00 até 20:00
OPENING_TIME = time(9, 0)
CLOSING_TIME = time(20, 0)
SLOT_STEP = timedelta(minutes=30)

# intervalo de almoço
LUNCH_BREAK = {"12:00", "12:30"}

# 0=segunda ... 6=domingo
CLOSED_WEEKDAYS = {6, 0}


def slot_grid() -> List[str]:
    slots: List[str] = []
    current = datetime.combine(date.min, OPENING_TIME)
    last = datetime.combine(date.min, CLOSING_TIME)

    while current <= last:
        label = current.strftime("%H:%M")
        if label not in LUNCH_BREAK:
            slots.append(label)
        current += SLOT_STEP

    return slots


SLOTS = frozenset(slot_grid())


def is_closed_day(day: date) -> bool:
    return day.weekday() in CLOSED_WEEKDAYS


def parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("Data inválida. Use o formato AAAA-MM-DD.")


def parse_service(value: str) -> ServiceName:
    try:
        return ServiceName(value)
    except ValueError:
        raise ValidationError("Serviço inválido.")


def validate_booking(payload: BookingCreate, enforce_closed_days: bool = False) -> Booking:
    """Valida os campos e monta o registro (sem tocar no banco)."""
    if not (payload.name and payload.phone and payload.service and payload.date and payload.time):
        raise ValidationError("Todos os campos são obrigatórios.")

    service = parse_service(payload.service)
    day = parse_date(payload.date)

    if payload.time not in SLOTS:
        raise ValidationError("Horário fora da grade de atendimento.")

    if enforce_closed_days and is_closed_day(day):
        raise ValidationError("Não há atendimento aos domingos e segundas.")

    return Booking(
        name=payload.name,
        phone=payload.phone,
        service=service.value,
        date=day,
        time=payload.time,
    )


def try_reserve(
    session: Session,
    payload: BookingCreate,
    enforce_closed_days: bool = False,
) -> Booking:
    """Reserva o horário ou falha com SlotConflictError.

    Não há leitura prévia: a constraint única (date, time, service) decide,
    então duas requisições simultâneas não conseguem o mesmo horário.
    """
    booking = validate_booking(payload, enforce_closed_days)

    session.add(booking)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        logger.warning(
            "Horário já reservado",
            extra={"date": payload.date, "time": payload.time, "service": payload.service},
        )
        raise SlotConflictError()

    session.refresh(booking)
    logger.info(
        "Agendamento criado",
        extra={"bookingId": booking.id, "date": booking.date.isoformat(), "time": booking.time},
    )
    return booking


def available_times(
    session: Session,
    day: date,
    service: ServiceName,
    enforce_closed_days: bool = False,
) -> List[str]:
    if enforce_closed_days and is_closed_day(day):
        return []

    booked = set(
        session.exec(
            select(Booking.time).where(
                Booking.date == day,
                Booking.service == service.value,
            )
        ).all()
    )

    return [slot for slot in slot_grid() if slot not in booked]
