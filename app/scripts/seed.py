from datetime import date, timedelta

from sqlmodel import Session, select

from app.core.config import load_settings
from app.database import create_db_and_tables, create_db_engine
from app.models.booking import Booking, ServiceName
from app.models.user import User
from app.services import accounts, bookings


DEMO_NAME = "Cliente Teste"
DEMO_EMAIL = "cliente@teste.com"
DEMO_PASSWORD = "123456"


def next_open_day(start: date) -> date:
    day = start
    while bookings.is_closed_day(day):
        day += timedelta(days=1)
    return day


def main():
    settings = load_settings()
    engine = create_db_engine(settings)
    create_db_and_tables(engine)

    with Session(engine) as session:
        # 1) usuário de teste
        user = session.exec(select(User).where(User.email == DEMO_EMAIL)).first()
        if not user:
            user = accounts.register(session, DEMO_NAME, DEMO_EMAIL, DEMO_PASSWORD)

        # 2) alguns agendamentos no próximo dia útil (se não existirem)
        day = next_open_day(date.today() + timedelta(days=1))
        samples = [
            ("09:00", ServiceName.CORTE),
            ("10:30", ServiceName.BARBA),
            ("14:00", ServiceName.CORTE_BARBA),
        ]

        created = 0
        for slot, service in samples:
            exists = session.exec(
                select(Booking).where(
                    Booking.date == day,
                    Booking.time == slot,
                    Booking.service == service.value,
                )
            ).first()

            if not exists:
                session.add(
                    Booking(name=DEMO_NAME, phone="11999999999", service=service.value, date=day, time=slot)
                )
                created += 1

        session.commit()

        print("✅ Seed concluído!")
        print(f"Usuário: {user.id} ({user.email}) senha: {DEMO_PASSWORD}")
        print(f"Agendamentos criados em {day.isoformat()}: {created}")


if __name__ == "__main__":
    main()
