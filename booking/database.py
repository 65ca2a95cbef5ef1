import os
from dotenv import load_dotenv
from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from booking.core import config


load_dotenv()
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./booking.db")

engine = create_engine(DATABASE_URL, echo=config.SQL_ECHO)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_timeslot_schema_checked = False
_inquiry_schema_checked = False


def _ensure_index(table_name: str, statement: str) -> None:
    if table_name not in inspect(engine).get_table_names():
        return

    with engine.begin() as connection:
        connection.execute(text(statement))


def ensure_timeslot_schema() -> None:
    global _timeslot_schema_checked

    if _timeslot_schema_checked:
        return

    with _schema_lock:
        if _timeslot_schema_checked:
            return

        _ensure_index(
            'timeslots',
            'CREATE INDEX IF NOT EXISTS idx_timeslots_date_available ON timeslots(date, is_available)',
        )
        _timeslot_schema_checked = True


def ensure_inquiry_schema() -> None:
    global _inquiry_schema_checked

    if _inquiry_schema_checked:
        return

    with _schema_lock:
        if _inquiry_schema_checked:
            return

        _ensure_index(
            'inquiries',
            'CREATE INDEX IF NOT EXISTS idx_inquiries_date_status ON inquiries(preferred_date, status)',
        )
        _inquiry_schema_checked = True
