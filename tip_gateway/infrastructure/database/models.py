"""SQLAlchemy ORM models for calculation history"""

from datetime import datetime, timezone
from decimal import Decimal
from sqlalchemy import Column, Integer, DateTime, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.types import TypeDecorator

Base = declarative_base()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ExactDecimal(TypeDecorator):
    """Decimal stored as its canonical text so values read back unchanged"""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(Decimal(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value)


class Calculation(Base):
    """Tip calculation record"""

    __tablename__ = "calculations"
    # Never hand out the id of a deleted row again
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    bill_amount = Column(ExactDecimal, nullable=False)
    tip_percent = Column(ExactDecimal, nullable=False)
    number_of_people = Column(Integer, nullable=False)
    tip_amount = Column(ExactDecimal, nullable=False)
    total_with_tip = Column(ExactDecimal, nullable=False)
    amount_per_person = Column(ExactDecimal, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)
