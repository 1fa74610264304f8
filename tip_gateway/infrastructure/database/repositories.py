"""Data access layer for calculation history"""

import threading
from contextlib import contextmanager
from datetime import timezone
from decimal import Decimal
from typing import Iterator, List, Optional

from sqlalchemy import func
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from tip_gateway.domain.exceptions import (
    CalculationNotFoundError,
    InvalidInputError,
    StorageUnavailableError,
)
from tip_gateway.domain.models import CalculationRecord, HistoryPage, TipBreakdown
from tip_gateway.infrastructure.database.models import Base, Calculation, utc_now
from tip_gateway.infrastructure.database.session import build_engine, build_session_factory, sqlite_file_path


def to_record(row: Calculation) -> CalculationRecord:
    """Map ORM row to domain record"""
    created_at = row.created_at
    # SQLite hands back naive datetimes; they were written as UTC
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)

    return CalculationRecord(
        id=row.id,
        bill_amount=row.bill_amount,
        tip_percent=row.tip_percent,
        number_of_people=row.number_of_people,
        tip_amount=row.tip_amount,
        total_with_tip=row.total_with_tip,
        amount_per_person=row.amount_per_person,
        created_at=created_at,
    )


class CalculationRepository:
    """Repository for calculation records"""

    def __init__(self, db: Session):
        self.db = db

    def create_calculation(
        self,
        bill_amount: Decimal,
        tip_percent: Decimal,
        number_of_people: int,
        breakdown: TipBreakdown,
    ) -> Calculation:
        """Persist calculation to database"""
        db_calculation = Calculation(
            bill_amount=bill_amount,
            tip_percent=tip_percent,
            number_of_people=number_of_people,
            tip_amount=breakdown.tip_amount,
            total_with_tip=breakdown.total_with_tip,
            amount_per_person=breakdown.amount_per_person,
            created_at=utc_now(),
        )
        self.db.add(db_calculation)
        self.db.flush()  # Get ID without committing
        return db_calculation

    def get_calculations(self, limit: int, offset: int) -> List[Calculation]:
        """Fetch a page of calculations, newest first"""
        return (
            self.db.query(Calculation)
            .order_by(Calculation.created_at.desc(), Calculation.id.desc())
            .limit(limit)
            .offset(offset)
            .all()
        )

    def count_calculations(self) -> int:
        return self.db.query(func.count(Calculation.id)).scalar()

    def get_calculation_by_id(self, calculation_id: int) -> Optional[Calculation]:
        return (
            self.db.query(Calculation)
            .filter(Calculation.id == calculation_id)
            .first()
        )

    def delete_calculation(self, calculation_id: int) -> int:
        """Delete one calculation, returns number of rows removed"""
        return (
            self.db.query(Calculation)
            .filter(Calculation.id == calculation_id)
            .delete(synchronize_session=False)
        )

    def delete_all_calculations(self) -> int:
        return self.db.query(Calculation).delete(synchronize_session=False)


class CalculationStore:
    """
    Durable calculation history shared by every request in the process.

    Owns a single engine. Each operation runs in its own session and
    transaction. Writes are serialized by a lock so save, delete and
    delete-all never interleave; reads only see committed rows.
    """

    def __init__(self, engine: Engine, max_page_size: int = 100):
        self.engine = engine
        self.session_factory: sessionmaker = build_session_factory(engine)
        self.max_page_size = max_page_size
        self._write_lock = threading.Lock()

    @classmethod
    def from_url(cls, database_url: str, max_page_size: int = 100) -> "CalculationStore":
        return cls(build_engine(database_url), max_page_size=max_page_size)

    def create_schema(self) -> None:
        """Create tables and indexes if missing"""
        path = sqlite_file_path(self.engine.url)
        if path is not None:
            path.parent.mkdir(parents=True, exist_ok=True)
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as e:
            raise StorageUnavailableError(f"Could not create schema: {e}") from e

    def dispose(self) -> None:
        self.engine.dispose()

    @contextmanager
    def _session(self, write: bool = False) -> Iterator[CalculationRepository]:
        db = self.session_factory()
        try:
            if write:
                with self._write_lock:
                    yield CalculationRepository(db)
                    db.commit()
            else:
                yield CalculationRepository(db)
        except SQLAlchemyError as e:
            db.rollback()
            raise StorageUnavailableError(f"Storage error: {e}") from e
        except OverflowError as e:
            # Driver refuses integers wider than its column type
            db.rollback()
            raise InvalidInputError("Values are too large to store") from e
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def save(
        self,
        bill_amount: Decimal,
        tip_percent: Decimal,
        number_of_people: int,
        breakdown: TipBreakdown,
    ) -> CalculationRecord:
        """
        Persist a calculation and return it with its assigned id and timestamp.

        Raises:
            InvalidInputError: A value does not fit the database column
            StorageUnavailableError: The database rejected or failed the write
        """
        with self._session(write=True) as repo:
            row = repo.create_calculation(bill_amount, tip_percent, number_of_people, breakdown)
            record = to_record(row)
        return record

    def list(self, limit: int, offset: int = 0) -> HistoryPage:
        """
        Fetch one page of history ordered by creation time, newest first.

        Ties on created_at are broken by id descending so repeated calls
        page deterministically.

        Raises:
            InvalidInputError: limit outside 1..max_page_size or negative offset
        """
        if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= self.max_page_size:
            raise InvalidInputError(f"limit must be an integer between 1 and {self.max_page_size}")
        if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
            raise InvalidInputError("offset must be a non-negative integer")

        with self._session() as repo:
            rows = repo.get_calculations(limit, offset)
            total = repo.count_calculations()
            records = [to_record(row) for row in rows]

        return HistoryPage(records=records, total=total, limit=limit, offset=offset)

    def get(self, calculation_id: int) -> CalculationRecord:
        with self._session() as repo:
            row = repo.get_calculation_by_id(calculation_id)
            if row is None:
                raise CalculationNotFoundError(calculation_id)
            return to_record(row)

    def delete(self, calculation_id: int) -> None:
        with self._session(write=True) as repo:
            if repo.delete_calculation(calculation_id) == 0:
                raise CalculationNotFoundError(calculation_id)

    def delete_all(self) -> int:
        """Remove every calculation; safe to call on an empty store"""
        with self._session(write=True) as repo:
            return repo.delete_all_calculations()
