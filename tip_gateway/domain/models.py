"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List


@dataclass(frozen=True)
class TipBreakdown:
    """Output of the tip calculation, each value rounded to cents"""

    tip_amount: Decimal
    total_with_tip: Decimal
    amount_per_person: Decimal


@dataclass(frozen=True)
class CalculationRecord:
    """Persisted calculation: inputs, derived values and creation time"""

    id: int
    bill_amount: Decimal
    tip_percent: Decimal
    number_of_people: int
    tip_amount: Decimal
    total_with_tip: Decimal
    amount_per_person: Decimal
    created_at: datetime

    @property
    def breakdown(self) -> TipBreakdown:
        return TipBreakdown(
            tip_amount=self.tip_amount,
            total_with_tip=self.total_with_tip,
            amount_per_person=self.amount_per_person,
        )


@dataclass(frozen=True)
class HistoryPage:
    """One page of calculation history, newest first"""

    records: List[CalculationRecord]
    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + self.limit < self.total
