"""Pydantic schemas for API request/response validation"""

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt
from pydantic.alias_generators import to_camel

from tip_gateway.domain.models import CalculationRecord, HistoryPage, TipBreakdown

# JSON numbers only: numeric strings and booleans are rejected
JsonNumber = Union[StrictInt, StrictFloat]


class CamelModel(BaseModel):
    """Serializes snake_case fields as camelCase"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CalculationRequest(CamelModel):
    """Request body for POST /api/calculations and /api/calculations/validate"""

    bill_amount: JsonNumber = Field(..., description="Bill amount before tip")
    tip_percent: JsonNumber = Field(..., description="Tip percentage, e.g. 15 for 15%")
    number_of_people: JsonNumber = Field(..., description="Party size, a whole number")


class CalculationResponse(CamelModel):
    """Response for POST /api/calculations"""

    tip_amount: float
    total_with_tip: float
    amount_per_person: float
    calculation_id: Optional[int] = None

    @classmethod
    def from_breakdown(cls, breakdown: TipBreakdown, calculation_id: Optional[int] = None) -> "CalculationResponse":
        return cls(
            tip_amount=float(breakdown.tip_amount),
            total_with_tip=float(breakdown.total_with_tip),
            amount_per_person=float(breakdown.amount_per_person),
            calculation_id=calculation_id,
        )


class ValidationResponse(CamelModel):
    """Response for POST /api/calculations/validate"""

    tip_amount: float
    total_with_tip: float
    amount_per_person: float


class CalculationItem(CamelModel):
    """Single calculation in history"""

    id: int
    bill_amount: float
    tip_percent: float
    number_of_people: int
    tip_amount: float
    total_with_tip: float
    amount_per_person: float
    created_at: str

    @classmethod
    def from_record(cls, record: CalculationRecord) -> "CalculationItem":
        return cls(
            id=record.id,
            bill_amount=float(record.bill_amount),
            tip_percent=float(record.tip_percent),
            number_of_people=record.number_of_people,
            tip_amount=float(record.tip_amount),
            total_with_tip=float(record.total_with_tip),
            amount_per_person=float(record.amount_per_person),
            created_at=record.created_at.isoformat(),
        )


class Pagination(CamelModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class HistoryResponse(CamelModel):
    """Response for GET /api/history"""

    calculations: List[CalculationItem]
    pagination: Pagination

    @classmethod
    def from_page(cls, page: HistoryPage) -> "HistoryResponse":
        return cls(
            calculations=[CalculationItem.from_record(r) for r in page.records],
            pagination=Pagination(
                total=page.total,
                limit=page.limit,
                offset=page.offset,
                has_more=page.has_more,
            ),
        )


class MessageResponse(BaseModel):
    message: str


class DeleteAllResponse(BaseModel):
    message: str
    deleted: int


class HealthResponse(BaseModel):
    status: str
    message: str
    timestamp: str
