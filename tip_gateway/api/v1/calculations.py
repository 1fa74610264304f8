"""POST /api/calculations - tip calculation endpoints"""

import time
import logging
from fastapi import APIRouter, Depends, Request

from tip_gateway.api.v1.schemas import CalculationRequest, CalculationResponse, ValidationResponse
from tip_gateway.api.dependencies import get_request_id, get_store
from tip_gateway.infrastructure.database.repositories import CalculationStore
from tip_gateway.domain.calculator import compute, validate_inputs
from tip_gateway.domain.exceptions import InvalidInputError, StorageUnavailableError
from tip_gateway.infrastructure.observability.metrics import record_calculation, record_calculation_failure
from tip_gateway.infrastructure.observability.logging import log_calculation

router = APIRouter()


@router.post("/calculations", response_model=CalculationResponse, response_model_exclude_none=True, status_code=201)
def create_calculation(
    request_body: CalculationRequest,
    request: Request,
    store: CalculationStore = Depends(get_store),
):
    """
    Calculate tip and per-person share, then save to history.

    Flow:
    1. Validate inputs and compute the breakdown
    2. Persist inputs + breakdown as a calculation record
    3. Return breakdown with the new calculation id
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        # 1. Compute
        bill, tip, people = validate_inputs(
            request_body.bill_amount,
            request_body.tip_percent,
            request_body.number_of_people,
        )
        breakdown = compute(bill, tip, people)

        # 2. Persist
        record = store.save(bill, tip, people, breakdown)

    except InvalidInputError:
        record_calculation_failure("invalid_input")
        raise

    except StorageUnavailableError as e:
        record_calculation_failure("storage")
        logging.error(f"Failed to save calculation: {e}", extra={"request_id": request_id})
        raise

    duration_ms = (time.time() - start_time) * 1000
    record_calculation(persisted=True)
    log_calculation(request_id, record.id, people, duration_ms)

    return CalculationResponse.from_breakdown(breakdown, calculation_id=record.id)


@router.post("/calculations/validate", response_model=ValidationResponse)
def validate_calculation(request_body: CalculationRequest, request: Request):
    """Run the calculation without saving it"""
    start_time = time.time()

    try:
        breakdown = compute(
            request_body.bill_amount,
            request_body.tip_percent,
            request_body.number_of_people,
        )
    except InvalidInputError:
        record_calculation_failure("invalid_input")
        raise

    record_calculation(persisted=False)
    log_calculation(
        get_request_id(request),
        None,
        int(request_body.number_of_people),
        (time.time() - start_time) * 1000,
    )

    return ValidationResponse(
        tip_amount=float(breakdown.tip_amount),
        total_with_tip=float(breakdown.total_with_tip),
        amount_per_person=float(breakdown.amount_per_person),
    )
