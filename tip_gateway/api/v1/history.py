"""/api/history - list, fetch and delete saved calculations"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from tip_gateway.api.v1.schemas import CalculationItem, DeleteAllResponse, HistoryResponse, MessageResponse
from tip_gateway.api.dependencies import PageParams, get_page_params, get_request_id, get_store
from tip_gateway.infrastructure.database.repositories import CalculationStore
from tip_gateway.infrastructure.observability.metrics import record_history_deletion

router = APIRouter()


def parse_calculation_id(calculation_id: str) -> int:
    try:
        return int(calculation_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid calculation ID")


@router.get("/history", response_model=HistoryResponse)
def get_history(
    page: PageParams = Depends(get_page_params),
    store: CalculationStore = Depends(get_store),
):
    """
    Retrieve saved calculations, newest first.

    Returns:
        Calculations for the requested window plus pagination metadata
    """
    return HistoryResponse.from_page(store.list(limit=page.limit, offset=page.offset))


@router.get("/history/{calculation_id}", response_model=CalculationItem)
def get_calculation(calculation_id: str, store: CalculationStore = Depends(get_store)):
    return CalculationItem.from_record(store.get(parse_calculation_id(calculation_id)))


@router.delete("/history/{calculation_id}", response_model=MessageResponse)
def delete_calculation(
    calculation_id: str,
    request: Request,
    store: CalculationStore = Depends(get_store),
):
    parsed_id = parse_calculation_id(calculation_id)
    store.delete(parsed_id)

    record_history_deletion("single")
    logging.info("Calculation deleted", extra={"request_id": get_request_id(request), "calculation_id": parsed_id})
    return MessageResponse(message="Calculation deleted successfully")


@router.delete("/history", response_model=DeleteAllResponse)
def delete_all_calculations(request: Request, store: CalculationStore = Depends(get_store)):
    deleted = store.delete_all()

    record_history_deletion("all")
    logging.info("History cleared", extra={"request_id": get_request_id(request), "deleted": deleted})
    return DeleteAllResponse(message="All calculations deleted successfully", deleted=deleted)
