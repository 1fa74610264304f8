"""Dependency injection for FastAPI endpoints"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Query, Request

from tip_gateway.config import Settings
from tip_gateway.infrastructure.database.repositories import CalculationStore


@dataclass(frozen=True)
class PageParams:
    limit: int
    offset: int


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> CalculationStore:
    """Provide the calculation store the app was started with"""
    return request.app.state.store


def _parse_int(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None


def parse_pagination(
    limit: Optional[str],
    offset: Optional[str],
    default_limit: int = 50,
    max_limit: int = 100,
) -> PageParams:
    """
    Turn raw query values into a usable page window.

    Missing or non-numeric values fall back to the defaults (limit
    default_limit, offset 0). A limit below 1 also falls back, a limit
    above max_limit is clamped, and a negative offset becomes 0.
    """
    parsed_limit = _parse_int(limit)
    parsed_offset = _parse_int(offset)

    if parsed_limit is None or parsed_limit < 1:
        parsed_limit = default_limit
    parsed_limit = min(parsed_limit, max_limit)

    if parsed_offset is None or parsed_offset < 0:
        parsed_offset = 0

    return PageParams(limit=parsed_limit, offset=parsed_offset)


def get_page_params(
    limit: Optional[str] = Query(None, description="Page size"),
    offset: Optional[str] = Query(None, description="Records to skip"),
    settings: Settings = Depends(get_settings),
) -> PageParams:
    return parse_pagination(
        limit,
        offset,
        default_limit=settings.history_default_limit,
        max_limit=settings.history_max_limit,
    )
