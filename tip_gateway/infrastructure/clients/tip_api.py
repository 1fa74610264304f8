"""Tip calculator API HTTP client"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx

from tip_gateway.config import settings
from tip_gateway.domain.calculator import compute
from tip_gateway.domain.exceptions import CalculationNotFoundError, InvalidInputError, TipAPIError
from tip_gateway.domain.models import CalculationRecord, HistoryPage, TipBreakdown


@dataclass(frozen=True)
class CalculationResult:
    """Breakdown returned by the API, or computed locally when it is unreachable"""

    breakdown: TipBreakdown
    calculation_id: Optional[int]
    connected: bool


def _money(value: Any) -> Decimal:
    return Decimal(str(value))


def _parse_breakdown(data: Dict[str, Any]) -> TipBreakdown:
    return TipBreakdown(
        tip_amount=_money(data["tipAmount"]),
        total_with_tip=_money(data["totalWithTip"]),
        amount_per_person=_money(data["amountPerPerson"]),
    )


def _parse_record(data: Dict[str, Any]) -> CalculationRecord:
    return CalculationRecord(
        id=data["id"],
        bill_amount=_money(data["billAmount"]),
        tip_percent=_money(data["tipPercent"]),
        number_of_people=data["numberOfPeople"],
        tip_amount=_money(data["tipAmount"]),
        total_with_tip=_money(data["totalWithTip"]),
        amount_per_person=_money(data["amountPerPerson"]),
        created_at=datetime.fromisoformat(data["createdAt"]),
    )


class TipCalculatorClient:
    """Client for the tip calculator API"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport)

    async def _request(
        self, method: str, path: str, calculation_id: Optional[int] = None, **kwargs
    ) -> httpx.Response:
        """
        Send one request; no retries.

        Raises:
            InvalidInputError: API answered 400
            CalculationNotFoundError: API answered 404 for calculation_id
            TipAPIError: On timeout, connection failure or other HTTP errors
        """
        async with self._client() as client:
            try:
                response = await client.request(method, path, **kwargs)
            except httpx.TimeoutException as e:
                raise TipAPIError(f"Tip API timeout after {self.timeout}s") from e
            except httpx.RequestError as e:
                raise TipAPIError(f"Tip API unreachable: {e}") from e

        if response.status_code == 400:
            raise InvalidInputError(self._error_message(response))
        if response.status_code == 404 and calculation_id is not None:
            raise CalculationNotFoundError(calculation_id)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TipAPIError(f"Tip API error: {e.response.status_code}") from e
        return response

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text
        return body.get("message") or body.get("error") or response.text

    @staticmethod
    def _payload(bill_amount: float, tip_percent: float, number_of_people: int) -> Dict[str, Any]:
        return {
            "billAmount": bill_amount,
            "tipPercent": tip_percent,
            "numberOfPeople": number_of_people,
        }

    async def calculate(self, bill_amount: float, tip_percent: float, number_of_people: int) -> CalculationResult:
        """Calculate tip and save to history"""
        response = await self._request(
            "POST", "/api/calculations", json=self._payload(bill_amount, tip_percent, number_of_people)
        )
        try:
            data = response.json()
            return CalculationResult(
                breakdown=_parse_breakdown(data),
                calculation_id=data["calculationId"],
                connected=True,
            )
        except (KeyError, ValueError, TypeError) as e:
            raise TipAPIError(f"Invalid calculation response: {e}") from e

    async def calculate_with_fallback(
        self, bill_amount: float, tip_percent: float, number_of_people: int
    ) -> CalculationResult:
        """
        Calculate through the API, falling back to the local calculator.

        Any failure other than invalid input is logged and answered with a
        locally computed breakdown marked as disconnected. Invalid input is
        re-checked locally and raised as InvalidInputError either way.
        """
        try:
            return await self.calculate(bill_amount, tip_percent, number_of_people)
        except TipAPIError as e:
            logging.warning(f"Tip API unavailable, calculating locally: {e}")

        return CalculationResult(
            breakdown=compute(bill_amount, tip_percent, number_of_people),
            calculation_id=None,
            connected=False,
        )

    async def validate(self, bill_amount: float, tip_percent: float, number_of_people: int) -> TipBreakdown:
        """Calculate without saving"""
        response = await self._request(
            "POST", "/api/calculations/validate", json=self._payload(bill_amount, tip_percent, number_of_people)
        )
        try:
            return _parse_breakdown(response.json())
        except (KeyError, ValueError, TypeError) as e:
            raise TipAPIError(f"Invalid validation response: {e}") from e

    async def get_history(self, limit: int = 50, offset: int = 0) -> HistoryPage:
        response = await self._request("GET", "/api/history", params={"limit": limit, "offset": offset})
        try:
            data = response.json()
            pagination = data["pagination"]
            return HistoryPage(
                records=[_parse_record(item) for item in data["calculations"]],
                total=pagination["total"],
                limit=pagination["limit"],
                offset=pagination["offset"],
            )
        except (KeyError, ValueError, TypeError) as e:
            raise TipAPIError(f"Invalid history response: {e}") from e

    async def get_calculation(self, calculation_id: int) -> CalculationRecord:
        """
        Raises:
            CalculationNotFoundError: No calculation with that id
        """
        response = await self._request("GET", f"/api/history/{calculation_id}", calculation_id=calculation_id)
        try:
            return _parse_record(response.json())
        except (KeyError, ValueError, TypeError) as e:
            raise TipAPIError(f"Invalid calculation response: {e}") from e

    async def delete_calculation(self, calculation_id: int) -> None:
        await self._request("DELETE", f"/api/history/{calculation_id}", calculation_id=calculation_id)

    async def delete_all_calculations(self) -> int:
        response = await self._request("DELETE", "/api/history")
        return response.json().get("deleted", 0)

    async def check_health(self) -> bool:
        """Check if the API is reachable and healthy"""
        try:
            await self._request("GET", "/health")
        except TipAPIError:
            return False
        return True
