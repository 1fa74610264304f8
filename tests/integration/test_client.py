"""Integration tests for the tip calculator API client"""

import httpx
import pytest
from decimal import Decimal
from fastapi import FastAPI
from tip_gateway.domain.exceptions import CalculationNotFoundError, InvalidInputError, TipAPIError
from tip_gateway.infrastructure.clients.tip_api import TipCalculatorClient


@pytest.fixture
def api_client(app: FastAPI) -> TipCalculatorClient:
    """Client wired to the in-process app"""
    return TipCalculatorClient(base_url="http://testserver", transport=httpx.ASGITransport(app=app))


def offline_client(handler) -> TipCalculatorClient:
    return TipCalculatorClient(base_url="http://tips.invalid", transport=httpx.MockTransport(handler))


async def test_calculate_saves_and_returns_id(api_client: TipCalculatorClient):
    result = await api_client.calculate(100, 10, 2)

    assert result.connected is True
    assert result.calculation_id is not None
    assert result.breakdown.amount_per_person == Decimal("55.0")

    record = await api_client.get_calculation(result.calculation_id)
    assert record.id == result.calculation_id
    assert record.total_with_tip == Decimal("110.0")
    assert record.created_at.tzinfo is not None


async def test_validate_does_not_save(api_client: TipCalculatorClient):
    breakdown = await api_client.validate(33.33, 15, 3)

    assert breakdown.tip_amount == Decimal("5.0")
    assert breakdown.amount_per_person == Decimal("12.78")
    assert (await api_client.get_history()).total == 0


async def test_invalid_input_raises(api_client: TipCalculatorClient):
    with pytest.raises(InvalidInputError, match="Number of people must be at least 1"):
        await api_client.calculate(100, 10, 0)


async def test_history_and_deletes(api_client: TipCalculatorClient):
    ids = [(await api_client.calculate(10 + i, 15, 2)).calculation_id for i in range(3)]

    page = await api_client.get_history(limit=2, offset=0)
    assert [r.id for r in page.records] == [ids[2], ids[1]]
    assert page.total == 3
    assert page.has_more is True

    await api_client.delete_calculation(ids[0])
    with pytest.raises(CalculationNotFoundError):
        await api_client.get_calculation(ids[0])
    with pytest.raises(CalculationNotFoundError):
        await api_client.delete_calculation(ids[0])

    assert await api_client.delete_all_calculations() == 2
    assert (await api_client.get_history()).total == 0


async def test_check_health(api_client: TipCalculatorClient):
    assert await api_client.check_health() is True


async def test_check_health_when_unreachable():
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    assert await offline_client(refuse).check_health() is False


async def test_calculate_unreachable_raises():
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TipAPIError):
        await offline_client(refuse).calculate(100, 10, 2)


async def test_fallback_computes_locally_when_unreachable():
    """Test the local calculator answers when the API cannot be reached"""

    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    result = await offline_client(refuse).calculate_with_fallback(33.33, 15, 3)

    assert result.connected is False
    assert result.calculation_id is None
    assert result.breakdown.tip_amount == Decimal("5.00")
    assert result.breakdown.total_with_tip == Decimal("38.33")
    assert result.breakdown.amount_per_person == Decimal("12.78")


async def test_fallback_on_server_error():
    def fail(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "Internal server error"})

    result = await offline_client(fail).calculate_with_fallback(100, 10, 2)

    assert result.connected is False
    assert result.breakdown.amount_per_person == Decimal("55.00")


async def test_fallback_on_timeout():
    def slow(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    result = await offline_client(slow).calculate_with_fallback(50, 20, 3)

    assert result.connected is False
    assert result.breakdown.total_with_tip == Decimal("60.00")
    assert result.breakdown.amount_per_person == Decimal("20.00")


async def test_fallback_uses_api_when_available(api_client: TipCalculatorClient):
    result = await api_client.calculate_with_fallback(100, 10, 2)

    assert result.connected is True
    assert result.calculation_id is not None


async def test_fallback_does_not_mask_invalid_input(api_client: TipCalculatorClient):
    with pytest.raises(InvalidInputError):
        await api_client.calculate_with_fallback(0, 10, 2)


async def test_malformed_response_raises():
    def garbage(request: httpx.Request) -> httpx.Response:
        return httpx.Response(201, json={"unexpected": True})

    with pytest.raises(TipAPIError):
        await offline_client(garbage).calculate(100, 10, 2)
