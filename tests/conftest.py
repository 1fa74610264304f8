"""Pytest fixtures for testing"""

import pytest
from decimal import Decimal
from pathlib import Path
from typing import Generator
from fastapi import FastAPI
from fastapi.testclient import TestClient
from tip_gateway.api.main import create_app
from tip_gateway.config import Settings
from tip_gateway.domain.calculator import compute
from tip_gateway.domain.models import CalculationRecord
from tip_gateway.infrastructure.database.repositories import CalculationStore


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a throwaway SQLite file"""
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        environment="production",
        history_max_limit=100,
    )


@pytest.fixture
def store(settings: Settings) -> Generator[CalculationStore, None, None]:
    """Create test database and store"""
    store = CalculationStore.from_url(settings.database_url, max_page_size=settings.history_max_limit)
    store.create_schema()
    try:
        yield store
    finally:
        store.dispose()


@pytest.fixture
def app(settings: Settings, store: CalculationStore) -> FastAPI:
    return create_app(settings=settings, store=store)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create FastAPI test client with test database"""
    return TestClient(app)


@pytest.fixture
def save_calculation(store: CalculationStore):
    """Compute and persist a calculation, the way POST /api/calculations does"""

    def _save(bill: str = "100", tip: str = "15", people: int = 2) -> CalculationRecord:
        breakdown = compute(Decimal(bill), Decimal(tip), people)
        return store.save(Decimal(bill), Decimal(tip), people, breakdown)

    return _save
