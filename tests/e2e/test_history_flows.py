"""
End-to-end flows through the HTTP API.

Scenarios:
- dinner_party: several tables split bills, then browse history page by page
- cleanup: user removes one mistaken entry, then clears everything
- preview_then_save: user previews a split before committing it
"""

import pytest
from fastapi.testclient import TestClient


def calculate(client: TestClient, bill, tip, people) -> dict:
    response = client.post(
        "/api/calculations",
        json={"billAmount": bill, "tipPercent": tip, "numberOfPeople": people},
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.integration
def test_dinner_party_paging(client: TestClient):
    """
    dinner_party: 12 saved calculations, browsed 5 at a time
    Expected: every record seen once, newest first, hasMore flips on the last page
    """
    ids = [calculate(client, 20 + i, 18, 1 + i % 4)["calculationId"] for i in range(12)]

    seen = []
    offset = 0
    while True:
        data = client.get(f"/api/history?limit=5&offset={offset}").json()
        seen.extend(c["id"] for c in data["calculations"])
        assert data["pagination"]["total"] == 12
        if not data["pagination"]["hasMore"]:
            break
        offset += 5

    assert seen == list(reversed(ids))
    assert offset == 10


@pytest.mark.integration
def test_cleanup(client: TestClient):
    """
    cleanup: delete one mistaken calculation, then clear history
    Expected: total drops by exactly one, then to zero
    """
    good = calculate(client, 64.5, 20, 3)
    mistake = calculate(client, 6450, 20, 3)

    assert client.delete(f"/api/history/{mistake['calculationId']}").status_code == 200
    history = client.get("/api/history").json()
    assert history["pagination"]["total"] == 1
    assert history["calculations"][0]["id"] == good["calculationId"]
    assert history["calculations"][0]["amountPerPerson"] == 25.8

    # Already gone
    assert client.get(f"/api/history/{mistake['calculationId']}").status_code == 404
    assert client.delete(f"/api/history/{mistake['calculationId']}").status_code == 404

    assert client.delete("/api/history").status_code == 200
    assert client.get("/api/history").json() == {
        "calculations": [],
        "pagination": {"total": 0, "limit": 50, "offset": 0, "hasMore": False},
    }


@pytest.mark.integration
def test_preview_then_save(client: TestClient):
    """
    preview_then_save: validate first, then save the same inputs
    Expected: identical numbers, only the saved one appears in history
    """
    body = {"billAmount": 87.65, "tipPercent": 15, "numberOfPeople": 4}

    preview = client.post("/api/calculations/validate", json=body).json()
    saved = calculate(client, 87.65, 15, 4)

    assert preview == {k: saved[k] for k in ("tipAmount", "totalWithTip", "amountPerPerson")}

    record = client.get(f"/api/history/{saved['calculationId']}").json()
    assert record["billAmount"] == 87.65
    assert record["tipAmount"] == saved["tipAmount"]
    assert client.get("/api/history").json()["pagination"]["total"] == 1
