import pytest
from aiohttp.test_utils import TestClient, TestServer

from splitsettle.web import create_app

PARTICIPANTS = [
    {"id": "a", "name": "A"},
    {"id": "b", "name": "B"},
    {"id": "c", "name": "C"},
]


def dinner(**overrides):
    expense = {
        "id": "e1",
        "description": "Dinner",
        "amount": 90,
        "paidBy": "a",
        "splitAmong": ["a", "b", "c"],
    }
    expense.update(overrides)
    return expense


@pytest.mark.asyncio
async def test_health():
    async with TestClient(TestServer(create_app())) as client:
        resp = await client.get("/health")
        assert resp.status == 200
        assert await resp.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_post_settlements():
    async with TestClient(TestServer(create_app())) as client:
        resp = await client.post("/settlements", json={"participants": PARTICIPANTS, "expenses": [dinner()]})
        assert resp.status == 200
        body = await resp.json()

    assert body["balances"] == {"a": 60.0, "b": -30.0, "c": -30.0}
    assert body["settlements"] == [
        {"from": "B", "to": "A", "amount": 30.0},
        {"from": "C", "to": "A", "amount": 30.0},
    ]


@pytest.mark.asyncio
async def test_snake_case_fields_accepted():
    expense = {"id": "e1", "description": "Taxi", "amount": "10", "paid_by": "a", "split_among": ["a", "b"]}
    async with TestClient(TestServer(create_app())) as client:
        resp = await client.post("/settlements", json={"participants": PARTICIPANTS[:2], "expenses": [expense]})
        assert resp.status == 200
        body = await resp.json()

    assert body["settlements"] == [{"from": "B", "to": "A", "amount": 5.0}]


@pytest.mark.asyncio
async def test_non_positive_amount_rejected():
    async with TestClient(TestServer(create_app())) as client:
        resp = await client.post(
            "/settlements",
            json={"participants": PARTICIPANTS, "expenses": [dinner(amount=0)]},
        )
        assert resp.status == 422
        body = await resp.json()

    assert body["error"] == "validation"
    assert [f["field"] for f in body["fields"]] == ["expenses.0.amount"]


@pytest.mark.asyncio
async def test_empty_split_rejected():
    async with TestClient(TestServer(create_app())) as client:
        resp = await client.post(
            "/settlements",
            json={"participants": PARTICIPANTS, "expenses": [dinner(splitAmong=[])]},
        )
        assert resp.status == 422
        body = await resp.json()

    assert body["fields"][0]["field"].startswith("expenses.0.")


@pytest.mark.asyncio
async def test_unknown_participant_rejected():
    async with TestClient(TestServer(create_app())) as client:
        resp = await client.post(
            "/settlements",
            json={"participants": PARTICIPANTS, "expenses": [dinner(splitAmong=["a", "zed"])]},
        )
        assert resp.status == 422
        body = await resp.json()

    assert body == {
        "error": "unknown_participant",
        "field": "expenses.0.splitAmong",
        "participant_id": "zed",
        "expense_id": "e1",
    }


@pytest.mark.asyncio
async def test_duplicate_participants_rejected():
    participants = PARTICIPANTS + [{"id": "a", "name": "Again"}]
    async with TestClient(TestServer(create_app())) as client:
        resp = await client.post("/settlements", json={"participants": participants, "expenses": [dinner()]})
        assert resp.status == 422
        body = await resp.json()

    assert body["fields"] == [{"field": "participants", "reason": "duplicate id 'a'"}]


@pytest.mark.asyncio
async def test_invalid_json():
    async with TestClient(TestServer(create_app())) as client:
        resp = await client.post("/settlements", data="not json", headers={"Content-Type": "application/json"})
        assert resp.status == 400


@pytest.mark.asyncio
async def test_oversized_amount_rejected():
    async with TestClient(TestServer(create_app())) as client:
        resp = await client.post(
            "/settlements",
            json={"participants": PARTICIPANTS, "expenses": [dinner(amount="1e30")]},
        )
        assert resp.status == 422
        body = await resp.json()

    assert body["error"] == "validation"
    assert [f["field"] for f in body["fields"]] == ["expenses.0.amount"]
