import uuid

import pytest

from core.config import settings


async def _create(client, **body):
    payload = {"email": "sender@example.com", "parcelType": "document", "weight": 1.5}
    payload.update(body)
    resp = await client.post("/parcels", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["insertedId"]


@pytest.mark.asyncio
async def test_create_parcel_assigns_initial_state(client):
    resp = await client.post(
        "/parcels",
        json={
            "email": "sender@example.com",
            "weight": 1.5,
            "status": "delivered",
            "payment_status": "paid",
            "transactionId": "tx_forged",
        },
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["code"] == 0
    assert body["data"]["acknowledged"] is True
    parcel_id = body["data"]["insertedId"]

    fetched = (await client.get(f"/parcels/{parcel_id}")).json()["data"]
    assert fetched["_id"] == parcel_id
    assert fetched["status"] == "pending"
    assert fetched["payment_status"] == "unpaid"
    assert fetched["transactionId"] is None
    assert fetched["weight"] == 1.5
    assert fetched["createdAt"]


@pytest.mark.asyncio
async def test_create_parcel_requires_valid_email(client):
    resp = await client.post("/parcels", json={"email": "not-an-email"})
    assert resp.status_code == 400
    assert resp.json()["error"]["type"] == "ValidationError"


@pytest.mark.asyncio
async def test_list_parcels_filters_by_email(client):
    await _create(client, email="a@example.com", label="first")
    await _create(client, email="b@example.com")
    await _create(client, email="a@example.com", label="second")

    everything = (await client.get("/parcels")).json()["data"]
    mine = (await client.get("/parcels", params={"email": "a@example.com"})).json()["data"]

    assert len(everything) == 3
    assert [p["label"] for p in mine] == ["second", "first"]


@pytest.mark.asyncio
async def test_get_parcel_not_found_vs_malformed_id(client):
    missing = await client.get(f"/parcels/{uuid.uuid4()}")
    assert missing.status_code == 404
    assert missing.json()["error"]["type"] == "ParcelNotFound"

    malformed = await client.get("/parcels/not-a-valid-id")
    assert malformed.status_code == 400
    assert malformed.json()["error"]["type"] == "InvalidIdentifier"


@pytest.mark.asyncio
async def test_patch_merges_fields(client):
    parcel_id = await _create(client)

    resp = await client.patch(f"/parcels/{parcel_id}", json={"weight": 3, "receiverName": "Rahim"})
    assert resp.status_code == 200
    assert resp.json()["data"] == {"matchedCount": 1, "modifiedCount": 1, "acknowledged": True}

    same = await client.patch(f"/parcels/{parcel_id}", json={"weight": 3})
    assert same.json()["data"]["modifiedCount"] == 0

    fetched = (await client.get(f"/parcels/{parcel_id}")).json()["data"]
    assert fetched["weight"] == 3
    assert fetched["receiverName"] == "Rahim"
    assert fetched["parcelType"] == "document"


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["payment_status", "status", "transactionId"])
async def test_patch_cannot_touch_payment_fields(client, field):
    parcel_id = await _create(client)
    resp = await client.patch(f"/parcels/{parcel_id}", json={field: "paid"})
    assert resp.status_code == 400
    fetched = (await client.get(f"/parcels/{parcel_id}")).json()["data"]
    assert fetched["payment_status"] == "unpaid"


@pytest.mark.asyncio
async def test_patch_unknown_parcel(client):
    resp = await client.patch(f"/parcels/{uuid.uuid4()}", json={"weight": 1})
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_delete_is_idempotent(client):
    parcel_id = await _create(client)

    first = await client.delete(f"/parcels/{parcel_id}")
    second = await client.delete(f"/parcels/{parcel_id}")

    assert first.json()["data"] == {"deletedCount": 1, "acknowledged": True}
    assert second.status_code == 200
    assert second.json()["data"]["deletedCount"] == 0
    assert (await client.get(f"/parcels/{parcel_id}")).status_code == 404


@pytest.mark.asyncio
async def test_delete_malformed_id(client):
    resp = await client.delete("/parcels/xyz")
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_delete_paid_parcel_can_be_blocked(client, monkeypatch):
    parcel_id = await _create(client)
    await client.post(
        "/payments",
        json={"email": "payer@example.com", "parcelId": parcel_id, "amount": 10, "transactionId": "tx_del"},
    )
    monkeypatch.setattr(settings, "PARCEL_ALLOW_DELETE_PAID", False)

    resp = await client.delete(f"/parcels/{parcel_id}")

    assert resp.status_code == 409
    assert (await client.get(f"/parcels/{parcel_id}")).status_code == 200


@pytest.mark.asyncio
async def test_error_envelope_carries_request_id(client):
    resp = await client.get("/parcels/bad-id", headers={"X-Request-ID": "req-123"})
    assert resp.headers["X-Request-ID"] == "req-123"
    error = resp.json()["error"]
    assert error["request_id"] == "req-123"
    assert error["timestamp"].endswith("Z")
