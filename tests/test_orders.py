"""Tests for order placement."""
import uuid

from httpx import AsyncClient

ORDER_API = "/api/storefleet/order"


def _order_body(**overrides):
    body = {
        "shippingInfo": {
            "address": "12 Market Road",
            "state": "Karnataka",
            "country": "IN",
            "pincode": 560001,
            "phoneNumber": 9876543210,
        },
        "orderedItems": [
            {
                "name": "Pixel Phone",
                "price": 499.0,
                "quantity": 1,
                "image": "https://example.com/img1.png",
                "product": str(uuid.uuid4()),
            }
        ],
        "paymentInfo": {"id": "pay_123"},
        "itemsPrice": 499.0,
        "taxPrice": 89.82,
        "shippingPrice": 0.0,
        "totalPrice": 588.82,
    }
    body.update(overrides)
    return body


async def test_create_order(client: AsyncClient, test_user, auth_headers):
    response = await client.post(f"{ORDER_API}/new", json=_order_body(), headers=auth_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "Order placed successfully!"
    order = data["order"]
    assert order["user_id"] == str(test_user.id)
    assert order["payment_status"] is True
    assert order["paid_at"]
    assert order["order_status"] == "Processing"
    assert order["total_price"] == 588.82
    assert order["ordered_items"][0]["quantity"] == 1


async def test_order_total_mismatch(client: AsyncClient, auth_headers):
    response = await client.post(
        f"{ORDER_API}/new",
        json=_order_body(totalPrice=500.0),
        headers=auth_headers
    )

    assert response.status_code == 400
    assert response.json()["message"].startswith("Total price mismatch")


async def test_order_total_within_tolerance(client: AsyncClient, auth_headers):
    response = await client.post(
        f"{ORDER_API}/new",
        json=_order_body(totalPrice=588.825),
        headers=auth_headers
    )

    assert response.status_code == 201


async def test_order_requires_items(client: AsyncClient, auth_headers):
    response = await client.post(
        f"{ORDER_API}/new",
        json=_order_body(orderedItems=[]),
        headers=auth_headers
    )

    assert response.status_code == 400


async def test_order_requires_login(client: AsyncClient):
    response = await client.post(f"{ORDER_API}/new", json=_order_body())

    assert response.status_code == 401
