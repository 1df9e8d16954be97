"""Tests for product catalogue and review endpoints."""
import uuid

import pytest_asyncio
from httpx import AsyncClient

PRODUCT_API = "/api/storefleet/product"


def _product_body(**overrides):
    body = {
        "name": "Pixel Phone",
        "description": "A phone with a very good camera.",
        "price": 499.0,
        "category": "Mobile",
        "stock": 5,
        "images": [{"public_id": "img1", "url": "https://example.com/img1.png"}],
    }
    body.update(overrides)
    return body


@pytest_asyncio.fixture
async def product(client: AsyncClient, admin_headers):
    response = await client.post(f"{PRODUCT_API}/add", json=_product_body(), headers=admin_headers)
    assert response.status_code == 201
    return response.json()["product"]


async def test_admin_adds_product(client: AsyncClient, admin_user, admin_headers):
    response = await client.post(f"{PRODUCT_API}/add", json=_product_body(), headers=admin_headers)

    assert response.status_code == 201
    product = response.json()["product"]
    assert product["name"] == "Pixel Phone"
    assert product["rating"] == 0
    assert product["number_of_reviews"] == 0
    assert product["created_by"] == str(admin_user.id)


async def test_user_cannot_add_product(client: AsyncClient, auth_headers):
    response = await client.post(f"{PRODUCT_API}/add", json=_product_body(), headers=auth_headers)

    assert response.status_code == 403


async def test_add_product_requires_login(client: AsyncClient):
    response = await client.post(f"{PRODUCT_API}/add", json=_product_body())

    assert response.status_code == 401


async def test_add_product_validation(client: AsyncClient, admin_headers):
    response = await client.post(
        f"{PRODUCT_API}/add",
        json=_product_body(category="Spaceships", images=[]),
        headers=admin_headers
    )

    assert response.status_code == 400
    assert response.json()["success"] is False


async def test_product_details_and_not_found(client: AsyncClient, product):
    found = await client.get(f"{PRODUCT_API}/details/{product['id']}")
    missing = await client.get(f"{PRODUCT_API}/details/{uuid.uuid4()}")
    malformed = await client.get(f"{PRODUCT_API}/details/not-a-uuid")

    assert found.status_code == 200
    assert found.json()["product"]["id"] == product["id"]
    assert missing.status_code == 404
    assert missing.json()["message"] == "Product not found."
    assert malformed.status_code == 400


async def test_list_products_filters_and_pagination(client: AsyncClient, admin_headers):
    for name, price, category in [
        ("Budget Phone", 100.0, "Mobile"),
        ("Flagship Phone", 900.0, "Mobile"),
        ("Desk Lamp", 40.0, "Furniture"),
    ]:
        await client.post(
            f"{PRODUCT_API}/add",
            json=_product_body(name=name, price=price, category=category),
            headers=admin_headers
        )

    everything = await client.get(f"{PRODUCT_API}/products")
    data = everything.json()["data"]
    assert everything.status_code == 200
    assert everything.json()["message"] == "Products retrieved successfully"
    assert data["pagination"]["totalItems"] == 3

    phones = await client.get(f"{PRODUCT_API}/products", params={"keyword": "phone"})
    assert {p["name"] for p in phones.json()["data"]["products"]} == {"Budget Phone", "Flagship Phone"}

    cheap_mobiles = await client.get(
        f"{PRODUCT_API}/products",
        params={"category": "Mobile", "price[lte]": 500}
    )
    assert [p["name"] for p in cheap_mobiles.json()["data"]["products"]] == ["Budget Phone"]

    sorted_page = await client.get(
        f"{PRODUCT_API}/products",
        params={"sortBy": "price", "order": "desc", "limit": 2, "page": 1}
    )
    page = sorted_page.json()["data"]
    assert [p["name"] for p in page["products"]] == ["Flagship Phone", "Budget Phone"]
    assert page["pagination"] == {
        "currentPage": 1,
        "totalPages": 2,
        "itemsPerPage": 2,
        "totalItems": 3,
        "itemsOnPage": 2,
    }


async def test_update_product(client: AsyncClient, product, admin_headers):
    response = await client.put(
        f"{PRODUCT_API}/update/{product['id']}",
        json={"price": 450.0, "stock": 2},
        headers=admin_headers
    )

    assert response.status_code == 200
    updated = response.json()["product"]
    assert updated["price"] == 450.0
    assert updated["stock"] == 2
    assert updated["name"] == product["name"]


async def test_update_product_empty_body(client: AsyncClient, product, admin_headers):
    response = await client.put(
        f"{PRODUCT_API}/update/{product['id']}",
        json={},
        headers=admin_headers
    )

    assert response.status_code == 400
    assert response.json()["message"] == "No data provided for update."


async def test_delete_product(client: AsyncClient, product, admin_headers):
    response = await client.delete(f"{PRODUCT_API}/delete/{product['id']}", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Product deleted successfully."

    gone = await client.get(f"{PRODUCT_API}/details/{product['id']}")
    assert gone.status_code == 404


async def test_rating_again_replaces_review(client: AsyncClient, product, auth_headers, other_headers):
    await client.put(
        f"{PRODUCT_API}/rate/{product['id']}",
        json={"rating": 2, "comment": "meh"},
        headers=auth_headers
    )
    await client.put(
        f"{PRODUCT_API}/rate/{product['id']}",
        json={"rating": 4, "comment": "grew on me"},
        headers=auth_headers
    )
    response = await client.put(
        f"{PRODUCT_API}/rate/{product['id']}",
        json={"rating": 5},
        headers=other_headers
    )

    assert response.status_code == 200
    rated = response.json()["product"]
    assert rated["number_of_reviews"] == 2
    assert rated["rating"] == 4.5

    reviews = await client.get(f"{PRODUCT_API}/reviews/{product['id']}")
    comments = sorted(r["comment"] for r in reviews.json()["reviews"])
    assert comments == ["", "grew on me"]


async def test_rate_rejects_out_of_range(client: AsyncClient, product, auth_headers):
    response = await client.put(
        f"{PRODUCT_API}/rate/{product['id']}",
        json={"rating": 6},
        headers=auth_headers
    )

    assert response.status_code == 400


async def test_delete_review(client: AsyncClient, product, auth_headers, other_headers):
    rated = await client.put(
        f"{PRODUCT_API}/rate/{product['id']}",
        json={"rating": 3},
        headers=auth_headers
    )
    review_id = rated.json()["product"]["reviews"][0]["id"]
    params = {"productId": product["id"], "reviewId": review_id}

    forbidden = await client.delete(f"{PRODUCT_API}/review/delete", params=params, headers=other_headers)
    assert forbidden.status_code == 403

    deleted = await client.delete(f"{PRODUCT_API}/review/delete", params=params, headers=auth_headers)
    assert deleted.status_code == 200
    assert deleted.json()["product"]["rating"] == 0
    assert deleted.json()["product"]["number_of_reviews"] == 0

    again = await client.delete(f"{PRODUCT_API}/review/delete", params=params, headers=auth_headers)
    assert again.status_code == 404


async def test_delete_review_requires_ids(client: AsyncClient, auth_headers):
    response = await client.delete(f"{PRODUCT_API}/review/delete", headers=auth_headers)

    assert response.status_code == 400
