"""
Tests for the product endpoints.
"""

from decimal import Decimal
from uuid import uuid4

from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import ContactType, Order, OrderItem, ProductAttribute, ProductImage, ProductVariant

BASE = "/api/v1/products"


async def place_order(db_session: AsyncSession, variant_id: str) -> None:
    order = Order(
        order_number=f"ORD-{uuid4().hex[:8]}",
        total_price=Decimal("19.99"),
        customer_name="Aida",
        customer_phone="+996555000111",
        contact_type=ContactType.CALL.value,
        customer_address="Bishkek, Chui 1",
        items=[OrderItem(variant_id=variant_id, quantity=1, price=Decimal("19.99"))],
    )
    db_session.add(order)
    await db_session.commit()


async def count_rows(db_session: AsyncSession, model) -> int:
    return await db_session.scalar(select(func.count()).select_from(model))


async def test_create_product(client: AsyncClient, make_category, product_payload) -> None:
    category = await make_category("Shirts")

    response = await client.post(BASE, json=product_payload(category["id"], name="  T-Shirt  "))

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "T-Shirt"
    assert data["categoryId"] == category["id"]
    assert data["category"] == {"id": category["id"], "name": "Shirts"}
    assert data["isActive"] is True
    variant = data["variants"][0]
    assert variant["size"] == "M"
    assert variant["color"] == "Black"
    assert variant["sku"] == "TS-M-BLK"
    assert variant["price"] == 19.99
    assert variant["discountPrice"] is None
    assert variant["attributes"] == [{"name": "Material", "value": "Cotton"}]
    assert variant["images"] == ["https://cdn.example.com/ts-black-1.jpg", "https://cdn.example.com/ts-black-2.jpg"]


async def test_first_image_is_main(
    client: AsyncClient, db_session: AsyncSession, make_category, make_product
) -> None:
    category = await make_category("Shirts")
    await make_product(category["id"])

    result = await db_session.execute(
        select(ProductImage.image_url, ProductImage.is_main).order_by(ProductImage.position)
    )

    assert result.all() == [
        ("https://cdn.example.com/ts-black-1.jpg", True),
        ("https://cdn.example.com/ts-black-2.jpg", False),
    ]


async def test_list_derives_row_fields(client: AsyncClient, make_category, make_product, variant_payload) -> None:
    category = await make_category("Shirts")
    await make_product(
        category["id"],
        variants=[
            variant_payload(size="S", images=[]),
            variant_payload(size="L", quantity=3, price=24.5, images=["https://cdn.example.com/ts-l.jpg"]),
        ],
    )

    response = await client.get(BASE)

    assert response.status_code == 200
    [row] = response.json()
    assert row["variantsCount"] == 2
    assert row["totalQuantity"] == 8
    assert row["minPrice"] == 19.99
    assert row["maxPrice"] == 24.5
    assert row["imagesCount"] == 1
    assert row["mainImage"] == "https://cdn.example.com/ts-l.jpg"
    assert row["category"] == {"id": category["id"], "name": "Shirts"}


async def test_list_newest_first(client: AsyncClient, make_category, make_product) -> None:
    category = await make_category("Shirts")
    await make_product(category["id"], name="First")
    await make_product(category["id"], name="Second")

    response = await client.get(BASE)

    assert [row["name"] for row in response.json()] == ["Second", "First"]


async def test_create_validation_errors(client: AsyncClient, make_category, product_payload) -> None:
    category = await make_category("Shirts")
    cases = [
        (product_payload(category["id"], name=" "), "Product name is required."),
        (product_payload(None), "Product category is required."),
        (product_payload("nowhere"), "Category nowhere was not found."),
        (product_payload(category["id"], variants=[]), "A product must have at least one variant."),
    ]

    for body, detail in cases:
        response = await client.post(BASE, json=body)
        assert response.status_code == 400
        assert response.json()["detail"] == detail

    assert (await client.get(BASE)).json() == []


async def test_invalid_variant_rolls_back_everything(
    client: AsyncClient, db_session: AsyncSession, make_category, product_payload, variant_payload
) -> None:
    category = await make_category("Shirts")
    body = product_payload(category["id"], variants=[variant_payload(), variant_payload(price=0)])

    response = await client.post(BASE, json=body)

    assert response.status_code == 400
    assert response.json()["detail"].startswith("Variant 2:")
    assert await count_rows(db_session, ProductVariant) == 0
    assert await count_rows(db_session, ProductImage) == 0
    assert (await client.get(BASE)).json() == []


async def test_variant_requires_size_and_color(
    client: AsyncClient, make_category, product_payload, variant_payload
) -> None:
    category = await make_category("Shirts")

    response = await client.post(BASE, json=product_payload(category["id"], variants=[variant_payload(color="  ")]))

    assert response.status_code == 400
    assert response.json()["detail"].startswith("Variant 1:")


async def test_get_unknown_product(client: AsyncClient) -> None:
    response = await client.get(f"{BASE}/missing")

    assert response.status_code == 404
    assert response.json()["detail"] == "Product missing was not found."


async def test_update_replaces_variants(
    client: AsyncClient, db_session: AsyncSession, make_category, make_product, product_payload, variant_payload
) -> None:
    shirts = await make_category("Shirts")
    tops = await make_category("Tops")
    product = await make_product(shirts["id"])
    old_variant_id = product["variants"][0]["id"]

    body = product_payload(
        tops["id"],
        name="Long Sleeve",
        isActive=False,
        variants=[variant_payload(size="XL", color="Red", images=["https://cdn.example.com/red.jpg"], attributes=[])],
    )
    response = await client.put(f"{BASE}/{product['id']}", json=body)

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Long Sleeve"
    assert data["categoryId"] == tops["id"]
    assert data["isActive"] is False
    assert [(v["size"], v["color"]) for v in data["variants"]] == [("XL", "Red")]
    assert data["variants"][0]["id"] != old_variant_id
    assert await count_rows(db_session, ProductVariant) == 1
    assert await count_rows(db_session, ProductImage) == 1
    assert await count_rows(db_session, ProductAttribute) == 0


async def test_update_unknown_product(client: AsyncClient, make_category, product_payload) -> None:
    category = await make_category("Shirts")

    response = await client.put(f"{BASE}/missing", json=product_payload(category["id"]))

    assert response.status_code == 404


async def test_update_blocked_when_ordered(
    client: AsyncClient, db_session: AsyncSession, make_category, make_product, product_payload
) -> None:
    category = await make_category("Shirts")
    product = await make_product(category["id"])
    await place_order(db_session, product["variants"][0]["id"])

    response = await client.put(f"{BASE}/{product['id']}", json=product_payload(category["id"], name="Renamed"))

    assert response.status_code == 400
    assert response.json()["blockers"] == {"orderItems": 1}
    assert (await client.get(f"{BASE}/{product['id']}")).json()["name"] == "T-Shirt"


async def test_delete_product_removes_variants(
    client: AsyncClient, db_session: AsyncSession, make_category, make_product
) -> None:
    category = await make_category("Shirts")
    product = await make_product(category["id"])

    response = await client.delete(f"{BASE}/{product['id']}")

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert (await client.get(f"{BASE}/{product['id']}")).status_code == 404
    assert await count_rows(db_session, ProductVariant) == 0
    assert await count_rows(db_session, ProductImage) == 0
    assert await count_rows(db_session, ProductAttribute) == 0

    # The category can now be deleted
    assert (await client.delete(f"/api/v1/categories/{category['id']}")).status_code == 200


async def test_delete_blocked_when_ordered(
    client: AsyncClient, db_session: AsyncSession, make_category, make_product
) -> None:
    category = await make_category("Shirts")
    product = await make_product(category["id"])
    await place_order(db_session, product["variants"][0]["id"])

    response = await client.delete(f"{BASE}/{product['id']}")

    assert response.status_code == 400
    body = response.json()
    assert body["blockers"] == {"orderItems": 1}
    assert "referenced by existing orders" in body["detail"]
    assert (await client.get(f"{BASE}/{product['id']}")).status_code == 200


async def test_delete_unknown_product(client: AsyncClient) -> None:
    response = await client.delete(f"{BASE}/missing")

    assert response.status_code == 404


async def test_sub_cent_price_is_rejected(
    client: AsyncClient, db_session: AsyncSession, make_category, product_payload, variant_payload
) -> None:
    category = await make_category("Shirts")

    for variant in (variant_payload(price=0.001), variant_payload(discountPrice=0.004)):
        response = await client.post(BASE, json=product_payload(category["id"], variants=[variant]))
        assert response.status_code == 400
        assert response.json()["detail"].startswith("Variant 1:")

    assert await count_rows(db_session, ProductVariant) == 0


async def test_update_with_sub_cent_price_keeps_product(
    client: AsyncClient, make_category, make_product, product_payload, variant_payload
) -> None:
    category = await make_category("Shirts")
    product = await make_product(category["id"])

    body = product_payload(category["id"], variants=[variant_payload(price=0.004)])
    response = await client.put(f"{BASE}/{product['id']}", json=body)

    assert response.status_code == 400
    assert response.json()["detail"].startswith("Variant 1:")
    assert (await client.get(f"{BASE}/{product['id']}")).json()["variants"][0]["price"] == 19.99


async def test_out_of_range_values_are_rejected(
    client: AsyncClient, make_category, product_payload, variant_payload
) -> None:
    category = await make_category("Shirts")

    for variant in (
        variant_payload(price=100_000_000),
        variant_payload(discountPrice=1e9),
        variant_payload(quantity=2**31),
    ):
        response = await client.post(BASE, json=product_payload(category["id"], variants=[variant]))
        assert response.status_code == 400
        assert response.json()["detail"].startswith("Variant 1:")


async def test_prices_are_stored_in_cents(client: AsyncClient, make_category, make_product, variant_payload) -> None:
    category = await make_category("Shirts")

    product = await make_product(category["id"], variants=[variant_payload(price=19.995, discountPrice=0.005)])

    variant = product["variants"][0]
    assert variant["price"] == 20.0
    assert variant["discountPrice"] == 0.01


async def test_attributes_and_images_are_trimmed(
    client: AsyncClient, db_session: AsyncSession, make_category, make_product, variant_payload
) -> None:
    category = await make_category("Shirts")
    variant = variant_payload(
        attributes=[{"name": "  Fit ", "value": " Slim  "}, {"name": "   ", "value": "ignored"}],
        images=["   ", "  https://cdn.example.com/a.jpg ", "https://cdn.example.com/b.jpg"],
    )

    product = await make_product(category["id"], variants=[variant])

    data = product["variants"][0]
    assert data["attributes"] == [{"name": "Fit", "value": "Slim"}]
    assert data["images"] == ["https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg"]
    result = await db_session.execute(select(ProductImage.image_url).where(ProductImage.is_main.is_(True)))
    assert result.scalars().all() == ["https://cdn.example.com/a.jpg"]


async def test_timestamps_carry_utc_offset(client: AsyncClient, make_category, make_product) -> None:
    category = await make_category("Shirts")
    product = await make_product(category["id"])

    for stamp in (category["createdAt"], product["createdAt"], product["updatedAt"]):
        assert stamp.endswith("Z") or stamp.endswith("+00:00")
