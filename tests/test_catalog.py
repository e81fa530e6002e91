# tests/test_catalog.py
import pytest

from shop_service.db.schemas import CategoryInput, CategoryUpdate, ImageInput, ProductInput, ProductUpdate
from shop_service.exceptions import ConflictError, NotFoundError, ValidationError
from shop_service.services import categories, products


@pytest.mark.parametrize("field, value", [("name", ""), ("price", 0), ("price", -1.5), ("stock", -1)])
async def test_create_product_rejects_invalid_fields(db, field, value):
    category = await categories.create_category(db, CategoryInput(name="Tools"))
    data = {"name": "Hammer", "price": 9.99, "stock": 3, "category_id": category.id, field: value}
    with pytest.raises(ValidationError):
        await products.create_product(db, ProductInput(**data))


async def test_create_product_requires_existing_category(db):
    with pytest.raises(NotFoundError):
        await products.create_product(db, ProductInput(name="Hammer", price=9.99, stock=1, category_id=999))


async def test_duplicate_sku_is_a_conflict(db, make_product):
    first = await make_product()
    await products.update_product(db, first.id, ProductUpdate(sku="SKU-1"))
    with pytest.raises(ConflictError):
        await products.create_product(db, ProductInput(
            name="Other", price=1.0, stock=1, category_id=first.category_id, sku="SKU-1",
        ))


async def test_list_filters_compose_and_absent_filters_do_not_constrain(db, make_product):
    await make_product(name="Red Mug", price=8.0, description="ceramic")
    await make_product(name="Blue Mug", price=15.0)
    await make_product(name="Teapot", price=30.0, description="Goes well with a MUG")

    assert len(await products.list_products(db)) == 3
    assert [p.name for p in await products.list_products(db, search="mug")] == ["Blue Mug", "Red Mug", "Teapot"]
    assert [p.name for p in await products.list_products(db, search="mug", max_price=20)] == ["Blue Mug", "Red Mug"]
    assert [p.name for p in await products.list_products(db, min_price=10, max_price=20)] == ["Blue Mug"]


async def test_list_filters_by_category(db, make_product):
    kitchen = await categories.create_category(db, CategoryInput(name="Kitchen"))
    await make_product(name="Pan", category_id=kitchen.id)
    await make_product(name="Book")

    assert [p.name for p in await products.list_products(db, category_id=kitchen.id)] == ["Pan"]


async def test_negative_price_bounds_are_rejected(db):
    with pytest.raises(ValidationError):
        await products.list_products(db, min_price=-1)
    with pytest.raises(ValidationError):
        await products.list_products(db, max_price=-1)


async def test_partial_update_only_touches_present_fields(db, make_product):
    product = await make_product(price=10.0, stock=5, description="handmade")

    updated = await products.update_product(db, product.id, ProductUpdate(stock=0))

    assert updated.stock == 0
    assert updated.price == 10.0
    assert updated.description == "handmade"


async def test_update_cannot_break_price_or_stock(db, make_product):
    product = await make_product()
    with pytest.raises(ValidationError):
        await products.update_product(db, product.id, ProductUpdate(price=0))
    with pytest.raises(ValidationError):
        await products.update_product(db, product.id, ProductUpdate(stock=-2))
    with pytest.raises(ValidationError):
        await products.update_product(db, product.id, ProductUpdate(name=" "))


async def test_deleted_product_is_not_found(db, make_product):
    product = await make_product()
    await products.delete_product(db, product.id)

    with pytest.raises(NotFoundError):
        await products.get_product(db, product.id)
    assert await products.list_products(db) == []


async def test_category_names_are_unique(db):
    await categories.create_category(db, CategoryInput(name="Games"))
    with pytest.raises(ConflictError):
        await categories.create_category(db, CategoryInput(name="Games"))

    other = await categories.create_category(db, CategoryInput(name="Toys"))
    with pytest.raises(ConflictError):
        await categories.update_category(db, other.id, CategoryUpdate(name="Games"))


async def test_category_with_products_cannot_be_deleted(db, make_product):
    product = await make_product()

    with pytest.raises(ConflictError):
        await categories.delete_category(db, product.category_id)
    assert (await categories.get_category(db, product.category_id)).id == product.category_id

    await products.delete_product(db, product.id)
    await categories.delete_category(db, product.category_id)
    with pytest.raises(NotFoundError):
        await categories.get_category(db, product.category_id)


async def test_single_primary_image_per_product(db, make_product):
    product = await make_product()

    first = await products.add_image(db, product.id, ImageInput(url="https://img/1.png"))
    second = await products.add_image(db, product.id, ImageInput(url="https://img/2.png"))
    assert first.is_primary and not second.is_primary

    third = await products.add_image(db, product.id, ImageInput(url="https://img/3.png", is_primary=True))
    images = (await products.get_product(db, product.id)).images
    assert [i.id for i in images if i.is_primary] == [third.id]

    await products.delete_image(db, product.id, third.id)
    images = (await products.get_product(db, product.id)).images
    assert [i.id for i in images] == [first.id, second.id]
    assert [i.id for i in images if i.is_primary] == [first.id]


async def test_inactive_product_is_only_visible_to_management(db, make_product):
    product = await make_product(name="Retired Mug")
    await products.update_product(db, product.id, ProductUpdate(is_active=False))

    assert await products.list_products(db) == []
    with pytest.raises(NotFoundError):
        await products.get_product(db, product.id, active_only=True)
    assert (await products.get_product(db, product.id)).is_active is False
