# tests/test_cart_and_orders.py
import pytest

from shop_service.db import functions
from shop_service.db.models import OrderStatus
from shop_service.db.schemas import AddressInput, ProductUpdate
from shop_service.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from shop_service.services import addresses, carts, orders, products

HOME = AddressInput(type="shipping", street="1 Main St", city="Springfield", state="IL", country="US", zip_code="62701")


async def _stock(db, product_id):
    return (await functions.get_product_by_id(db, product_id, refresh=True)).stock


async def test_get_cart_creates_one_cart_per_user(db, make_user):
    user = await make_user()
    first = await carts.get_cart(db, user.id)
    second = await carts.get_cart(db, user.id)
    assert first.id == second.id
    assert first.items == [] and first.total == 0


async def test_adding_same_product_sums_quantity(db, make_user, make_product):
    user = await make_user()
    product = await make_product(price=12.5, stock=5)

    cart = await carts.add_to_cart(db, user.id, product.id, 2)
    assert [(i.quantity, i.subtotal) for i in cart.items] == [(2, 25.0)]

    cart = await carts.add_to_cart(db, user.id, product.id, 2)
    assert [(i.quantity, i.subtotal) for i in cart.items] == [(4, 50.0)]
    assert cart.total == 50.0


async def test_existing_line_takes_current_price(db, make_user, make_product):
    user = await make_user()
    product = await make_product(price=10.0, stock=10)
    await carts.add_to_cart(db, user.id, product.id, 1)

    await products.update_product(db, product.id, ProductUpdate(price=11.0))
    cart = await carts.add_to_cart(db, user.id, product.id, 1)

    assert cart.items[0].price == 11.0
    assert cart.items[0].subtotal == 22.0


async def test_add_to_cart_checks_product_and_stock(db, make_user, make_product):
    user = await make_user()
    product = await make_product(stock=3)

    with pytest.raises(NotFoundError):
        await carts.add_to_cart(db, user.id, 999, 1)
    with pytest.raises(ValidationError):
        await carts.add_to_cart(db, user.id, product.id, 4)
    with pytest.raises(ValidationError):
        await carts.add_to_cart(db, user.id, product.id, 0)
    assert (await carts.get_cart(db, user.id)).items == []


async def test_update_cart_item_recomputes_subtotal(db, make_user, make_product):
    user = await make_user()
    product = await make_product(price=4.0, stock=10)
    cart = await carts.add_to_cart(db, user.id, product.id, 1)

    cart = await carts.update_cart_item(db, user.id, cart.items[0].id, 3)
    assert cart.items[0].quantity == 3
    assert cart.items[0].subtotal == 12.0

    with pytest.raises(ValidationError):
        await carts.update_cart_item(db, user.id, cart.items[0].id, 11)


async def test_cart_items_are_scoped_to_owner(db, make_user, make_product):
    owner = await make_user()
    intruder = await make_user()
    product = await make_product()
    item_id = (await carts.add_to_cart(db, owner.id, product.id, 1)).items[0].id

    with pytest.raises(NotFoundError):
        await carts.update_cart_item(db, intruder.id, item_id, 2)
    with pytest.raises(NotFoundError):
        await carts.remove_from_cart(db, intruder.id, item_id)
    assert len((await carts.get_cart(db, owner.id)).items) == 1

    await carts.remove_from_cart(db, owner.id, item_id)
    assert (await carts.get_cart(db, owner.id)).items == []


async def test_clear_cart_removes_all_items(db, make_user, make_product):
    user = await make_user()
    await carts.add_to_cart(db, user.id, (await make_product()).id, 1)
    await carts.add_to_cart(db, user.id, (await make_product()).id, 2)

    await carts.clear_cart(db, user.id)
    assert (await carts.get_cart(db, user.id)).items == []


async def test_create_order_on_empty_cart_fails_without_side_effects(db, make_user):
    user = await make_user()
    with pytest.raises(ValidationError, match="empty"):
        await orders.create_order(db, user.id)

    await carts.get_cart(db, user.id)
    with pytest.raises(ValidationError, match="empty"):
        await orders.create_order(db, user.id)
    assert await orders.list_user_orders(db, user.id) == []


async def test_create_order_snapshots_cart_and_empties_it(db, make_user, make_product):
    user = await make_user()
    mug = await make_product(price=12.5, stock=5)
    pot = await make_product(price=3.2, stock=10)
    await carts.add_to_cart(db, user.id, mug.id, 4)
    await carts.add_to_cart(db, user.id, pot.id, 3)

    order = await orders.create_order(db, user.id)

    assert order.status == OrderStatus.pending
    assert [(i.product_id, i.quantity, i.price) for i in order.items] == [(mug.id, 4, 12.5), (pot.id, 3, 3.2)]
    assert order.total_amount == pytest.approx(sum(i.subtotal for i in order.items))
    assert order.total_amount == pytest.approx(59.6)
    assert (await carts.get_cart(db, user.id)).items == []
    assert await _stock(db, mug.id) == 1
    assert await _stock(db, pot.id) == 7


async def test_order_prices_do_not_follow_product_changes(db, make_user, make_product):
    user = await make_user()
    product = await make_product(price=10.0)
    await carts.add_to_cart(db, user.id, product.id, 1)
    order = await orders.create_order(db, user.id)

    await products.update_product(db, product.id, ProductUpdate(price=99.0))

    reloaded = await orders.get_order(db, order.id, user.id)
    assert reloaded.items[0].price == 10.0
    assert reloaded.total_amount == 10.0


async def test_checkout_fails_when_stock_ran_out(db, make_user, make_product):
    first = await make_user()
    second = await make_user()
    product_id, second_id = (await make_product(stock=3)).id, second.id
    await carts.add_to_cart(db, first.id, product_id, 2)
    await carts.add_to_cart(db, second_id, product_id, 2)

    await orders.create_order(db, first.id)
    with pytest.raises(ConflictError):
        await orders.create_order(db, second_id)

    # the rollback expires loaded instances, so only plain ids are used below
    assert await _stock(db, product_id) == 1
    assert len((await carts.get_cart(db, second_id)).items) == 1
    assert await orders.list_user_orders(db, second_id) == []


async def test_order_uses_default_address_unless_given(db, make_user, make_product):
    user = await make_user()
    other = await make_user()
    home = await addresses.create_address(db, user.id, HOME)
    foreign = await addresses.create_address(db, other.id, HOME)
    product = await make_product()

    await carts.add_to_cart(db, user.id, product.id, 1)
    with pytest.raises(NotFoundError):
        await orders.create_order(db, user.id, shipping_address_id=foreign.id)

    order = await orders.create_order(db, user.id, notes="leave at the door")
    assert order.shipping_address_id == home.id
    assert order.notes == "leave at the door"


async def test_cancel_only_from_pending_and_restocks(db, make_user, make_product):
    user = await make_user()
    product = await make_product(stock=5)
    await carts.add_to_cart(db, user.id, product.id, 2)
    order = await orders.create_order(db, user.id)
    assert await _stock(db, product.id) == 3

    cancelled = await orders.cancel_order(db, order.id, user.id)
    assert cancelled.status == OrderStatus.cancelled
    assert await _stock(db, product.id) == 5

    with pytest.raises(ValidationError):
        await orders.cancel_order(db, order.id, user.id)


async def test_cancel_fails_after_processing_and_keeps_status(db, make_user, make_product):
    user = await make_user()
    await carts.add_to_cart(db, user.id, (await make_product()).id, 1)
    order = await orders.create_order(db, user.id)
    await orders.update_order_status(db, order.id, "processing")

    with pytest.raises(ValidationError):
        await orders.cancel_order(db, order.id, user.id)
    assert (await orders.get_order(db, order.id, user.id)).status == OrderStatus.processing


async def test_orders_of_other_users_are_hidden(db, make_user, make_product):
    owner = await make_user()
    other = await make_user()
    await carts.add_to_cart(db, owner.id, (await make_product()).id, 1)
    order = await orders.create_order(db, owner.id)

    with pytest.raises(NotFoundError):
        await orders.get_order(db, order.id, other.id)
    with pytest.raises(ForbiddenError):
        await orders.cancel_order(db, order.id, other.id)
    assert (await orders.get_order(db, order.id, owner.id)).status == OrderStatus.pending


async def test_status_updates_follow_the_transition_graph(db, make_user, make_product):
    user = await make_user()
    await carts.add_to_cart(db, user.id, (await make_product()).id, 1)
    order = await orders.create_order(db, user.id)

    with pytest.raises(ValidationError):
        await orders.update_order_status(db, order.id, "delivered")
    with pytest.raises(ValidationError):
        await orders.update_order_status(db, order.id, "teleported")
    assert (await orders.get_order(db, order.id, user.id)).status == OrderStatus.pending

    await orders.update_order_status(db, order.id, "processing")
    updated = await orders.update_order_status(db, order.id, "shipped", tracking_number="TRK123")
    assert updated.status == OrderStatus.shipped
    assert updated.tracking_number == "TRK123"

    with pytest.raises(NotFoundError):
        await orders.update_order_status(db, 999, "processing")


async def test_inactive_product_cannot_be_added_to_cart(db, make_user, make_product):
    user = await make_user()
    product = await make_product()
    await products.update_product(db, product.id, ProductUpdate(is_active=False))

    with pytest.raises(NotFoundError):
        await carts.add_to_cart(db, user.id, product.id, 1)
    assert (await carts.get_cart(db, user.id)).items == []


async def test_new_order_has_no_extra_charges(db, make_user, make_product):
    user = await make_user()
    await carts.add_to_cart(db, user.id, (await make_product(price=7.5)).id, 2)

    order = await orders.create_order(db, user.id)

    assert (order.shipping_cost, order.tax_amount, order.discount) == (0.0, 0.0, 0.0)
    assert order.total_amount == 15.0
