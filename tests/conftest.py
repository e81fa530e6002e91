# tests/conftest.py
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import update
from sqlalchemy.pool import StaticPool

from shop_service.config import Settings
from shop_service.db.database import make_engine, make_sessionmaker
from shop_service.db.init_db import init_db
from shop_service.db.models import OrderStatus, RoleEnum, User
from shop_service.db.schemas import CategoryInput, ProductInput
from shop_service.main import create_app
from shop_service.services import categories, orders, products, users

from helpers import API, TEST_SECRET, register_and_login


def sqlite_engine():
    return make_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )


@pytest.fixture
def settings():
    return Settings(database_url="sqlite+aiosqlite://", jwt_secret=TEST_SECRET, log_level="WARNING")


# ---------------------------------------------------------------- service level

@pytest.fixture
async def db():
    engine = sqlite_engine()
    await init_db(engine)
    async with make_sessionmaker(engine)() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    async def _make(email=None, name="Test User", password="secret1"):
        counter["n"] += 1
        return await users.register(db, email or f"user{counter['n']}@example.com", password, name)

    return _make


@pytest.fixture
def make_product(db):
    state = {"category": None, "n": 0}

    async def _make(price=10.0, stock=5, name=None, description=None, category_id=None):
        if category_id is None:
            if state["category"] is None:
                state["category"] = await categories.create_category(db, CategoryInput(name="General"))
            category_id = state["category"].id
        state["n"] += 1
        return await products.create_product(db, ProductInput(
            name=name or f"Product {state['n']}",
            description=description,
            price=price,
            stock=stock,
            category_id=category_id,
        ))

    return _make


@pytest.fixture
def deliver(db):
    """Walk an order through the allowed transitions up to delivered."""
    async def _deliver(order_id):
        for status in (OrderStatus.processing, OrderStatus.shipped, OrderStatus.delivered):
            await orders.update_order_status(db, order_id, status.value)

    return _deliver


# ---------------------------------------------------------------- HTTP level

@pytest.fixture
def app(settings):
    return create_app(settings, engine=sqlite_engine())


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


async def _promote(app, email):
    async with app.state.sessionmaker() as session:
        await session.execute(update(User).where(User.email == email).values(role=RoleEnum.admin))
        await session.commit()


@pytest.fixture
def admin_headers(app, client):
    register_and_login(client, "admin@shop.com")
    client.portal.call(_promote, app, "admin@shop.com")
    response = client.post(f"{API}/auth/login", json={"email": "admin@shop.com", "password": "secret1"})
    return {"Authorization": f"Bearer {response.json()['data']['token']}"}


@pytest.fixture
def user_headers(client):
    return register_and_login(client, "a@x.com")


@pytest.fixture
def catalog(client, admin_headers):
    """One category with a single product: price 12.5, stock 5."""
    category = client.post(f"{API}/admin/categories", json={"name": "Books"}, headers=admin_headers)
    assert category.status_code == 201, category.text
    category_id = category.json()["data"]["id"]
    product = client.post(f"{API}/admin/products", headers=admin_headers, json={
        "name": "Python Tricks", "description": "A buffet of awesome Python features",
        "price": 12.5, "stock": 5, "category_id": category_id, "sku": "BK-001",
    })
    assert product.status_code == 201, product.text
    return {"category_id": category_id, "product_id": product.json()["data"]["id"]}

