import mongomock
import pytest
from fastapi.testclient import TestClient

from storefront.core.config import Settings
from storefront.main import create_app

PREFIX = "/api/v1"


@pytest.fixture
def settings():
    return Settings(
        APP_PREFIX=PREFIX,
        APP_PORT=8000,
        MONGO_URI="mongodb://localhost:27017",
        MONGO_DB_NAME="storefront_test",
        JWT_SECRET="test-secret",
        JWT_EXPIRES_IN_MINUTES=30,
        BCRYPT_ROUNDS=4,
    )


@pytest.fixture
def db():
    return mongomock.MongoClient()["storefront_test"]


@pytest.fixture
def app(settings, db):
    return create_app(settings, db=db)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def register(client, username="alice", password="s3cret!", email=None, name="Alice"):
    resp = client.post(f"{PREFIX}/users", json={
        "username": username,
        "name": name,
        "password": password,
        "email": email or f"{username}@shop.io",
    })
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


def login(client, username="alice", password="s3cret!"):
    resp = client.post(f"{PREFIX}/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]["token"]


@pytest.fixture
def user(client):
    return register(client)


@pytest.fixture
def auth(client, user):
    return {"Authorization": f"Bearer {login(client)}"}


@pytest.fixture
def make_product(client, auth):
    counter = {"n": 0}

    def _make(price=10.0, stock=5, name=None):
        counter["n"] += 1
        n = counter["n"]
        resp = client.post(f"{PREFIX}/products", headers=auth, json={
            "productCode": f"P{n:03d}",
            "name": name or f"Product {n}",
            "description": "test item",
            "price": price,
            "quantityInStock": stock,
        })
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]
    return _make
