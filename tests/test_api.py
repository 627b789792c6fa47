import jwt
from bson import ObjectId

from storefront.security.tokens import TokenService
from storefront.security.utils import now_utc
from conftest import PREFIX, login, register


def test_health_and_info(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get(f"{PREFIX}/health").json() == {"status": "ok"}
    assert client.get(f"{PREFIX}/_info").json()["service"] == "storefront"


def test_register_hides_password_and_normalizes_email(client):
    user = register(client, username="bob", email="  Bob@Shop.IO ")
    assert user["email"] == "bob@shop.io"
    assert user["status"] == "ACTIVE"
    assert "password" not in user
    assert isinstance(user["_id"], str)


def test_register_validation_error_uses_envelope(client):
    resp = client.post(f"{PREFIX}/users", json={"username": "x", "name": "X", "password": "p", "email": "nope"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["message"] == "Validation failed"
    assert any(e["field"] == "email" for e in body["errors"])


def test_duplicate_username_is_conflict(client, user):
    resp = client.post(f"{PREFIX}/users", json={
        "username": "alice", "name": "Other", "password": "x", "email": "other@shop.io",
    })
    assert resp.status_code == 409
    assert resp.json()["success"] is False


def test_login_returns_token_and_ttl(client, user):
    resp = client.post(f"{PREFIX}/auth/login", json={"username": "alice", "password": "s3cret!"})
    body = resp.json()
    assert resp.status_code == 200
    assert body["success"] is True
    assert body["message"] == "Login successful"
    assert body["data"]["expiresInMinutes"] == 30
    assert body["data"]["token"]


def test_login_wrong_password(client, user):
    resp = client.post(f"{PREFIX}/auth/login", json={"username": "alice", "password": "wrong"})
    assert resp.status_code == 403
    body = resp.json()
    assert body == {"success": False, "message": "Invalid credentials", "errors": None}


def test_login_unknown_or_inactive_user(client, user, auth):
    resp = client.post(f"{PREFIX}/auth/login", json={"username": "ghost", "password": "s3cret!"})
    assert resp.status_code == 403

    assert client.post(f"{PREFIX}/users/inactivate/{user['_id']}", headers=auth).json()["data"]["status"] == "INACTIVE"
    resp = client.post(f"{PREFIX}/auth/login", json={"username": "alice", "password": "s3cret!"})
    assert resp.status_code == 403
    assert resp.json()["message"] == "Invalid credentials"

    assert client.post(f"{PREFIX}/users/activate/{user['_id']}", headers=auth).json()["data"]["status"] == "ACTIVE"
    assert login(client)


def test_gate_requires_bearer(client):
    resp = client.get(f"{PREFIX}/products")
    assert resp.status_code == 401
    assert resp.json()["message"] == "Token not provided"

    resp = client.get(f"{PREFIX}/products", headers={"Authorization": "Basic YWxpY2U6eA=="})
    assert resp.status_code == 401


def test_gate_rejects_bad_tokens(client, settings):
    resp = client.get(f"{PREFIX}/users", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 403
    assert resp.json()["message"] == "Invalid or expired token"

    expired = TokenService(settings.JWT_SECRET, 1).issue("x", {}, issued_at=now_utc().replace(year=2000))
    resp = client.get(f"{PREFIX}/users", headers={"Authorization": f"Bearer {expired}"})
    assert resp.status_code == 403


def test_gate_rejects_token_without_subject(client, settings):
    token = jwt.encode({"user": {}}, settings.JWT_SECRET, algorithm="HS256")
    resp = client.get(f"{PREFIX}/orders", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 403
    assert resp.json()["message"] == "Invalid token payload"


def test_user_routes(client, user, auth):
    uid = user["_id"]
    resp = client.get(f"{PREFIX}/users/{uid}", headers=auth)
    assert resp.json()["data"]["username"] == "alice"

    resp = client.patch(f"{PREFIX}/users/{uid}", headers=auth, json={"name": "Alice B", "password": "n3w"})
    assert resp.json()["data"]["name"] == "Alice B"
    assert login(client, password="n3w")

    listing = client.get(f"{PREFIX}/users?username=alice", headers=auth).json()["data"]
    assert listing["total"] == 1

    resp = client.delete(f"{PREFIX}/users/{uid}", headers=auth)
    assert resp.json()["message"] == "User deleted successfully"
    resp = client.get(f"{PREFIX}/users/{uid}", headers=auth)
    assert resp.status_code == 404
    assert resp.json()["message"] == "User not found"


def test_product_crud(client, auth, make_product):
    p = make_product(price=3.5, stock=2)
    resp = client.patch(f"{PREFIX}/products/{p['_id']}", headers=auth, json={"quantityInStock": 9})
    assert resp.json()["data"]["quantityInStock"] == 9
    assert resp.json()["data"]["price"] == 3.5

    resp = client.post(f"{PREFIX}/products", headers=auth, json={"productCode": "X1", "name": "Bad", "price": 1.234})
    assert resp.status_code == 400

    resp = client.post(f"{PREFIX}/products", headers=auth, json={"productCode": "TOOLONGCODE1", "name": "Bad"})
    assert resp.status_code == 400

    assert client.delete(f"{PREFIX}/products/{p['_id']}", headers=auth).status_code == 200
    assert client.get(f"{PREFIX}/products/{p['_id']}", headers=auth).status_code == 404


def test_product_listing_filters_by_price_and_pages(client, auth, make_product):
    for i in range(12):
        make_product(price=19.99 if i % 2 else 5.0)

    resp = client.get(f"{PREFIX}/products?price=19.99&page=2&limit=5", headers=auth)
    data = resp.json()["data"]
    assert resp.status_code == 200
    assert data["page"] == 2
    assert data["total"] == 6
    assert data["pages"] == 2
    assert len(data["items"]) == 1
    assert all(p["price"] == 19.99 for p in data["items"])

    same = client.get(f"{PREFIX}/products?price=19.99&page=2&limit=5&colour=red", headers=auth).json()["data"]
    assert same == data

    assert client.get(f"{PREFIX}/products?limit=0", headers=auth).status_code == 400


def test_create_order_with_no_products(client, auth):
    resp = client.post(f"{PREFIX}/orders", headers=auth, json={"products": []})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Order must contain at least one product"


def test_create_order_out_of_stock(client, auth, make_product):
    p = make_product(stock=1, name="Lamp")
    resp = client.post(f"{PREFIX}/orders", headers=auth, json={"products": [{"product": p["_id"], "quantity": 2}]})
    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "The following products are out of stock: Lamp"
    assert body["errors"] == {"products": ["Lamp"]}
    assert client.get(f"{PREFIX}/orders", headers=auth).json()["data"]["total"] == 0


def test_create_order_binds_caller_and_expands(client, auth, user, make_product):
    a = make_product(stock=5, price=2.0)
    b = make_product(stock=5, price=3.0)
    resp = client.post(f"{PREFIX}/orders", headers=auth, json={
        "user": str(ObjectId()),
        "totalProducts": 99,
        "products": [{"product": a["_id"], "quantity": 5}, {"product": b["_id"], "quantity": 1}],
    })
    assert resp.status_code == 201
    order = resp.json()["data"]
    assert order["user"] == user["_id"]
    assert order["totalProducts"] == 2
    assert order["totalAmount"] == 13.0

    mine = client.get(f"{PREFIX}/orders/from/{user['_id']}?with=user,products.product", headers=auth).json()["data"]
    assert mine["total"] == 1
    expanded = mine["items"][0]
    assert expanded["user"]["username"] == "alice"
    assert "password" not in expanded["user"]
    assert expanded["products"][0]["product"]["name"] == a["name"]

    resp = client.patch(f"{PREFIX}/orders/{order['_id']}", headers=auth, json={"status": "shipped"})
    assert resp.json()["data"]["status"] == "SHIPPED"
    resp = client.patch(f"{PREFIX}/orders/{order['_id']}", headers=auth, json={"status": "LOST"})
    assert resp.status_code == 400

    assert client.get(f"{PREFIX}/orders/{order['_id']}", headers=auth).json()["data"]["_id"] == order["_id"]
    assert client.delete(f"{PREFIX}/orders/{order['_id']}", headers=auth).status_code == 200
    assert client.get(f"{PREFIX}/orders/{order['_id']}", headers=auth).status_code == 404


def test_malformed_order_line(client, auth):
    resp = client.post(f"{PREFIX}/orders", headers=auth, json={"products": [{"product": "abc", "quantity": 0}]})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Validation failed"


def test_unknown_route_uses_envelope(client):
    resp = client.get(f"{PREFIX}/nothing-here")
    assert resp.status_code == 404
    assert resp.json()["success"] is False


def test_update_trims_username_so_uniqueness_holds(client, user, auth):
    register(client, username="bob")
    resp = client.patch(f"{PREFIX}/users/{user['_id']}", headers=auth, json={"username": " bob ", "name": "  Al  "})
    assert resp.status_code == 409

    resp = client.patch(f"{PREFIX}/users/{user['_id']}", headers=auth, json={"name": "  Al  "})
    assert resp.json()["data"]["name"] == "Al"


def test_listing_with_oversized_page_is_bad_input(client, auth):
    resp = client.get(f"{PREFIX}/products?page=100000000000000000000", headers=auth)
    assert resp.status_code == 400
    assert resp.json()["success"] is False
