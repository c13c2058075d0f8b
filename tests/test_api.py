from decimal import Decimal
from urllib.parse import parse_qs, unquote, urlparse

from storefront.seed import ADMIN_EMAIL, ADMIN_PASSWORD


def login_admin(client):
    r = client.post("/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert r.status_code == 200
    return r.json()


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "store_ready": True}


def test_products_listing_and_detail(client):
    r = client.get("/products")
    assert r.status_code == 200
    assert len(r.json()) == 6

    r = client.get("/products", params={"q": "vehicle"})
    assert [p["name"] for p in r.json()] == ["Vehicle Collection"]

    r = client.get("/products/1")
    assert r.status_code == 200
    assert r.json()["name"] == "Futuristic Robot Model"
    assert Decimal(r.json()["price"]) == Decimal("29.99")

    assert client.get("/products/999").status_code == 404


def test_register_login_logout_flow(client):
    r = client.post("/auth/register", json={"email": "shopper@example.com", "password": "secret123"})
    assert r.status_code == 201
    assert r.json()["role"] == "user"

    r = client.post("/auth/register", json={"email": "shopper@example.com", "password": "secret123"})
    assert r.status_code == 400
    assert r.json()["detail"] == "User already exists with this email"

    me = client.get("/auth/me").json()
    assert me["authenticated"] and not me["is_admin"]

    client.post("/auth/logout")
    assert client.get("/auth/me").json()["authenticated"] is False

    r = client.post("/auth/login", json={"email": "shopper@example.com", "password": "nope"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid email or password"


def test_dashboard_requires_login(client):
    assert client.get("/orders").status_code == 401
    client.post("/auth/register", json={"email": "empty@example.com", "password": "secret123"})
    r = client.get("/orders")
    assert r.status_code == 200
    assert r.json() == []


def test_admin_routes_forbidden_for_regular_users(client):
    assert client.get("/admin/products").status_code == 403
    client.post("/auth/register", json={"email": "regular@example.com", "password": "secret123"})
    r = client.post("/admin/products", json={"name": "X", "price": "1.00"})
    assert r.status_code == 403
    assert r.json()["detail"] == "Access Denied"
    assert client.delete("/admin/products/1").status_code == 403


def test_admin_product_crud(client):
    login_admin(client)

    r = client.post("/admin/products", json={
        "name": "Dungeon Props",
        "description": "Crates, barrels and torches",
        "price": "14.50",
        "image_url": "https://example.com/props.png",
        "paypal_link": "https://www.paypal.com/cgi-bin/webscr?cmd=_s-xclick&hosted_button_id=PROPS",
        "zip_path": "assets/products/props.zip",
    })
    assert r.status_code == 201
    pid = r.json()["id"]

    r = client.put(f"/admin/products/{pid}", json={"name": "Dungeon Props HD", "price": "19.00"})
    assert r.status_code == 200
    assert r.json()["name"] == "Dungeon Props HD"
    assert r.json()["paypal_link"].endswith("hosted_button_id=PROPS")

    r = client.delete(f"/admin/products/{pid}")
    assert r.status_code == 200
    assert r.json()["deleted"] == pid
    assert pid not in [p["id"] for p in client.get("/products").json()]

    r = client.put("/admin/products/999", json={"name": "Ghost", "price": "1.00"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Error saving product. Please try again."


def test_admin_rejects_negative_price(client):
    login_admin(client)
    r = client.post("/admin/products", json={"name": "Bad", "price": "-1.00"})
    assert r.status_code == 422


def test_admin_records_order_shown_on_dashboard(client):
    login_admin(client)
    r = client.post("/admin/orders", json={"user_email": "buyer@example.com", "product_id": 5})
    assert r.status_code == 201
    client.post("/auth/logout")

    client.post("/auth/register", json={"email": "buyer@example.com", "password": "secret123"})
    orders = client.get("/orders").json()
    assert len(orders) == 1
    assert orders[0]["product_name"] == "Vehicle Collection"


def test_checkout_link_carries_return_url(client):
    client.post("/auth/register", json={"email": "buyer@example.com", "password": "secret123"})
    r = client.get("/products/2/checkout")
    assert r.status_code == 200
    url = r.json()["url"]
    link, _, encoded_return = url.partition("&return=")
    assert link.endswith("hosted_button_id=SAMPLE2")

    return_url = urlparse(unquote(encoded_return))
    assert return_url.path == "/thankyou"
    assert parse_qs(return_url.query) == {"product_id": ["2"], "email": ["buyer@example.com"]}


def test_checkout_link_anonymous_has_no_email(client):
    url = client.get("/products/1/checkout").json()["url"]
    assert "email" not in unquote(url)


def test_thank_you_does_not_write_orders(client):
    r = client.get("/thankyou", params={"product_id": 3, "email": "buyer@example.com"})
    assert r.status_code == 200
    body = r.json()
    assert body["product"]["name"] == "Architectural Building Set"
    assert body["download_path"] == "assets/products/building.zip"

    client.post("/auth/register", json={"email": "buyer@example.com", "password": "secret123"})
    assert client.get("/orders").json() == []


def test_chat_endpoint(client):
    r = client.post("/chat", json={"message": "Generate a procedural tree model"})
    assert r.status_code == 200
    bot = r.json()["messages"][-1]
    assert bot["type"] == "bot"
    assert bot["download_link"] == "tree_generator.py"

    history = client.get("/chat").json()
    assert history["prompts_left"] == 2
    assert len(history["chats"]) == 1

    assert client.post("/chat", json={"message": "   "}).status_code == 400
