"""Routers via TestClient: typed failures mapped to status codes."""

SUBJECT = {"X-Subject-Id": "user-1"}
OTHER = {"X-Subject-Id": "user-2"}
CHECKOUT = {"shipping_address": "12 Market Street", "contact_phone": "555-0100"}


def _login(client, sub="user-1", **claims):
    response = client.post("/users/sync", json={"sub": sub, **claims})
    assert response.status_code == 200
    return response.json()


def _add(client, product_id, quantity=1, headers=SUBJECT):
    return client.post("/cart/items", json={"product_id": product_id, "quantity": quantity}, headers=headers)


class TestHealthAndProducts:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_products(self, client):
        response = client.get("/products/")
        assert response.status_code == 200
        assert [p["id"] for p in response.json()] == [1, 2, 3]

    def test_unknown_product(self, client):
        assert client.get("/products/99").status_code == 404


class TestUsersEndpoints:
    def test_sync_and_me(self, client):
        _login(client, email="ada@example.com")

        me = client.get("/users/me", headers=SUBJECT)

        assert me.status_code == 200
        assert me.json()["email"] == "ada@example.com"

    def test_sync_without_subject(self, client):
        assert client.post("/users/sync", json={"email": "x@example.com"}).status_code == 401

    def test_me_anonymous(self, client):
        assert client.get("/users/me").status_code == 401

    def test_update_contact(self, client):
        _login(client)

        response = client.put("/users/me/contact", json={"phone_number": "555-0100"}, headers=SUBJECT)

        assert response.json()["phone_number"] == "555-0100"


class TestCartEndpoints:
    def test_add_and_get(self, client):
        _login(client)
        _add(client, 1, 2)
        response = _add(client, 1, 3)

        body = response.json()
        assert response.status_code == 200
        assert len(body["items"]) == 1
        assert body["items"][0]["quantity"] == 5
        assert body["item_count"] == 5
        assert client.get("/cart/count", headers=SUBJECT).json() == {"count": 5}

    def test_quantity_clamped_to_one(self, client):
        _login(client)

        assert _add(client, 1, 0).json()["items"][0]["quantity"] == 1

    def test_cart_before_sync(self, client):
        assert _add(client, 1).status_code == 409

    def test_anonymous(self, client):
        assert client.get("/cart/").status_code == 404
        assert client.get("/cart/count").json() == {"count": 0}
        assert _add(client, 1, headers={}).status_code == 401

    def test_remove_and_clear(self, client):
        _login(client)
        _add(client, 1)
        line_id = _add(client, 2).json()["items"][1]["id"]

        removed = client.delete(f"/cart/items/{line_id}", headers=SUBJECT)
        assert [i["product_id"] for i in removed.json()["items"]] == [1]

        again = client.delete(f"/cart/items/{line_id}", headers=SUBJECT)
        assert again.status_code == 200

        cleared = client.delete("/cart/items", headers=SUBJECT)
        assert cleared.json()["items"] == []

    def test_mutations_without_cart_are_no_content(self, client):
        _login(client)

        assert client.delete("/cart/items/5", headers=SUBJECT).status_code == 204
        assert client.delete("/cart/items/5", headers=SUBJECT).status_code == 204
        assert client.delete("/cart/items", headers=SUBJECT).status_code == 204
        assert _add(client, 99).status_code == 204
        assert client.get("/cart/", headers=SUBJECT).status_code == 404


class TestOrderEndpoints:
    def test_place_and_confirm(self, client, notifier):
        _login(client)
        _add(client, 1, 2)
        _add(client, 2, 1)

        response = client.post("/orders/", json=CHECKOUT, headers=SUBJECT)

        assert response.status_code == 201
        order = response.json()
        assert order["total"] in ("25.00", "25.0", 25.0)
        assert notifier.sent == [("user-1", order["id"])]

        confirm = client.get(f"/orders/{order['id']}", headers=SUBJECT)
        assert confirm.status_code == 200
        assert len(confirm.json()["items"]) == 2

        assert client.get("/cart/count", headers=SUBJECT).json() == {"count": 0}
        assert [o["id"] for o in client.get("/orders/", headers=SUBJECT).json()] == [order["id"]]

    def test_foreign_order_is_not_found(self, client):
        _login(client)
        _login(client, sub="user-2")
        _add(client, 1)
        order_id = client.post("/orders/", json=CHECKOUT, headers=SUBJECT).json()["id"]

        assert client.get(f"/orders/{order_id}", headers=OTHER).status_code == 404

    def test_empty_cart(self, client):
        _login(client)

        assert client.post("/orders/", json=CHECKOUT, headers=SUBJECT).status_code == 400

    def test_validation_errors_per_field(self, client):
        _login(client)
        _add(client, 1)

        response = client.post(
            "/orders/", json={"shipping_address": "", "contact_phone": "abc"}, headers=SUBJECT
        )

        assert response.status_code == 422
        errors = response.json()["detail"]["errors"]
        assert set(errors) == {"shipping_address", "contact_phone"}

    def test_checkout_defaults(self, client):
        _login(client)
        client.put("/users/me/contact", json={"default_shipping_address": "1 Main St"}, headers=SUBJECT)

        defaults = client.get("/orders/checkout", headers=SUBJECT).json()

        assert defaults == {"shipping_address": "1 Main St", "contact_phone": ""}

    def test_anonymous_checkout(self, client):
        assert client.post("/orders/", json=CHECKOUT).status_code == 401
