from conftest import STAFF_KEY, auth_headers, place_order, register


def test_profile_roundtrip(client):
    token, user_id = register(client, phone="555-0100")

    profile = client.get("/api/profile", headers=auth_headers(token))
    assert profile.status_code == 200
    body = profile.json()
    assert body["id"] == user_id
    assert body["email"] == "ada@example.com"
    assert body["phone"] == "555-0100"
    assert body["created_at"]
    assert "hashed_password" not in body

    response = client.put("/api/profile", json={"name": "Ada L.", "phone": "555-0199"}, headers=auth_headers(token))
    assert response.status_code == 200

    body = client.get("/api/profile", headers=auth_headers(token)).json()
    assert body["name"] == "Ada L."
    assert body["phone"] == "555-0199"
    assert body["email"] == "ada@example.com"


def test_profile_of_unknown_user(client, app):
    # Validly signed, but for a user id that was never registered
    token = app.state.session_issuer.issue(4242, "ghost@example.com")
    assert client.get("/api/profile", headers=auth_headers(token)).status_code == 404


def test_change_password(client):
    token, _ = register(client)

    wrong = client.put(
        "/api/change-password",
        json={"currentPassword": "wrong", "newPassword": "n3w-pass"},
        headers=auth_headers(token),
    )
    assert wrong.status_code == 401

    ok = client.put(
        "/api/change-password",
        json={"currentPassword": "s3cret!", "newPassword": "n3w-pass"},
        headers=auth_headers(token),
    )
    assert ok.status_code == 200

    assert client.post("/api/login", json={"email": "ada@example.com", "password": "s3cret!"}).status_code == 401
    assert client.post("/api/login", json={"email": "ada@example.com", "password": "n3w-pass"}).status_code == 200


def test_change_password_unknown_user(client, app):
    token = app.state.session_issuer.issue(4242, "ghost@example.com")
    response = client.put(
        "/api/change-password",
        json={"currentPassword": "a", "newPassword": "b"},
        headers=auth_headers(token),
    )
    assert response.status_code == 404


def test_dashboard(client):
    token, _ = register(client)
    other, _ = register(client, email="eve@example.com", name="Eve")
    ids = [place_order(client, token, material="pla")["orderId"] for _ in range(6)]
    place_order(client, other, material="metal")

    client.patch(f"/api/orders/{ids[0]}/status", json={"status": "completed"}, headers={"X-API-Key": STAFF_KEY})
    client.delete(f"/api/orders/{ids[1]}", headers=auth_headers(token))

    response = client.get("/api/dashboard", headers=auth_headers(token))

    assert response.status_code == 200
    body = response.json()
    assert body["summary"] == {
        "total_orders": 6,
        "active_orders": 4,
        "completed_orders": 1,
        "total_spent": 60.0,
    }
    assert [o["id"] for o in body["recentOrders"]] == list(reversed(ids))[:5]


def test_dashboard_empty(client):
    token, _ = register(client)
    body = client.get("/api/dashboard", headers=auth_headers(token)).json()
    assert body["summary"]["total_orders"] == 0
    assert body["summary"]["total_spent"] == 0
    assert body["recentOrders"] == []


def test_contact_needs_no_login(client):
    response = client.post("/api/contact", json={
        "name": "Grace",
        "email": "grace@example.com",
        "subject": "Bulk order",
        "message": "Do you print in nylon?",
    })

    assert response.status_code == 201
    assert response.json()["messageId"] > 0


def test_contact_validation(client):
    response = client.post("/api/contact", json={
        "name": "Grace",
        "email": "grace",
        "message": "Hi",
    })
    assert response.status_code == 400

    response = client.post("/api/contact", json={"name": "Grace", "email": "grace@example.com"})
    assert response.status_code == 400


def test_materials_catalog(client):
    response = client.get("/api/materials")

    assert response.status_code == 200
    materials = {m["id"]: m for m in response.json()}
    assert set(materials) == {"pla", "abs", "petg", "resin", "nylon", "metal"}
    assert materials["petg"]["base_price"] == 18


def test_quote_estimate_matches_order_price(client):
    token, _ = register(client)

    estimate = client.get("/api/quote", params={"material": "nylon", "needs_design": "yes"}).json()
    charged = place_order(client, token, material="nylon", needs_design="yes")["totalPrice"]

    assert estimate["estimate"] is True
    assert estimate["base_price"] == 25
    assert estimate["design_fee"] == 50
    assert estimate["total_price"] == charged == 75


def test_quote_requires_material(client):
    assert client.get("/api/quote").status_code == 400


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
