def test_cart_requires_token(client):
    assert client.get("/api/cart").status_code == 401


def test_cart_rejects_bad_token(client):
    res = client.get("/api/cart", headers={"Authorization": "Bearer not-a-jwt"})
    assert res.status_code == 401


def test_cart_is_customer_only(client, auth, pharmacy):
    assert client.get("/api/cart", headers=auth(pharmacy)).status_code == 403


def test_cart_flow(client, auth, customer, make_medicine):
    med = make_medicine(name="Ibuprofen", price="45.50", stock=10)
    headers = auth(customer)

    res = client.post("/api/cart/add", json={"itemId": med.id}, headers=headers)
    assert res.status_code == 200
    assert res.json()["items"][0]["quantity"] == 1

    res = client.post("/api/cart/add", json={"itemId": med.id, "quantity": 2}, headers=headers)
    body = res.json()
    assert body["items"][0]["quantity"] == 3
    assert body["total"] == 136.5

    res = client.put("/api/cart/update", json={"itemId": med.id, "quantity": 1}, headers=headers)
    assert res.json()["items"][0]["quantity"] == 1

    res = client.get("/api/cart", headers=headers)
    assert res.json()["items"][0]["name"] == "Ibuprofen"
    assert res.json()["items"][0]["price"] == 45.5

    res = client.delete(f"/api/cart/{med.id}", headers=headers)
    assert res.status_code == 200
    assert res.json() == {"items": [], "total": 0.0}

    # Removing again is fine
    assert client.delete(f"/api/cart/{med.id}", headers=headers).status_code == 200


def test_update_errors(client, auth, customer, make_medicine):
    med = make_medicine()
    headers = auth(customer)

    res = client.put("/api/cart/update", json={"itemId": med.id, "quantity": 2}, headers=headers)
    assert res.status_code == 404
    assert res.json()["code"] == "CART_ITEM_NOT_FOUND"

    client.post("/api/cart/add", json={"itemId": med.id}, headers=headers)
    res = client.put("/api/cart/update", json={"itemId": med.id, "quantity": 0}, headers=headers)
    assert res.status_code == 400
    assert res.json()["code"] == "INVALID_QUANTITY"


def test_add_unknown_medicine(client, auth, customer):
    res = client.post("/api/cart/add", json={"itemId": 999}, headers=auth(customer))
    assert res.status_code == 404
