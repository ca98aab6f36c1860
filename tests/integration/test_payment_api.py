from models.medicine import Medicine
from models.order import Order


def _checkout(client, headers, address):
    return client.post("/api/payment/create-order", json={"deliveryAddress": address}, headers=headers)


def _verify(client, headers, sign, gateway_order_id, payment_id, signature=None):
    return client.post("/api/payment/verify", json={
        "gatewayOrderId": gateway_order_id,
        "gatewayPaymentId": payment_id,
        "signature": signature if signature is not None else sign(gateway_order_id, payment_id),
    }, headers=headers)


def test_full_checkout(client, db, auth, customer, make_medicine, sign, address):
    med = make_medicine(name="A", price="50.00", stock=5)
    headers = auth(customer)
    client.post("/api/cart/add", json={"itemId": med.id, "quantity": 2}, headers=headers)

    res = _checkout(client, headers, address)
    assert res.status_code == 200
    started = res.json()
    assert started["amount"] == 10000
    assert started["currency"] == "INR"
    assert started["gateway_order_id"] == "order_test1"

    res = _verify(client, headers, sign, started["gateway_order_id"], "pay_001")
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    order = body["order"]
    assert order["total_price"] == 100.0
    assert order["payment_status"] == "completed"
    assert order["delivery_status"] == "pending"
    assert order["delivery_address"]["zip_code"] == "411001"
    assert order["items"] == [{
        "medicine_id": med.id, "medicine_name": "A", "quantity": 2,
        "price_at_purchase": 50.0, "line_total": 100.0,
    }]

    assert client.get("/api/cart", headers=headers).json()["items"] == []
    db.expire_all()
    assert db.get(Medicine, med.id).stock_quantity == 3

    # Same callback again: same order, no second decrement
    res = _verify(client, headers, sign, started["gateway_order_id"], "pay_001")
    assert res.status_code == 200
    assert res.json()["order"]["id"] == order["id"]
    assert res.json()["message"] == "Payment already processed"
    db.expire_all()
    assert db.get(Medicine, med.id).stock_quantity == 3
    assert db.query(Order).count() == 1


def test_checkout_rejections(client, db, auth, customer, make_medicine, address, gateway):
    headers = auth(customer)

    res = _checkout(client, headers, address)
    assert res.status_code == 400
    assert res.json()["code"] == "REJECTED_EMPTY_CART"

    med = make_medicine(name="B", stock=3)
    client.post("/api/cart/add", json={"itemId": med.id, "quantity": 10}, headers=headers)

    res = _checkout(client, headers, {**address, "phone": ""})
    assert res.status_code == 400
    assert res.json()["code"] == "REJECTED_INVALID_ADDRESS"
    assert res.json()["missing"] == ["phone"]

    res = _checkout(client, headers, address)
    assert res.status_code == 400
    body = res.json()
    assert body["code"] == "REJECTED_INSUFFICIENT_STOCK"
    assert body["shortages"] == [{"medicine_id": med.id, "name": "B", "requested": 10, "available": 3}]
    assert gateway.calls == []
    db.expire_all()
    assert db.get(Medicine, med.id).stock_quantity == 3


def test_gateway_down(client, auth, customer, make_medicine, address, gateway):
    med = make_medicine()
    headers = auth(customer)
    client.post("/api/cart/add", json={"itemId": med.id}, headers=headers)
    gateway.fail_with()

    res = _checkout(client, headers, address)

    assert res.status_code == 502
    assert res.json()["code"] == "FAILED_GATEWAY"
    assert "gateway down" not in res.json()["detail"]


def test_forged_signature(client, db, auth, customer, make_medicine, sign, address):
    med = make_medicine(stock=5)
    headers = auth(customer)
    client.post("/api/cart/add", json={"itemId": med.id}, headers=headers)
    started = _checkout(client, headers, address).json()

    res = _verify(client, headers, sign, started["gateway_order_id"], "pay_1", signature="0" * 64)

    assert res.status_code == 400
    assert res.json()["code"] == "REJECTED_BAD_SIGNATURE"
    assert db.query(Order).count() == 0
    assert len(client.get("/api/cart", headers=headers).json()["items"]) == 1


def test_verify_unknown_gateway_order(client, auth, customer, sign):
    res = _verify(client, auth(customer), sign, "order_nope", "pay_1")
    assert res.status_code == 404
    assert res.json()["code"] == "REJECTED_UNKNOWN_INTENT"


def test_verify_requires_fields(client, auth, customer):
    res = client.post("/api/payment/verify", json={"gatewayOrderId": "order_1"}, headers=auth(customer))
    assert res.status_code == 422


def test_two_customers_one_unit_short(client, db, auth, customer, other_customer, make_medicine, sign, address):
    med = make_medicine(stock=3)
    alice, bob = auth(customer), auth(other_customer)
    client.post("/api/cart/add", json={"itemId": med.id, "quantity": 2}, headers=alice)
    client.post("/api/cart/add", json={"itemId": med.id, "quantity": 2}, headers=bob)

    started_a = _checkout(client, alice, address).json()
    started_b = _checkout(client, bob, address).json()

    res_a = _verify(client, alice, sign, started_a["gateway_order_id"], "pay_a")
    res_b = _verify(client, bob, sign, started_b["gateway_order_id"], "pay_b")

    assert res_a.status_code == 200
    assert res_b.status_code == 400
    assert res_b.json()["code"] == "REJECTED_INSUFFICIENT_STOCK"
    db.expire_all()
    assert db.get(Medicine, med.id).stock_quantity == 1
    assert db.query(Order).count() == 1


def test_create_order_without_address(client, auth, customer, make_medicine):
    headers = auth(customer)

    res = client.post("/api/payment/create-order", json={}, headers=headers)
    assert res.status_code == 400
    assert res.json()["code"] == "REJECTED_EMPTY_CART"

    med = make_medicine()
    client.post("/api/cart/add", json={"itemId": med.id}, headers=headers)

    res = client.post("/api/payment/create-order", json={}, headers=headers)
    assert res.status_code == 400
    assert res.json()["code"] == "REJECTED_INVALID_ADDRESS"
    assert res.json()["missing"] == ["address_line1", "city", "full_name", "phone", "state", "zip_code"]
