import pytest

from exceptions import CartItemNotFound, InvalidQuantity, MedicineNotFound
from models.cart import CartItem
from services.cart_store import CartStore


def test_add_defaults_to_one_and_increments(db, customer, make_medicine):
    med = make_medicine(price="12.50", stock=1)
    store = CartStore(db)

    store.add_item(customer, med.id)
    out = store.add_item(customer, med.id, 3)

    assert len(out.items) == 1
    assert out.items[0].quantity == 4
    assert out.items[0].line_total == 50.0
    assert out.total == 50.0
    assert db.query(CartItem).count() == 1


def test_add_does_not_check_stock(db, customer, make_medicine):
    med = make_medicine(stock=0)
    out = CartStore(db).add_item(customer, med.id, 7)
    assert out.items[0].quantity == 7


def test_add_unknown_medicine(db, customer):
    with pytest.raises(MedicineNotFound):
        CartStore(db).add_item(customer, 999)


@pytest.mark.parametrize("quantity", [0, -2])
def test_add_rejects_non_positive_quantity(db, customer, make_medicine, quantity):
    med = make_medicine()
    with pytest.raises(InvalidQuantity):
        CartStore(db).add_item(customer, med.id, quantity)


def test_set_quantity_overwrites(db, customer, make_medicine):
    med = make_medicine()
    store = CartStore(db)
    store.add_item(customer, med.id, 5)

    out = store.set_quantity(customer, med.id, 2)

    assert out.items[0].quantity == 2


@pytest.mark.parametrize("quantity", [0, -1])
def test_set_quantity_below_one_fails_and_keeps_line(db, customer, make_medicine, quantity):
    med = make_medicine()
    store = CartStore(db)
    store.add_item(customer, med.id, 3)

    with pytest.raises(InvalidQuantity):
        store.set_quantity(customer, med.id, quantity)
    assert store.list_items(customer).items[0].quantity == 3


def test_set_quantity_for_missing_line(db, customer, make_medicine):
    med = make_medicine()
    with pytest.raises(CartItemNotFound):
        CartStore(db).set_quantity(customer, med.id, 2)


def test_remove_is_idempotent(db, customer, make_medicine):
    med = make_medicine()
    store = CartStore(db)
    store.add_item(customer, med.id)

    assert store.remove_item(customer, med.id).items == []
    assert store.remove_item(customer, med.id).items == []
    assert store.remove_item(customer, 12345).items == []


def test_list_joins_live_snapshot(db, customer, make_medicine):
    med = make_medicine(name="Cetirizine", price="25.00")
    store = CartStore(db)
    store.add_item(customer, med.id, 2)

    med.price = 30
    db.commit()
    item = store.list_items(customer).items[0]

    assert item.name == "Cetirizine"
    assert item.image == "/img/cetirizine.png"
    assert item.price == 30.0
    assert item.line_total == 60.0


def test_carts_are_per_customer(db, customer, other_customer, make_medicine):
    med = make_medicine()
    store = CartStore(db)
    store.add_item(customer, med.id, 2)

    assert store.list_items(other_customer).items == []
    store.clear(customer.id)
    db.commit()
    assert store.list_items(customer).items == []


def test_cart_changes_are_visible_to_other_sessions(db, session_factory, customer, make_medicine):
    med = make_medicine()
    CartStore(db).add_item(customer, med.id, 2)

    other = session_factory()
    try:
        CartStore(other).add_item(other.get(type(customer), customer.id), med.id, 3)
    finally:
        other.close()

    assert CartStore(db).list_items(customer).items[0].quantity == 5
    CartStore(db).clear(customer.id)
    db.commit()
    assert CartStore(db).lines(customer.id) == []
