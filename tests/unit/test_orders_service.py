import pytest
from fastapi import HTTPException

from pixoul.cart import service as cart_service
from pixoul.orders import service as orders_service

BURGER = {"id": "burger", "name": "Burger", "price": 20}
PIZZA = {"id": "pizza", "name": "Pizza", "price": 95}


def test_order_freezes_cart_totals(fake_db):
    cart_service.add_to_cart("u1", BURGER, 2)
    cart_service.add_to_cart("u1", PIZZA, 1)
    order = orders_service.create_order_from_cart("u1")
    assert order["subtotal"] == 135.0
    assert order["tax"] == 6.75
    assert order["total"] == 141.75
    assert order["status"] == "pending"
    assert order["payment_status"] == "unpaid"
    assert order["fulfillment"] == "pickup"
    # le panier reste actif jusqu'au paiement
    assert fake_db.rows("carts", id=order["cart_id"])[0]["status"] == "active"


def test_empty_cart_is_400(fake_db):
    with pytest.raises(HTTPException) as exc:
        orders_service.create_order_from_cart("u1")
    assert exc.value.status_code == 400
    assert exc.value.detail == "Cart is empty"


def test_list_my_orders_with_items(fake_db):
    mine = fake_db.seed("orders", {"user_id": "u1", "status": "new", "total": 40})[0]
    fake_db.seed("orders", {"user_id": "u2", "status": "new", "total": 95})
    fake_db.seed("order_items", {"order_id": mine["id"], "name": "Burger", "qty": 2})
    out = orders_service.list_my_orders("u1")
    assert len(out) == 1
    assert out[0]["items"][0]["name"] == "Burger"


def test_kitchen_status_flow(fake_db):
    order = fake_db.seed("orders", {"user_id": "u1", "status": "new"})[0]
    for status in ("preparing", "ready", "completed"):
        assert orders_service.update_order_status(order["id"], status)["status"] == status
    assert [o["id"] for o in orders_service.list_orders("completed")] == [order["id"]]


@pytest.mark.parametrize("status", ["pending", "burnt"])
def test_invalid_kitchen_status_is_400(fake_db, status):
    order = fake_db.seed("orders", {"user_id": "u1", "status": "new"})[0]
    with pytest.raises(HTTPException) as exc:
        orders_service.update_order_status(order["id"], status)
    assert exc.value.status_code == 400


def test_unknown_order_is_404(fake_db):
    with pytest.raises(HTTPException) as exc:
        orders_service.update_order_status("nope", "ready")
    assert exc.value.status_code == 404
