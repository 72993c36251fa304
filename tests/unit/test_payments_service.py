import pytest
from fastapi import HTTPException

from pixoul.auth.identity import Authenticated, Guest
from pixoul.payments import service as payments_service
from tests.fakes import TEST_USER, paid_session


@pytest.fixture(autouse=True)
def order(fake_db):
    return fake_db.seed("orders", {
        "id": "order-1", "user_id": "test-user", "total": 141.75,
        "payment_status": "unpaid", "status": "pending",
    })[0]


def _payload(**overrides):
    payload = {
        "type": "order",
        "referenceId": "order-1",
        "amount": 141.75,
        "metadata": {"itemName": "Snack order", "description": "2 items"},
    }
    payload.update(overrides)
    return payload


def test_create_checkout_builds_session(fake_stripe):
    out = payments_service.create_checkout(TEST_USER, _payload(), "https://pixoul.test/")
    assert out == {"url": "https://checkout.stripe.test/1", "sessionId": "cs_test_1"}

    params = fake_stripe.created[0]
    line = params["line_items"][0]
    assert line["quantity"] == 1
    assert line["price_data"]["unit_amount"] == 14884
    assert line["price_data"]["currency"] == "aed"
    assert line["price_data"]["product_data"] == {"name": "Snack order", "description": "2 items"}
    assert params["customer"] == "cus_test"
    assert params["success_url"] == "https://pixoul.test/payment-success?type=order&id=order-1&session_id={CHECKOUT_SESSION_ID}"
    assert params["cancel_url"] == "https://pixoul.test/payment-cancelled?type=order&id=order-1"
    assert params["metadata"] == {
        "type": "order", "referenceId": "order-1", "userId": "test-user",
        "subtotal": "14175", "vat": "709", "total": "14884",
    }
    assert params["payment_intent_data"] is None


def test_create_checkout_defaults_item_name_and_saves_card(fake_stripe):
    payments_service.create_checkout(TEST_USER, _payload(metadata={}, paymentMethodId="pm_1"), "https://pixoul.test")
    params = fake_stripe.created[0]
    assert params["line_items"][0]["price_data"]["product_data"] == {"name": "Payment"}
    assert params["payment_intent_data"] == {"setup_future_usage": "on_session"}


def test_idempotency_key_follows_every_checkout_parameter(fake_stripe):
    payments_service.create_checkout(TEST_USER, _payload(), "https://pixoul.test")
    payments_service.create_checkout(TEST_USER, _payload(), "https://pixoul.test")
    payments_service.create_checkout(TEST_USER, _payload(metadata={"itemName": "Other name"}), "https://pixoul.test")
    payments_service.create_checkout(TEST_USER, _payload(paymentMethodId="pm_1"), "https://pixoul.test")
    payments_service.create_checkout(TEST_USER, _payload(), "https://other.pixoul.test")
    keys = [p["idempotency_key"] for p in fake_stripe.created]
    assert keys[0] == keys[1]
    assert len(set(keys[1:])) == 4


def test_checkout_amount_must_match_stored_total(fake_stripe):
    with pytest.raises(HTTPException) as exc:
        payments_service.create_checkout(TEST_USER, _payload(amount=0.01), "https://pixoul.test")
    assert exc.value.status_code == 400
    assert exc.value.detail == "amount does not match amount due (141.75)"
    assert fake_stripe.created == []


def test_checkout_checks_the_purchasable(fake_db, fake_stripe):
    fake_db.seed(
        "orders",
        {"id": "order-other", "user_id": "someone-else", "total": 141.75, "payment_status": "unpaid"},
        {"id": "order-paid", "user_id": "test-user", "total": 141.75, "payment_status": "paid"},
    )
    for ref, status in (("missing", 404), ("order-other", 403), ("order-paid", 409)):
        with pytest.raises(HTTPException) as exc:
            payments_service.create_checkout(TEST_USER, _payload(referenceId=ref), "https://pixoul.test")
        assert exc.value.status_code == status
    assert fake_stripe.created == []


def test_party_checkout_needs_a_quote(fake_db, fake_stripe):
    party = fake_db.seed("party_requests", {"user_id": "test-user", "status": "new", "payment_status": "unpaid"})[0]
    with pytest.raises(HTTPException) as exc:
        payments_service.create_checkout(TEST_USER, _payload(type="party", referenceId=party["id"]), "https://pixoul.test")
    assert exc.value.status_code == 409

    fake_db.rows("party_requests", id=party["id"])[0]["estimated_cost"] = 141.75
    payments_service.create_checkout(TEST_USER, _payload(type="party", referenceId=party["id"]), "https://pixoul.test")
    assert fake_stripe.created[0]["metadata"]["total"] == "14884"


def test_event_checkout_charges_price_per_seat(fake_db, fake_stripe):
    event = fake_db.seed("events_programs", {"title": "Retro night", "price": 50, "status": "active"})[0]
    reg = fake_db.seed("event_registrations", {
        "user_id": "test-user", "event_id": event["id"], "party_size": 2, "payment_status": "unpaid",
    })[0]
    payments_service.create_checkout(TEST_USER, _payload(type="event", referenceId=reg["id"], amount=100), "https://pixoul.test")
    assert fake_stripe.created[0]["line_items"][0]["price_data"]["unit_amount"] == 10500


@pytest.mark.parametrize(
    "payload,status",
    [
        (_payload(type="giftcard"), 400),
        (_payload(amount=-1), 400),
        (_payload(amount="abc"), 400),
        (_payload(referenceId=""), 400),
    ],
)
def test_create_checkout_validation(fake_stripe, payload, status):
    with pytest.raises(HTTPException) as exc:
        payments_service.create_checkout(TEST_USER, payload, "https://pixoul.test")
    assert exc.value.status_code == status
    assert fake_stripe.created == []


def test_create_checkout_requires_email_identity(fake_stripe):
    for who in (Guest(), Authenticated(id="u1", email=None)):
        with pytest.raises(HTTPException) as exc:
            payments_service.create_checkout(who, _payload(), "https://pixoul.test")
        assert exc.value.status_code == 401


def test_verify_unpaid_session_mutates_nothing(fake_db, fake_stripe):
    fake_stripe.sessions["cs_u"] = dict(paid_session("cs_u", "order", "order-1"), payment_status="unpaid")
    calls_before = len(fake_db.calls)
    with pytest.raises(HTTPException) as exc:
        payments_service.verify_payment(TEST_USER, "cs_u")
    assert exc.value.status_code == 400
    assert exc.value.detail == "Payment not completed"
    assert fake_db.calls[calls_before:] == []


def test_verify_other_users_session_is_403(fake_db, fake_stripe):
    fake_stripe.sessions["cs_o"] = paid_session("cs_o", "order", "order-1", user_id="someone-else")
    with pytest.raises(HTTPException) as exc:
        payments_service.verify_payment(TEST_USER, "cs_o")
    assert exc.value.status_code == 403
    assert fake_db.rows("processed_payments") == []


def test_verify_paid_booking(fake_db, fake_stripe):
    booking = fake_db.seed("room_bookings", {"user_id": "test-user", "status": "pending", "payment_status": "unpaid", "total_amount": 141.75})[0]
    fake_stripe.sessions["cs_b"] = paid_session("cs_b", "booking", booking["id"])
    out = payments_service.verify_payment(TEST_USER, "cs_b")
    assert out == {"success": True, "type": "booking", "referenceId": booking["id"], "alreadyProcessed": False}
    again = payments_service.verify_payment(TEST_USER, "cs_b")
    assert again["alreadyProcessed"] is True


def test_webhook_ignores_other_events(fake_db):
    out = payments_service.handle_webhook_event({"type": "payment_intent.created", "data": {"object": {}}})
    assert out == {"received": True, "status": "ignored"}
    assert fake_db.calls == []


def test_webhook_ignores_unpaid_completed_session(fake_db):
    session = dict(paid_session("cs_x", "order", "order-1"), payment_status="unpaid")
    out = payments_service.handle_webhook_event({"id": "evt_1", "type": "checkout.session.completed", "data": {"object": session}})
    assert out["status"] == "ignored"
    assert fake_db.calls == []


def test_webhook_reconciles_party(fake_db, fake_stripe):
    party = fake_db.seed("party_requests", {"user_id": "test-user", "status": "new", "payment_status": "unpaid", "estimated_cost": 141.75})[0]
    event = {"id": "evt_9", "type": "checkout.session.completed", "data": {"object": paid_session("cs_9", "party", party["id"])}}
    out = payments_service.handle_webhook_event(event)
    assert out["received"] is True
    assert out["alreadyProcessed"] is False
    assert fake_db.rows("processed_payments", session_id="cs_9")[0]["event_id"] == "evt_9"
