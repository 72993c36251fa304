import pytest
from fastapi import HTTPException

from pixoul.auth.identity import Authenticated
from pixoul.chat import service as chat_service
from tests.fakes import TEST_USER, staff

OTHER = Authenticated(id="other-user", email="other@example.com")


def test_support_conversation_is_reused_per_user(fake_db):
    first = chat_service.open_conversation(TEST_USER, "support")
    again = chat_service.open_conversation(TEST_USER, "support")
    other = chat_service.open_conversation(OTHER, "support")
    assert first["id"] == again["id"]
    assert other["id"] != first["id"]
    assert first["title"] == "Support"


def test_reference_conversation_is_reused(fake_db):
    booking = fake_db.seed("room_bookings", {"user_id": "test-user", "status": "pending"})[0]
    conv = chat_service.open_conversation(TEST_USER, "booking", reference_id=booking["id"], title="Booking")
    assert chat_service.open_conversation(TEST_USER, "booking", reference_id=booking["id"])["id"] == conv["id"]
    assert len(fake_db.rows("chat_conversations")) == 1


@pytest.mark.parametrize("ctype,ref", [("gossip", None), ("booking", None), ("party", "")])
def test_open_conversation_validation(fake_db, ctype, ref):
    with pytest.raises(HTTPException) as exc:
        chat_service.open_conversation(TEST_USER, ctype, reference_id=ref)
    assert exc.value.status_code == 400


def test_reference_conversation_requires_ownership(fake_db):
    party = fake_db.seed("party_requests", {"user_id": "other-user", "status": "new"})[0]
    with pytest.raises(HTTPException) as exc:
        chat_service.open_conversation(TEST_USER, "party", reference_id=party["id"])
    assert exc.value.status_code == 404
    assert fake_db.rows("chat_conversations") == []

    with pytest.raises(HTTPException) as exc:
        chat_service.open_conversation(TEST_USER, "booking", reference_id="missing")
    assert exc.value.status_code == 404


def test_staff_opens_reference_conversation_for_owner(fake_db):
    party = fake_db.seed("party_requests", {"user_id": "other-user", "status": "new"})[0]
    conv = chat_service.open_conversation(staff("bookings"), "party", reference_id=party["id"])
    assert conv["user_id"] == "other-user"
    assert chat_service.open_conversation(OTHER, "party", reference_id=party["id"])["id"] == conv["id"]
    with pytest.raises(HTTPException) as exc:
        chat_service.open_conversation(TEST_USER, "party", reference_id=party["id"])
    assert exc.value.status_code == 404


def test_messages_flow_between_customer_and_staff(fake_db):
    conv = chat_service.open_conversation(TEST_USER, "support")
    first = chat_service.send_message(TEST_USER, conv["id"], "  Hello?  ")
    assert first["message"] == "Hello?"
    assert first["is_staff"] is False

    desk = staff("support")
    seen = chat_service.list_messages(desk, conv["id"])
    assert [m["message"] for m in seen] == ["Hello?"]
    assert fake_db.rows("chat_messages", id=first["id"])[0]["is_read"] is True

    reply = chat_service.send_message(desk, conv["id"], "Hi!")
    assert reply["is_staff"] is True
    newer = chat_service.list_messages(TEST_USER, conv["id"], since=first["created_at"])
    assert [m["message"] for m in newer] == ["Hi!"]
    assert fake_db.rows("chat_conversations", id=conv["id"])[0]["last_message_at"] != conv["last_message_at"]


def test_empty_message_is_400(fake_db):
    conv = chat_service.open_conversation(TEST_USER, "support")
    with pytest.raises(HTTPException) as exc:
        chat_service.send_message(TEST_USER, conv["id"], "   ")
    assert exc.value.status_code == 400
    assert exc.value.detail == "Message cannot be empty"


def test_stranger_cannot_read_or_write(fake_db):
    conv = chat_service.open_conversation(TEST_USER, "support")
    for call in (lambda: chat_service.list_messages(OTHER, conv["id"]), lambda: chat_service.send_message(OTHER, conv["id"], "hi")):
        with pytest.raises(HTTPException) as exc:
            call()
        assert exc.value.status_code == 404
    assert fake_db.rows("chat_messages") == []


def test_staff_lists_every_conversation(fake_db):
    chat_service.open_conversation(TEST_USER, "support")
    chat_service.open_conversation(OTHER, "support")
    assert len(chat_service.list_conversations(staff("support"))) == 2
    assert len(chat_service.list_conversations(TEST_USER)) == 1
