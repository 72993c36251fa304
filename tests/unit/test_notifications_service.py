import pytest
from fastapi import HTTPException

from pixoul.notifications import service as notifications_service
from tests.fakes import TEST_USER, staff


def test_customer_sees_only_own_unread(fake_db):
    notifications_service.notify_user("test-user", "payment", "Paid")
    read = notifications_service.notify_user("test-user", "payment", "Old")
    notifications_service.notify_user("someone-else", "payment", "Not mine")
    notifications_service.notify_role("kitchen", "order", "New order")
    fake_db.rows("notifications", id=read["id"])[0]["is_read"] = True

    titles = [n["title"] for n in notifications_service.list_for_identity(TEST_USER)]
    assert titles == ["Paid"]


def test_customer_list_is_capped(fake_db):
    for i in range(35):
        notifications_service.notify_user("test-user", "payment", f"n{i}")
    listed = notifications_service.list_for_identity(TEST_USER)
    assert len(listed) == 30
    assert listed[0]["title"] == "n34"


def test_staff_sees_their_role(fake_db):
    notifications_service.notify_role("kitchen", "order", "Order")
    notifications_service.notify_role("events", "event", "Event")
    notifications_service.notify_user("staff-user", "payment", "Personal")
    assert [n["title"] for n in notifications_service.list_for_identity(staff("kitchen"))] == ["Order"]


def test_manager_sees_all_roles(fake_db):
    for role in ("kitchen", "events", "bookings", "manager"):
        notifications_service.notify_role(role, "x", role)
    assert len(notifications_service.list_for_identity(staff("manager"))) == 4


def test_mark_read(fake_db):
    n = notifications_service.notify_user("test-user", "payment", "Paid")
    out = notifications_service.mark_read(TEST_USER, n["id"])
    assert out["is_read"] is True
    assert out["read_at"]
    assert notifications_service.list_for_identity(TEST_USER) == []


def test_mark_read_for_role(fake_db):
    n = notifications_service.notify_role("events", "event", "New registration")
    assert notifications_service.mark_read(staff("events"), n["id"])["is_read"] is True
    with pytest.raises(HTTPException):
        notifications_service.mark_read(staff("kitchen"), n["id"])


def test_mark_read_someone_elses_is_404(fake_db):
    n = notifications_service.notify_user("someone-else", "payment", "Paid")
    with pytest.raises(HTTPException) as exc:
        notifications_service.mark_read(TEST_USER, n["id"])
    assert exc.value.status_code == 404
    assert fake_db.rows("notifications", id=n["id"])[0]["is_read"] is False
