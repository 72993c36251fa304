from datetime import date

import pytest

from pixoul.bookings import validators

SUNDAY = date(2026, 10, 18)
FRIDAY = date(2026, 10, 23)
SATURDAY = date(2026, 10, 24)


@pytest.mark.parametrize("phone", ["501234567", "58 123 4567", "+971551234567", "0521234567", "00971541234567"])
def test_valid_uae_mobiles(phone):
    assert validators.is_phone_valid(phone)
    assert validators.validate_phone(phone).startswith("+971")


@pytest.mark.parametrize("phone", ["", "511234567", "50123456", "5012345678", "abc"])
def test_invalid_phones(phone):
    assert not validators.is_phone_valid(phone)
    with pytest.raises(ValueError):
        validators.validate_phone(phone)


def test_business_hours_by_weekday():
    assert validators.business_hours(None) == (10, 22)
    assert validators.business_hours(SUNDAY) == (10, 22)
    assert validators.business_hours(FRIDAY) == (10, 24)
    assert validators.business_hours(SATURDAY) == (10, 24)


def test_time_slots_end_before_close():
    slots = validators.build_time_slots(SUNDAY, 2)
    assert slots[0] == "10:00"
    assert slots[-1] == "20:00"
    assert validators.build_time_slots(FRIDAY, 2)[-1] == "22:00"
    assert validators.build_time_slots(SUNDAY, 13) == []


def test_booking_window():
    assert validators.validate_booking_window(SUNDAY, "18:00", 2) == "20:00"
    assert validators.validate_booking_window(FRIDAY, "22:30", 1) == "23:30"
    with pytest.raises(ValueError):
        validators.validate_booking_window(SUNDAY, "21:00", 2)
    with pytest.raises(ValueError):
        validators.validate_booking_window(SUNDAY, "09:00", 1)
    with pytest.raises(ValueError):
        validators.validate_booking_window(SUNDAY, "noon", 1)
