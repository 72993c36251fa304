import re
from datetime import date
from typing import List, Optional, Tuple

# Mobiles UAE sans indicatif (9 chiffres)
PHONE_RE = re.compile(r"^(50|52|54|55|56|58)\d{7}$")
UAE_PREFIX = "+971"

def normalize_phone(v: str) -> str:
    """Retire espaces, tirets, indicatif +971/00971 et 0 initial."""
    digits = re.sub(r"[\s\-()]", "", v or "")
    for prefix in ("+971", "00971", "971"):
        if digits.startswith(prefix):
            digits = digits[len(prefix):]
            break
    if digits.startswith("0"):
        digits = digits[1:]
    return digits

def is_phone_valid(v: str) -> bool:
    return bool(PHONE_RE.match(normalize_phone(v)))

def validate_phone(v: str) -> str:
    """Valide et retourne le numéro stocké (+971XXXXXXXXX)."""
    digits = normalize_phone(v)
    if not PHONE_RE.match(digits):
        raise ValueError("Phone must be a UAE mobile number (50, 52, 54, 55, 56 or 58 followed by 7 digits)")
    return f"{UAE_PREFIX}{digits}"

def business_hours(day: Optional[date] = None) -> Tuple[int, int]:
    """(ouverture, fermeture) en heures: 10-22 du dimanche au jeudi, 10-24 vendredi/samedi."""
    if day is None:
        return 10, 22
    # weekday(): lundi=0 ... vendredi=4, samedi=5
    if day.weekday() in (4, 5):
        return 10, 24
    return 10, 22

def build_time_slots(day: Optional[date], duration_hours: int) -> List[str]:
    open_h, close_h = business_hours(day)
    return [f"{hour:02d}:00" for hour in range(open_h, close_h - int(duration_hours) + 1)]

def parse_hour(start_time: str) -> Tuple[int, int]:
    m = re.match(r"^(\d{1,2}):(\d{2})(?::\d{2})?$", (start_time or "").strip())
    if not m:
        raise ValueError("start_time must be HH:MM")
    hour, minute = int(m.group(1)), int(m.group(2))
    if hour > 23 or minute > 59:
        raise ValueError("start_time must be HH:MM")
    return hour, minute

def validate_booking_window(day: date, start_time: str, duration_hours: int) -> str:
    """
    Vérifie que le créneau tient dans les horaires d'ouverture du jour.
    Retourne l'heure de fin (HH:MM).
    """
    if int(duration_hours) <= 0:
        raise ValueError("duration_hours must be positive")
    hour, minute = parse_hour(start_time)
    open_h, close_h = business_hours(day)
    start = hour * 60 + minute
    end = start + int(duration_hours) * 60
    if start < open_h * 60 or end > close_h * 60:
        raise ValueError(f"Booking must be between {open_h:02d}:00 and {close_h:02d}:00")
    end_hour = hour + int(duration_hours)
    return f"{end_hour:02d}:{minute:02d}"
