"""
Montants du checkout en unités mineures (fils/centimes).
"""
import math
from typing import Any, Dict

from pixoul.config import VAT_RATE

# module pixoul.payments.pricing
def round_half_up(value: float) -> int:
    """Arrondi à l'entier, demi vers le haut (0.5 -> 1, 2.5 -> 3)."""
    return int(math.floor(value + 0.5))

def to_minor_units(amount: Any) -> int:
    return round_half_up(float(amount) * 100)

def checkout_amounts(amount: Any, vat_rate: float = VAT_RATE) -> Dict[str, int]:
    """
    subtotal = round(amount × 100), vat = round(subtotal × 5%), total = subtotal + vat.
    Ex: 141.75 -> {subtotal: 14175, vat: 709, total: 14884}
    """
    subtotal = to_minor_units(amount)
    vat = round_half_up(subtotal * vat_rate)
    return {"subtotal": subtotal, "vat": vat, "total": subtotal + vat}
