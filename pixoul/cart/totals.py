"""
Calculs panier purs (pas de DB).
"""
from typing import Any, Dict, Iterable

from pixoul.config import TAX_RATE, DEFAULT_FEES, DEFAULT_TIP

# module pixoul.cart.totals
def _money(v: Any) -> float:
    try:
        return float(v or 0)
    except (TypeError, ValueError):
        return 0.0

def line_total(unit_price: Any, qty: int) -> float:
    """line_total = unit_price × qty, arrondi au centime."""
    return round(_money(unit_price) * int(qty), 2)

def calculate_totals(
    items: Iterable[Dict[str, Any]],
    *,
    fees: float = DEFAULT_FEES,
    tip: float = DEFAULT_TIP,
    tax_rate: float = TAX_RATE,
) -> Dict[str, float]:
    """
    Agrège les lignes du panier en {subtotal, tax, fees, tip, total}.
    - subtotal = Σ line_total
    - tax = tax_rate × subtotal (5% par défaut)
    - total = subtotal + tax + fees + tip
    """
    subtotal = round(sum(_money(i.get("line_total")) for i in items), 2)
    tax = round(subtotal * tax_rate, 2)
    fees = round(_money(fees), 2)
    tip = round(_money(tip), 2)
    total = round(subtotal + tax + fees + tip, 2)
    return {"subtotal": subtotal, "tax": tax, "fees": fees, "tip": tip, "total": total}

def item_count(items: Iterable[Dict[str, Any]]) -> int:
    return sum(int(i.get("qty") or 0) for i in items)
