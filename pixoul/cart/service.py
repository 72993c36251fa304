"""
Cas d'usage 'cart': un panier actif par utilisateur, agrégat recalculé après
chaque mutation.

Concurrence:
- création: l'index unique partiel carts(user_id) where status='active' fait
  échouer le second insert; on relit alors le panier gagnant
- doublons hérités: fusionnés dans le panier le plus ancien (statut 'merged')
- agrégat: écriture conditionnée par `version`; une écriture périmée est
  recalculée depuis les lignes fraîches puis retentée (CART_REFRESH_RETRIES)
"""
from typing import Any, Dict, List, Optional
import logging

from fastapi import HTTPException
from postgrest.exceptions import APIError

from pixoul.config import CART_REFRESH_RETRIES
from pixoul.infra.supabase_client import is_unique_violation
from . import repository
from . import totals as cart_totals

logger = logging.getLogger(__name__)

# module pixoul.cart.service
def _positive_qty(qty: Any) -> int:
    try:
        value = int(qty)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="Quantity must be a positive integer")
    if isinstance(qty, float) and qty != value:
        raise HTTPException(status_code=400, detail="Quantity must be a positive integer")
    if value <= 0:
        raise HTTPException(status_code=400, detail="Quantity must be a positive integer")
    return value

def _merge_duplicate_lines(cart_id: str) -> None:
    """Regroupe les lignes d'un même article (après fusion de paniers)."""
    seen: Dict[str, dict] = {}
    for line in repository.list_items(cart_id):
        key = str(line.get("menu_item_id") or "")
        kept = seen.get(key)
        if kept is None:
            seen[key] = line
            continue
        qty = int(kept.get("qty") or 0) + int(line.get("qty") or 0)
        kept["qty"] = qty
        kept["line_total"] = cart_totals.line_total(kept.get("unit_price"), qty)
        repository.update_item(kept["id"], {"qty": qty, "line_total": kept["line_total"]})
        repository.delete_item(line["id"])

def _merge_carts(carts: List[dict]) -> dict:
    primary = carts[0]
    for other in carts[1:]:
        logger.warning("cart.merge user_id=%s from=%s into=%s", primary.get("user_id"), other.get("id"), primary.get("id"))
        repository.move_items(other["id"], primary["id"])
        repository.set_cart_status(other["id"], "merged")
    _merge_duplicate_lines(primary["id"])
    return primary

def get_or_create_active_cart(user_id: str) -> dict:
    """
    Retourne le panier actif de l'utilisateur (création paresseuse).
    Jamais plus d'un panier actif après l'appel.
    """
    carts = repository.list_active_carts(user_id)
    if not carts:
        try:
            created = repository.insert_cart(user_id)
        except APIError as e:
            if not is_unique_violation(e):
                logger.exception("cart.get_or_create_active_cart failed user_id=%s", user_id)
                raise
            # Un autre appel a créé le panier entre la lecture et l'insert
            created = None
        carts = [created] if created else repository.list_active_carts(user_id)
        if not carts:
            raise HTTPException(status_code=500, detail="Unable to create cart")
    if len(carts) > 1:
        primary = _merge_carts(carts)
        refresh_cart(primary["id"])
        return repository.get_cart(primary["id"]) or primary
    return carts[0]

def refresh_cart(cart_id: str) -> Dict[str, Any]:
    """
    Relit les lignes, recalcule {subtotal, tax, fees, tip, total} et persiste
    l'agrégat avec contrôle de version. Retourne {...cart, items, item_count}.
    """
    for attempt in range(max(1, CART_REFRESH_RETRIES)):
        cart = repository.get_cart(cart_id)
        if not cart:
            raise HTTPException(status_code=404, detail="Cart not found")
        items = repository.list_items(cart_id)
        agg = cart_totals.calculate_totals(items, fees=cart.get("fees") or 0, tip=cart.get("tip") or 0)
        updated = repository.update_cart_totals(cart_id, int(cart.get("version") or 0), agg)
        if updated:
            out = dict(updated)
            out["items"] = items
            out["item_count"] = cart_totals.item_count(items)
            return out
        logger.info("cart.refresh_cart stale write cart_id=%s attempt=%s", cart_id, attempt + 1)
    raise HTTPException(status_code=409, detail="Cart was modified concurrently, please retry")

def get_cart(user_id: str) -> Dict[str, Any]:
    cart = get_or_create_active_cart(user_id)
    return refresh_cart(cart["id"])

def _find_line(cart_id: str, cart_item_id: str) -> Optional[dict]:
    for line in repository.list_items(cart_id):
        if str(line.get("id")) == str(cart_item_id):
            return line
    return None

def add_to_cart(user_id: str, item: Dict[str, Any], qty: Any = 1) -> Dict[str, Any]:
    """
    Ajoute un article du menu. Une ligne existante pour le même article voit sa
    quantité augmentée (pas de doublon de ligne).
    """
    qty = _positive_qty(qty)
    menu_item_id = str(item.get("id") or "").strip()
    if not menu_item_id:
        raise HTTPException(status_code=400, detail="Menu item id is required")
    try:
        price = float(item.get("price"))
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="Menu item price is required")
    if price < 0:
        raise HTTPException(status_code=400, detail="Menu item price must be positive")

    cart = get_or_create_active_cart(user_id)
    existing = next(
        (l for l in repository.list_items(cart["id"]) if str(l.get("menu_item_id")) == menu_item_id),
        None,
    )
    if existing:
        return update_quantity(user_id, existing["id"], int(existing.get("qty") or 0) + qty)

    repository.insert_item({
        "cart_id": cart["id"],
        "menu_item_id": menu_item_id,
        "name": item.get("name") or "",
        "unit_price": price,
        "qty": qty,
        "line_total": cart_totals.line_total(price, qty),
        "image_url": item.get("image_url"),
    })
    logger.info("cart.add_to_cart user_id=%s menu_item_id=%s qty=%s", user_id, menu_item_id, qty)
    return refresh_cart(cart["id"])

def update_quantity(user_id: str, cart_item_id: str, qty: Any) -> Dict[str, Any]:
    """qty <= 0 équivaut à remove_item."""
    try:
        qty = int(qty)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="Quantity must be an integer")
    if qty <= 0:
        return remove_item(user_id, cart_item_id)

    cart = get_or_create_active_cart(user_id)
    line = _find_line(cart["id"], cart_item_id)
    if not line:
        raise HTTPException(status_code=404, detail="Cart item not found")
    repository.update_item(line["id"], {
        "qty": qty,
        "line_total": cart_totals.line_total(line.get("unit_price"), qty),
    })
    return refresh_cart(cart["id"])

def remove_item(user_id: str, cart_item_id: str) -> Dict[str, Any]:
    cart = get_or_create_active_cart(user_id)
    line = _find_line(cart["id"], cart_item_id)
    if not line:
        raise HTTPException(status_code=404, detail="Cart item not found")
    repository.delete_item(line["id"])
    return refresh_cart(cart["id"])

def clear_cart(user_id: str) -> Dict[str, Any]:
    cart = get_or_create_active_cart(user_id)
    repository.delete_items_for_cart(cart["id"])
    return refresh_cart(cart["id"])
