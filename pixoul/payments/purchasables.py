"""
Objets payables via Checkout. Chaque variante sait:
- charger sa ligne (load) et en donner le propriétaire
- calculer le montant dû à partir des données stockées (jamais du client)
- marquer sa ligne comme payée

La mise à jour est conditionnelle (payment_status NULL ou != 'paid'): un second
passage ne réécrit pas une ligne déjà payée.
"""
from typing import Any, Dict, Optional
import logging

from fastapi import HTTPException

from pixoul.cart import repository as cart_repo
from pixoul.orders import repository as orders_repo
from pixoul.bookings import repository as bookings_repo
from pixoul.events import repository as events_repo
from . import pricing

logger = logging.getLogger(__name__)

# module pixoul.payments.purchasables
def payment_method_of(session: Dict[str, Any]) -> str:
    types = session.get("payment_method_types") or []
    return types[0] if types else "card"

def payment_intent_id_of(session: Dict[str, Any]) -> Optional[str]:
    pi = session.get("payment_intent")
    if isinstance(pi, dict):
        return pi.get("id")
    return pi or None


class Purchasable:
    type_name = ""
    label = ""
    # rôle staff notifié au paiement
    staff_role = ""
    link_path = "/"

    def load(self, reference_id: str) -> Optional[dict]:
        raise NotImplementedError

    def require(self, reference_id: str) -> dict:
        row = self.load(reference_id)
        if not row:
            raise HTTPException(status_code=404, detail=f"{self.label} not found: {reference_id}")
        return row

    def owner_of(self, row: dict) -> str:
        return str(row.get("user_id") or "")

    def is_paid(self, row: dict) -> bool:
        return (row.get("payment_status") or "").lower() == "paid"

    def amount_due(self, row: dict) -> float:
        """Montant dû avant TVA checkout, en unités majeures."""
        raise NotImplementedError

    def check_paid_amount(self, row: dict, session: Dict[str, Any]) -> None:
        """
        400 si le montant encaissé ne correspond pas:
        - amount_total différent du total annoncé dans metadata.total
        - amount_total inférieur au total attendu pour la ligne
        """
        paid = session.get("amount_total")
        declared = (session.get("metadata") or {}).get("total")
        expected = pricing.checkout_amounts(self.amount_due(row))["total"]
        try:
            paid = int(paid)
        except (TypeError, ValueError):
            raise HTTPException(status_code=400, detail="Session amount missing")
        if declared not in (None, "") and str(declared) != str(paid):
            raise HTTPException(status_code=400, detail="Paid amount does not match checkout total")
        if paid < expected:
            raise HTTPException(status_code=400, detail=f"Paid amount {paid} is below amount due {expected}")

    def mark_paid(self, reference_id: str, session: Dict[str, Any]) -> dict:
        raise NotImplementedError


class Order(Purchasable):
    type_name = "order"
    label = "Order"
    staff_role = "kitchen"
    link_path = "/orders"

    def load(self, reference_id):
        return orders_repo.get_order(reference_id)

    def amount_due(self, row):
        return float(row.get("total") or 0)

    def mark_paid(self, reference_id, session):
        """
        - montant vérifié avant tout effet
        - order_items matérialisés depuis cart_items (une seule fois)
        - commande passée en 'new' / 'paid'
        - panier clôturé ('completed')
        """
        order = self.require(reference_id)
        self.check_paid_amount(order, session)
        cart_id = order.get("cart_id")

        if not orders_repo.list_order_items(reference_id):
            cart_items = cart_repo.list_items(cart_id) if cart_id else []
            orders_repo.insert_order_items([
                {
                    "order_id": reference_id,
                    "menu_item_id": it.get("menu_item_id"),
                    "name": it.get("name"),
                    "qty": it.get("qty"),
                    "unit_price": it.get("unit_price"),
                    "line_total": it.get("line_total"),
                }
                for it in cart_items
            ])

        updated = orders_repo.mark_order_paid(reference_id, {
            "payment_status": "paid",
            "payment_method": payment_method_of(session),
            "status": "new",
        })
        if cart_id:
            cart_repo.set_cart_status(cart_id, "completed")
        return updated or order


class _ConfirmedOnPayment(Purchasable):
    table = ""

    def load(self, reference_id):
        return bookings_repo.get_row(self.table, reference_id)

    def _mark(self, reference_id: str, data: Dict[str, Any]) -> Optional[dict]:
        return bookings_repo.mark_paid(self.table, reference_id, data)

    def paid_fields(self, session: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "payment_status": "paid",
            "payment_method": payment_method_of(session),
            "stripe_payment_id": payment_intent_id_of(session),
            "status": "confirmed",
        }

    def mark_paid(self, reference_id, session):
        row = self.require(reference_id)
        self.check_paid_amount(row, session)
        return self._mark(reference_id, self.paid_fields(session)) or row


class RoomBooking(_ConfirmedOnPayment):
    type_name = "booking"
    label = "Room booking"
    staff_role = "bookings"
    link_path = "/bookings"
    table = "room_bookings"

    def amount_due(self, row):
        return float(row.get("total_amount") or 0)


class PartyRequest(_ConfirmedOnPayment):
    type_name = "party"
    label = "Party request"
    staff_role = "bookings"
    link_path = "/bookings"
    table = "party_requests"

    def amount_due(self, row):
        # le devis est posé par le staff (estimated_cost)
        if row.get("estimated_cost") is None:
            raise HTTPException(status_code=409, detail="Party request has no quoted price yet")
        return float(row["estimated_cost"])


class EventRegistration(_ConfirmedOnPayment):
    type_name = "event"
    label = "Event registration"
    staff_role = "events"
    link_path = "/events"

    def load(self, reference_id):
        return events_repo.get_registration(reference_id)

    def _mark(self, reference_id, data):
        return events_repo.mark_registration_paid(reference_id, data)

    def amount_due(self, row):
        event = events_repo.get_event(str(row.get("event_id") or ""))
        if not event:
            raise HTTPException(status_code=404, detail="Event not found")
        return round(float(event.get("price") or 0) * int(row.get("party_size") or 1), 2)

    def paid_fields(self, session):
        fields = super().paid_fields(session)
        amount_total = session.get("amount_total")
        fields["amount_paid"] = (amount_total / 100) if amount_total else 0
        return fields


PURCHASABLES: Dict[str, Purchasable] = {
    p.type_name: p for p in (Order(), RoomBooking(), EventRegistration(), PartyRequest())
}

def get_purchasable(payment_type: Optional[str]) -> Purchasable:
    purchasable = PURCHASABLES.get(payment_type or "")
    if purchasable is None:
        raise HTTPException(status_code=400, detail=f"Unknown payment type: {payment_type}")
    return purchasable
