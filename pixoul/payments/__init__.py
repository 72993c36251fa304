"""
Module 'payments' (feature-first): point d'entrée public.
Réunit montants, metadata Stripe, client Stripe, objets payables, réconciliation et services.
"""

from .pricing import round_half_up, to_minor_units, checkout_amounts
from .metadata import make_metadata, extract_metadata_from_session, extract_session_from_event
from .stripe_client import require_stripe, create_session, get_session, parse_event
from .purchasables import PURCHASABLES, get_purchasable
from .reconcile import reconcile_payment
from .service import create_checkout, verify_payment, handle_webhook_event

__all__ = [
    # pricing
    "round_half_up",
    "to_minor_units",
    "checkout_amounts",
    # metadata
    "make_metadata",
    "extract_metadata_from_session",
    "extract_session_from_event",
    # stripe
    "require_stripe",
    "create_session",
    "get_session",
    "parse_event",
    # purchasables
    "PURCHASABLES",
    "get_purchasable",
    # services
    "reconcile_payment",
    "create_checkout",
    "verify_payment",
    "handle_webhook_event",
]
