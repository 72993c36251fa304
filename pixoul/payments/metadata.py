"""
Sérialisation/désérialisation des métadonnées Stripe (type, referenceId, userId).
Stripe n'accepte que des chaînes dans metadata.
"""
from typing import Any, Dict, Optional, Tuple

# module pixoul.payments.metadata
def make_metadata(payment_type: str, reference_id: str, user_id: str, amounts: Dict[str, int]) -> Dict[str, str]:
    return {
        "type": payment_type,
        "referenceId": str(reference_id),
        "userId": str(user_id),
        "subtotal": str(amounts["subtotal"]),
        "vat": str(amounts["vat"]),
        "total": str(amounts["total"]),
    }

def extract_metadata_from_session(session: Dict[str, Any]) -> Tuple[Optional[str], Optional[str], Optional[str]]:
    """
    Extrait (type, referenceId, userId) depuis une session Checkout.
    Valeurs absentes -> None.
    """
    meta = ((session or {}).get("metadata") or {}) if isinstance(session, dict) else {}
    return meta.get("type") or None, meta.get("referenceId") or None, meta.get("userId") or None

def extract_session_from_event(event: Dict[str, Any]) -> Dict[str, Any]:
    """event.data.object (la session) pour un event checkout.session.*"""
    data_obj = (event or {}).get("data", {}).get("object", {}) if isinstance(event, dict) else {}
    return data_obj or {}
