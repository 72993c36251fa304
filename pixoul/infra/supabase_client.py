from typing import Any, Optional
from supabase import create_client, Client
from postgrest.exceptions import APIError
from pixoul.config import SUPABASE_URL, SUPABASE_ANON, SUPABASE_SERVICE_KEY

_supabase: Optional[Client] = None
_service_supabase: Optional[Client] = None

# Code Postgres renvoyé par PostgREST sur violation de contrainte unique
UNIQUE_VIOLATION = "23505"

def get_supabase() -> Client:
    global _supabase
    if _supabase is None:
        if not SUPABASE_URL or not SUPABASE_ANON:
            raise RuntimeError("SUPABASE_URL/SUPABASE_ANON_KEY manquants")
        _supabase = create_client(SUPABASE_URL, SUPABASE_ANON)
    return _supabase

def get_service_supabase() -> Client:
    global _service_supabase
    if not SUPABASE_SERVICE_KEY:
        raise RuntimeError("SUPABASE_SERVICE_ROLE_KEY manquant pour get_service_supabase()")
    if _service_supabase is None:
        _service_supabase = create_client(SUPABASE_URL, SUPABASE_SERVICE_KEY)
    return _service_supabase

def rows(res: Any) -> list:
    """Normalise res.data en liste (certaines réponses renvoient un dict ou None)."""
    data = getattr(res, "data", None)
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        return [data]
    return []

def first_row(res: Any) -> Optional[dict]:
    found = rows(res)
    return found[0] if found else None

def is_unique_violation(exc: Exception) -> bool:
    return isinstance(exc, APIError) and str(getattr(exc, "code", "") or "") == UNIQUE_VIOLATION

# Filtre PostgREST "pas encore payé": NULL compte comme impayé (<> ne matche pas NULL)
NOT_PAID_FILTER = "payment_status.is.null,payment_status.neq.paid"
