from typing import Optional

from .identity import Authenticated, from_user_dict
from .repository import get_user_from_access_token as _repo_get_user_from_token

def get_user_from_token(access_token: str) -> Optional[Authenticated]:
    """Normalise l'utilisateur issu de supabase.auth.get_user(access_token):
    - Retourne une identité Authenticated (id, email, rôle, metadata, token)
    - Retourne None si Supabase ne reconnaît pas le token
    """
    raw = _repo_get_user_from_token(access_token)
    if not raw.get("id"):
        return None
    return from_user_dict(raw, token=access_token)
