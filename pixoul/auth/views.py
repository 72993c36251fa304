# module pixoul.auth.views
"""Identité courante (/api/v1/auth/me).
L'inscription et la connexion restent chez Supabase Auth; l'API ne fait que
valider le token reçu.
"""
from fastapi import APIRouter, Depends

from pixoul.auth.identity import Identity, Authenticated
from pixoul.utils.security import get_identity

router = APIRouter(prefix="/api/v1/auth", tags=["Auth API"])

@router.get("/me")
def me(identity: Identity = Depends(get_identity)):
    return {
        "id": identity.id,
        "email": identity.email,
        "role": identity.role,
        "name": (identity.metadata or {}).get("name") or (identity.metadata or {}).get("full_name"),
        "isGuest": not isinstance(identity, Authenticated),
        "isStaff": identity.is_staff,
    }
