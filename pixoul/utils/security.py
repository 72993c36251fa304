from fastapi import Request, HTTPException, Depends
from typing import Optional

from pixoul.auth.identity import Identity, Guest, Authenticated

COOKIE_NAME = "sb_access"

def extract_token(request: Request) -> Optional[str]:
    # Hybride: priorité au Bearer, fallback cookie
    token = None
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
    if not token:
        token = request.cookies.get(COOKIE_NAME)
    return token or None

def get_identity(request: Request) -> Identity:
    """
    Résout l'identité de l'appelant pour la requête courante.
    - Mode démo (app.state.demo_mode): identité invitée fixe, sans appel à Supabase.
    - Sinon: token Bearer/cookie validé par Supabase Auth.
    - 401 si aucun token ou token rejeté.
    """
    if getattr(request.app.state, "demo_mode", False):
        return Guest()

    token = extract_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        # Délégué au service Auth
        from pixoul.auth.service import get_user_from_token as _svc_get_user_from_token
        user = _svc_get_user_from_token(token)
    except Exception:
        raise HTTPException(status_code=401, detail="Session expired, please sign in again")
    if user is None:
        raise HTTPException(status_code=401, detail="Session expired, please sign in again")
    return user

def require_user(identity: Identity = Depends(get_identity)) -> Authenticated:
    """Impose une identité authentifiée (l'invité du mode démo est refusé)."""
    if not isinstance(identity, Authenticated):
        raise HTTPException(status_code=401, detail="User not authenticated")
    return identity

def require_staff(area: str):
    """Fabrique une dépendance qui exige un membre du staff habilité sur `area`."""
    def _dep(user: Authenticated = Depends(require_user)) -> Authenticated:
        if not user.can_manage(area):
            raise HTTPException(status_code=403, detail="Forbidden")
        return user
    return _dep

