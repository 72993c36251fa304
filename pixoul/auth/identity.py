"""
Identité de l'appelant, résolue à chaque requête.

Deux variantes seulement:
- Guest: identité invitée fixe, utilisée quand l'application tourne en mode démo
- Authenticated: utilisateur Supabase (id, email, rôle, metadata, token)

Les vues reçoivent l'identité par injection (Depends(get_identity)); aucun
drapeau global n'est consulté en dehors de app.state.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

GUEST_ID = "guest"
GUEST_EMAIL = "guest@pixoul.com"

# Rôles staff reconnus (user_metadata.role); "manager" a accès à toutes les zones
STAFF_AREAS = ("bookings", "events", "kitchen", "gallery", "guides", "support")
MANAGER_ROLE = "manager"
CUSTOMER_ROLE = "customer"


@dataclass(frozen=True)
class Guest:
    id: str = GUEST_ID
    email: str = GUEST_EMAIL
    role: str = CUSTOMER_ROLE
    metadata: Dict[str, Any] = field(default_factory=lambda: {"name": "Guest User"})
    token: Optional[str] = None

    @property
    def is_staff(self) -> bool:
        return False


@dataclass(frozen=True)
class Authenticated:
    id: str
    email: Optional[str]
    role: str = CUSTOMER_ROLE
    metadata: Dict[str, Any] = field(default_factory=dict)
    token: Optional[str] = None

    @property
    def is_staff(self) -> bool:
        return self.role == MANAGER_ROLE or self.role in STAFF_AREAS

    def can_manage(self, area: str) -> bool:
        return self.role == MANAGER_ROLE or self.role == area


Identity = Union[Guest, Authenticated]


def determine_role(metadata: Dict[str, Any] | None) -> str:
    role_lower = str((metadata or {}).get("role", "")).strip().lower()
    if role_lower == MANAGER_ROLE or role_lower in STAFF_AREAS:
        return role_lower
    return CUSTOMER_ROLE


def from_user_dict(user: Dict[str, Any], token: Optional[str] = None) -> Authenticated:
    metadata = user.get("user_metadata") or user.get("metadata") or {}
    return Authenticated(
        id=str(user.get("id") or ""),
        email=user.get("email"),
        role=determine_role(metadata),
        metadata=metadata,
        token=token,
    )
