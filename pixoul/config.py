# pixoul.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

"""
Configuration centrale du backend Pixoul.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Supabase, Stripe), sécurité cookies, CORS/hosts
- Expose les paramètres métier du panier et du paiement (taxe, TVA, devise, retries)
- DEMO_MODE: lu au démarrage puis injecté dans app.state (jamais consulté directement par les vues)
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _env_flag(name: str, default: str = "false") -> bool:
    return _clean_env(os.getenv(name, default)).lower() in ("1", "true", "yes")

# Supabase: URLs et clés (public/anon/service)
# - SUPABASE_URL peut parfois être sans schéma: on préfixe en https:// si nécessaire
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or os.getenv("VITE_SUPABASE_URL") or "")
SUPABASE_ANON = _clean_env(os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_SERVICE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Cookies / sécurité
COOKIE_SECURE = _env_flag("COOKIE_SECURE")

# Mode démo: identité invitée fixe à la place de la session Supabase
DEMO_MODE = _env_flag("DEMO_MODE")

# CORS grand ouvert par défaut (les fonctions d'origine répondaient avec "*")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h.strip()]

# Origine du front pour les redirections Stripe quand l'en-tête Origin est absent
FRONTEND_ORIGIN = _clean_env(os.getenv("FRONTEND_ORIGIN") or "http://localhost:3000").rstrip("/")

# Stripe: clés privées et secret webhook
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")
STRIPE_WEBHOOK_SECRET = _clean_env(os.getenv("STRIPE_WEBHOOK_SECRET") or "")
CHECKOUT_CURRENCY = _clean_env(os.getenv("CHECKOUT_CURRENCY") or "aed").lower()

# Panier: taxe forfaitaire sur le sous-total, frais et pourboire par défaut
TAX_RATE = float(os.getenv("TAX_RATE", "0.05"))
DEFAULT_FEES = float(os.getenv("DEFAULT_FEES", "0"))
DEFAULT_TIP = float(os.getenv("DEFAULT_TIP", "0"))
CART_REFRESH_RETRIES = int(os.getenv("CART_REFRESH_RETRIES", "3"))

# Paiement: TVA ajoutée au montant du checkout, durée de vie d'une réservation de traitement
VAT_RATE = float(os.getenv("VAT_RATE", "0.05"))
PAYMENT_CLAIM_TTL_SECONDS = int(os.getenv("PAYMENT_CLAIM_TTL_SECONDS", "300"))
