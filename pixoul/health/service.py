from urllib.parse import urlparse
import socket

from pixoul.config import SUPABASE_URL
import pixoul.infra.supabase_client as supabase_client

# table -> colonne de clé sondée (processed_payments est indexée par session_id)
HEALTH_TABLES = {"carts": "id", "orders": "id", "processed_payments": "session_id"}

def _check_table(client, name: str, key_column: str = "id"):
    try:
        res = client.table(name).select(key_column, count="exact").limit(1).execute()
        return {"ok": True, "count": getattr(res, "count", None)}
    except Exception as e:
        return {"ok": False, "error": str(e)}

def health_supabase_info():
    """Diagnostic Supabase: DNS de l'hôte, connexion service-role et tables clés."""
    parsed = urlparse(SUPABASE_URL) if SUPABASE_URL else None
    hostname = parsed.hostname if parsed else None
    dns_ok = None
    dns_error = None
    if hostname:
        try:
            socket.getaddrinfo(hostname, 443)
            dns_ok = True
        except OSError as e:
            dns_ok = False
            dns_error = str(e)

    info = {
        "supabase_url": SUPABASE_URL,
        "hostname": hostname,
        "dns_ok": dns_ok,
        "dns_error": dns_error,
        "connect_ok": False,
        "error": None,
        "tables": {},
    }
    try:
        client = supabase_client.get_service_supabase()
        for t, key_column in HEALTH_TABLES.items():
            info["tables"][t] = _check_table(client, t, key_column)
        info["connect_ok"] = all(t["ok"] for t in info["tables"].values())
    except Exception as e:
        info["error"] = str(e)
    return info
