"""
ASGI entrypoint: expose `app` pour les process managers / déploiements.

- En production, un process manager (ex: gunicorn + uvicorn workers) importe `pixoul.asgi:app`.
- Toute la configuration (routes, middlewares, lifespan) est centralisée dans create_app.
"""
import logging

from pixoul.app_setup.factory import create_app

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = create_app()
