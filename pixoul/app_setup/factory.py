"""
Factory d'application pour les entrypoints (ex: pixoul.asgi).
Ordonne les étapes d'initialisation de manière lisible et testable.
"""
from fastapi import FastAPI

from pixoul.config import DEMO_MODE
from .lifespan import lifespan
from .middlewares import register_basic_middlewares, register_security_middleware
from .exceptions import register_exception_handlers
from .routers import register_routers

def create_app(demo_mode: bool = DEMO_MODE) -> FastAPI:
    """
    Construit l'app FastAPI avec le lifespan et enregistre:
      - middlewares (CORS, TrustedHost, en-têtes de sécurité)
      - gestionnaires d'exceptions
      - tous les routers (API v1, health)
    demo_mode est posé dans app.state et lu par get_identity à chaque requête.
    """
    app = FastAPI(title="Pixoul API", lifespan=lifespan)
    app.state.demo_mode = bool(demo_mode)
    register_basic_middlewares(app)
    register_security_middleware(app)
    register_exception_handlers(app)
    register_routers(app)
    return app
