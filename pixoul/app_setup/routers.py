"""
Registre central des routers (API v1, health).
"""
from fastapi import FastAPI

from pixoul.cart import views as cart_views
from pixoul.orders import views as orders_views
from pixoul.payments import views as payments_views
from pixoul.bookings import views as bookings_views
from pixoul.events import views as events_views
from pixoul.notifications import views as notifications_views
from pixoul.chat import views as chat_views
from pixoul.auth import views as auth_views
from pixoul.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    """
    Agrège tous les routers de l'application.
    L'ordre n'a pas d'impact (préfixes distincts).
    """
    # API v1
    app.include_router(auth_views.router)
    app.include_router(cart_views.router)
    app.include_router(orders_views.router)
    app.include_router(payments_views.router)
    app.include_router(bookings_views.router)
    app.include_router(events_views.router)
    app.include_router(notifications_views.router)
    app.include_router(chat_views.router)
    # Health & monitoring
    app.include_router(health_router)
