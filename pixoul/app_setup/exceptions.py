"""
Gestionnaires d'exceptions.
- HTTPException: corps JSON {"detail": ...}, en-têtes conservés (ex: WWW-Authenticate)
- APIError PostgREST non interceptée: journalisée, 502 côté client
"""
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from postgrest.exceptions import APIError

logger = logging.getLogger(__name__)

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(APIError)
    async def postgrest_error_handler(request: Request, exc: APIError):
        logger.error("postgrest error path=%s code=%s message=%s", request.url.path, exc.code, exc.message)
        return JSONResponse(status_code=502, content={"detail": exc.message or "Database error"})
