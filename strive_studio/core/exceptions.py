# strive_studio/core/exceptions.py

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class AuthException(HTTPException):
    def __init__(self, detail: str = "No se pudieron validar las credenciales"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class StudioError(Exception):
    """
    Error de dominio. Cada subclase trae su `kind` legible por máquina
    y el código HTTP con el que se responde.
    """
    kind = "error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ValidationError(StudioError):
    kind = "validation"
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(StudioError):
    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT


class NotFoundError(StudioError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class AuthorizationError(StudioError):
    kind = "authorization"
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "No tiene permisos para realizar esta acción"):
        super().__init__(message)


class BackendError(StudioError):
    """Fallo del backend (base de datos, storage o servicio de auth)."""
    kind = "backend"
    status_code = status.HTTP_502_BAD_GATEWAY


def respuesta_error(status_code: int, error: str, kind: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, "kind": kind},
    )


_KIND_POR_STATUS = {
    400: "validation",
    401: "authentication",
    403: "authorization",
    404: "not_found",
    409: "conflict",
    422: "validation",
}


def registrar_manejadores(app: FastAPI) -> None:
    @app.exception_handler(StudioError)
    async def _studio_error(request: Request, exc: StudioError):
        if exc.status_code >= 500:
            logger.error(f"❌ {request.method} {request.url.path}: {exc.message}")
        else:
            logger.warning(f"⚠️ {request.method} {request.url.path} [{exc.kind}]: {exc.message}")
        return respuesta_error(exc.status_code, exc.message, exc.kind)

    @app.exception_handler(HTTPException)
    async def _http_error(request: Request, exc: HTTPException):
        kind = _KIND_POR_STATUS.get(exc.status_code, "error")
        response = respuesta_error(exc.status_code, str(exc.detail), kind)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        errores = exc.errors()
        if errores:
            primero = errores[0]
            campo = ".".join(str(p) for p in primero.get("loc", [])[1:])
            mensaje = f"{campo}: {primero.get('msg')}" if campo else primero.get("msg")
        else:
            mensaje = "Datos inválidos"
        return respuesta_error(status.HTTP_422_UNPROCESSABLE_ENTITY, mensaje, "validation")

    @app.exception_handler(SQLAlchemyError)
    async def _db_error(request: Request, exc: SQLAlchemyError):
        # La sesión se cierra (y hace rollback) en get_db
        logger.error(f"❌ Error de base de datos en {request.method} {request.url.path}: {exc}")
        return respuesta_error(status.HTTP_502_BAD_GATEWAY, "Error al acceder a la base de datos", "backend")
