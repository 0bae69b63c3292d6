import logging
from typing import Optional
from urllib.parse import quote

from fastapi import Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import HTTPConnection

from strive_studio.core.security import perfil_desde_token, token_de_request, verify_token
from strive_studio.models.perfil import Perfil

logger = logging.getLogger(__name__)

RUTAS_PUBLICAS = [
    "/login",
    "/registro",
    "/recuperar-password",
    "/restablecer-password",
    "/verificar-email",
    "/email-confirmado",
    "/auth/confirm",
]

# La API responde 401/403 por su cuenta; el onboarding se autoriza con el token de la invitación
PREFIJOS_SIN_PROTECCION = ["/api", "/docs", "/redoc", "/openapi.json", "/health", "/onboarding", "/static"]

DASHBOARD_POR_ROL = {
    "admin": "/admin",
    "coach": "/coach",
    "staff": "/staff",
    "cliente": "/cliente",
}


def _coincide(ruta: str, prefijo: str) -> bool:
    return ruta == prefijo or ruta.startswith(prefijo + "/")


def es_ruta_publica(ruta: str) -> bool:
    if ruta == "/":
        return True
    return any(_coincide(ruta, p) for p in RUTAS_PUBLICAS + PREFIJOS_SIN_PROTECCION)


def dashboard_de(rol: str) -> str:
    return DASHBOARD_POR_ROL.get(rol, "/login")


def destino_redireccion(ruta: str, autenticado: bool, perfil: Optional[Perfil]) -> Optional[str]:
    """
    Decide a dónde redirigir una petición de página. None = dejar pasar.
    """
    if es_ruta_publica(ruta):
        return None
    if not autenticado:
        return f"/login?redirect={quote(ruta)}"
    if perfil is None:
        return "/login"
    if not perfil.email_confirmado:
        return "/verificar-email"
    if not perfil.activo:
        return None if ruta == "/cuenta-desactivada" else "/cuenta-desactivada"

    ruta_base = ruta.split("/")[1]
    if ruta_base in DASHBOARD_POR_ROL and ruta_base != perfil.rol:
        return dashboard_de(perfil.rol)
    return None


class ProteccionRutasMiddleware(BaseHTTPMiddleware):
    """Protege las rutas de página según sesión, estado de la cuenta y rol."""

    async def dispatch(self, request: Request, call_next):
        ruta = request.url.path
        if es_ruta_publica(ruta):
            return await call_next(request)

        token = token_de_request(request, _bearer(request))
        autenticado = token is not None and verify_token(token) is not None
        perfil = None
        if autenticado:
            perfil = await run_in_threadpool(cargar_perfil, request, token)

        destino = destino_redireccion(ruta, autenticado, perfil)
        if destino:
            logger.debug(f"↪️ {ruta} -> {destino}")
            return RedirectResponse(destino, status_code=307)
        return await call_next(request)


def _bearer(request: Request) -> Optional[str]:
    autorizacion = request.headers.get("authorization", "")
    if autorizacion.lower().startswith("bearer "):
        return autorizacion[7:].strip() or None
    return None


def cargar_perfil(conexion: HTTPConnection, token: str) -> Optional[Perfil]:
    """Carga el perfil en una sesión propia y lo devuelve desligado de ella."""
    db = conexion.app.state.session_factory()
    try:
        perfil = perfil_desde_token(db, token)
        if perfil is not None:
            db.expunge(perfil)
        return perfil
    finally:
        db.close()
