import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from strive_studio.config import settings
from strive_studio.core.rutas import cargar_perfil
from strive_studio.core.security import get_current_user
from strive_studio.database import get_db
from strive_studio.models.perfil import Perfil
from strive_studio.schemas.comun import Respuesta, ok
from strive_studio.schemas.notificacion import ConteoNoLeidas, NotificacionResponse
from strive_studio.services import notificaciones_service
from strive_studio.services.realtime import hub

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=Respuesta[List[NotificacionResponse]])
def get_notificaciones(
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    return ok(notificaciones_service.obtener_notificaciones(db, current_user, limit))


@router.get("/no-leidas/count", response_model=Respuesta[ConteoNoLeidas])
def get_no_leidas(db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    return ok({"count": notificaciones_service.contar_no_leidas(db, current_user)})


@router.put("/leer-todas", response_model=Respuesta[ConteoNoLeidas])
def leer_todas(db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    marcadas = notificaciones_service.marcar_todas_como_leidas(db, current_user)
    return ok({"count": marcadas}, f"{marcadas} notificación(es) marcada(s) como leída(s)")


@router.put("/{notificacion_id}/leer", response_model=Respuesta[NotificacionResponse])
def leer_notificacion(
    notificacion_id: str,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    return ok(notificaciones_service.marcar_como_leida(db, current_user, notificacion_id))


@router.delete("/{notificacion_id}", response_model=Respuesta[None])
def delete_notificacion(
    notificacion_id: str,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    notificaciones_service.eliminar_notificacion(db, current_user, notificacion_id)
    return ok(None, "Notificación eliminada")


@router.websocket("/ws")
async def notificaciones_ws(websocket: WebSocket, token: Optional[str] = None):
    """
    Canal en tiempo real del usuario autenticado. Cada mensaje es
    {"evento": INSERT|UPDATE|DELETE, "notificacion": {...}}.
    """
    token = token or websocket.cookies.get(settings.ACCESS_TOKEN_COOKIE)
    perfil = await run_in_threadpool(cargar_perfil, websocket, token) if token else None
    if perfil is None or not perfil.activo:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    suscripcion = hub.suscribir(perfil.id)

    async def _enviar():
        while True:
            evento = await suscripcion.queue.get()
            await websocket.send_json(evento)

    envio = asyncio.create_task(_enviar())
    try:
        while True:
            # El cliente solo mantiene viva la conexión
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug(f"🔌 {perfil.id} desconectado del canal de notificaciones")
    finally:
        envio.cancel()
        hub.cancelar(suscripcion)
