"""
Canal en tiempo real de notificaciones.

Los INSERT/UPDATE/DELETE de filas de `notificaciones` se capturan en el
flush de la sesión y se publican a los suscriptores del destinatario
solo después del commit. La entrega es best-effort: si un suscriptor ya
no está, el evento se descarta.
"""
import asyncio
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Set

from sqlalchemy import event
from sqlalchemy.orm import Session

from strive_studio.models.notificacion import Notificacion

logger = logging.getLogger(__name__)

_CLAVE_EVENTOS = "eventos_notificacion"


@dataclass(eq=False)
class Suscripcion:
    destinatario_id: str
    loop: asyncio.AbstractEventLoop
    queue: asyncio.Queue = field(default_factory=asyncio.Queue)


class NotificacionesHub:
    def __init__(self) -> None:
        # Se publica desde hilos del threadpool, no solo desde el event loop
        self._lock = threading.Lock()
        self._por_destinatario: Dict[str, Set[Suscripcion]] = {}

    def suscribir(self, destinatario_id: str) -> Suscripcion:
        """Debe llamarse desde el event loop que va a consumir la cola."""
        suscripcion = Suscripcion(destinatario_id, asyncio.get_running_loop())
        with self._lock:
            self._por_destinatario.setdefault(destinatario_id, set()).add(suscripcion)
        logger.debug(f"🔌 Suscripción abierta para {destinatario_id}")
        return suscripcion

    def cancelar(self, suscripcion: Suscripcion) -> None:
        with self._lock:
            subs = self._por_destinatario.get(suscripcion.destinatario_id)
            if not subs:
                return
            subs.discard(suscripcion)
            if not subs:
                self._por_destinatario.pop(suscripcion.destinatario_id, None)

    def suscriptores(self, destinatario_id: str) -> int:
        with self._lock:
            return len(self._por_destinatario.get(destinatario_id) or ())

    def publicar(self, destinatario_id: str, evento: Dict[str, Any]) -> int:
        with self._lock:
            targets = list(self._por_destinatario.get(destinatario_id) or [])

        entregados = 0
        for suscripcion in targets:
            try:
                suscripcion.loop.call_soon_threadsafe(suscripcion.queue.put_nowait, evento)
                entregados += 1
            except RuntimeError:
                # El loop del suscriptor ya cerró
                logger.warning(f"⚠️ Suscriptor de {destinatario_id} sin loop activo, se descarta")
                self.cancelar(suscripcion)
        return entregados


hub = NotificacionesHub()


def serializar_notificacion(notificacion: Notificacion) -> Dict[str, Any]:
    datos = {}
    for columna in Notificacion.__table__.columns:
        valor = getattr(notificacion, columna.key)
        if isinstance(valor, datetime):
            valor = valor.isoformat()
        datos[columna.key] = valor
    return datos


@event.listens_for(Session, "after_flush")
def _capturar_cambios(session: Session, flush_context) -> None:
    eventos: List[tuple] = session.info.setdefault(_CLAVE_EVENTOS, [])
    for obj in session.new:
        if isinstance(obj, Notificacion):
            eventos.append((obj.destinatario_id, {"evento": "INSERT", "notificacion": serializar_notificacion(obj)}))
    for obj in session.dirty:
        if isinstance(obj, Notificacion) and session.is_modified(obj, include_collections=False):
            eventos.append((obj.destinatario_id, {"evento": "UPDATE", "notificacion": serializar_notificacion(obj)}))
    for obj in session.deleted:
        if isinstance(obj, Notificacion):
            eventos.append((obj.destinatario_id, {"evento": "DELETE", "notificacion": {"id": obj.id}}))


@event.listens_for(Session, "after_commit")
def _publicar_cambios(session: Session) -> None:
    eventos = session.info.pop(_CLAVE_EVENTOS, None)
    if not eventos:
        return
    for destinatario_id, evento in eventos:
        try:
            hub.publicar(destinatario_id, evento)
        except Exception as e:
            logger.error(f"❌ Error publicando notificación en tiempo real: {e}")


@event.listens_for(Session, "after_rollback")
def _descartar_cambios(session: Session) -> None:
    session.info.pop(_CLAVE_EVENTOS, None)
