import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from strive_studio.core.exceptions import NotFoundError
from strive_studio.core.fechas import utcnow
from strive_studio.models.notificacion import Notificacion
from strive_studio.models.perfil import Perfil
from strive_studio.services import realtime  # noqa: F401 (registra los eventos de sesión)

logger = logging.getLogger(__name__)


def crear_notificacion(
    db: Session,
    destinatario_id: str,
    tipo: str,
    titulo: str,
    mensaje: str,
    url_accion: Optional[str] = None,
    icono: Optional[str] = None,
    data: Optional[Dict[str, Any]] = None,
) -> Notificacion:
    """
    Agrega la notificación a la transacción en curso; se guarda (y se
    publica en tiempo real) con el commit de la acción que la origina.
    """
    notificacion = Notificacion(
        destinatario_id=destinatario_id,
        tipo=tipo,
        titulo=titulo,
        mensaje=mensaje,
        url_accion=url_accion,
        icono=icono,
        data=data or {},
    )
    db.add(notificacion)
    return notificacion


def notificar_admins(db: Session, tipo: str, titulo: str, mensaje: str, **kwargs) -> int:
    admins = db.query(Perfil).filter(Perfil.rol == "admin", Perfil.activo == True).all()
    for admin in admins:
        crear_notificacion(db, admin.id, tipo, titulo, mensaje, **kwargs)
    return len(admins)


def obtener_notificaciones(db: Session, perfil: Perfil, limit: int = 50) -> List[Notificacion]:
    return (
        db.query(Notificacion)
        .filter(Notificacion.destinatario_id == perfil.id)
        .order_by(Notificacion.created_at.desc())
        .limit(limit)
        .all()
    )


def contar_no_leidas(db: Session, perfil: Perfil) -> int:
    return (
        db.query(Notificacion)
        .filter(Notificacion.destinatario_id == perfil.id, Notificacion.leida == False)
        .count()
    )


def _obtener_propia(db: Session, perfil: Perfil, notificacion_id: str) -> Notificacion:
    notificacion = (
        db.query(Notificacion)
        .filter(Notificacion.id == notificacion_id, Notificacion.destinatario_id == perfil.id)
        .first()
    )
    if not notificacion:
        raise NotFoundError("Notificación no encontrada")
    return notificacion


def marcar_como_leida(db: Session, perfil: Perfil, notificacion_id: str) -> Notificacion:
    notificacion = _obtener_propia(db, perfil, notificacion_id)
    if not notificacion.leida:
        notificacion.leida = True
        notificacion.leida_at = utcnow()
        db.commit()
        db.refresh(notificacion)
    return notificacion


def marcar_todas_como_leidas(db: Session, perfil: Perfil) -> int:
    pendientes = (
        db.query(Notificacion)
        .filter(Notificacion.destinatario_id == perfil.id, Notificacion.leida == False)
        .all()
    )
    ahora = utcnow()
    for notificacion in pendientes:
        notificacion.leida = True
        notificacion.leida_at = ahora
    db.commit()
    return len(pendientes)


def eliminar_notificacion(db: Session, perfil: Perfil, notificacion_id: str) -> None:
    notificacion = _obtener_propia(db, perfil, notificacion_id)
    db.delete(notificacion)
    db.commit()
