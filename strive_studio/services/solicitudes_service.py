import logging
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from strive_studio.core.core import requerir_rol
from strive_studio.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from strive_studio.core.fechas import utcnow
from strive_studio.models.clase import Clase
from strive_studio.models.perfil import Perfil
from strive_studio.models.personal import Coach
from strive_studio.models.solicitud_clase import SolicitudClase
from strive_studio.services.clases_service import (
    describir_clase,
    rechazar_solicitudes_pendientes,
    obtener_clase,
    ocupar_clase_con_coach,
    validar_coach_activo,
)
from strive_studio.services.notificaciones_service import crear_notificacion, notificar_admins

logger = logging.getLogger(__name__)


def solicitar_clase(db: Session, perfil: Perfil, clase_id: str, mensaje: Optional[str] = None) -> SolicitudClase:
    requerir_rol(perfil, "coach")
    coach = db.query(Coach).filter(Coach.id == perfil.id).first()
    if not coach or coach.estado != "aprobado" or not coach.activo:
        raise AuthorizationError("Solo coaches aprobados y activos pueden solicitar clases")

    clase = obtener_clase(db, clase_id)
    if clase.estado != "programada":
        raise ConflictError("Solo se pueden solicitar clases programadas")
    if clase.coach_id is not None:
        raise ConflictError("Esta clase ya tiene un coach asignado")
    if clase.disciplina and not coach.imparte(clase.disciplina.tipo):
        raise ValidationError("No impartes la disciplina de esta clase")

    existente = (
        db.query(SolicitudClase)
        .filter(
            SolicitudClase.clase_id == clase.id,
            SolicitudClase.coach_id == coach.id,
            SolicitudClase.estado == "pendiente",
        )
        .first()
    )
    if existente:
        raise ConflictError("Ya solicitaste esta clase")

    solicitud = SolicitudClase(
        clase_id=clase.id,
        coach_id=coach.id,
        mensaje=(mensaje or "").strip() or None,
        estado="pendiente",
    )
    db.add(solicitud)
    db.flush()

    notificar_admins(
        db, "solicitud_clase",
        "Nueva solicitud de clase",
        f"{perfil.nombre_completo or perfil.email} solicitó impartir {describir_clase(clase)}",
        url_accion="/admin/clases/solicitudes",
        icono="inbox",
        data={"clase_id": clase.id, "solicitud_id": solicitud.id},
    )
    db.commit()
    db.refresh(solicitud)
    logger.info(f"📨 Coach {coach.id} solicitó la clase {clase.id}")
    return solicitud


def cancelar_solicitud(db: Session, perfil: Perfil, solicitud_id: str) -> None:
    requerir_rol(perfil, "coach")
    solicitud = (
        db.query(SolicitudClase)
        .filter(SolicitudClase.id == solicitud_id, SolicitudClase.coach_id == perfil.id)
        .first()
    )
    if not solicitud:
        raise NotFoundError("Solicitud no encontrada")
    if solicitud.estado != "pendiente":
        raise ConflictError("Solo puedes cancelar solicitudes pendientes")

    db.delete(solicitud)
    db.commit()
    logger.info(f"↩️ Solicitud {solicitud_id} retirada por el coach {perfil.id}")


def asignar_coach_a_clase(db: Session, perfil: Perfil, clase_id: str, solicitud_id: str) -> SolicitudClase:
    """
    Aprueba la solicitud, asigna el coach a la clase y rechaza las demás
    solicitudes pendientes de esa clase.
    """
    requerir_rol(perfil, "admin")
    solicitud = db.query(SolicitudClase).filter(SolicitudClase.id == solicitud_id).first()
    if not solicitud:
        raise NotFoundError("Solicitud no encontrada")
    if solicitud.clase_id != clase_id:
        raise ValidationError("La solicitud no corresponde a esta clase")
    if solicitud.estado != "pendiente":
        raise ConflictError("La solicitud ya fue respondida")

    clase = obtener_clase(db, clase_id)
    if clase.estado != "programada":
        raise ConflictError("Solo se puede asignar coach a clases programadas")
    if clase.coach_id is not None:
        raise ConflictError("Esta clase ya tiene un coach asignado")

    coach = validar_coach_activo(db, solicitud.coach_id)

    ocupar_clase_con_coach(db, clase, coach.id, perfil)

    solicitud.estado = "aprobado"
    solicitud.respondida_por = perfil.id
    solicitud.respondida_at = utcnow()
    rechazadas = rechazar_solicitudes_pendientes(db, clase, perfil, excepto_id=solicitud.id)

    crear_notificacion(
        db, coach.id, "solicitud_aprobada",
        "Solicitud aprobada",
        f"Tu solicitud fue aprobada. Impartirás {describir_clase(clase)}",
        url_accion="/coach/clases",
        icono="check-circle",
        data={"clase_id": clase.id, "solicitud_id": solicitud.id},
    )
    db.commit()
    db.refresh(solicitud)
    logger.info(
        f"✅ Solicitud {solicitud.id} aprobada; clase {clase.id} asignada a {coach.id}, {rechazadas} rechazadas"
    )
    return solicitud


def obtener_solicitudes(
    db: Session,
    perfil: Perfil,
    clase_id: Optional[str] = None,
    coach_id: Optional[str] = None,
    estado: Optional[str] = None,
) -> List[SolicitudClase]:
    requerir_rol(perfil, "admin", "coach")
    query = db.query(SolicitudClase).options(
        joinedload(SolicitudClase.clase).joinedload(Clase.disciplina),
        joinedload(SolicitudClase.coach),
    )
    if perfil.rol == "coach":
        query = query.filter(SolicitudClase.coach_id == perfil.id)
    elif coach_id:
        query = query.filter(SolicitudClase.coach_id == coach_id)
    if clase_id:
        query = query.filter(SolicitudClase.clase_id == clase_id)
    if estado:
        query = query.filter(SolicitudClase.estado == estado)
    return query.order_by(SolicitudClase.created_at.desc()).all()
