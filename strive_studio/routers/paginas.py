"""
Datos de arranque de las páginas por rol. El middleware de rutas ya
redirige a quien no corresponde; aquí se vuelve a exigir el rol.
"""
from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from strive_studio.core.core import requerir_rol
from strive_studio.core.fechas import utcnow
from strive_studio.core.security import get_current_user
from strive_studio.database import get_db
from strive_studio.models.clase import Clase
from strive_studio.models.perfil import Perfil
from strive_studio.models.solicitud_clase import SolicitudClase
from strive_studio.schemas.clase import ClaseResponse
from strive_studio.schemas.comun import ok
from strive_studio.schemas.espacio import SalonResponse
from strive_studio.schemas.personal import InvitacionResponse
from strive_studio.schemas.reserva import ReservaResponse
from strive_studio.schemas.solicitud import SolicitudResponse
from strive_studio.services import espacios_service, personal_service, reservas_service

router = APIRouter()

PROXIMAS_CLASES = 10


def _proximas_clases(db: Session, coach_id: str = None):
    query = db.query(Clase).filter(Clase.estado == "programada", Clase.fecha_hora > utcnow())
    if coach_id:
        query = query.filter(Clase.coach_id == coach_id)
    clases = query.order_by(Clase.fecha_hora.asc()).limit(PROXIMAS_CLASES).all()
    return [ClaseResponse.model_validate(c) for c in clases]


@router.get("/admin")
def dashboard_admin(db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    requerir_rol(current_user, "admin")
    solicitudes = db.query(SolicitudClase).filter(SolicitudClase.estado == "pendiente").count()
    sin_coach = (
        db.query(Clase)
        .filter(Clase.coach_id.is_(None), Clase.estado == "programada", Clase.fecha_hora > utcnow())
        .count()
    )
    return ok({
        "personal": personal_service.obtener_estadisticas_personal(db, current_user),
        "solicitudes_pendientes": solicitudes,
        "clases_sin_coach": sin_coach,
        "proximas_clases": _proximas_clases(db),
    })


@router.get("/coach")
def dashboard_coach(db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    requerir_rol(current_user, "coach")
    solicitudes = (
        db.query(SolicitudClase)
        .filter(SolicitudClase.coach_id == current_user.id, SolicitudClase.estado == "pendiente")
        .all()
    )
    return ok({
        "proximas_clases": _proximas_clases(db, current_user.id),
        "solicitudes_pendientes": [SolicitudResponse.model_validate(s) for s in solicitudes],
    })


@router.get("/staff")
def dashboard_staff(db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    requerir_rol(current_user, "staff")
    salones = []
    for salon in espacios_service.obtener_salones(db, current_user):
        salones.append({
            "salon": SalonResponse.model_validate(salon),
            "estadisticas": espacios_service.obtener_estadisticas_salon(db, salon.id),
        })
    return ok({"salones": salones, "proximas_clases": _proximas_clases(db)})


@router.get("/cliente")
def dashboard_cliente(db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    reservas = reservas_service.obtener_mis_reservas(db, current_user, "activas")
    return ok({
        "estadisticas": reservas_service.obtener_estadisticas_cliente(db, current_user),
        "proximas_reservas": [ReservaResponse.model_validate(r) for r in reservas],
    })


@router.get("/onboarding/{token}")
def pagina_onboarding(token: str, db: Session = Depends(get_db)):
    invitacion = personal_service.obtener_invitacion_por_token(db, token)
    if invitacion.estado == "aceptada":
        return RedirectResponse("/login?mensaje=onboarding_ya_completado", status_code=307)
    return ok(InvitacionResponse.model_validate(invitacion))
