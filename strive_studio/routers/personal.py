from typing import List, Optional, Union

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from strive_studio.core.exceptions import AuthorizationError
from strive_studio.core.security import get_current_user
from strive_studio.database import get_db
from strive_studio.models.perfil import Perfil
from strive_studio.models.personal import Coach
from strive_studio.schemas.comun import Respuesta, ok
from strive_studio.schemas.personal import (
    CoachResponse,
    EstadisticasPersonal,
    HeadCoachRequest,
    InvitacionCreate,
    InvitacionResponse,
    RechazarPersonalRequest,
    StaffResponse,
)
from strive_studio.services import personal_service
from strive_studio.services.documentos_service import obtener_personal

router = APIRouter()

PersonalDetalle = Union[CoachResponse, StaffResponse]


def _serializar(personal) -> PersonalDetalle:
    if isinstance(personal, Coach):
        return CoachResponse.model_validate(personal)
    return StaffResponse.model_validate(personal)


@router.get("", response_model=Respuesta[List[PersonalDetalle]])
def get_personal(
    tipo: Optional[str] = Query(None, pattern="^(coach|staff)$"),
    estado: Optional[str] = Query(None, pattern="^(pendiente|aprobado|rechazado)$"),
    busqueda: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    personal = personal_service.obtener_todo_personal(db, current_user, tipo, estado, busqueda)
    return ok([_serializar(p) for p in personal])


@router.get("/estadisticas", response_model=Respuesta[EstadisticasPersonal])
def get_estadisticas(db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    return ok(personal_service.obtener_estadisticas_personal(db, current_user))


# ============== INVITACIONES ==============

@router.post("/invitaciones", response_model=Respuesta[InvitacionResponse], status_code=201)
def create_invitacion(
    datos: InvitacionCreate,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    invitacion = personal_service.invitar_personal(db, current_user, datos)
    return ok(invitacion, f"Invitación enviada a {invitacion.email}")


@router.get("/invitaciones/{token}", response_model=Respuesta[InvitacionResponse])
def get_invitacion(token: str, db: Session = Depends(get_db)):
    """Pública: el token de la invitación es la credencial."""
    return ok(personal_service.obtener_invitacion_por_token(db, token))


# ============== HEAD COACH ==============

@router.put("/coaches/{coach_id}/head-coach", response_model=Respuesta[CoachResponse])
def update_head_coach(
    coach_id: str,
    datos: HeadCoachRequest,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    coach = personal_service.designar_head_coach(db, current_user, coach_id, datos.es_head_coach, datos.disciplina)
    mensaje = f"Head coach de {coach.head_coach_de}" if coach.es_head_coach else "Ya no es head coach"
    return ok(coach, mensaje)


# ============== REVISIÓN ==============

@router.get("/{tipo}/{personal_id}", response_model=Respuesta[PersonalDetalle])
def get_personal_detalle(
    tipo: str,
    personal_id: str,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    if current_user.rol != "admin" and current_user.id != personal_id:
        raise AuthorizationError()
    return ok(_serializar(obtener_personal(db, personal_id, tipo)))


@router.post("/{tipo}/{personal_id}/aprobar", response_model=Respuesta[PersonalDetalle])
def aprobar_personal(
    tipo: str,
    personal_id: str,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    personal = personal_service.aprobar_personal(db, current_user, personal_id, tipo)
    return ok(_serializar(personal), "Personal aprobado")


@router.post("/{tipo}/{personal_id}/rechazar", response_model=Respuesta[PersonalDetalle])
def rechazar_personal(
    tipo: str,
    personal_id: str,
    datos: RechazarPersonalRequest,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    personal = personal_service.rechazar_personal(db, current_user, personal_id, tipo, datos.motivo)
    return ok(_serializar(personal), "Personal rechazado")


@router.delete("/{tipo}/{personal_id}", response_model=Respuesta[None])
def delete_personal(
    tipo: str,
    personal_id: str,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    personal_service.eliminar_personal(db, current_user, personal_id, tipo)
    return ok(None, "Personal eliminado")
