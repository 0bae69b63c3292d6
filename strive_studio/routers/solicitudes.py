from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from strive_studio.core.security import get_current_user
from strive_studio.database import get_db
from strive_studio.models.perfil import Perfil
from strive_studio.schemas.comun import Respuesta, ok
from strive_studio.schemas.solicitud import SolicitudCreate, SolicitudResponse
from strive_studio.services import solicitudes_service

router = APIRouter()


@router.get("", response_model=Respuesta[List[SolicitudResponse]])
def get_solicitudes(
    clase_id: Optional[str] = None,
    coach_id: Optional[str] = None,
    estado: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    return ok(solicitudes_service.obtener_solicitudes(db, current_user, clase_id, coach_id, estado))


@router.post("", response_model=Respuesta[SolicitudResponse], status_code=201)
def create_solicitud(
    datos: SolicitudCreate,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    solicitud = solicitudes_service.solicitar_clase(db, current_user, datos.clase_id, datos.mensaje)
    return ok(solicitud, "Solicitud enviada")


@router.delete("/{solicitud_id}", response_model=Respuesta[None])
def delete_solicitud(solicitud_id: str, db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    solicitudes_service.cancelar_solicitud(db, current_user, solicitud_id)
    return ok(None, "Solicitud cancelada")
