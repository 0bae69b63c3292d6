from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from strive_studio.core.security import get_current_user
from strive_studio.database import get_db
from strive_studio.models.perfil import Perfil
from strive_studio.schemas.clase import (
    AsignarCoachRequest,
    CancelarClaseRequest,
    ClaseCreate,
    ClaseResponse,
    ClaseUpdate,
)
from strive_studio.schemas.comun import Respuesta, ok
from strive_studio.schemas.solicitud import SolicitudResponse
from strive_studio.services import clases_service, solicitudes_service

router = APIRouter()


@router.get("", response_model=Respuesta[List[ClaseResponse]])
def get_clases(
    desde: Optional[datetime] = None,
    hasta: Optional[datetime] = None,
    salon_id: Optional[str] = None,
    disciplina_id: Optional[str] = None,
    coach_id: Optional[str] = None,
    estado: Optional[str] = None,
    solo_sin_asignar: bool = False,
    solo_futuras: bool = False,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    clases = clases_service.obtener_clases(
        db, current_user,
        desde=desde, hasta=hasta, salon_id=salon_id, disciplina_id=disciplina_id,
        coach_id=coach_id, estado=estado, solo_sin_asignar=solo_sin_asignar, solo_futuras=solo_futuras,
    )
    return ok(clases)


@router.post("/completar-vencidas", response_model=Respuesta[List[str]])
def completar_vencidas(db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    completadas = clases_service.completar_clases_vencidas(db, current_user)
    return ok(completadas, f"{len(completadas)} clase(s) completada(s)")


@router.get("/{clase_id}", response_model=Respuesta[ClaseResponse])
def get_clase(clase_id: str, db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    return ok(clases_service.obtener_clase_por_id(db, current_user, clase_id))


@router.post("", response_model=Respuesta[ClaseResponse], status_code=201)
def create_clase(datos: ClaseCreate, db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    clase = clases_service.crear_clase(db, current_user, datos)
    return ok(clase, "Clase creada correctamente")


@router.put("/{clase_id}", response_model=Respuesta[ClaseResponse])
def update_clase(
    clase_id: str,
    datos: ClaseUpdate,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    clase = clases_service.actualizar_clase(db, current_user, clase_id, datos)
    return ok(clase, "Clase actualizada correctamente")


@router.post("/{clase_id}/asignar-coach", response_model=Respuesta[ClaseResponse])
def asignar_coach(
    clase_id: str,
    datos: AsignarCoachRequest,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    clase = clases_service.asignar_coach_directo(db, current_user, clase_id, datos.coach_id)
    return ok(clase, "Coach asignado correctamente")


@router.post("/{clase_id}/desasignar-coach", response_model=Respuesta[ClaseResponse])
def desasignar_coach(clase_id: str, db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    clase = clases_service.desasignar_coach(db, current_user, clase_id)
    return ok(clase, "Coach desasignado")


@router.post("/{clase_id}/solicitudes/{solicitud_id}/aprobar", response_model=Respuesta[SolicitudResponse])
def aprobar_solicitud(
    clase_id: str,
    solicitud_id: str,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    solicitud = solicitudes_service.asignar_coach_a_clase(db, current_user, clase_id, solicitud_id)
    return ok(solicitud, "Solicitud aprobada y coach asignado")


@router.post("/{clase_id}/cancelar", response_model=Respuesta[ClaseResponse])
def cancelar_clase(
    clase_id: str,
    datos: Optional[CancelarClaseRequest] = None,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    clase = clases_service.cancelar_clase(db, current_user, clase_id, datos.razon if datos else None)
    return ok(clase, "Clase cancelada")


@router.post("/{clase_id}/completar", response_model=Respuesta[ClaseResponse])
def completar_clase(clase_id: str, db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    return ok(clases_service.completar_clase(db, current_user, clase_id), "Clase completada")


@router.delete("/{clase_id}", response_model=Respuesta[None])
def delete_clase(clase_id: str, db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    clases_service.eliminar_clase(db, current_user, clase_id)
    return ok(None, "Clase eliminada")
