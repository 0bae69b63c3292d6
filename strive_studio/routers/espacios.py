from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from strive_studio.core.security import get_current_user
from strive_studio.database import get_db
from strive_studio.models.perfil import Perfil
from strive_studio.schemas.comun import Respuesta, ok
from strive_studio.schemas.espacio import (
    EspacioCreate,
    EspacioEstadoUpdate,
    EspacioResponse,
    EstadisticasSalon,
    SalonCreate,
    SalonResponse,
    SalonUpdate,
)
from strive_studio.services import espacios_service

router = APIRouter()


# ============== SALONES ==============

@router.get("/salones", response_model=Respuesta[List[SalonResponse]])
def get_salones(
    incluir_inactivos: bool = False,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    return ok(espacios_service.obtener_salones(db, current_user, incluir_inactivos))


@router.get("/salones/{salon_id}", response_model=Respuesta[SalonResponse])
def get_salon(salon_id: str, db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    return ok(espacios_service.obtener_salon(db, salon_id))


@router.post("/salones", response_model=Respuesta[SalonResponse], status_code=201)
def create_salon(datos: SalonCreate, db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    return ok(espacios_service.crear_salon(db, current_user, datos), "Salón creado correctamente")


@router.put("/salones/{salon_id}", response_model=Respuesta[SalonResponse])
def update_salon(
    salon_id: str,
    datos: SalonUpdate,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    return ok(espacios_service.actualizar_salon(db, current_user, salon_id, datos), "Salón actualizado")


@router.delete("/salones/{salon_id}", response_model=Respuesta[None])
def delete_salon(salon_id: str, db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    espacios_service.eliminar_salon(db, current_user, salon_id)
    return ok(None, "Salón eliminado")


@router.get("/salones/{salon_id}/espacios", response_model=Respuesta[List[EspacioResponse]])
def get_espacios_salon(salon_id: str, db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    return ok(espacios_service.obtener_espacios_por_salon(db, salon_id))


@router.get("/salones/{salon_id}/estadisticas", response_model=Respuesta[EstadisticasSalon])
def get_estadisticas_salon(salon_id: str, db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    return ok(espacios_service.obtener_estadisticas_salon(db, salon_id))


# ============== ESPACIOS ==============

@router.post("/espacios", response_model=Respuesta[EspacioResponse], status_code=201)
def create_espacio(datos: EspacioCreate, db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    espacio = espacios_service.crear_espacio(db, current_user, datos)
    return ok(espacio, f"Espacio {espacio.numero} creado")


@router.get("/espacios/{espacio_id}", response_model=Respuesta[EspacioResponse])
def get_espacio(espacio_id: str, db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    return ok(espacios_service.obtener_espacio(db, espacio_id))


@router.patch("/espacios/{espacio_id}/estado", response_model=Respuesta[EspacioResponse])
def update_estado_espacio(
    espacio_id: str,
    datos: EspacioEstadoUpdate,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    espacio = espacios_service.actualizar_estado_espacio(db, current_user, espacio_id, datos.estado, datos.notas)
    return ok(espacio, "Estado actualizado")


@router.delete("/espacios/{espacio_id}", response_model=Respuesta[None])
def delete_espacio(espacio_id: str, db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    espacios_service.eliminar_espacio(db, current_user, espacio_id)
    return ok(None, "Espacio eliminado")
