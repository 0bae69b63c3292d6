from datetime import datetime
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from strive_studio.core.security import get_current_user
from strive_studio.database import get_db
from strive_studio.models.lista_espera import ListaEspera
from strive_studio.models.perfil import Perfil
from strive_studio.schemas.clase import ClaseResponse
from strive_studio.schemas.comun import Respuesta, ok
from strive_studio.schemas.reserva import (
    CancelacionResponse,
    CancelarReservaRequest,
    DisponibilidadResponse,
    EstadisticasCliente,
    ListaEsperaCreate,
    ListaEsperaResponse,
    ReservaCreate,
    ReservaResponse,
)
from strive_studio.services import reservas_service

router = APIRouter()


@router.post("", response_model=Respuesta[Union[ReservaResponse, ListaEsperaResponse]], status_code=201)
def create_reserva(
    datos: ReservaCreate,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    resultado = reservas_service.crear_reserva(
        db, current_user, datos.clase_id, datos.espacio_id, datos.unirse_lista_espera
    )
    if isinstance(resultado, ListaEspera):
        return ok(
            ListaEsperaResponse.model_validate(resultado),
            f"La clase está llena. Quedaste en la posición {resultado.posicion} de la lista de espera",
        )
    return ok(ReservaResponse.model_validate(resultado), "Reserva confirmada")


@router.post("/{reserva_id}/cancelar", response_model=Respuesta[CancelacionResponse])
def cancelar_reserva(
    reserva_id: str,
    datos: Optional[CancelarReservaRequest] = None,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    reserva, tardia, horas = reservas_service.cancelar_reserva(
        db, current_user, reserva_id, datos.razon if datos else None
    )
    mensaje = "Reserva cancelada"
    if tardia:
        mensaje = "Reserva cancelada. Cancelación tardía registrada"
    return ok({"reserva": reserva, "tardia": tardia, "horas_anticipacion": horas}, mensaje)


@router.get("/mis-reservas", response_model=Respuesta[List[ReservaResponse]])
def get_mis_reservas(
    filtro: str = Query("activas", pattern="^(activas|pasadas|canceladas|todas)$"),
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    return ok(reservas_service.obtener_mis_reservas(db, current_user, filtro))


@router.get("/clases-disponibles", response_model=Respuesta[List[ClaseResponse]])
def get_clases_disponibles(
    disciplina_id: Optional[str] = None,
    salon_id: Optional[str] = None,
    desde: Optional[datetime] = None,
    hasta: Optional[datetime] = None,
    solo_disponibles: bool = False,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    clases = reservas_service.obtener_clases_disponibles(
        db, current_user, disciplina_id, salon_id, desde, hasta, solo_disponibles
    )
    return ok(clases)


@router.get("/disponibilidad/{clase_id}", response_model=Respuesta[DisponibilidadResponse])
def get_disponibilidad(clase_id: str, db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    return ok(reservas_service.verificar_disponibilidad(db, clase_id))


@router.get("/estadisticas", response_model=Respuesta[EstadisticasCliente])
def get_estadisticas(db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    return ok(reservas_service.obtener_estadisticas_cliente(db, current_user))


# ============== LISTA DE ESPERA ==============

@router.post("/lista-espera", response_model=Respuesta[ListaEsperaResponse], status_code=201)
def unirse_lista_espera(
    datos: ListaEsperaCreate,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    entrada = reservas_service.agregar_lista_espera(db, current_user, datos.clase_id)
    return ok(entrada, f"Estás en la posición {entrada.posicion} de la lista de espera")


@router.delete("/lista-espera/{clase_id}", response_model=Respuesta[None])
def salir_lista_espera(clase_id: str, db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    reservas_service.remover_lista_espera(db, current_user, clase_id)
    return ok(None, "Saliste de la lista de espera")
