from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .clase import ClaseResponse

__all__ = [
    "ReservaCreate", "CancelarReservaRequest", "EspacioReservado", "ReservaResponse",
    "CancelacionResponse", "ListaEsperaCreate", "ListaEsperaResponse",
    "DisponibilidadResponse", "EstadisticasCliente",
]


class ReservaCreate(BaseModel):
    clase_id: str
    espacio_id: Optional[str] = None
    unirse_lista_espera: bool = Field(False, description="Si la clase está llena, entrar a la lista de espera")


class CancelarReservaRequest(BaseModel):
    razon: Optional[str] = Field(None, max_length=500)


class EspacioReservado(BaseModel):
    id: str
    numero: int
    tipo_equipo: str

    class Config:
        from_attributes = True


class ReservaResponse(BaseModel):
    id: str
    clase_id: str
    cliente_id: str
    espacio_id: Optional[str] = None
    estado: str
    razon_cancelacion: Optional[str] = None
    cancelada_at: Optional[datetime] = None
    cancelada_tardia: bool
    created_at: datetime
    clase: Optional[ClaseResponse] = None
    espacio: Optional[EspacioReservado] = None

    class Config:
        from_attributes = True


class CancelacionResponse(BaseModel):
    reserva: ReservaResponse
    tardia: bool
    horas_anticipacion: float


class ListaEsperaCreate(BaseModel):
    clase_id: str


class ListaEsperaResponse(BaseModel):
    id: str
    clase_id: str
    cliente_id: str
    posicion: int
    notificado: bool
    created_at: datetime

    class Config:
        from_attributes = True


class DisponibilidadResponse(BaseModel):
    clase_id: str
    disponible: bool
    capacidad: int
    reservas_count: int
    espacios_disponibles: int
    en_lista_espera: int


class EstadisticasCliente(BaseModel):
    reservas_activas: int
    clases_completadas: int
    cancelaciones: int
    cancelaciones_tardias: int
