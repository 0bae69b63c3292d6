from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .disciplina import DisciplinaResumen
from .espacio import SalonResumen

__all__ = [
    "ClaseCreate", "ClaseUpdate", "CoachResumen", "ClaseResponse",
    "AsignarCoachRequest", "CancelarClaseRequest",
]


class ClaseCreate(BaseModel):
    fecha_hora: datetime
    duracion: int = Field(60, description="Duración en minutos")
    salon_id: str
    disciplina_id: str
    especialidad_id: Optional[str] = None
    capacidad: Optional[int] = Field(None, description="Por defecto, la capacidad máxima del salón")
    nombre_clase: Optional[str] = Field(None, max_length=150)
    descripcion: Optional[str] = None


class ClaseUpdate(BaseModel):
    fecha_hora: Optional[datetime] = None
    duracion: Optional[int] = None
    salon_id: Optional[str] = None
    disciplina_id: Optional[str] = None
    especialidad_id: Optional[str] = None
    capacidad: Optional[int] = None
    nombre_clase: Optional[str] = Field(None, max_length=150)
    descripcion: Optional[str] = None
    notas_coach: Optional[str] = None
    playlist_url: Optional[str] = Field(None, max_length=500)


class CoachResumen(BaseModel):
    id: str
    nombre_completo: str
    es_head_coach: bool = False

    class Config:
        from_attributes = True


class ClaseResponse(BaseModel):
    id: str
    fecha_hora: datetime
    duracion: int
    salon_id: str
    disciplina_id: str
    especialidad_id: Optional[str] = None
    coach_id: Optional[str] = None
    capacidad: int
    reservas_count: int
    espacios_disponibles: int
    estado: str
    nombre_clase: Optional[str] = None
    descripcion: Optional[str] = None
    notas_coach: Optional[str] = None
    playlist_url: Optional[str] = None
    razon_cancelacion: Optional[str] = None
    asignada_at: Optional[datetime] = None
    salon: Optional[SalonResumen] = None
    disciplina: Optional[DisciplinaResumen] = None
    coach: Optional[CoachResumen] = None

    class Config:
        from_attributes = True


class AsignarCoachRequest(BaseModel):
    coach_id: str


class CancelarClaseRequest(BaseModel):
    razon: Optional[str] = Field(None, max_length=500)
