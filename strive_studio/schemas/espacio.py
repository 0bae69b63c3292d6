from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

__all__ = [
    "SalonCreate", "SalonUpdate", "SalonResumen", "SalonResponse",
    "EspacioCreate", "EspacioEstadoUpdate", "EspacioResponse", "EstadisticasSalon",
]


class SalonCreate(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=100)
    descripcion: Optional[str] = None
    tipo: str = Field(..., pattern="^(cycling|funcional)$")
    capacidad_maxima: int = Field(..., gt=0)
    orden_display: int = 0


class SalonUpdate(BaseModel):
    nombre: Optional[str] = Field(None, min_length=1, max_length=100)
    descripcion: Optional[str] = None
    capacidad_maxima: Optional[int] = Field(None, gt=0)
    activo: Optional[bool] = None
    orden_display: Optional[int] = None


class SalonResumen(BaseModel):
    id: str
    nombre: str
    tipo: str

    class Config:
        from_attributes = True


class SalonResponse(SalonResumen):
    descripcion: Optional[str] = None
    capacidad_maxima: int
    activo: bool
    orden_display: int


class EspacioCreate(BaseModel):
    salon_id: str
    numero: int = Field(..., gt=0)
    tipo_equipo: str = Field(..., pattern="^(bici|tapete)$")
    marca_equipo: Optional[str] = None
    modelo_equipo: Optional[str] = None
    usos_para_mantenimiento: int = Field(100, gt=0)


class EspacioEstadoUpdate(BaseModel):
    estado: str = Field(..., pattern="^(disponible|ocupado|mantenimiento)$")
    notas: Optional[str] = None


class EspacioResponse(BaseModel):
    id: str
    salon_id: str
    numero: int
    tipo_equipo: str
    marca_equipo: Optional[str] = None
    modelo_equipo: Optional[str] = None
    estado: str
    ultimo_mantenimiento: Optional[datetime] = None
    usos_desde_mantenimiento: int
    usos_para_mantenimiento: int
    porcentaje_uso: float
    notas_mantenimiento: Optional[str] = None

    class Config:
        from_attributes = True


class EstadisticasSalon(BaseModel):
    total: int
    disponibles: int
    ocupados: int
    mantenimiento: int
    requieren_mantenimiento: int
