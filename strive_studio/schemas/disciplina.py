from pydantic import BaseModel, Field
from typing import List, Optional

__all__ = [
    "DisciplinaCreate", "DisciplinaUpdate", "DisciplinaResumen", "DisciplinaResponse",
    "EspecialidadCreate", "EspecialidadResponse",
]


class EspecialidadCreate(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=100)
    descripcion: Optional[str] = None


class EspecialidadResponse(EspecialidadCreate):
    id: str
    disciplina_id: str

    class Config:
        from_attributes = True


class DisciplinaCreate(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=100)
    tipo: str = Field(..., pattern="^(cycling|funcional)$")
    color_hex: Optional[str] = Field(None, pattern="^#[0-9a-fA-F]{6}$")
    descripcion: Optional[str] = None


class DisciplinaUpdate(BaseModel):
    nombre: Optional[str] = Field(None, min_length=1, max_length=100)
    color_hex: Optional[str] = Field(None, pattern="^#[0-9a-fA-F]{6}$")
    descripcion: Optional[str] = None


class DisciplinaResumen(BaseModel):
    id: str
    nombre: str
    tipo: str
    color_hex: Optional[str] = None

    class Config:
        from_attributes = True


class DisciplinaResponse(DisciplinaResumen):
    descripcion: Optional[str] = None
    especialidades: List[EspecialidadResponse] = []
