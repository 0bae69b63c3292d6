from datetime import date
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

__all__ = [
    "CrearCuentaRequest", "DatosPersonalesRequest", "DatosRolRequest", "FinalizarRequest",
]


class CrearCuentaRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    rol: str = Field(..., pattern="^(coach|staff)$")
    token: str


class DatosPersonalesRequest(BaseModel):
    personal_id: str
    tipo_personal: str = Field(..., pattern="^(coach|staff)$")
    token: str
    nombre_completo: str = Field(..., min_length=3, max_length=200)
    telefono: Optional[str] = Field(None, pattern=r"^\+?[0-9 ]{10,15}$")
    fecha_nacimiento: Optional[date] = None
    curp: Optional[str] = Field(None, pattern="^[A-Z0-9]{18}$")
    rfc: Optional[str] = Field(None, pattern="^[A-Z0-9]{12,13}$")
    direccion_completa: Optional[str] = None
    cuenta_bancaria_banco: Optional[str] = None
    cuenta_bancaria_clabe: Optional[str] = Field(None, pattern="^[0-9]{18}$")
    cuenta_bancaria_beneficiario: Optional[str] = None
    contacto_emergencia_nombre: Optional[str] = None
    contacto_emergencia_telefono: Optional[str] = None
    contacto_emergencia_relacion: Optional[str] = None

    @field_validator("curp", "rfc", mode="before")
    @classmethod
    def mayusculas(cls, v):
        if isinstance(v, str):
            return v.strip().upper() or None
        return v


class DatosRolRequest(BaseModel):
    personal_id: str
    tipo_personal: str = Field(..., pattern="^(coach|staff)$")
    token: str
    # Coach
    disciplinas: Optional[str] = Field(None, pattern="^(cycling|funcional|ambas)$")
    especialidades: Optional[List[str]] = None
    biografia: Optional[str] = Field(None, max_length=2000)
    anos_experiencia: Optional[int] = Field(None, ge=0)
    certificaciones: Optional[List[str]] = None
    # Staff
    horario_entrada: Optional[str] = Field(None, pattern="^([01][0-9]|2[0-3]):[0-5][0-9]$")
    horario_salida: Optional[str] = Field(None, pattern="^([01][0-9]|2[0-3]):[0-5][0-9]$")
    dias_laborales: Optional[List[int]] = None

    @field_validator("dias_laborales")
    @classmethod
    def dias_validos(cls, v):
        if v is not None and any(d < 0 or d > 6 for d in v):
            raise ValueError("Los días laborales van de 0 (domingo) a 6 (sábado)")
        return v


class FinalizarRequest(BaseModel):
    personal_id: str
    tipo_personal: str = Field(..., pattern="^(coach|staff)$")
    firma_base64: str = Field(..., min_length=10)
    token: str
