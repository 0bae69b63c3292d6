from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

__all__ = [
    "PersonalResponse", "CoachResponse", "StaffResponse", "RechazarPersonalRequest",
    "HeadCoachRequest", "InvitacionCreate", "InvitacionResponse", "ConteoPersonal", "EstadisticasPersonal",
]


class PersonalResponse(BaseModel):
    id: str
    tipo_personal: str
    nombre_completo: str
    email: str
    estado: str
    activo: bool
    onboarding_completo: bool
    documentos_completos: bool
    aprobado_at: Optional[datetime] = None
    notas_rechazo: Optional[str] = None
    contrato_firmado_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class CoachResponse(PersonalResponse):
    disciplinas: str
    especialidades: Optional[List[str]] = None
    biografia: Optional[str] = None
    anos_experiencia: int
    certificaciones: Optional[List[str]] = None
    es_head_coach: bool
    head_coach_de: Optional[str] = None
    disponible_para_clases: bool
    total_clases_impartidas: int


class StaffResponse(PersonalResponse):
    horario_entrada: Optional[str] = None
    horario_salida: Optional[str] = None
    dias_laborales: Optional[List[int]] = None


class RechazarPersonalRequest(BaseModel):
    motivo: str = Field(..., description="Motivo del rechazo, visible para la persona")


class HeadCoachRequest(BaseModel):
    es_head_coach: bool
    disciplina: Optional[str] = Field(None, pattern="^(cycling|funcional)$")


class InvitacionCreate(BaseModel):
    email: EmailStr
    tipo: str = Field(..., pattern="^(coach|staff)$")
    disciplinas: Optional[List[str]] = None
    mensaje_personalizado: Optional[str] = Field(None, max_length=1000)


class InvitacionResponse(BaseModel):
    id: str
    email: str
    rol: str
    disciplinas: Optional[List[str]] = None
    mensaje_personalizado: Optional[str] = None
    token: str
    estado: str
    expira_at: datetime
    aceptada_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ConteoPersonal(BaseModel):
    activos: int
    pendientes: int
    rechazados: int


class EstadisticasPersonal(BaseModel):
    coaches: ConteoPersonal
    staff: ConteoPersonal
    total_activos: int
    total_pendientes: int
    documentos_pendientes: int
    invitaciones_pendientes: int
