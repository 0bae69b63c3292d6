from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .clase import ClaseResponse, CoachResumen

__all__ = ["SolicitudCreate", "SolicitudResponse"]


class SolicitudCreate(BaseModel):
    clase_id: str
    mensaje: Optional[str] = Field(None, max_length=500)


class SolicitudResponse(BaseModel):
    id: str
    clase_id: str
    coach_id: str
    mensaje: Optional[str] = None
    estado: str
    respondida_at: Optional[datetime] = None
    created_at: datetime
    clase: Optional[ClaseResponse] = None
    coach: Optional[CoachResumen] = None

    class Config:
        from_attributes = True
