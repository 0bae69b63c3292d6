from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel

__all__ = ["NotificacionResponse", "ConteoNoLeidas"]


class NotificacionResponse(BaseModel):
    id: str
    tipo: str
    titulo: str
    mensaje: str
    leida: bool
    leida_at: Optional[datetime] = None
    url_accion: Optional[str] = None
    icono: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ConteoNoLeidas(BaseModel):
    count: int
