from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

__all__ = ["DocumentoResponse", "RevisionDocumentoRequest"]


class DocumentoResponse(BaseModel):
    id: str
    personal_id: str
    tipo_personal: str
    tipo_documento: str
    nombre_archivo: Optional[str] = None
    url_archivo: str
    estado: str
    version: int
    documento_anterior_id: Optional[str] = None
    comentarios_admin: Optional[str] = None
    revisado_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class RevisionDocumentoRequest(BaseModel):
    comentario: Optional[str] = Field(None, max_length=1000)
