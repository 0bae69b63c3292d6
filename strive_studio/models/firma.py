from sqlalchemy import JSON, Column, ForeignKey, String

from strive_studio.models.base import BaseModel


class FirmaDocumento(BaseModel):
    __tablename__ = "firmas_documentos"

    usuario_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    firma_storage_url = Column(String(500), nullable=False)
    tipo_documento = Column(String(50), nullable=False, default="contrato")
    metadatos = Column("metadata", JSON, default=dict)
