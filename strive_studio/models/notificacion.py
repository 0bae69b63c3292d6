from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from strive_studio.models.base import BaseModel


class Notificacion(BaseModel):
    __tablename__ = "notificaciones"

    destinatario_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    tipo = Column(String(50), nullable=False)
    titulo = Column(String(255), nullable=False)
    mensaje = Column(Text, nullable=False)
    leida = Column(Boolean, nullable=False, default=False)
    leida_at = Column(DateTime)
    url_accion = Column(String(255))
    icono = Column(String(50))
    data = Column(JSON, default=dict)

    # Relación
    destinatario = relationship("Perfil", back_populates="notificaciones")
