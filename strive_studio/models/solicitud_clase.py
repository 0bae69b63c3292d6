from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from strive_studio.models.base import BaseModel


class SolicitudClase(BaseModel):
    """Solicitud de un coach para impartir una clase sin asignar."""
    __tablename__ = "solicitudes_clase"

    clase_id = Column(String(36), ForeignKey("clases.id", ondelete="CASCADE"), nullable=False, index=True)
    coach_id = Column(String(36), ForeignKey("coaches.id", ondelete="CASCADE"), nullable=False, index=True)
    mensaje = Column(Text)
    estado = Column(String(20), nullable=False, default="pendiente")  # pendiente, aprobado, rechazado
    respondida_por = Column(String(36), ForeignKey("profiles.id"))
    respondida_at = Column(DateTime)

    # Relaciones
    clase = relationship("Clase", back_populates="solicitudes")
    coach = relationship("Coach", back_populates="solicitudes")
