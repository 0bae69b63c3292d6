from sqlalchemy import JSON, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from strive_studio.core.fechas import utcnow
from strive_studio.models.base import BaseModel


class InvitacionPersonal(BaseModel):
    __tablename__ = "invitaciones_personal"

    email = Column(String(150), nullable=False, index=True)
    rol = Column(String(20), nullable=False)  # coach, staff
    disciplinas = Column(JSON)
    mensaje_personalizado = Column(Text)
    token = Column(String(64), nullable=False, unique=True, index=True)
    estado = Column(String(20), nullable=False, default="pendiente")  # pendiente, aceptada, expirada
    invitado_por = Column(String(36), ForeignKey("profiles.id"))
    expira_at = Column(DateTime, nullable=False)
    aceptada_at = Column(DateTime)

    invitador = relationship("Perfil")

    @property
    def vencida(self) -> bool:
        return self.expira_at <= utcnow()
