from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from strive_studio.models.base import BaseModel

TIPOS_DOCUMENTO = (
    "ine_frente",
    "ine_reverso",
    "comprobante_domicilio",
    "curp",
    "rfc",
    "certificacion",
    "contrato",
    "otro",
)


class DocumentoPersonal(BaseModel):
    __tablename__ = "documentos_personal"

    coach_id = Column(String(36), ForeignKey("coaches.id", ondelete="CASCADE"), index=True)
    staff_id = Column(String(36), ForeignKey("staff.id", ondelete="CASCADE"), index=True)
    tipo_documento = Column(String(50), nullable=False)
    nombre_archivo = Column(String(255))
    url_archivo = Column(String(500), nullable=False)
    estado = Column(String(20), nullable=False, default="pendiente")  # pendiente, aprobado, rechazado
    version = Column(Integer, nullable=False, default=1)
    documento_anterior_id = Column(String(36), ForeignKey("documentos_personal.id"))
    comentarios_admin = Column(Text)
    revisado_por = Column(String(36))
    revisado_at = Column(DateTime)

    # Relaciones
    coach = relationship("Coach", back_populates="documentos")
    staff = relationship("Staff", back_populates="documentos")
    documento_anterior = relationship("DocumentoPersonal", remote_side="DocumentoPersonal.id")

    @property
    def personal_id(self) -> str:
        return self.coach_id or self.staff_id

    @property
    def tipo_personal(self) -> str:
        return "coach" if self.coach_id else "staff"
