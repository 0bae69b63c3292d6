from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, Text, text
from sqlalchemy.orm import relationship

from strive_studio.models.base import BaseModel


class Reserva(BaseModel):
    __tablename__ = "reservas"

    clase_id = Column(String(36), ForeignKey("clases.id"), nullable=False, index=True)
    cliente_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    espacio_id = Column(String(36), ForeignKey("espacios.id"))
    estado = Column(String(20), nullable=False, default="confirmada")  # confirmada, cancelada, completada, no_show
    razon_cancelacion = Column(Text)
    cancelada_at = Column(DateTime)
    cancelada_tardia = Column(Boolean, nullable=False, default=False)

    # Una sola reserva confirmada por cliente y por espacio en cada clase
    __table_args__ = (
        Index(
            "uq_reserva_cliente_confirmada", "clase_id", "cliente_id", unique=True,
            postgresql_where=text("estado = 'confirmada'"),
            sqlite_where=text("estado = 'confirmada'"),
        ),
        Index(
            "uq_reserva_espacio_confirmada", "clase_id", "espacio_id", unique=True,
            postgresql_where=text("estado = 'confirmada'"),
            sqlite_where=text("estado = 'confirmada'"),
        ),
    )

    # Relaciones
    clase = relationship("Clase", back_populates="reservas")
    cliente = relationship("Perfil", back_populates="reservas")
    espacio = relationship("Espacio", back_populates="reservas")
