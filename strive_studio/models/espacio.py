from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from strive_studio.models.base import BaseModel


class Espacio(BaseModel):
    """Unidad de equipo (bici o tapete) dentro de un salón."""
    __tablename__ = "espacios"

    salon_id = Column(String(36), ForeignKey("salones.id"), nullable=False, index=True)
    numero = Column(Integer, nullable=False)
    tipo_equipo = Column(String(20), nullable=False)  # bici, tapete
    marca_equipo = Column(String(100))
    modelo_equipo = Column(String(100))
    estado = Column(String(20), nullable=False, default="disponible")  # disponible, ocupado, mantenimiento
    ultimo_mantenimiento = Column(DateTime)
    usos_desde_mantenimiento = Column(Integer, nullable=False, default=0)
    usos_para_mantenimiento = Column(Integer, nullable=False, default=100)
    notas_mantenimiento = Column(Text)

    __table_args__ = (
        UniqueConstraint("salon_id", "numero", name="uq_espacio_salon_numero"),
    )

    # Relaciones
    salon = relationship("Salon", back_populates="espacios")
    reservas = relationship("Reserva", back_populates="espacio")

    @property
    def porcentaje_uso(self) -> float:
        if not self.usos_para_mantenimiento:
            return 0.0
        return self.usos_desde_mantenimiento / self.usos_para_mantenimiento
