from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from strive_studio.core.fechas import utcnow
from strive_studio.models.base import BaseModel

ESTADOS_CLASE = ("programada", "en_curso", "completada", "cancelada")


class Clase(BaseModel):
    __tablename__ = "clases"

    fecha_hora = Column(DateTime, nullable=False, index=True)
    duracion = Column(Integer, nullable=False)  # minutos
    salon_id = Column(String(36), ForeignKey("salones.id"), nullable=False)
    disciplina_id = Column(String(36), ForeignKey("disciplinas.id"), nullable=False)
    especialidad_id = Column(String(36), ForeignKey("especialidades.id"))
    coach_id = Column(String(36), ForeignKey("coaches.id"))
    capacidad = Column(Integer, nullable=False)
    reservas_count = Column(Integer, nullable=False, default=0)
    estado = Column(String(20), nullable=False, default="programada")
    nombre_clase = Column(String(150))
    descripcion = Column(Text)
    notas_coach = Column(Text)
    playlist_url = Column(String(500))
    razon_cancelacion = Column(Text)
    asignada_por = Column(String(36), ForeignKey("profiles.id"))
    asignada_at = Column(DateTime)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("reservas_count >= 0", name="ck_clase_reservas_no_negativas"),
        CheckConstraint("reservas_count <= capacidad", name="ck_clase_reservas_capacidad"),
    )

    # Relaciones
    salon = relationship("Salon", back_populates="clases")
    disciplina = relationship("Disciplina", back_populates="clases")
    especialidad = relationship("Especialidad")
    coach = relationship("Coach", back_populates="clases")
    reservas = relationship("Reserva", back_populates="clase")
    solicitudes = relationship("SolicitudClase", back_populates="clase", cascade="all, delete-orphan")
    lista_espera = relationship(
        "ListaEspera", back_populates="clase", cascade="all, delete-orphan", order_by="ListaEspera.posicion"
    )

    @property
    def espacios_disponibles(self) -> int:
        return max(self.capacidad - self.reservas_count, 0)
