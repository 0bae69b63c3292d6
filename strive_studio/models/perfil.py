from sqlalchemy import Boolean, Column, Date, DateTime, String
from sqlalchemy.orm import relationship

from strive_studio.core.fechas import utcnow
from strive_studio.database import Base


class Perfil(Base):
    """Perfil de la aplicación; el id es el mismo que el del usuario en el servicio de auth."""
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True)
    email = Column(String(150), unique=True, nullable=False, index=True)
    nombre_completo = Column(String(200), nullable=False, default="")
    telefono = Column(String(20))
    fecha_nacimiento = Column(Date)
    rol = Column(String(20), nullable=False, default="cliente")  # admin, coach, staff, cliente
    activo = Column(Boolean, nullable=False, default=True)
    email_confirmado = Column(Boolean, nullable=False, default=True)
    onboarding_completo = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relaciones
    reservas = relationship("Reserva", back_populates="cliente")
    notificaciones = relationship("Notificacion", back_populates="destinatario", cascade="all, delete-orphan")
