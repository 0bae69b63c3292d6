from sqlalchemy import Boolean, Column, Integer, String, Text
from sqlalchemy.orm import relationship

from strive_studio.models.base import BaseModel


class Salon(BaseModel):
    __tablename__ = "salones"

    nombre = Column(String(100), nullable=False)
    descripcion = Column(Text)
    tipo = Column(String(20), nullable=False)  # cycling, funcional
    capacidad_maxima = Column(Integer, nullable=False)
    activo = Column(Boolean, nullable=False, default=True)
    orden_display = Column(Integer, nullable=False, default=0)

    # Relaciones
    espacios = relationship("Espacio", back_populates="salon", order_by="Espacio.numero")
    clases = relationship("Clase", back_populates="salon")
