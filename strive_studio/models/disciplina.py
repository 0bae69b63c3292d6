from sqlalchemy import Column, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from strive_studio.models.base import BaseModel


class Disciplina(BaseModel):
    __tablename__ = "disciplinas"

    nombre = Column(String(100), nullable=False, unique=True)
    tipo = Column(String(20), nullable=False)  # cycling, funcional
    color_hex = Column(String(9))
    descripcion = Column(Text)

    # Relaciones
    especialidades = relationship("Especialidad", back_populates="disciplina", cascade="all, delete-orphan")
    clases = relationship("Clase", back_populates="disciplina")


class Especialidad(BaseModel):
    __tablename__ = "especialidades"

    disciplina_id = Column(String(36), ForeignKey("disciplinas.id", ondelete="CASCADE"), nullable=False)
    nombre = Column(String(100), nullable=False)
    descripcion = Column(Text)

    disciplina = relationship("Disciplina", back_populates="especialidades")
