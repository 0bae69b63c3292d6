from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from strive_studio.models.base import BaseModel


class ListaEspera(BaseModel):
    __tablename__ = "lista_espera"

    clase_id = Column(String(36), ForeignKey("clases.id", ondelete="CASCADE"), nullable=False, index=True)
    cliente_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    posicion = Column(Integer, nullable=False)
    notificado = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("clase_id", "cliente_id", name="uq_lista_espera_cliente"),
    )

    clase = relationship("Clase", back_populates="lista_espera")
    cliente = relationship("Perfil")
