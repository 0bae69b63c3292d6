from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import declared_attr, relationship

from strive_studio.core.fechas import utcnow
from strive_studio.database import Base


class PersonalMixin:
    """Columnas compartidas por coaches y staff."""

    @declared_attr
    def id(cls):
        return Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True)

    @declared_attr
    def perfil(cls):
        return relationship("Perfil", lazy="joined")

    # Estado y aprobación
    estado = Column(String(20), nullable=False, default="pendiente")  # pendiente, aprobado, rechazado
    activo = Column(Boolean, nullable=False, default=False)
    onboarding_completo = Column(Boolean, nullable=False, default=False)
    documentos_completos = Column(Boolean, nullable=False, default=False)
    aprobado_por = Column(String(36))
    aprobado_at = Column(DateTime)
    notas_rechazo = Column(Text)
    notas_admin = Column(Text)

    # Documentos personales
    curp = Column(String(18))
    rfc = Column(String(13))
    direccion_completa = Column(Text)

    # Cuenta bancaria
    cuenta_bancaria_banco = Column(String(100))
    cuenta_bancaria_clabe = Column(String(18))
    cuenta_bancaria_beneficiario = Column(String(200))

    # Contacto de emergencia
    contacto_emergencia_nombre = Column(String(200))
    contacto_emergencia_telefono = Column(String(20))
    contacto_emergencia_relacion = Column(String(50))

    # Contrato
    contrato_firmado_url = Column(String(500))
    contrato_firmado_at = Column(DateTime)

    invitacion_id = Column(String(36))
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    @property
    def nombre_completo(self) -> str:
        return (self.perfil.nombre_completo or "") if self.perfil else ""

    @property
    def email(self) -> str:
        return self.perfil.email if self.perfil else ""


class Coach(PersonalMixin, Base):
    __tablename__ = "coaches"

    disciplinas = Column(String(20), nullable=False, default="cycling")  # cycling, funcional, ambas
    especialidades = Column(JSON, default=list)
    biografia = Column(Text)
    anos_experiencia = Column(Integer, nullable=False, default=0)
    certificaciones = Column(JSON, default=list)
    es_head_coach = Column(Boolean, nullable=False, default=False)
    head_coach_de = Column(String(20))
    disponible_para_clases = Column(Boolean, nullable=False, default=True)
    total_clases_impartidas = Column(Integer, nullable=False, default=0)

    # Relaciones
    clases = relationship("Clase", back_populates="coach")
    solicitudes = relationship("SolicitudClase", back_populates="coach", cascade="all, delete-orphan")
    documentos = relationship("DocumentoPersonal", back_populates="coach", cascade="all, delete-orphan")

    tipo_personal = "coach"

    def imparte(self, disciplina: str) -> bool:
        return self.disciplinas in (disciplina, "ambas")


class Staff(PersonalMixin, Base):
    __tablename__ = "staff"

    horario_entrada = Column(String(5))
    horario_salida = Column(String(5))
    dias_laborales = Column(JSON, default=list)

    documentos = relationship("DocumentoPersonal", back_populates="staff", cascade="all, delete-orphan")

    tipo_personal = "staff"
