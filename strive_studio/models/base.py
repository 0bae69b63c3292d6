import uuid

from sqlalchemy import Column, DateTime, String

from strive_studio.core.fechas import utcnow
from strive_studio.database import Base


def generar_uuid() -> str:
    return str(uuid.uuid4())


class BaseModel(Base):
    __abstract__ = True
    id = Column(String(36), primary_key=True, default=generar_uuid)
    created_at = Column(DateTime, default=utcnow, nullable=False)
