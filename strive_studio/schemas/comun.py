from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

__all__ = ["Respuesta", "ok"]


class Respuesta(BaseModel, Generic[T]):
    """Contrato uniforme de las acciones: success + data (+ mensaje)."""
    success: bool = True
    data: Optional[T] = None
    mensaje: Optional[str] = None


def ok(data: Any = None, mensaje: Optional[str] = None) -> dict:
    respuesta = {"success": True, "data": data}
    if mensaje:
        respuesta["mensaje"] = mensaje
    return respuesta
