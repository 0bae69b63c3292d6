import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from strive_studio.config import settings
from strive_studio.core.core import requerir_rol
from strive_studio.core.exceptions import ConflictError, NotFoundError, ValidationError
from strive_studio.core.fechas import utcnow
from strive_studio.models.espacio import Espacio
from strive_studio.models.perfil import Perfil
from strive_studio.models.reserva import Reserva
from strive_studio.models.salon import Salon
from strive_studio.schemas.espacio import EspacioCreate, SalonCreate, SalonUpdate

logger = logging.getLogger(__name__)

ESTADOS_ESPACIO = ("disponible", "ocupado", "mantenimiento")


# ============== SALONES ==============

def obtener_salones(db: Session, perfil: Perfil, incluir_inactivos: bool = False) -> List[Salon]:
    query = db.query(Salon)
    if perfil.rol != "admin" or not incluir_inactivos:
        query = query.filter(Salon.activo == True)
    return query.order_by(Salon.orden_display.asc(), Salon.nombre.asc()).all()


def obtener_salon(db: Session, salon_id: str) -> Salon:
    salon = db.query(Salon).filter(Salon.id == salon_id).first()
    if not salon:
        raise NotFoundError("Salón no encontrado")
    return salon


def crear_salon(db: Session, perfil: Perfil, datos: SalonCreate) -> Salon:
    requerir_rol(perfil, "admin")
    salon = Salon(**datos.model_dump(), activo=True)
    db.add(salon)
    db.commit()
    db.refresh(salon)
    logger.info(f"🏢 Salón {salon.nombre} creado")
    return salon


def actualizar_salon(db: Session, perfil: Perfil, salon_id: str, datos: SalonUpdate) -> Salon:
    requerir_rol(perfil, "admin", "staff")
    salon = obtener_salon(db, salon_id)
    cambios = datos.model_dump(exclude_unset=True)

    nueva_capacidad = cambios.get("capacidad_maxima")
    if nueva_capacidad is not None:
        total = db.query(Espacio).filter(Espacio.salon_id == salon.id).count()
        if nueva_capacidad < total:
            raise ConflictError(
                f"La capacidad máxima no puede ser menor a los {total} espacios registrados"
            )

    for campo, valor in cambios.items():
        if valor is None and campo in ("nombre", "capacidad_maxima", "activo", "orden_display"):
            continue
        setattr(salon, campo, valor)
    db.commit()
    db.refresh(salon)
    return salon


def eliminar_salon(db: Session, perfil: Perfil, salon_id: str) -> None:
    requerir_rol(perfil, "admin")
    salon = obtener_salon(db, salon_id)
    total = db.query(Espacio).filter(Espacio.salon_id == salon.id).count()
    if total > 0:
        raise ConflictError(
            f"No se puede eliminar. El salón tiene {total} espacio(s); elimínalos primero"
        )
    if salon.clases:
        raise ConflictError("No se puede eliminar un salón con clases registradas; desactívalo en su lugar")
    db.delete(salon)
    db.commit()
    logger.info(f"🗑️ Salón {salon_id} eliminado")


# ============== ESPACIOS ==============

def obtener_espacios_por_salon(db: Session, salon_id: str) -> List[Espacio]:
    obtener_salon(db, salon_id)
    return (
        db.query(Espacio)
        .filter(Espacio.salon_id == salon_id)
        .order_by(Espacio.numero.asc())
        .all()
    )


def obtener_espacio(db: Session, espacio_id: str) -> Espacio:
    espacio = db.query(Espacio).filter(Espacio.id == espacio_id).first()
    if not espacio:
        raise NotFoundError("Espacio no encontrado")
    return espacio


def crear_espacio(db: Session, perfil: Perfil, datos: EspacioCreate) -> Espacio:
    requerir_rol(perfil, "admin")
    salon = obtener_salon(db, datos.salon_id)

    duplicado = (
        db.query(Espacio)
        .filter(Espacio.salon_id == salon.id, Espacio.numero == datos.numero)
        .first()
    )
    if duplicado:
        raise ConflictError(f"Ya existe el espacio número {datos.numero} en este salón")

    total = db.query(Espacio).filter(Espacio.salon_id == salon.id).count()
    if total >= salon.capacidad_maxima:
        raise ConflictError(
            f"El salón alcanzó su capacidad máxima de {salon.capacidad_maxima} espacios"
        )

    espacio = Espacio(**datos.model_dump(), estado="disponible", usos_desde_mantenimiento=0)
    db.add(espacio)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Ya existe el espacio número {datos.numero} en este salón")
    db.refresh(espacio)
    logger.info(f"🚲 Espacio {espacio.numero} creado en salón {salon.nombre}")
    return espacio


def actualizar_estado_espacio(
    db: Session, perfil: Perfil, espacio_id: str, nuevo_estado: str, notas: Optional[str] = None
) -> Espacio:
    """
    Cualquier estado puede pasar a cualquier otro. Entrar a mantenimiento
    reinicia el contador de usos y registra la fecha.
    """
    requerir_rol(perfil, "admin", "staff")
    if nuevo_estado not in ESTADOS_ESPACIO:
        raise ValidationError(f"Estado inválido. Use: {', '.join(ESTADOS_ESPACIO)}")
    espacio = obtener_espacio(db, espacio_id)

    espacio.estado = nuevo_estado
    if nuevo_estado == "mantenimiento":
        espacio.usos_desde_mantenimiento = 0
        espacio.ultimo_mantenimiento = utcnow()
    if notas is not None:
        espacio.notas_mantenimiento = notas
    db.commit()
    db.refresh(espacio)
    logger.info(f"🔧 Espacio {espacio.id} ahora {nuevo_estado}")
    return espacio


def eliminar_espacio(db: Session, perfil: Perfil, espacio_id: str) -> None:
    requerir_rol(perfil, "admin")
    espacio = obtener_espacio(db, espacio_id)
    activas = (
        db.query(Reserva)
        .filter(Reserva.espacio_id == espacio.id, Reserva.estado == "confirmada")
        .count()
    )
    if activas > 0:
        raise ConflictError(f"No se puede eliminar. El espacio tiene {activas} reserva(s) confirmada(s)")
    historicas = db.query(Reserva).filter(Reserva.espacio_id == espacio.id).count()
    if historicas > 0:
        raise ConflictError("No se puede eliminar un espacio con historial de reservas; márcalo en mantenimiento")
    db.delete(espacio)
    db.commit()


def requiere_mantenimiento(espacio: Espacio) -> bool:
    return espacio.porcentaje_uso >= settings.UMBRAL_MANTENIMIENTO


def obtener_estadisticas_salon(db: Session, salon_id: str) -> dict:
    espacios = obtener_espacios_por_salon(db, salon_id)
    return {
        "total": len(espacios),
        "disponibles": sum(1 for e in espacios if e.estado == "disponible"),
        "ocupados": sum(1 for e in espacios if e.estado == "ocupado"),
        "mantenimiento": sum(1 for e in espacios if e.estado == "mantenimiento"),
        "requieren_mantenimiento": sum(1 for e in espacios if requiere_mantenimiento(e)),
    }
