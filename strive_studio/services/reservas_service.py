import logging
from datetime import datetime
from typing import List, Optional, Tuple, Union

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from strive_studio.config import settings
from strive_studio.core.core import requerir_rol
from strive_studio.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from strive_studio.core.fechas import a_utc, utcnow
from strive_studio.models.clase import Clase
from strive_studio.models.espacio import Espacio
from strive_studio.models.lista_espera import ListaEspera
from strive_studio.models.perfil import Perfil
from strive_studio.models.reserva import Reserva
from strive_studio.services.clases_service import describir_clase, obtener_clase
from strive_studio.services.notificaciones_service import crear_notificacion

logger = logging.getLogger(__name__)

FILTROS_MIS_RESERVAS = ("activas", "pasadas", "canceladas", "todas")


def _validar_clase_reservable(clase: Clase) -> None:
    if clase.estado != "programada":
        raise ConflictError("La clase no está disponible para reservar")
    if clase.fecha_hora <= utcnow():
        raise ConflictError("La clase ya comenzó")


def _validar_espacio(db: Session, clase: Clase, espacio_id: str) -> Espacio:
    espacio = db.query(Espacio).filter(Espacio.id == espacio_id).first()
    if not espacio:
        raise NotFoundError("Espacio no encontrado")
    if espacio.salon_id != clase.salon_id:
        raise ValidationError("El espacio no pertenece al salón de la clase")
    if espacio.estado != "disponible":
        raise ConflictError(f"El espacio {espacio.numero} no está disponible")
    ocupado = (
        db.query(Reserva)
        .filter(
            Reserva.clase_id == clase.id,
            Reserva.espacio_id == espacio.id,
            Reserva.estado == "confirmada",
        )
        .first()
    )
    if ocupado:
        raise ConflictError(f"El espacio {espacio.numero} ya está reservado en esta clase")
    return espacio


def _tomar_lugar(db: Session, clase_id: str) -> bool:
    """
    Verifica capacidad e incrementa el contador en una sola sentencia.
    False si la clase está llena (o dejó de estar programada).
    """
    filas = (
        db.query(Clase)
        .filter(
            Clase.id == clase_id,
            Clase.estado == "programada",
            Clase.reservas_count < Clase.capacidad,
        )
        .update({Clase.reservas_count: Clase.reservas_count + 1}, synchronize_session=False)
    )
    return filas == 1


def _liberar_lugar(db: Session, clase_id: str) -> None:
    db.query(Clase).filter(Clase.id == clase_id, Clase.reservas_count > 0).update(
        {Clase.reservas_count: Clase.reservas_count - 1}, synchronize_session=False
    )


def _salir_de_lista_espera(db: Session, clase_id: str, cliente_id: str) -> bool:
    """Quita al cliente de la lista y recorre a los que estaban detrás."""
    entrada = (
        db.query(ListaEspera)
        .filter(ListaEspera.clase_id == clase_id, ListaEspera.cliente_id == cliente_id)
        .first()
    )
    if not entrada:
        return False

    posicion = entrada.posicion
    db.delete(entrada)
    db.flush()
    db.query(ListaEspera).filter(
        ListaEspera.clase_id == clase_id, ListaEspera.posicion > posicion
    ).update({ListaEspera.posicion: ListaEspera.posicion - 1}, synchronize_session=False)
    return True


def crear_reserva(
    db: Session,
    perfil: Perfil,
    clase_id: str,
    espacio_id: Optional[str] = None,
    unirse_lista_espera: bool = False,
) -> Union[Reserva, ListaEspera]:
    """
    Reserva un lugar en la clase. Si la clase está llena lanza ConflictError,
    o agrega al cliente a la lista de espera cuando `unirse_lista_espera`.
    """
    requerir_rol(perfil, "cliente")
    clase = obtener_clase(db, clase_id)
    _validar_clase_reservable(clase)

    existente = (
        db.query(Reserva)
        .filter(
            Reserva.clase_id == clase.id,
            Reserva.cliente_id == perfil.id,
            Reserva.estado == "confirmada",
        )
        .first()
    )
    if existente:
        raise ConflictError("Ya tienes una reserva para esta clase")

    espacio = _validar_espacio(db, clase, espacio_id) if espacio_id else None

    if not _tomar_lugar(db, clase.id):
        db.rollback()
        db.refresh(clase)
        if clase.estado != "programada":
            raise ConflictError("La clase no está disponible para reservar")
        if unirse_lista_espera:
            return agregar_lista_espera(db, perfil, clase.id)
        raise ConflictError("La clase está llena")

    reserva = Reserva(
        clase_id=clase.id,
        cliente_id=perfil.id,
        espacio_id=espacio.id if espacio else None,
        estado="confirmada",
    )
    db.add(reserva)
    try:
        db.flush()
    except IntegrityError:
        # Otra reserva confirmada del mismo cliente o del mismo espacio ganó la carrera
        db.rollback()
        raise ConflictError("Ya existe una reserva confirmada para ese cliente o espacio")

    _salir_de_lista_espera(db, clase.id, perfil.id)

    lugar = f" (lugar {espacio.numero})" if espacio else ""
    crear_notificacion(
        db, perfil.id, "reserva_confirmada",
        "Reserva confirmada",
        f"Tu lugar en {describir_clase(clase)}{lugar} está confirmado",
        url_accion="/cliente/reservas",
        icono="check-circle",
        data={"clase_id": clase.id, "reserva_id": reserva.id},
    )
    db.commit()
    db.refresh(reserva)
    logger.info(f"🎟️ Reserva {reserva.id} creada para {perfil.id} en clase {clase.id}")
    return reserva


def _notificar_siguiente_en_espera(db: Session, clase: Clase) -> Optional[ListaEspera]:
    """Avisa al primer cliente en espera que todavía no fue notificado; el primero en reservar gana."""
    siguiente = (
        db.query(ListaEspera)
        .filter(ListaEspera.clase_id == clase.id, ListaEspera.notificado == False)
        .order_by(ListaEspera.posicion.asc())
        .first()
    )
    if not siguiente:
        return None
    siguiente.notificado = True
    crear_notificacion(
        db, siguiente.cliente_id, "lugar_disponible",
        "¡Se liberó un lugar!",
        f"Se liberó un lugar en {describir_clase(clase)}. Reserva antes de que se ocupe",
        url_accion="/cliente/clases",
        icono="bell",
        data={"clase_id": clase.id},
    )
    return siguiente


def cancelar_reserva(
    db: Session, perfil: Perfil, reserva_id: str, razon: Optional[str] = None
) -> Tuple[Reserva, bool, float]:
    """
    Cancela una reserva confirmada. Retorna (reserva, tardia, horas_anticipacion);
    menos de HORAS_CANCELACION_TARDIA horas antes de la clase cuenta como tardía.
    """
    requerir_rol(perfil, "cliente", "admin")
    reserva = (
        db.query(Reserva)
        .options(joinedload(Reserva.clase))
        .filter(Reserva.id == reserva_id)
        .first()
    )
    if not reserva:
        raise NotFoundError("Reserva no encontrada")
    if perfil.rol != "admin" and reserva.cliente_id != perfil.id:
        raise AuthorizationError("No puedes cancelar reservas de otro cliente")
    if reserva.estado != "confirmada":
        raise ConflictError("Solo se pueden cancelar reservas confirmadas")

    clase = reserva.clase
    ahora = utcnow()
    if clase.fecha_hora <= ahora:
        raise ConflictError("No se puede cancelar una clase que ya comenzó")

    horas_anticipacion = (clase.fecha_hora - ahora).total_seconds() / 3600
    tardia = horas_anticipacion < settings.HORAS_CANCELACION_TARDIA

    filas = (
        db.query(Reserva)
        .filter(Reserva.id == reserva.id, Reserva.estado == "confirmada")
        .update(
            {
                Reserva.estado: "cancelada",
                Reserva.cancelada_at: ahora,
                Reserva.cancelada_tardia: tardia,
                Reserva.razon_cancelacion: (razon or "").strip() or None,
            },
            synchronize_session=False,
        )
    )
    if filas == 0:
        db.rollback()
        raise ConflictError("La reserva ya fue cancelada")
    _liberar_lugar(db, clase.id)

    aviso = f" Cancelaste con menos de {settings.HORAS_CANCELACION_TARDIA} horas de anticipación." if tardia else ""
    crear_notificacion(
        db, reserva.cliente_id, "reserva_cancelada",
        "Reserva cancelada",
        f"Tu reserva para {describir_clase(clase)} fue cancelada.{aviso}",
        url_accion="/cliente/reservas",
        icono="x-circle",
        data={"clase_id": clase.id, "reserva_id": reserva.id, "tardia": tardia},
    )
    _notificar_siguiente_en_espera(db, clase)

    db.commit()
    db.refresh(reserva)
    logger.info(
        f"🚫 Reserva {reserva.id} cancelada ({horas_anticipacion:.1f}h antes{', tardía' if tardia else ''})"
    )
    return reserva, tardia, round(horas_anticipacion, 2)


def obtener_mis_reservas(db: Session, perfil: Perfil, filtro: str = "activas") -> List[Reserva]:
    requerir_rol(perfil, "cliente")
    if filtro not in FILTROS_MIS_RESERVAS:
        raise ValidationError(f"Filtro inválido. Use: {', '.join(FILTROS_MIS_RESERVAS)}")

    ahora = utcnow()
    query = (
        db.query(Reserva)
        .join(Clase, Reserva.clase_id == Clase.id)
        .options(
            joinedload(Reserva.clase).joinedload(Clase.disciplina),
            joinedload(Reserva.clase).joinedload(Clase.salon),
            joinedload(Reserva.clase).joinedload(Clase.coach),
            joinedload(Reserva.espacio),
        )
        .filter(Reserva.cliente_id == perfil.id)
    )

    if filtro == "activas":
        query = query.filter(Reserva.estado == "confirmada", Clase.fecha_hora > ahora)
        return query.order_by(Clase.fecha_hora.asc()).all()
    if filtro == "pasadas":
        query = query.filter(
            (Reserva.estado.in_(["completada", "no_show"]))
            | ((Reserva.estado == "confirmada") & (Clase.fecha_hora <= ahora))
        )
    elif filtro == "canceladas":
        query = query.filter(Reserva.estado == "cancelada")
    return query.order_by(Clase.fecha_hora.desc()).all()


def agregar_lista_espera(db: Session, perfil: Perfil, clase_id: str) -> ListaEspera:
    requerir_rol(perfil, "cliente")
    clase = obtener_clase(db, clase_id)
    _validar_clase_reservable(clase)
    if clase.reservas_count < clase.capacidad:
        raise ConflictError("La clase tiene lugares disponibles, puedes reservar directamente")

    reservada = (
        db.query(Reserva)
        .filter(
            Reserva.clase_id == clase.id,
            Reserva.cliente_id == perfil.id,
            Reserva.estado == "confirmada",
        )
        .first()
    )
    if reservada:
        raise ConflictError("Ya tienes una reserva para esta clase")

    existente = (
        db.query(ListaEspera)
        .filter(ListaEspera.clase_id == clase.id, ListaEspera.cliente_id == perfil.id)
        .first()
    )
    if existente:
        raise ConflictError("Ya estás en la lista de espera")

    ultima = (
        db.query(func.max(ListaEspera.posicion))
        .filter(ListaEspera.clase_id == clase.id)
        .scalar()
    )
    entrada = ListaEspera(
        clase_id=clase.id,
        cliente_id=perfil.id,
        posicion=(ultima or 0) + 1,
        notificado=False,
    )
    db.add(entrada)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Ya estás en la lista de espera")

    crear_notificacion(
        db, perfil.id, "lista_espera",
        "Estás en lista de espera",
        f"Quedaste en la posición {entrada.posicion} para {describir_clase(clase)}",
        url_accion="/cliente/reservas",
        icono="clock",
        data={"clase_id": clase.id, "posicion": entrada.posicion},
    )
    db.commit()
    db.refresh(entrada)
    logger.info(f"⏳ Cliente {perfil.id} en lista de espera de {clase.id}, posición {entrada.posicion}")
    return entrada


def remover_lista_espera(db: Session, perfil: Perfil, clase_id: str) -> None:
    requerir_rol(perfil, "cliente")
    if not _salir_de_lista_espera(db, clase_id, perfil.id):
        raise NotFoundError("No estás en la lista de espera de esta clase")
    db.commit()


def obtener_clases_disponibles(
    db: Session,
    perfil: Perfil,
    disciplina_id: Optional[str] = None,
    salon_id: Optional[str] = None,
    desde: Optional[datetime] = None,
    hasta: Optional[datetime] = None,
    solo_disponibles: bool = False,
) -> List[Clase]:
    requerir_rol(perfil, "cliente", "admin", "staff")
    query = (
        db.query(Clase)
        .options(joinedload(Clase.salon), joinedload(Clase.disciplina), joinedload(Clase.coach))
        .filter(Clase.estado == "programada", Clase.fecha_hora > utcnow())
    )
    if disciplina_id:
        query = query.filter(Clase.disciplina_id == disciplina_id)
    if salon_id:
        query = query.filter(Clase.salon_id == salon_id)
    if desde:
        query = query.filter(Clase.fecha_hora >= a_utc(desde))
    if hasta:
        query = query.filter(Clase.fecha_hora <= a_utc(hasta))
    if solo_disponibles:
        query = query.filter(Clase.reservas_count < Clase.capacidad)
    return query.order_by(Clase.fecha_hora.asc()).all()


def verificar_disponibilidad(db: Session, clase_id: str) -> dict:
    clase = obtener_clase(db, clase_id)
    en_espera = db.query(func.count(ListaEspera.id)).filter(ListaEspera.clase_id == clase.id).scalar()
    disponible = (
        clase.estado == "programada"
        and clase.fecha_hora > utcnow()
        and clase.espacios_disponibles > 0
    )
    return {
        "clase_id": clase.id,
        "disponible": disponible,
        "capacidad": clase.capacidad,
        "reservas_count": clase.reservas_count,
        "espacios_disponibles": clase.espacios_disponibles,
        "en_lista_espera": en_espera or 0,
    }


def obtener_estadisticas_cliente(db: Session, perfil: Perfil) -> dict:
    requerir_rol(perfil, "cliente")
    ahora = utcnow()
    base = db.query(Reserva).filter(Reserva.cliente_id == perfil.id)
    activas = (
        base.join(Clase, Reserva.clase_id == Clase.id)
        .filter(Reserva.estado == "confirmada", Clase.fecha_hora > ahora)
        .count()
    )
    return {
        "reservas_activas": activas,
        "clases_completadas": base.filter(Reserva.estado == "completada").count(),
        "cancelaciones": base.filter(Reserva.estado == "cancelada").count(),
        "cancelaciones_tardias": base.filter(
            Reserva.estado == "cancelada", Reserva.cancelada_tardia == True
        ).count(),
    }
