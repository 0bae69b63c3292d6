import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from strive_studio.core.core import requerir_rol
from strive_studio.core.exceptions import ConflictError, NotFoundError, ValidationError
from strive_studio.core.fechas import a_utc, utcnow
from strive_studio.models.clase import Clase
from strive_studio.models.disciplina import Disciplina, Especialidad
from strive_studio.models.espacio import Espacio
from strive_studio.models.lista_espera import ListaEspera
from strive_studio.models.perfil import Perfil
from strive_studio.models.personal import Coach
from strive_studio.models.reserva import Reserva
from strive_studio.models.salon import Salon
from strive_studio.models.solicitud_clase import SolicitudClase
from strive_studio.schemas.clase import ClaseCreate, ClaseUpdate
from strive_studio.services.notificaciones_service import crear_notificacion

logger = logging.getLogger(__name__)

CAPACIDAD_POR_DEFECTO = 20


def describir_clase(clase: Clase) -> str:
    nombre = clase.nombre_clase or (clase.disciplina.nombre if clase.disciplina else "Clase")
    return f"{nombre} del {clase.fecha_hora:%d/%m/%Y %H:%M}"


def obtener_clase(db: Session, clase_id: str) -> Clase:
    clase = (
        db.query(Clase)
        .options(joinedload(Clase.salon), joinedload(Clase.disciplina), joinedload(Clase.coach))
        .filter(Clase.id == clase_id)
        .first()
    )
    if not clase:
        raise NotFoundError("Clase no encontrada")
    return clase


def _validar_salon(db: Session, salon_id: str) -> Salon:
    salon = db.query(Salon).filter(Salon.id == salon_id).first()
    if not salon:
        raise NotFoundError("Salón no encontrado")
    if not salon.activo:
        raise ValidationError("El salón no está activo")
    return salon


def _validar_disciplina(db: Session, disciplina_id: str, especialidad_id: Optional[str]) -> Disciplina:
    disciplina = db.query(Disciplina).filter(Disciplina.id == disciplina_id).first()
    if not disciplina:
        raise NotFoundError("Disciplina no encontrada")
    if especialidad_id:
        especialidad = db.query(Especialidad).filter(Especialidad.id == especialidad_id).first()
        if not especialidad:
            raise NotFoundError("Especialidad no encontrada")
        if especialidad.disciplina_id != disciplina.id:
            raise ValidationError("La especialidad no pertenece a la disciplina")
    return disciplina


def _validar_fecha_futura(fecha_hora: datetime) -> datetime:
    fecha_hora = a_utc(fecha_hora)
    if fecha_hora <= utcnow():
        raise ValidationError("La fecha debe ser futura")
    return fecha_hora


def _validar_duracion(duracion: int) -> None:
    if duracion is None or duracion <= 0:
        raise ValidationError("La duración debe ser mayor a 0 minutos")


def _verificar_horario_salon(db: Session, salon_id: str, fecha_hora: datetime, excluir_id: Optional[str] = None) -> None:
    query = db.query(Clase).filter(
        Clase.salon_id == salon_id,
        Clase.fecha_hora == fecha_hora,
        Clase.estado == "programada",
    )
    if excluir_id:
        query = query.filter(Clase.id != excluir_id)
    if query.first():
        raise ConflictError("Ya existe una clase programada en ese salón a esa hora")


def _coaches_disponibles(db: Session, tipo_disciplina: str) -> List[Coach]:
    return (
        db.query(Coach)
        .filter(
            Coach.estado == "aprobado",
            Coach.activo == True,
            Coach.disponible_para_clases == True,
            Coach.disciplinas.in_([tipo_disciplina, "ambas"]),
        )
        .all()
    )


def crear_clase(db: Session, perfil: Perfil, datos: ClaseCreate) -> Clase:
    requerir_rol(perfil, "admin")

    fecha_hora = _validar_fecha_futura(datos.fecha_hora)
    _validar_duracion(datos.duracion)
    salon = _validar_salon(db, datos.salon_id)
    disciplina = _validar_disciplina(db, datos.disciplina_id, datos.especialidad_id)

    capacidad = datos.capacidad
    if capacidad is None:
        capacidad = salon.capacidad_maxima or CAPACIDAD_POR_DEFECTO
    if capacidad <= 0:
        raise ValidationError("La capacidad debe ser mayor a 0")

    _verificar_horario_salon(db, salon.id, fecha_hora)

    clase = Clase(
        fecha_hora=fecha_hora,
        duracion=datos.duracion,
        salon_id=salon.id,
        disciplina_id=disciplina.id,
        especialidad_id=datos.especialidad_id,
        capacidad=capacidad,
        reservas_count=0,
        estado="programada",
        coach_id=None,
        nombre_clase=datos.nombre_clase,
        descripcion=datos.descripcion,
    )
    db.add(clase)
    db.flush()

    for coach in _coaches_disponibles(db, disciplina.tipo):
        crear_notificacion(
            db, coach.id, "clase_creada",
            "Nueva clase disponible",
            f"Hay una nueva clase de {disciplina.nombre} el {fecha_hora:%d/%m/%Y %H:%M} sin coach asignado",
            url_accion="/coach/clases",
            icono="calendar",
            data={"clase_id": clase.id},
        )

    db.commit()
    db.refresh(clase)
    logger.info(f"✅ Clase {clase.id} creada por {perfil.id}")
    return clase


def actualizar_clase(db: Session, perfil: Perfil, clase_id: str, datos: ClaseUpdate) -> Clase:
    requerir_rol(perfil, "admin")
    clase = obtener_clase(db, clase_id)
    if clase.estado != "programada":
        raise ConflictError("Solo se pueden editar clases programadas")

    cambios = datos.model_dump(exclude_unset=True)

    if "fecha_hora" in cambios and cambios["fecha_hora"] is not None:
        cambios["fecha_hora"] = _validar_fecha_futura(cambios["fecha_hora"])
    if "duracion" in cambios:
        _validar_duracion(cambios["duracion"])
    if cambios.get("salon_id"):
        _validar_salon(db, cambios["salon_id"])
    if cambios.get("disciplina_id") or "especialidad_id" in cambios:
        _validar_disciplina(
            db,
            cambios.get("disciplina_id") or clase.disciplina_id,
            cambios.get("especialidad_id", clase.especialidad_id),
        )
    if "fecha_hora" in cambios or "salon_id" in cambios:
        _verificar_horario_salon(
            db,
            cambios.get("salon_id") or clase.salon_id,
            cambios.get("fecha_hora") or clase.fecha_hora,
            excluir_id=clase.id,
        )

    nueva_capacidad = cambios.pop("capacidad", None)
    if nueva_capacidad is not None:
        if nueva_capacidad <= 0:
            raise ValidationError("La capacidad debe ser mayor a 0")
        # Condicional: una reserva concurrente no puede quedar por encima de la nueva capacidad
        filas = (
            db.query(Clase)
            .filter(Clase.id == clase.id, Clase.reservas_count <= nueva_capacidad)
            .update({Clase.capacidad: nueva_capacidad}, synchronize_session=False)
        )
        if filas == 0:
            db.rollback()
            actual = db.query(Clase.reservas_count).filter(Clase.id == clase_id).scalar()
            raise ConflictError(
                f"La capacidad no puede ser menor a las {actual} reservas actuales"
            )
        db.refresh(clase)

    for campo, valor in cambios.items():
        if campo in ("fecha_hora", "duracion", "salon_id", "disciplina_id") and valor is None:
            continue
        setattr(clase, campo, valor)

    db.commit()
    db.refresh(clase)
    logger.info(f"✏️ Clase {clase.id} actualizada")
    return clase


def rechazar_solicitudes_pendientes(db: Session, clase: Clase, perfil: Perfil, excepto_id: Optional[str] = None,
                         motivo: str = "La clase fue asignada a otro coach") -> int:
    query = db.query(SolicitudClase).filter(
        SolicitudClase.clase_id == clase.id,
        SolicitudClase.estado == "pendiente",
    )
    if excepto_id:
        query = query.filter(SolicitudClase.id != excepto_id)

    ahora = utcnow()
    rechazadas = query.all()
    for solicitud in rechazadas:
        solicitud.estado = "rechazado"
        solicitud.respondida_por = perfil.id
        solicitud.respondida_at = ahora
        crear_notificacion(
            db, solicitud.coach_id, "solicitud_rechazada",
            "Solicitud no aprobada",
            f"Tu solicitud para {describir_clase(clase)} no fue aprobada. {motivo}",
            url_accion="/coach/clases",
            icono="x-circle",
            data={"clase_id": clase.id, "solicitud_id": solicitud.id},
        )
    return len(rechazadas)


def ocupar_clase_con_coach(db: Session, clase: Clase, coach_id: str, perfil: Perfil) -> None:
    """
    Asigna el coach solo si la clase sigue programada y sin coach. Si otro
    admin asignó primero, la actualización no afecta filas y se aborta.
    """
    filas = (
        db.query(Clase)
        .filter(Clase.id == clase.id, Clase.estado == "programada", Clase.coach_id.is_(None))
        .update(
            {Clase.coach_id: coach_id, Clase.asignada_por: perfil.id, Clase.asignada_at: utcnow()},
            synchronize_session=False,
        )
    )
    if filas == 0:
        db.rollback()
        raise ConflictError("Esta clase ya tiene un coach asignado")


def validar_coach_activo(db: Session, coach_id: str) -> Coach:
    coach = db.query(Coach).filter(Coach.id == coach_id).first()
    if not coach:
        raise NotFoundError("Coach no encontrado")
    if coach.estado != "aprobado" or not coach.activo:
        raise ValidationError("El coach debe estar aprobado y activo")
    return coach


def asignar_coach_directo(db: Session, perfil: Perfil, clase_id: str, coach_id: str) -> Clase:
    requerir_rol(perfil, "admin")
    clase = obtener_clase(db, clase_id)
    if clase.estado != "programada":
        raise ConflictError("Solo se puede asignar coach a clases programadas")
    if clase.coach_id is not None:
        raise ConflictError("Esta clase ya tiene un coach asignado")
    coach = validar_coach_activo(db, coach_id)

    ocupar_clase_con_coach(db, clase, coach.id, perfil)
    rechazar_solicitudes_pendientes(db, clase, perfil)
    crear_notificacion(
        db, coach.id, "clase_asignada",
        "Clase asignada",
        f"Se te asignó la clase {describir_clase(clase)}",
        url_accion="/coach/clases",
        icono="check-circle",
        data={"clase_id": clase.id},
    )
    db.commit()
    db.refresh(clase)
    logger.info(f"👤 Coach {coach.id} asignado directamente a clase {clase.id}")
    return clase


def desasignar_coach(db: Session, perfil: Perfil, clase_id: str) -> Clase:
    requerir_rol(perfil, "admin")
    clase = obtener_clase(db, clase_id)
    if clase.estado != "programada":
        raise ConflictError("Solo se puede desasignar el coach de clases programadas")
    if clase.coach_id is None:
        raise ConflictError("La clase no tiene coach asignado")

    coach_id = clase.coach_id
    clase.coach_id = None
    clase.asignada_por = None
    clase.asignada_at = None
    crear_notificacion(
        db, coach_id, "clase_desasignada",
        "Clase desasignada",
        f"Ya no estás asignado a la clase {describir_clase(clase)}",
        url_accion="/coach/clases",
        icono="alert-circle",
        data={"clase_id": clase.id},
    )
    db.commit()
    db.refresh(clase)
    logger.info(f"👤 Coach {coach_id} desasignado de clase {clase.id}")
    return clase


def cancelar_clase(db: Session, perfil: Perfil, clase_id: str, razon: Optional[str] = None) -> Clase:
    requerir_rol(perfil, "admin")
    clase = obtener_clase(db, clase_id)
    if clase.estado != "programada":
        raise ConflictError(f"No se puede cancelar una clase {clase.estado}")

    razon = (razon or "").strip() or "Clase cancelada por el estudio"
    ahora = utcnow()
    descripcion = describir_clase(clase)

    # Primero se cierra la clase: a partir de aquí ninguna reserva nueva pasa el filtro de estado
    filas = (
        db.query(Clase)
        .filter(Clase.id == clase.id, Clase.estado == "programada")
        .update(
            {Clase.estado: "cancelada", Clase.razon_cancelacion: razon, Clase.reservas_count: 0},
            synchronize_session=False,
        )
    )
    if filas == 0:
        db.rollback()
        raise ConflictError("La clase ya no está programada")

    reservas = (
        db.query(Reserva)
        .filter(Reserva.clase_id == clase.id, Reserva.estado == "confirmada")
        .all()
    )
    for reserva in reservas:
        reserva.estado = "cancelada"
        reserva.cancelada_at = ahora
        reserva.razon_cancelacion = razon
        crear_notificacion(
            db, reserva.cliente_id, "clase_cancelada",
            "Clase cancelada",
            f"La clase {descripcion} fue cancelada. {razon}",
            url_accion="/cliente/reservas",
            icono="x-circle",
            data={"clase_id": clase.id, "reserva_id": reserva.id},
        )

    en_espera = db.query(ListaEspera).filter(ListaEspera.clase_id == clase.id).all()
    for entrada in en_espera:
        crear_notificacion(
            db, entrada.cliente_id, "clase_cancelada",
            "Clase cancelada",
            f"La clase {descripcion}, en la que estabas en lista de espera, fue cancelada. {razon}",
            url_accion="/cliente/clases",
            icono="x-circle",
            data={"clase_id": clase.id},
        )
        db.delete(entrada)

    rechazar_solicitudes_pendientes(db, clase, perfil, motivo="La clase fue cancelada")

    if clase.coach_id:
        crear_notificacion(
            db, clase.coach_id, "clase_cancelada",
            "Clase cancelada",
            f"La clase {descripcion} que tenías asignada fue cancelada. {razon}",
            url_accion="/coach/clases",
            icono="x-circle",
            data={"clase_id": clase.id},
        )

    db.commit()
    db.refresh(clase)
    logger.info(f"🚫 Clase {clase.id} cancelada; {len(reservas)} reservas canceladas, {len(en_espera)} en espera avisados")
    return clase


def eliminar_clase(db: Session, perfil: Perfil, clase_id: str) -> None:
    requerir_rol(perfil, "admin")
    clase = obtener_clase(db, clase_id)
    if clase.estado != "programada":
        raise ConflictError("Solo se pueden eliminar clases programadas")
    if clase.reservas_count > 0:
        raise ConflictError(
            f"No se puede eliminar. La clase tiene {clase.reservas_count} reserva(s)."
        )
    historicas = db.query(Reserva).filter(Reserva.clase_id == clase.id).count()
    if historicas > 0:
        raise ConflictError(
            f"No se puede eliminar. La clase tiene {historicas} reserva(s) en su historial; cancélala en su lugar."
        )

    db.delete(clase)
    db.commit()
    logger.info(f"🗑️ Clase {clase_id} eliminada")


def obtener_clases(
    db: Session,
    perfil: Perfil,
    desde: Optional[datetime] = None,
    hasta: Optional[datetime] = None,
    salon_id: Optional[str] = None,
    disciplina_id: Optional[str] = None,
    coach_id: Optional[str] = None,
    estado: Optional[str] = None,
    solo_sin_asignar: bool = False,
    solo_futuras: bool = False,
) -> List[Clase]:
    """
    Listado según el rol:
    - admin: todas
    - coach: las suyas y las que no tienen coach
    - staff/cliente: solo clases con coach asignado y futuras
    """
    query = db.query(Clase).options(
        joinedload(Clase.salon), joinedload(Clase.disciplina), joinedload(Clase.coach)
    )

    if perfil.rol == "coach":
        query = query.filter(or_(Clase.coach_id == perfil.id, Clase.coach_id.is_(None)))
    elif perfil.rol in ("staff", "cliente"):
        query = query.filter(Clase.coach_id.isnot(None))
        solo_futuras = True

    if desde:
        query = query.filter(Clase.fecha_hora >= a_utc(desde))
    if hasta:
        query = query.filter(Clase.fecha_hora <= a_utc(hasta))
    if salon_id:
        query = query.filter(Clase.salon_id == salon_id)
    if disciplina_id:
        query = query.filter(Clase.disciplina_id == disciplina_id)
    if coach_id:
        query = query.filter(Clase.coach_id == coach_id)
    if estado:
        query = query.filter(Clase.estado == estado)
    if solo_sin_asignar:
        query = query.filter(Clase.coach_id.is_(None))
    if solo_futuras:
        query = query.filter(Clase.fecha_hora > utcnow())

    return query.order_by(Clase.fecha_hora.asc()).all()


def obtener_clase_por_id(db: Session, perfil: Perfil, clase_id: str) -> Clase:
    clase = obtener_clase(db, clase_id)
    if perfil.rol == "coach" and clase.coach_id not in (None, perfil.id):
        raise NotFoundError("Clase no encontrada")
    return clase


def completar_clase(db: Session, perfil: Optional[Perfil], clase_id: str) -> Clase:
    """
    Cierra una clase que ya terminó: reservas confirmadas pasan a completada,
    cada espacio reservado suma un uso y el coach suma una clase impartida.
    `perfil=None` indica una ejecución del sistema.
    """
    if perfil is not None:
        requerir_rol(perfil, "admin")
    clase = obtener_clase(db, clase_id)
    if clase.estado != "programada":
        raise ConflictError(f"No se puede completar una clase {clase.estado}")
    if clase.fecha_hora + timedelta(minutes=clase.duracion) > utcnow():
        raise ConflictError("La clase todavía no termina")

    reservas = (
        db.query(Reserva)
        .filter(Reserva.clase_id == clase.id, Reserva.estado == "confirmada")
        .all()
    )
    espacio_ids = [r.espacio_id for r in reservas if r.espacio_id]
    for reserva in reservas:
        reserva.estado = "completada"

    if espacio_ids:
        db.query(Espacio).filter(Espacio.id.in_(espacio_ids)).update(
            {Espacio.usos_desde_mantenimiento: Espacio.usos_desde_mantenimiento + 1},
            synchronize_session=False,
        )
    if clase.coach_id:
        db.query(Coach).filter(Coach.id == clase.coach_id).update(
            {Coach.total_clases_impartidas: Coach.total_clases_impartidas + 1},
            synchronize_session=False,
        )

    # Nadie de la lista de espera entrará ya
    db.query(ListaEspera).filter(ListaEspera.clase_id == clase.id).delete(synchronize_session=False)

    clase.estado = "completada"
    db.commit()
    db.refresh(clase)
    logger.info(f"🏁 Clase {clase.id} completada con {len(reservas)} asistentes")
    return clase


def completar_clases_vencidas(db: Session, perfil: Optional[Perfil] = None) -> List[str]:
    if perfil is not None:
        requerir_rol(perfil, "admin")
    ahora = utcnow()
    candidatas = db.query(Clase).filter(Clase.estado == "programada", Clase.fecha_hora < ahora).all()

    completadas = []
    for clase in candidatas:
        if clase.fecha_hora + timedelta(minutes=clase.duracion) <= ahora:
            completar_clase(db, None, clase.id)
            completadas.append(clase.id)
    return completadas
