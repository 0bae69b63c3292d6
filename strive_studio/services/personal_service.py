import logging
import secrets
from datetime import timedelta
from typing import List, Optional

from sqlalchemy.orm import Session

from strive_studio.config import settings
from strive_studio.core.core import requerir_rol
from strive_studio.core.email_service import send_invitacion_email
from strive_studio.core.exceptions import ConflictError, NotFoundError, ValidationError
from strive_studio.core.fechas import utcnow
from strive_studio.models.clase import Clase
from strive_studio.models.documento import DocumentoPersonal
from strive_studio.models.invitacion import InvitacionPersonal
from strive_studio.models.perfil import Perfil
from strive_studio.models.personal import Coach, Staff
from strive_studio.schemas.personal import InvitacionCreate
from strive_studio.services.documentos_service import modelo_personal, obtener_personal, ultimas_versiones
from strive_studio.services.notificaciones_service import crear_notificacion

logger = logging.getLogger(__name__)


# ============== INVITACIONES ==============

def invitar_personal(db: Session, perfil: Perfil, datos: InvitacionCreate) -> InvitacionPersonal:
    requerir_rol(perfil, "admin")
    email = datos.email.lower()

    if db.query(Perfil).filter(Perfil.email == email).first():
        raise ConflictError("Este email ya está registrado en el sistema")

    pendiente = (
        db.query(InvitacionPersonal)
        .filter(InvitacionPersonal.email == email, InvitacionPersonal.estado == "pendiente")
        .first()
    )
    if pendiente and not pendiente.vencida:
        raise ConflictError("Ya existe una invitación pendiente para este email")
    if pendiente:
        pendiente.estado = "expirada"

    if datos.tipo == "coach" and datos.disciplinas:
        invalidas = [d for d in datos.disciplinas if d not in ("cycling", "funcional")]
        if invalidas:
            raise ValidationError(f"Disciplinas inválidas: {', '.join(invalidas)}")

    invitacion = InvitacionPersonal(
        email=email,
        rol=datos.tipo,
        disciplinas=datos.disciplinas if datos.tipo == "coach" else None,
        mensaje_personalizado=datos.mensaje_personalizado,
        token=secrets.token_urlsafe(32),
        estado="pendiente",
        invitado_por=perfil.id,
        expira_at=utcnow() + timedelta(days=settings.DIAS_EXPIRACION_INVITACION),
    )
    db.add(invitacion)
    db.commit()
    db.refresh(invitacion)
    logger.info(f"✉️ Invitación {invitacion.id} creada para {email} ({datos.tipo})")

    enviado = send_invitacion_email(
        email, invitacion.rol, invitacion.token,
        settings.DIAS_EXPIRACION_INVITACION, invitacion.mensaje_personalizado,
    )
    if not enviado:
        logger.warning(f"⚠️ No se pudo enviar el email de invitación a {email}")
    return invitacion


def obtener_invitacion_por_token(db: Session, token: str) -> InvitacionPersonal:
    """
    Retorna la invitación pendiente. Las vencidas se marcan como expiradas y
    se reportan como no encontradas; las aceptadas se devuelven tal cual para
    que quien llama decida (p. ej. redirigir al login).
    """
    invitacion = db.query(InvitacionPersonal).filter(InvitacionPersonal.token == token).first()
    if not invitacion or invitacion.estado == "expirada":
        raise NotFoundError("Invitación no válida o expirada")
    if invitacion.estado == "pendiente" and invitacion.vencida:
        invitacion.estado = "expirada"
        db.commit()
        raise NotFoundError("Invitación no válida o expirada")
    return invitacion


# ============== CONSULTAS ==============

def obtener_todo_personal(
    db: Session,
    perfil: Perfil,
    tipo: Optional[str] = None,
    estado: Optional[str] = None,
    busqueda: Optional[str] = None,
) -> List:
    requerir_rol(perfil, "admin")
    modelos = [modelo_personal(tipo)] if tipo else [Coach, Staff]

    resultado = []
    for modelo in modelos:
        query = db.query(modelo).join(Perfil, modelo.id == Perfil.id)
        if estado:
            query = query.filter(modelo.estado == estado)
        if busqueda:
            patron = f"%{busqueda.strip()}%"
            query = query.filter(Perfil.nombre_completo.ilike(patron) | Perfil.email.ilike(patron))
        resultado.extend(query.all())

    resultado.sort(key=lambda p: p.created_at, reverse=True)
    return resultado


def obtener_estadisticas_personal(db: Session, perfil: Perfil) -> dict:
    requerir_rol(perfil, "admin")

    def _conteos(modelo):
        return {
            "activos": db.query(modelo).filter(modelo.estado == "aprobado", modelo.activo == True).count(),
            "pendientes": db.query(modelo).filter(modelo.estado == "pendiente").count(),
            "rechazados": db.query(modelo).filter(modelo.estado == "rechazado").count(),
        }

    coaches = _conteos(Coach)
    staff = _conteos(Staff)
    return {
        "coaches": coaches,
        "staff": staff,
        "total_activos": coaches["activos"] + staff["activos"],
        "total_pendientes": coaches["pendientes"] + staff["pendientes"],
        "documentos_pendientes": db.query(DocumentoPersonal).filter(DocumentoPersonal.estado == "pendiente").count(),
        "invitaciones_pendientes": db.query(InvitacionPersonal).filter(
            InvitacionPersonal.estado == "pendiente", InvitacionPersonal.expira_at > utcnow()
        ).count(),
    }


# ============== REVISIÓN ==============

def aprobar_personal(db: Session, perfil: Perfil, personal_id: str, tipo: str):
    """
    Aprueba a un coach o staff. Debe tener al menos un documento y la
    versión vigente de cada tipo de documento debe estar aprobada.
    """
    requerir_rol(perfil, "admin")
    personal = obtener_personal(db, personal_id, tipo)

    vigentes = ultimas_versiones(db, personal_id, tipo)
    if not vigentes:
        raise ValidationError("No se puede aprobar. No hay documentos registrados")
    pendientes = [d.tipo_documento for d in vigentes.values() if d.estado == "pendiente"]
    rechazados = [d.tipo_documento for d in vigentes.values() if d.estado == "rechazado"]
    if pendientes or rechazados:
        partes = []
        if pendientes:
            partes.append(f"{len(pendientes)} documento(s) pendiente(s)")
        if rechazados:
            partes.append(f"{len(rechazados)} documento(s) rechazado(s)")
        raise ValidationError(f"No se puede aprobar. Hay {' y '.join(partes)}")

    personal.estado = "aprobado"
    personal.activo = True
    personal.documentos_completos = True
    personal.aprobado_por = perfil.id
    personal.aprobado_at = utcnow()
    personal.notas_rechazo = None
    if personal.perfil:
        personal.perfil.activo = True

    crear_notificacion(
        db, personal.id, "personal_aprobado",
        "¡Tu cuenta fue aprobada!",
        "Ya puedes acceder a todas las funciones de Strive Studio.",
        url_accion=f"/{tipo}",
        icono="check-circle",
    )
    db.commit()
    db.refresh(personal)
    logger.info(f"✅ {tipo} {personal.id} aprobado por {perfil.id}")
    return personal


def rechazar_personal(db: Session, perfil: Perfil, personal_id: str, tipo: str, motivo: str):
    requerir_rol(perfil, "admin")
    motivo = (motivo or "").strip()
    if not motivo:
        raise ValidationError("Debes indicar el motivo del rechazo")
    personal = obtener_personal(db, personal_id, tipo)

    personal.estado = "rechazado"
    personal.activo = False
    personal.notas_rechazo = motivo
    crear_notificacion(
        db, personal.id, "personal_rechazado",
        "Tu solicitud no fue aprobada",
        f"Motivo: {motivo}",
        icono="x-circle",
        data={"motivo": motivo},
    )
    db.commit()
    db.refresh(personal)
    logger.info(f"❌ {tipo} {personal.id} rechazado por {perfil.id}")
    return personal


def eliminar_personal(db: Session, perfil: Perfil, personal_id: str, tipo: str) -> None:
    requerir_rol(perfil, "admin")
    personal = obtener_personal(db, personal_id, tipo)
    if tipo == "coach":
        asignadas = db.query(Clase).filter(Clase.coach_id == personal.id).count()
        if asignadas > 0:
            raise ConflictError(
                f"No se puede eliminar. El coach tiene {asignadas} clase(s) asignada(s); desactívalo en su lugar"
            )

    cuenta = personal.perfil
    db.delete(personal)
    if cuenta:
        db.delete(cuenta)
    db.commit()
    logger.info(f"🗑️ {tipo} {personal_id} eliminado")


def designar_head_coach(
    db: Session, perfil: Perfil, coach_id: str, es_head_coach: bool, disciplina: Optional[str] = None
) -> Coach:
    """
    Activa o quita el rol de head coach. Cada disciplina admite un solo head
    coach; si el coach imparte ambas, la disciplina es obligatoria.
    """
    requerir_rol(perfil, "admin")
    coach = obtener_personal(db, coach_id, "coach")

    if not es_head_coach:
        coach.es_head_coach = False
        coach.head_coach_de = None
        db.commit()
        db.refresh(coach)
        return coach

    if coach.estado != "aprobado" or not coach.activo:
        raise ValidationError("Solo coaches aprobados y activos pueden ser head coach")

    if disciplina is None:
        if coach.disciplinas == "ambas":
            raise ValidationError("Indica de qué disciplina será head coach")
        disciplina = coach.disciplinas
    if disciplina not in ("cycling", "funcional"):
        raise ValidationError("Disciplina inválida. Use cycling o funcional")
    if not coach.imparte(disciplina):
        raise ValidationError("El coach no imparte esa disciplina")

    actual = (
        db.query(Coach)
        .filter(Coach.es_head_coach == True, Coach.head_coach_de == disciplina, Coach.id != coach.id)
        .first()
    )
    if actual:
        raise ConflictError(f"{actual.nombre_completo or 'Otro coach'} ya es head coach de {disciplina}")

    coach.es_head_coach = True
    coach.head_coach_de = disciplina
    crear_notificacion(
        db, coach.id, "head_coach",
        "Ahora eres head coach",
        f"Fuiste designado head coach de {disciplina}",
        icono="star",
    )
    db.commit()
    db.refresh(coach)
    logger.info(f"⭐ Coach {coach.id} designado head coach de {disciplina}")
    return coach
