"""
Flujo de alta de coaches y staff invitados:

crear cuenta -> datos personales -> datos del rol -> documentos -> firma del contrato.

Cada paso se autoriza con el token de la invitación, que debe seguir
pendiente y corresponder a la persona que se está dando de alta.
"""
import base64
import binascii
import logging
from typing import Union

from sqlalchemy.orm import Session

from strive_studio.config import settings
from strive_studio.core.exceptions import ConflictError, ValidationError
from strive_studio.core.fechas import utcnow
from strive_studio.models.firma import FirmaDocumento
from strive_studio.models.invitacion import InvitacionPersonal
from strive_studio.models.perfil import Perfil
from strive_studio.models.personal import Coach, Staff
from strive_studio.schemas.onboarding import (
    CrearCuentaRequest,
    DatosPersonalesRequest,
    DatosRolRequest,
    FinalizarRequest,
)
from strive_studio.services.documentos_service import obtener_personal
from strive_studio.services.notificaciones_service import notificar_admins
from strive_studio.services.personal_service import obtener_invitacion_por_token
from strive_studio.services.supabase_storage import SupabaseGateway

logger = logging.getLogger(__name__)

CAMPOS_PERSONALES = (
    "curp", "rfc", "direccion_completa",
    "cuenta_bancaria_banco", "cuenta_bancaria_clabe", "cuenta_bancaria_beneficiario",
    "contacto_emergencia_nombre", "contacto_emergencia_telefono", "contacto_emergencia_relacion",
)


def _invitacion_pendiente(db: Session, token: str) -> InvitacionPersonal:
    invitacion = obtener_invitacion_por_token(db, token)
    if invitacion.estado == "aceptada":
        raise ConflictError("Esta invitación ya fue utilizada")
    return invitacion


def _personal_de_invitacion(db: Session, token: str, personal_id: str, tipo: str) -> Union[Coach, Staff]:
    invitacion = _invitacion_pendiente(db, token)
    if invitacion.rol != tipo:
        raise ValidationError("El tipo de personal no coincide con la invitación")
    personal = obtener_personal(db, personal_id, tipo)
    if personal.invitacion_id != invitacion.id:
        raise ValidationError("La invitación no corresponde a esta cuenta")
    return personal


def _disciplinas_de_invitacion(invitacion: InvitacionPersonal) -> str:
    disciplinas = set(invitacion.disciplinas or [])
    if {"cycling", "funcional"} <= disciplinas:
        return "ambas"
    if disciplinas:
        return disciplinas.pop()
    return "cycling"


def crear_cuenta(db: Session, storage: SupabaseGateway, datos: CrearCuentaRequest) -> str:
    invitacion = _invitacion_pendiente(db, datos.token)
    email = datos.email.lower()
    if invitacion.email != email:
        raise ValidationError("El email no coincide con el de la invitación")
    if invitacion.rol != datos.rol:
        raise ValidationError("El rol no coincide con el de la invitación")
    if db.query(Perfil).filter(Perfil.email == email).first():
        raise ConflictError("Este email ya está registrado en el sistema")

    user_id = storage.crear_usuario(email, datos.password, datos.rol)

    perfil = Perfil(
        id=user_id,
        email=email,
        rol=datos.rol,
        activo=True,
        # El enlace de la invitación llegó a este correo
        email_confirmado=True,
        onboarding_completo=False,
    )
    db.add(perfil)

    if datos.rol == "coach":
        personal = Coach(id=user_id, disciplinas=_disciplinas_de_invitacion(invitacion))
    else:
        personal = Staff(id=user_id)
    personal.estado = "pendiente"
    personal.activo = False
    personal.onboarding_completo = False
    personal.invitacion_id = invitacion.id
    db.add(personal)

    db.commit()
    logger.info(f"👤 Cuenta {user_id} creada para {email} ({datos.rol})")
    return user_id


def guardar_datos_personales(db: Session, datos: DatosPersonalesRequest) -> None:
    personal = _personal_de_invitacion(db, datos.token, datos.personal_id, datos.tipo_personal)

    perfil = personal.perfil
    perfil.nombre_completo = datos.nombre_completo.strip()
    perfil.telefono = datos.telefono
    perfil.fecha_nacimiento = datos.fecha_nacimiento

    for campo in CAMPOS_PERSONALES:
        setattr(personal, campo, getattr(datos, campo))

    db.commit()
    logger.info(f"📝 Datos personales guardados para {personal.id}")


def guardar_datos_rol(db: Session, datos: DatosRolRequest) -> None:
    personal = _personal_de_invitacion(db, datos.token, datos.personal_id, datos.tipo_personal)

    if datos.tipo_personal == "coach":
        if datos.disciplinas is None:
            raise ValidationError("Indica qué disciplinas impartes")
        personal.disciplinas = datos.disciplinas
        personal.especialidades = datos.especialidades or []
        personal.biografia = datos.biografia
        personal.anos_experiencia = datos.anos_experiencia or 0
        personal.certificaciones = datos.certificaciones or []
    else:
        if not datos.horario_entrada or not datos.horario_salida:
            raise ValidationError("Indica tu horario de entrada y salida")
        if datos.horario_salida <= datos.horario_entrada:
            raise ValidationError("La hora de salida debe ser posterior a la de entrada")
        personal.horario_entrada = datos.horario_entrada
        personal.horario_salida = datos.horario_salida
        personal.dias_laborales = sorted(set(datos.dias_laborales or []))

    db.commit()
    logger.info(f"📝 Datos de {datos.tipo_personal} guardados para {personal.id}")


def _decodificar_firma(firma_base64: str) -> bytes:
    # Acepta data URL ("data:image/png;base64,...") o base64 plano
    contenido = firma_base64.split(",", 1)[1] if firma_base64.startswith("data:") else firma_base64
    try:
        firma = base64.b64decode(contenido, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("La firma no es una imagen válida")
    if not firma:
        raise ValidationError("La firma está vacía")
    return firma


def finalizar(db: Session, storage: SupabaseGateway, datos: FinalizarRequest) -> None:
    personal = _personal_de_invitacion(db, datos.token, datos.personal_id, datos.tipo_personal)
    invitacion = _invitacion_pendiente(db, datos.token)
    firma = _decodificar_firma(datos.firma_base64)

    ahora = utcnow()
    ruta = f"{personal.id}/contrato/{int(ahora.timestamp() * 1000)}.png"
    url = storage.subir_bytes(settings.BUCKET_CONTRATOS, ruta, firma, "image/png")

    db.add(FirmaDocumento(
        usuario_id=personal.id,
        firma_storage_url=url,
        tipo_documento="contrato",
        metadatos={"tipo_personal": datos.tipo_personal, "invitacion_id": invitacion.id},
    ))

    personal.contrato_firmado_url = url
    personal.contrato_firmado_at = ahora
    personal.onboarding_completo = True
    # El admin debe aprobar
    personal.estado = "pendiente"
    personal.perfil.onboarding_completo = True

    invitacion.estado = "aceptada"
    invitacion.aceptada_at = ahora

    nombre = personal.perfil.nombre_completo or personal.perfil.email
    notificar_admins(
        db, "nuevo_personal",
        "Nuevo personal por revisar",
        f"{nombre} completó su registro como {datos.tipo_personal} y espera aprobación",
        url_accion=f"/admin/personal/{personal.id}/revision",
        icono="user-plus",
        data={"personal_id": personal.id, "tipo_personal": datos.tipo_personal},
    )
    db.commit()
    logger.info(f"🎉 Onboarding completado para {personal.id}")
