import logging
from typing import Dict, List, Optional, Union

from fastapi import UploadFile
from sqlalchemy.orm import Session

from strive_studio.core.core import requerir_rol
from strive_studio.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from strive_studio.core.fechas import utcnow
from strive_studio.models.documento import TIPOS_DOCUMENTO, DocumentoPersonal
from strive_studio.models.perfil import Perfil
from strive_studio.models.personal import Coach, Staff
from strive_studio.services.notificaciones_service import crear_notificacion, notificar_admins
from strive_studio.services.supabase_storage import SupabaseGateway

logger = logging.getLogger(__name__)


def modelo_personal(tipo: str):
    if tipo == "coach":
        return Coach
    if tipo == "staff":
        return Staff
    raise ValidationError("Tipo de personal inválido. Use coach o staff")


def columna_personal(tipo: str):
    return DocumentoPersonal.coach_id if tipo == "coach" else DocumentoPersonal.staff_id


def obtener_personal(db: Session, personal_id: str, tipo: str) -> Union[Coach, Staff]:
    modelo = modelo_personal(tipo)
    personal = db.query(modelo).filter(modelo.id == personal_id).first()
    if not personal:
        raise NotFoundError("Coach no encontrado" if tipo == "coach" else "Staff no encontrado")
    return personal


def ultimas_versiones(db: Session, personal_id: str, tipo: str) -> Dict[str, DocumentoPersonal]:
    """Documento vigente (la versión más alta) por tipo de documento."""
    documentos = (
        db.query(DocumentoPersonal)
        .filter(columna_personal(tipo) == personal_id)
        .order_by(DocumentoPersonal.version.asc())
        .all()
    )
    vigentes: Dict[str, DocumentoPersonal] = {}
    for documento in documentos:
        vigentes[documento.tipo_documento] = documento
    return vigentes


async def subir_documento(
    db: Session,
    storage: SupabaseGateway,
    perfil: Perfil,
    tipo_documento: str,
    archivo: UploadFile,
) -> DocumentoPersonal:
    """
    Sube un documento del propio coach o staff. Si ya existía uno del mismo
    tipo se crea la versión siguiente, enlazada con la anterior.
    """
    requerir_rol(perfil, "coach", "staff")
    if tipo_documento not in TIPOS_DOCUMENTO:
        raise ValidationError(f"Tipo de documento inválido. Use: {', '.join(TIPOS_DOCUMENTO)}")
    tipo = perfil.rol
    obtener_personal(db, perfil.id, tipo)

    anterior = ultimas_versiones(db, perfil.id, tipo).get(tipo_documento)
    version = anterior.version + 1 if anterior else 1

    url, nombre_archivo = await storage.subir_documento(
        archivo, carpeta=f"{tipo}/{perfil.id}/{tipo_documento}_v{version}"
    )

    documento = DocumentoPersonal(
        tipo_documento=tipo_documento,
        nombre_archivo=nombre_archivo,
        url_archivo=url,
        estado="pendiente",
        version=version,
        documento_anterior_id=anterior.id if anterior else None,
    )
    if tipo == "coach":
        documento.coach_id = perfil.id
    else:
        documento.staff_id = perfil.id
    db.add(documento)
    db.flush()

    modelo = modelo_personal(tipo)
    db.query(modelo).filter(modelo.id == perfil.id).update(
        {modelo.documentos_completos: False}, synchronize_session=False
    )

    if anterior:
        notificar_admins(
            db, "documento_actualizado",
            "Documento actualizado",
            f"{'Coach' if tipo == 'coach' else 'Staff'} {perfil.nombre_completo} subió una nueva versión de {tipo_documento}",
            url_accion=f"/admin/personal/{perfil.id}/revision",
            icono="file",
            data={"documento_id": documento.id, "personal_id": perfil.id},
        )
    db.commit()
    db.refresh(documento)
    logger.info(f"📄 Documento {tipo_documento} v{version} subido por {perfil.id}")
    return documento


def obtener_documentos(db: Session, perfil: Perfil, personal_id: str, tipo: str) -> List[DocumentoPersonal]:
    if perfil.rol != "admin" and perfil.id != personal_id:
        raise AuthorizationError()
    modelo_personal(tipo)
    return (
        db.query(DocumentoPersonal)
        .filter(columna_personal(tipo) == personal_id)
        .order_by(DocumentoPersonal.tipo_documento.asc(), DocumentoPersonal.version.desc())
        .all()
    )


def obtener_documentos_pendientes(db: Session, perfil: Perfil) -> List[DocumentoPersonal]:
    requerir_rol(perfil, "admin")
    return (
        db.query(DocumentoPersonal)
        .filter(DocumentoPersonal.estado == "pendiente")
        .order_by(DocumentoPersonal.created_at.asc())
        .all()
    )


def _obtener_documento(db: Session, documento_id: str) -> DocumentoPersonal:
    documento = db.query(DocumentoPersonal).filter(DocumentoPersonal.id == documento_id).first()
    if not documento:
        raise NotFoundError("Documento no encontrado")
    return documento


def _documento_en_revision(db: Session, documento_id: str) -> DocumentoPersonal:
    """Solo la versión vigente de cada tipo, y mientras siga pendiente, puede revisarse."""
    documento = _obtener_documento(db, documento_id)
    if documento.estado != "pendiente":
        raise ConflictError(f"El documento ya fue revisado ({documento.estado})")
    vigente = ultimas_versiones(db, documento.personal_id, documento.tipo_personal).get(documento.tipo_documento)
    if vigente is not None and vigente.id != documento.id:
        raise ConflictError(
            f"Existe una versión más reciente (v{vigente.version}) de {documento.tipo_documento}"
        )
    return documento


def aprobar_documento(db: Session, perfil: Perfil, documento_id: str, comentario: Optional[str] = None) -> DocumentoPersonal:
    requerir_rol(perfil, "admin")
    documento = _documento_en_revision(db, documento_id)

    documento.estado = "aprobado"
    documento.revisado_por = perfil.id
    documento.revisado_at = utcnow()
    documento.comentarios_admin = comentario or None
    db.flush()

    personal_id, tipo = documento.personal_id, documento.tipo_personal
    vigentes = ultimas_versiones(db, personal_id, tipo)
    if vigentes and all(d.estado == "aprobado" for d in vigentes.values()):
        personal = obtener_personal(db, personal_id, tipo)
        if not personal.documentos_completos:
            personal.documentos_completos = True
            crear_notificacion(
                db, personal_id, "documentos_aprobados",
                "¡Todos tus documentos han sido aprobados!",
                "Tu perfil está siendo revisado para aprobación final.",
                icono="check-circle",
            )

    db.commit()
    db.refresh(documento)
    logger.info(f"✅ Documento {documento.id} aprobado por {perfil.id}")
    return documento


def rechazar_documento(db: Session, perfil: Perfil, documento_id: str, comentario: Optional[str]) -> DocumentoPersonal:
    requerir_rol(perfil, "admin")
    comentario = (comentario or "").strip()
    if not comentario:
        raise ValidationError("Debes indicar el motivo del rechazo")
    documento = _documento_en_revision(db, documento_id)

    documento.estado = "rechazado"
    documento.revisado_por = perfil.id
    documento.revisado_at = utcnow()
    documento.comentarios_admin = comentario

    personal = obtener_personal(db, documento.personal_id, documento.tipo_personal)
    personal.documentos_completos = False
    crear_notificacion(
        db, documento.personal_id, "documento_rechazado",
        "Documento rechazado",
        f"Tu documento {documento.tipo_documento} fue rechazado: {comentario}. Sube una nueva versión.",
        url_accion="/onboarding/documentos",
        icono="x-circle",
        data={"documento_id": documento.id},
    )
    db.commit()
    db.refresh(documento)
    logger.info(f"❌ Documento {documento.id} rechazado por {perfil.id}")
    return documento


def eliminar_documento(db: Session, perfil: Perfil, documento_id: str) -> None:
    documento = _obtener_documento(db, documento_id)
    if perfil.rol != "admin":
        if documento.personal_id != perfil.id:
            raise AuthorizationError()
        if documento.estado != "pendiente":
            raise ConflictError("Solo puedes eliminar documentos pendientes de revisión")
    siguiente = (
        db.query(DocumentoPersonal)
        .filter(DocumentoPersonal.documento_anterior_id == documento.id)
        .first()
    )
    if siguiente:
        siguiente.documento_anterior_id = documento.documento_anterior_id
    db.delete(documento)
    db.commit()
