from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from strive_studio.core.security import get_current_user
from strive_studio.database import get_db
from strive_studio.models.perfil import Perfil
from strive_studio.schemas.comun import Respuesta, ok
from strive_studio.schemas.documento import DocumentoResponse, RevisionDocumentoRequest
from strive_studio.services import documentos_service
from strive_studio.services.supabase_storage import SupabaseGateway, get_supabase

router = APIRouter()


@router.post("", response_model=Respuesta[DocumentoResponse], status_code=201)
async def upload_documento(
    tipo_documento: str = Form(...),
    archivo: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage: SupabaseGateway = Depends(get_supabase),
    current_user: Perfil = Depends(get_current_user),
):
    documento = await documentos_service.subir_documento(db, storage, current_user, tipo_documento, archivo)
    return ok(documento, f"Documento subido (versión {documento.version})")


@router.get("/pendientes", response_model=Respuesta[List[DocumentoResponse]])
def get_documentos_pendientes(db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    return ok(documentos_service.obtener_documentos_pendientes(db, current_user))


@router.get("/{tipo}/{personal_id}", response_model=Respuesta[List[DocumentoResponse]])
def get_documentos(
    tipo: str,
    personal_id: str,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    return ok(documentos_service.obtener_documentos(db, current_user, personal_id, tipo))


@router.post("/{documento_id}/aprobar", response_model=Respuesta[DocumentoResponse])
def aprobar_documento(
    documento_id: str,
    datos: Optional[RevisionDocumentoRequest] = None,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    comentario = datos.comentario if datos else None
    documento = documentos_service.aprobar_documento(db, current_user, documento_id, comentario)
    return ok(documento, "Documento aprobado")


@router.post("/{documento_id}/rechazar", response_model=Respuesta[DocumentoResponse])
def rechazar_documento(
    documento_id: str,
    datos: RevisionDocumentoRequest,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    documento = documentos_service.rechazar_documento(db, current_user, documento_id, datos.comentario)
    return ok(documento, "Documento rechazado")


@router.delete("/{documento_id}", response_model=Respuesta[None])
def delete_documento(documento_id: str, db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    documentos_service.eliminar_documento(db, current_user, documento_id)
    return ok(None, "Documento eliminado")
