# strive_studio/services/supabase_storage.py
import logging
import uuid
from typing import Optional, Tuple

from fastapi import UploadFile
from supabase import Client, create_client

from strive_studio.config import settings
from strive_studio.core.exceptions import BackendError, ValidationError

logger = logging.getLogger(__name__)

EXTENSIONES_DOCUMENTO = {"pdf", "png", "jpg", "jpeg", "webp"}


class SupabaseGateway:
    """Acceso al backend alojado: storage de archivos y alta de usuarios en auth."""

    def __init__(self, client: Optional[Client] = None):
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            # Usar SERVICE KEY para escritura
            self._client = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY)
        return self._client

    def subir_bytes(self, bucket: str, storage_path: str, content: bytes, content_type: str) -> str:
        """Sube el contenido y retorna la URL pública."""
        try:
            self.client.storage.from_(bucket).upload(
                storage_path,
                content,
                {"content-type": content_type},
            )
            return self.client.storage.from_(bucket).get_public_url(storage_path)
        except Exception as e:
            logger.error(f"❌ Error subiendo {storage_path} a {bucket}: {e}")
            raise BackendError(f"Error al subir archivo: {str(e)}")

    async def subir_documento(self, file: UploadFile, carpeta: str) -> Tuple[str, str]:
        """Valida y sube un documento de personal. Retorna (url, nombre_archivo)."""
        content = await file.read()
        max_size_mb = settings.MAX_DOCUMENTO_MB
        if not content:
            raise ValidationError("El archivo está vacío")
        if len(content) > max_size_mb * 1024 * 1024:
            raise ValidationError(f"El archivo es demasiado grande (máximo {max_size_mb}MB)")

        filename = file.filename or "documento"
        ext = filename.split('.')[-1].lower() if '.' in filename else ''
        if ext not in EXTENSIONES_DOCUMENTO:
            raise ValidationError("Tipo de archivo no permitido. Use PDF, PNG, JPG o WEBP")

        storage_path = f"{carpeta}/{uuid.uuid4().hex}.{ext}"
        content_type = file.content_type or ("application/pdf" if ext == "pdf" else f"image/{ext}")
        url = self.subir_bytes(settings.BUCKET_DOCUMENTOS, storage_path, content, content_type)
        return url, filename

    def crear_usuario(self, email: str, password: str, rol: str) -> str:
        """Registra el usuario en el servicio de auth y retorna su id."""
        try:
            respuesta = self.client.auth.sign_up({
                "email": email,
                "password": password,
                "options": {"data": {"rol": rol}},
            })
        except Exception as e:
            logger.warning(f"⚠️ Alta de usuario rechazada para {email}: {e}")
            raise ValidationError(str(e) or "Error al crear cuenta")

        if respuesta.user is None:
            raise ValidationError("Error al crear cuenta")
        return str(respuesta.user.id)


# Instancia global
supabase_gateway = SupabaseGateway()


def get_supabase() -> SupabaseGateway:
    return supabase_gateway
