# strive_studio/config.py

from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str
    CREAR_TABLAS: bool = False

    # Supabase (auth, storage)
    SUPABASE_URL: str
    SUPABASE_KEY: str          # anon public key
    SUPABASE_SERVICE_KEY: str  # service_role key
    SUPABASE_JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str = "authenticated"
    ACCESS_TOKEN_COOKIE: str = "access_token"

    # Storage buckets
    BUCKET_DOCUMENTOS: str = "documentos-personal"
    BUCKET_CONTRATOS: str = "contratos-firmados"
    MAX_DOCUMENTO_MB: int = 10

    # Email
    RESEND_API_KEY: str = ""
    SENDER_EMAIL: str = "Strive Studio <no-reply@strivestudio.app>"

    # Reglas de negocio
    HORAS_CANCELACION_TARDIA: int = 2
    DIAS_EXPIRACION_INVITACION: int = 7
    UMBRAL_MANTENIMIENTO: float = 0.8

    # Logging
    LOG_LEVEL: str = "INFO"

    # CORS
    FRONTEND_URLS: str = "http://localhost:3000,http://localhost:5173"
    FRONTEND_BASE_URL: str = "http://localhost:3000"

    @property
    def allowed_origins(self) -> List[str]:
        urls = self.FRONTEND_URLS.split(",")
        all_urls = []
        for url in urls:
            url = url.strip()
            if url:
                all_urls.append(url)
                # Añadir versión HTTPS si es HTTP
                if url.startswith("http://"):
                    all_urls.append(url.replace("http://", "https://"))
        return all_urls

    class Config:
        env_file = ".env"


settings = Settings()
