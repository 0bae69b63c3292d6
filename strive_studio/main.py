# En main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from strive_studio.config import settings
from strive_studio.core.exceptions import registrar_manejadores
from strive_studio.core.logging_config import setup_logging
from strive_studio.core.rutas import ProteccionRutasMiddleware
from strive_studio.database import Base, SessionLocal, engine
from strive_studio.routers import (
    clases,
    disciplinas,
    documentos,
    espacios,
    notificaciones,
    onboarding,
    paginas,
    personal,
    reservas,
    solicitudes,
)

setup_logging()
logger = logging.getLogger(__name__)

if settings.CREAR_TABLAS:
    import strive_studio.models  # noqa: F401
    Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Strive Studio API",
    description="API para gestión de clases, reservas y personal del estudio de cycling y funcional",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# El middleware usa su propia sesión por request
app.state.session_factory = SessionLocal

# Protección de páginas (el último middleware añadido es el más externo)
app.add_middleware(ProteccionRutasMiddleware)

# Configuración CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=[
        "Authorization",
        "Content-Type",
        "Accept",
        "Origin",
        "X-Requested-With",
    ],
    expose_headers=["*"],
    max_age=600,
)

registrar_manejadores(app)

# Acciones
app.include_router(disciplinas.router, prefix="/api/disciplinas", tags=["Disciplinas"])
app.include_router(clases.router, prefix="/api/clases", tags=["Clases"])
app.include_router(solicitudes.router, prefix="/api/solicitudes", tags=["Solicitudes de Clase"])
app.include_router(reservas.router, prefix="/api/reservas", tags=["Reservas"])
app.include_router(espacios.router, prefix="/api", tags=["Salones y Espacios"])
app.include_router(personal.router, prefix="/api/personal", tags=["Personal"])
app.include_router(documentos.router, prefix="/api/documentos", tags=["Documentos"])
app.include_router(notificaciones.router, prefix="/api/notificaciones", tags=["Notificaciones"])
app.include_router(onboarding.router, prefix="/api/onboarding", tags=["Onboarding"])

# Páginas
app.include_router(paginas.router, tags=["Páginas"])


@app.get("/")
def read_root():
    return {
        "mensaje": "Strive Studio API funcionando correctamente",
        "version": "1.0.0"
    }


@app.get("/health")
def health_check():
    return {
        "status": "healthy",
        "service": "Strive Studio API",
    }
