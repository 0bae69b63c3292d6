from .clases import router as clases_router
from .disciplinas import router as disciplinas_router
from .documentos import router as documentos_router
from .espacios import router as espacios_router
from .notificaciones import router as notificaciones_router
from .onboarding import router as onboarding_router
from .paginas import router as paginas_router
from .personal import router as personal_router
from .reservas import router as reservas_router
from .solicitudes import router as solicitudes_router

__all__ = [
    "clases_router", "disciplinas_router", "documentos_router", "espacios_router",
    "notificaciones_router", "onboarding_router", "paginas_router", "personal_router",
    "reservas_router", "solicitudes_router",
]
