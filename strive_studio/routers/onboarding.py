from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from strive_studio.database import get_db
from strive_studio.schemas.comun import ok
from strive_studio.schemas.onboarding import (
    CrearCuentaRequest,
    DatosPersonalesRequest,
    DatosRolRequest,
    FinalizarRequest,
)
from strive_studio.services import onboarding_service
from strive_studio.services.supabase_storage import SupabaseGateway, get_supabase

# Sin get_current_user: cada paso se autoriza con el token de la invitación
router = APIRouter()


@router.post("/crear-cuenta", status_code=201)
def crear_cuenta(
    datos: CrearCuentaRequest,
    db: Session = Depends(get_db),
    storage: SupabaseGateway = Depends(get_supabase),
):
    user_id = onboarding_service.crear_cuenta(db, storage, datos)
    return ok({"userId": user_id}, "Cuenta creada correctamente")


@router.post("/datos-personales")
def datos_personales(datos: DatosPersonalesRequest, db: Session = Depends(get_db)):
    onboarding_service.guardar_datos_personales(db, datos)
    return ok(None, "Datos personales guardados")


@router.post("/datos-rol")
def datos_rol(datos: DatosRolRequest, db: Session = Depends(get_db)):
    onboarding_service.guardar_datos_rol(db, datos)
    return ok(None, "Datos guardados")


@router.post("/finalizar")
def finalizar(
    datos: FinalizarRequest,
    db: Session = Depends(get_db),
    storage: SupabaseGateway = Depends(get_supabase),
):
    onboarding_service.finalizar(db, storage, datos)
    return ok(None, "¡Registro completado! Tu cuenta será revisada por un administrador")
