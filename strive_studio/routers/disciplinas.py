from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from strive_studio.core.core import requerir_rol
from strive_studio.core.exceptions import ConflictError, NotFoundError
from strive_studio.core.security import get_current_user
from strive_studio.database import get_db
from strive_studio.models.clase import Clase
from strive_studio.models.disciplina import Disciplina, Especialidad
from strive_studio.models.perfil import Perfil
from strive_studio.schemas.comun import Respuesta, ok
from strive_studio.schemas.disciplina import (
    DisciplinaCreate,
    DisciplinaResponse,
    DisciplinaUpdate,
    EspecialidadCreate,
    EspecialidadResponse,
)

router = APIRouter()


def _obtener_disciplina(db: Session, disciplina_id: str) -> Disciplina:
    disciplina = db.query(Disciplina).filter(Disciplina.id == disciplina_id).first()
    if not disciplina:
        raise NotFoundError("Disciplina no encontrada")
    return disciplina


@router.get("", response_model=Respuesta[List[DisciplinaResponse]])
def get_disciplinas(db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    return ok(db.query(Disciplina).order_by(Disciplina.nombre.asc()).all())


@router.get("/{disciplina_id}", response_model=Respuesta[DisciplinaResponse])
def get_disciplina(disciplina_id: str, db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    return ok(_obtener_disciplina(db, disciplina_id))


@router.post("", response_model=Respuesta[DisciplinaResponse], status_code=201)
def create_disciplina(
    disciplina_data: DisciplinaCreate,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    requerir_rol(current_user, "admin")
    existing_disciplina = db.query(Disciplina).filter(Disciplina.nombre == disciplina_data.nombre).first()
    if existing_disciplina:
        raise ConflictError("Ya existe una disciplina con ese nombre")

    nueva_disciplina = Disciplina(**disciplina_data.model_dump())
    db.add(nueva_disciplina)
    db.commit()
    db.refresh(nueva_disciplina)
    return ok(nueva_disciplina, "Disciplina creada")


@router.put("/{disciplina_id}", response_model=Respuesta[DisciplinaResponse])
def update_disciplina(
    disciplina_id: str,
    disciplina_data: DisciplinaUpdate,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    requerir_rol(current_user, "admin")
    disciplina = _obtener_disciplina(db, disciplina_id)

    if disciplina_data.nombre and disciplina_data.nombre != disciplina.nombre:
        existing_disciplina = db.query(Disciplina).filter(
            Disciplina.nombre == disciplina_data.nombre,
            Disciplina.id != disciplina_id
        ).first()
        if existing_disciplina:
            raise ConflictError("Ya existe una disciplina con ese nombre")

    for field, value in disciplina_data.model_dump(exclude_unset=True).items():
        setattr(disciplina, field, value)

    db.commit()
    db.refresh(disciplina)
    return ok(disciplina, "Disciplina actualizada")


@router.delete("/{disciplina_id}", response_model=Respuesta[None])
def delete_disciplina(disciplina_id: str, db: Session = Depends(get_db), current_user: Perfil = Depends(get_current_user)):
    requerir_rol(current_user, "admin")
    disciplina = _obtener_disciplina(db, disciplina_id)
    clases = db.query(Clase).filter(Clase.disciplina_id == disciplina.id).count()
    if clases > 0:
        raise ConflictError(f"No se puede eliminar. La disciplina tiene {clases} clase(s) registrada(s)")

    db.delete(disciplina)
    db.commit()
    return ok(None, "Disciplina eliminada")


# ============== ESPECIALIDADES ==============

@router.post("/{disciplina_id}/especialidades", response_model=Respuesta[EspecialidadResponse], status_code=201)
def create_especialidad(
    disciplina_id: str,
    datos: EspecialidadCreate,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    requerir_rol(current_user, "admin")
    disciplina = _obtener_disciplina(db, disciplina_id)
    if any(e.nombre.lower() == datos.nombre.lower() for e in disciplina.especialidades):
        raise ConflictError("La disciplina ya tiene una especialidad con ese nombre")

    especialidad = Especialidad(disciplina_id=disciplina.id, **datos.model_dump())
    db.add(especialidad)
    db.commit()
    db.refresh(especialidad)
    return ok(especialidad, "Especialidad creada")


@router.delete("/{disciplina_id}/especialidades/{especialidad_id}", response_model=Respuesta[None])
def delete_especialidad(
    disciplina_id: str,
    especialidad_id: str,
    db: Session = Depends(get_db),
    current_user: Perfil = Depends(get_current_user),
):
    requerir_rol(current_user, "admin")
    especialidad = db.query(Especialidad).filter(
        Especialidad.id == especialidad_id,
        Especialidad.disciplina_id == disciplina_id
    ).first()
    if not especialidad:
        raise NotFoundError("Especialidad no encontrada")
    if db.query(Clase).filter(Clase.especialidad_id == especialidad.id).count() > 0:
        raise ConflictError("No se puede eliminar una especialidad usada por clases")

    db.delete(especialidad)
    db.commit()
    return ok(None, "Especialidad eliminada")
