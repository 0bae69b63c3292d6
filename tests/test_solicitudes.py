import pytest

from strive_studio.core.exceptions import AuthorizationError, ConflictError, ValidationError
from strive_studio.models.clase import Clase
from strive_studio.models.notificacion import Notificacion
from strive_studio.models.solicitud_clase import SolicitudClase
from strive_studio.services.solicitudes_service import (
    asignar_coach_a_clase,
    cancelar_solicitud,
    obtener_solicitudes,
    solicitar_clase,
)
from tests.helpers import add_clase, add_coach, add_disciplina, add_perfil, add_salon


def test_solicitar_clase_avisa_a_los_admins(session):
    admin = add_perfil(session, rol="admin")
    coach = add_coach(session)
    clase = add_clase(session)

    solicitud = solicitar_clase(session, coach.perfil, clase.id, "  Me encantaría  ")

    assert solicitud.estado == "pendiente"
    assert solicitud.mensaje == "Me encantaría"
    aviso = session.query(Notificacion).filter(Notificacion.destinatario_id == admin.id).one()
    assert aviso.tipo == "solicitud_clase"
    assert aviso.data["solicitud_id"] == solicitud.id


def test_solicitud_duplicada_falla(session):
    coach = add_coach(session)
    clase = add_clase(session)

    solicitar_clase(session, coach.perfil, clase.id)
    with pytest.raises(ConflictError):
        solicitar_clase(session, coach.perfil, clase.id)


def test_coach_no_aprobado_no_puede_solicitar(session):
    coach = add_coach(session, estado="pendiente", activo=False)
    clase = add_clase(session)

    with pytest.raises(AuthorizationError):
        solicitar_clase(session, coach.perfil, clase.id)


def test_coach_de_otra_disciplina_no_puede_solicitar(session):
    coach = add_coach(session, disciplinas="funcional")
    salon = add_salon(session, tipo="cycling")
    clase = add_clase(session, salon=salon, disciplina=add_disciplina(session, tipo="cycling"))

    with pytest.raises(ValidationError):
        solicitar_clase(session, coach.perfil, clase.id)


def test_aprobar_solicitud_asigna_y_rechaza_las_demas(session):
    admin = add_perfil(session, rol="admin")
    ana = add_coach(session, nombre="Ana")
    beto = add_coach(session, nombre="Beto")
    clase = add_clase(session)
    de_ana = solicitar_clase(session, ana.perfil, clase.id)
    de_beto = solicitar_clase(session, beto.perfil, clase.id)

    aprobada = asignar_coach_a_clase(session, admin, clase.id, de_ana.id)

    assert aprobada.estado == "aprobado"
    assert aprobada.respondida_por == admin.id
    session.refresh(de_beto)
    assert de_beto.estado == "rechazado"
    assert session.query(Clase).filter(Clase.id == clase.id).one().coach_id == ana.id
    tipos_beto = {n.tipo for n in session.query(Notificacion).filter(Notificacion.destinatario_id == beto.id)}
    assert tipos_beto == {"solicitud_rechazada"}

    with pytest.raises(ConflictError):
        asignar_coach_a_clase(session, admin, clase.id, de_beto.id)


def test_aprobar_solicitud_de_otra_clase_falla(session):
    admin = add_perfil(session, rol="admin")
    coach = add_coach(session)
    salon = add_salon(session)
    clase = add_clase(session, salon=salon, horas=10)
    otra = add_clase(session, salon=salon, horas=20)
    solicitud = solicitar_clase(session, coach.perfil, clase.id)

    with pytest.raises(ValidationError):
        asignar_coach_a_clase(session, admin, otra.id, solicitud.id)


def test_cancelar_solicitud_la_elimina(session):
    coach = add_coach(session)
    clase = add_clase(session)
    solicitud = solicitar_clase(session, coach.perfil, clase.id)

    cancelar_solicitud(session, coach.perfil, solicitud.id)

    assert session.query(SolicitudClase).count() == 0


def test_coach_solo_ve_sus_solicitudes(session):
    admin = add_perfil(session, rol="admin")
    ana = add_coach(session)
    beto = add_coach(session)
    clase = add_clase(session)
    solicitar_clase(session, ana.perfil, clase.id)
    solicitar_clase(session, beto.perfil, clase.id)

    assert len(obtener_solicitudes(session, admin)) == 2
    propias = obtener_solicitudes(session, ana.perfil)
    assert [s.coach_id for s in propias] == [ana.id]
