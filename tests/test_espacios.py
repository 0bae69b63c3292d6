import pytest

from strive_studio.core.exceptions import AuthorizationError, ConflictError, ValidationError
from strive_studio.schemas.espacio import EspacioCreate, SalonCreate, SalonUpdate
from strive_studio.services.espacios_service import (
    actualizar_estado_espacio,
    actualizar_salon,
    crear_espacio,
    crear_salon,
    eliminar_espacio,
    eliminar_salon,
    obtener_espacios_por_salon,
    obtener_estadisticas_salon,
    obtener_salones,
)
from tests.helpers import add_clase, add_espacio, add_perfil, add_reserva, add_salon


def test_crear_espacio_y_listarlo(session):
    admin = add_perfil(session, rol="admin")
    salon = add_salon(session, capacidad_maxima=4)

    espacio = crear_espacio(session, admin, EspacioCreate(salon_id=salon.id, numero=3, tipo_equipo="bici"))

    assert espacio.estado == "disponible"
    assert espacio.usos_desde_mantenimiento == 0
    assert [e.id for e in obtener_espacios_por_salon(session, salon.id)] == [espacio.id]


def test_numero_duplicado_en_el_salon_falla(session):
    admin = add_perfil(session, rol="admin")
    salon = add_salon(session)
    crear_espacio(session, admin, EspacioCreate(salon_id=salon.id, numero=1, tipo_equipo="bici"))

    with pytest.raises(ConflictError):
        crear_espacio(session, admin, EspacioCreate(salon_id=salon.id, numero=1, tipo_equipo="bici"))

    # El mismo número en otro salón sí se permite
    otro = add_salon(session, nombre="Salón Funcional", tipo="funcional")
    crear_espacio(session, admin, EspacioCreate(salon_id=otro.id, numero=1, tipo_equipo="tapete"))


def test_salon_lleno_no_acepta_mas_espacios(session):
    admin = add_perfil(session, rol="admin")
    salon = add_salon(session, capacidad_maxima=2)
    add_espacio(session, salon, 1)
    add_espacio(session, salon, 2)

    with pytest.raises(ConflictError):
        crear_espacio(session, admin, EspacioCreate(salon_id=salon.id, numero=3, tipo_equipo="bici"))


def test_mantenimiento_reinicia_contador(session):
    staff = add_perfil(session, rol="staff")
    salon = add_salon(session)
    bici = add_espacio(session, salon, 1, usos=85)

    bici = actualizar_estado_espacio(session, staff, bici.id, "mantenimiento", "Cambio de cadena")

    assert bici.estado == "mantenimiento"
    assert bici.usos_desde_mantenimiento == 0
    assert bici.ultimo_mantenimiento is not None
    assert bici.notas_mantenimiento == "Cambio de cadena"

    bici = actualizar_estado_espacio(session, staff, bici.id, "disponible")
    assert bici.estado == "disponible"


def test_estado_invalido_falla(session):
    admin = add_perfil(session, rol="admin")
    bici = add_espacio(session, add_salon(session), 1)

    with pytest.raises(ValidationError):
        actualizar_estado_espacio(session, admin, bici.id, "rota")


def test_cliente_no_cambia_estado(session):
    cliente = add_perfil(session)
    bici = add_espacio(session, add_salon(session), 1)

    with pytest.raises(AuthorizationError):
        actualizar_estado_espacio(session, cliente, bici.id, "mantenimiento")


def test_capacidad_del_salon_no_baja_de_los_espacios(session):
    admin = add_perfil(session, rol="admin")
    salon = add_salon(session, capacidad_maxima=5)
    for numero in range(1, 4):
        add_espacio(session, salon, numero)

    with pytest.raises(ConflictError):
        actualizar_salon(session, admin, salon.id, SalonUpdate(capacidad_maxima=2))

    salon = actualizar_salon(session, admin, salon.id, SalonUpdate(capacidad_maxima=3, nombre="Ride"))
    assert (salon.capacidad_maxima, salon.nombre) == (3, "Ride")


def test_estadisticas_del_salon(session):
    salon = add_salon(session)
    add_espacio(session, salon, 1, usos=90)
    add_espacio(session, salon, 2, usos=10)
    en_taller = add_espacio(session, salon, 3)
    en_taller.estado = "mantenimiento"
    session.commit()

    stats = obtener_estadisticas_salon(session, salon.id)

    assert stats == {
        "total": 3,
        "disponibles": 2,
        "ocupados": 0,
        "mantenimiento": 1,
        "requieren_mantenimiento": 1,
    }


def test_eliminar_salon_con_espacios_falla(session):
    admin = add_perfil(session, rol="admin")
    salon = add_salon(session)
    add_espacio(session, salon, 1)

    with pytest.raises(ConflictError):
        eliminar_salon(session, admin, salon.id)


def test_eliminar_espacio_con_reservas_falla(session):
    admin = add_perfil(session, rol="admin")
    salon = add_salon(session)
    bici = add_espacio(session, salon, 1)
    clase = add_clase(session, salon=salon)
    add_reserva(session, clase, add_perfil(session), espacio=bici)

    with pytest.raises(ConflictError):
        eliminar_espacio(session, admin, bici.id)


def test_salones_inactivos_solo_para_admin(session):
    admin = add_perfil(session, rol="admin")
    cliente = add_perfil(session)
    crear_salon(session, admin, SalonCreate(nombre="Ride", tipo="cycling", capacidad_maxima=20))
    cerrado = crear_salon(session, admin, SalonCreate(nombre="Viejo", tipo="funcional", capacidad_maxima=10))
    actualizar_salon(session, admin, cerrado.id, SalonUpdate(activo=False))

    assert len(obtener_salones(session, admin, incluir_inactivos=True)) == 2
    assert [s.nombre for s in obtener_salones(session, cliente, incluir_inactivos=True)] == ["Ride"]
