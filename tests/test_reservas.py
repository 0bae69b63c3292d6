import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from strive_studio.core.exceptions import ConflictError, NotFoundError
from strive_studio.database import Base
from strive_studio.models.clase import Clase
from strive_studio.models.lista_espera import ListaEspera
from strive_studio.models.notificacion import Notificacion
from strive_studio.models.perfil import Perfil
from strive_studio.models.reserva import Reserva
from strive_studio.services.reservas_service import (
    agregar_lista_espera,
    cancelar_reserva,
    crear_reserva,
    obtener_estadisticas_cliente,
    obtener_mis_reservas,
    remover_lista_espera,
    verificar_disponibilidad,
)
from tests.helpers import add_clase, add_espacio, add_perfil, add_reserva, add_salon


def _conteo(session, clase_id):
    session.expire_all()
    return session.query(Clase.reservas_count).filter(Clase.id == clase_id).scalar()


def test_clase_llena_cancelar_y_volver_a_llenar(session):
    clase = add_clase(session, capacidad=10)
    clientes = [add_perfil(session) for _ in range(10)]
    reservas = [crear_reserva(session, c, clase.id) for c in clientes]
    assert _conteo(session, clase.id) == 10

    nuevo = add_perfil(session)
    with pytest.raises(ConflictError):
        crear_reserva(session, nuevo, clase.id)
    assert _conteo(session, clase.id) == 10

    cancelar_reserva(session, clientes[0], reservas[0].id)
    assert _conteo(session, clase.id) == 9

    crear_reserva(session, nuevo, clase.id)
    assert _conteo(session, clase.id) == 10


def test_clase_llena_con_lista_de_espera(session):
    clase = add_clase(session, capacidad=1)
    crear_reserva(session, add_perfil(session), clase.id)

    primero = crear_reserva(session, add_perfil(session), clase.id, unirse_lista_espera=True)
    segundo = crear_reserva(session, add_perfil(session), clase.id, unirse_lista_espera=True)

    assert isinstance(primero, ListaEspera)
    assert (primero.posicion, segundo.posicion) == (1, 2)
    assert _conteo(session, clase.id) == 1


def test_dos_sesiones_con_datos_viejos_solo_una_reserva(tmp_path):
    # Base en archivo para que cada sesión tenga su propia conexión
    engine = create_engine(f"sqlite:///{tmp_path / 'carrera.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    Sesion = sessionmaker(bind=engine, autoflush=False)

    with Sesion() as preparacion:
        clase = add_clase(preparacion, capacidad=1)
        ana = add_perfil(preparacion)
        beto = add_perfil(preparacion)
        clase_id, ana_id, beto_id = clase.id, ana.id, beto.id

    primera, segunda = Sesion(), Sesion()
    try:
        # Ambas leen la clase con un lugar libre
        assert primera.get(Clase, clase_id).espacios_disponibles == 1
        assert segunda.get(Clase, clase_id).espacios_disponibles == 1

        crear_reserva(primera, primera.get(Perfil, ana_id), clase_id)
        with pytest.raises(ConflictError):
            crear_reserva(segunda, segunda.get(Perfil, beto_id), clase_id)
    finally:
        primera.close()
        segunda.close()

    with Sesion() as verificacion:
        assert verificacion.get(Clase, clase_id).reservas_count == 1
        assert verificacion.query(Reserva).filter(Reserva.estado == "confirmada").count() == 1
    engine.dispose()


def test_reserva_duplicada_falla(session):
    cliente = add_perfil(session)
    clase = add_clase(session)
    crear_reserva(session, cliente, clase.id)

    with pytest.raises(ConflictError):
        crear_reserva(session, cliente, clase.id)
    assert _conteo(session, clase.id) == 1


def test_espacio_no_se_reserva_dos_veces(session):
    salon = add_salon(session)
    bici = add_espacio(session, salon, 7)
    clase = add_clase(session, salon=salon)

    reserva = crear_reserva(session, add_perfil(session), clase.id, espacio_id=bici.id)
    assert reserva.espacio_id == bici.id

    with pytest.raises(ConflictError):
        crear_reserva(session, add_perfil(session), clase.id, espacio_id=bici.id)
    assert _conteo(session, clase.id) == 1


def test_cancelacion_tardia(session):
    cliente = add_perfil(session)
    clase = add_clase(session, horas=1)
    reserva = crear_reserva(session, cliente, clase.id)

    cancelada, tardia, horas = cancelar_reserva(session, cliente, reserva.id, "Se me hizo tarde")

    assert tardia is True
    assert 0 < horas <= 1
    assert cancelada.estado == "cancelada"
    assert cancelada.cancelada_tardia is True
    assert cancelada.razon_cancelacion == "Se me hizo tarde"


def test_cancelacion_a_tiempo(session):
    cliente = add_perfil(session)
    clase = add_clase(session, horas=30)
    reserva = crear_reserva(session, cliente, clase.id)

    _, tardia, horas = cancelar_reserva(session, cliente, reserva.id)

    assert tardia is False
    assert horas > 29


def test_no_se_cancela_clase_que_ya_comenzo(session):
    cliente = add_perfil(session)
    clase = add_clase(session, horas=-0.25)
    reserva = add_reserva(session, clase, cliente)

    with pytest.raises(ConflictError):
        cancelar_reserva(session, cliente, reserva.id)
    assert _conteo(session, clase.id) == 1


def test_cancelar_avisa_al_primero_en_espera(session):
    clase = add_clase(session, capacidad=1)
    titular = add_perfil(session)
    reserva = crear_reserva(session, titular, clase.id)
    espera_1 = add_perfil(session)
    espera_2 = add_perfil(session)
    agregar_lista_espera(session, espera_1, clase.id)
    agregar_lista_espera(session, espera_2, clase.id)

    cancelar_reserva(session, titular, reserva.id)

    avisos = session.query(Notificacion).filter(Notificacion.tipo == "lugar_disponible").all()
    assert [n.destinatario_id for n in avisos] == [espera_1.id]

    # Quien reserva primero se queda con el lugar y sale de la lista
    crear_reserva(session, espera_2, clase.id)
    restantes = session.query(ListaEspera).filter(ListaEspera.clase_id == clase.id).all()
    assert [e.cliente_id for e in restantes] == [espera_1.id]


def test_lista_espera_solo_si_esta_llena(session):
    clase = add_clase(session, capacidad=3)

    with pytest.raises(ConflictError):
        agregar_lista_espera(session, add_perfil(session), clase.id)


def test_salir_de_lista_espera_recorre_posiciones(session):
    clase = add_clase(session, capacidad=1)
    crear_reserva(session, add_perfil(session), clase.id)
    clientes = [add_perfil(session) for _ in range(3)]
    for cliente in clientes:
        agregar_lista_espera(session, cliente, clase.id)

    remover_lista_espera(session, clientes[0], clase.id)

    session.expire_all()
    posiciones = {
        e.cliente_id: e.posicion
        for e in session.query(ListaEspera).filter(ListaEspera.clase_id == clase.id)
    }
    assert posiciones == {clientes[1].id: 1, clientes[2].id: 2}

    with pytest.raises(NotFoundError):
        remover_lista_espera(session, clientes[0], clase.id)


def test_reservar_desde_lista_espera_recorre_posiciones(session):
    clase = add_clase(session, capacidad=1)
    titular = add_perfil(session)
    reserva = crear_reserva(session, titular, clase.id)
    clientes = [add_perfil(session) for _ in range(3)]
    for cliente in clientes:
        agregar_lista_espera(session, cliente, clase.id)

    cancelar_reserva(session, titular, reserva.id)
    crear_reserva(session, clientes[0], clase.id)
    nuevo = add_perfil(session)
    entrada = agregar_lista_espera(session, nuevo, clase.id)
    assert entrada.posicion == 3

    session.expire_all()
    posiciones = {
        e.cliente_id: e.posicion
        for e in session.query(ListaEspera).filter(ListaEspera.clase_id == clase.id)
    }
    assert posiciones == {clientes[1].id: 1, clientes[2].id: 2, nuevo.id: 3}


def test_mis_reservas_y_estadisticas(session):
    cliente = add_perfil(session)
    salon = add_salon(session)
    futura = add_clase(session, salon=salon, horas=48)
    otra = add_clase(session, salon=salon, horas=72)
    pasada = add_clase(session, salon=salon, horas=-48)
    crear_reserva(session, cliente, futura.id)
    cancelada = crear_reserva(session, cliente, otra.id)
    cancelar_reserva(session, cliente, cancelada.id)
    add_reserva(session, pasada, cliente, estado="completada")

    assert [r.clase_id for r in obtener_mis_reservas(session, cliente, "activas")] == [futura.id]
    assert [r.clase_id for r in obtener_mis_reservas(session, cliente, "canceladas")] == [otra.id]
    assert [r.clase_id for r in obtener_mis_reservas(session, cliente, "pasadas")] == [pasada.id]
    assert len(obtener_mis_reservas(session, cliente, "todas")) == 3

    stats = obtener_estadisticas_cliente(session, cliente)
    assert stats["reservas_activas"] == 1
    assert stats["clases_completadas"] == 1
    assert stats["cancelaciones"] == 1
    assert stats["cancelaciones_tardias"] == 0


def test_verificar_disponibilidad(session):
    clase = add_clase(session, capacidad=2)
    crear_reserva(session, add_perfil(session), clase.id)

    disponibilidad = verificar_disponibilidad(session, clase.id)

    assert disponibilidad["disponible"] is True
    assert disponibilidad["espacios_disponibles"] == 1
    assert disponibilidad["en_lista_espera"] == 0


def test_crear_reserva_en_clase_pasada_falla(session):
    clase = add_clase(session, horas=-1)

    with pytest.raises(ConflictError):
        crear_reserva(session, add_perfil(session), clase.id)
