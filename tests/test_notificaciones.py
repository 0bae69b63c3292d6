import asyncio
import threading
import time

import pytest
from starlette.websockets import WebSocketDisconnect

from strive_studio.models.notificacion import Notificacion
from strive_studio.services.notificaciones_service import (
    contar_no_leidas,
    crear_notificacion,
    eliminar_notificacion,
    marcar_como_leida,
    marcar_todas_como_leidas,
    obtener_notificaciones,
)
from strive_studio.core.exceptions import NotFoundError
from strive_studio.services.realtime import NotificacionesHub, hub
from tests.helpers import add_perfil, auth_headers, token_para


def _notificar(session, perfil, titulo="Hola"):
    notificacion = crear_notificacion(session, perfil.id, "aviso", titulo, "Mensaje de prueba")
    session.commit()
    return notificacion


# ============== BANDEJA ==============

def test_bandeja_solo_del_destinatario(session):
    ana = add_perfil(session)
    beto = add_perfil(session)
    propia = _notificar(session, ana)
    ajena = _notificar(session, beto)

    assert [n.id for n in obtener_notificaciones(session, ana)] == [propia.id]
    assert contar_no_leidas(session, ana) == 1

    with pytest.raises(NotFoundError):
        marcar_como_leida(session, ana, ajena.id)
    with pytest.raises(NotFoundError):
        eliminar_notificacion(session, ana, ajena.id)


def test_marcar_leidas(session):
    cliente = add_perfil(session)
    primera = _notificar(session, cliente, "Uno")
    _notificar(session, cliente, "Dos")
    _notificar(session, cliente, "Tres")

    leida = marcar_como_leida(session, cliente, primera.id)
    assert leida.leida is True
    assert leida.leida_at is not None
    assert contar_no_leidas(session, cliente) == 2

    assert marcar_todas_como_leidas(session, cliente) == 2
    assert contar_no_leidas(session, cliente) == 0


def test_api_de_notificaciones(client, session):
    cliente = add_perfil(session)
    notificacion = _notificar(session, cliente)
    headers = auth_headers(cliente)

    respuesta = client.get("/api/notificaciones/no-leidas/count", headers=headers)
    assert respuesta.json()["data"] == {"count": 1}

    respuesta = client.put(f"/api/notificaciones/{notificacion.id}/leer", headers=headers)
    assert respuesta.json()["data"]["leida"] is True

    respuesta = client.delete(f"/api/notificaciones/{notificacion.id}", headers=headers)
    assert respuesta.status_code == 200
    assert client.get("/api/notificaciones", headers=headers).json()["data"] == []


# ============== TIEMPO REAL ==============

def test_hub_entrega_solo_al_destinatario():
    hub_local = NotificacionesHub()

    async def escenario():
        ana = hub_local.suscribir("ana")
        beto = hub_local.suscribir("beto")
        # Publicación desde otro hilo, como lo hace el threadpool
        hilo = threading.Thread(target=hub_local.publicar, args=("ana", {"evento": "INSERT"}))
        hilo.start()
        hilo.join()
        evento = await asyncio.wait_for(ana.queue.get(), timeout=1)
        assert evento == {"evento": "INSERT"}
        assert beto.queue.empty()

        hub_local.cancelar(ana)
        assert hub_local.suscriptores("ana") == 0
        assert hub_local.publicar("ana", {"evento": "INSERT"}) == 0

    asyncio.run(escenario())


def test_commit_publica_insert_update_y_delete(session):
    cliente = add_perfil(session)

    async def escenario():
        suscripcion = hub.suscribir(cliente.id)
        try:
            notificacion = _notificar(session, cliente, "En vivo")
            evento = await asyncio.wait_for(suscripcion.queue.get(), timeout=1)
            assert evento["evento"] == "INSERT"
            assert evento["notificacion"]["titulo"] == "En vivo"

            marcar_como_leida(session, cliente, notificacion.id)
            evento = await asyncio.wait_for(suscripcion.queue.get(), timeout=1)
            assert evento["evento"] == "UPDATE"
            assert evento["notificacion"]["leida"] is True

            eliminar_notificacion(session, cliente, notificacion.id)
            evento = await asyncio.wait_for(suscripcion.queue.get(), timeout=1)
            assert evento == {"evento": "DELETE", "notificacion": {"id": notificacion.id}}
        finally:
            hub.cancelar(suscripcion)

    asyncio.run(escenario())


def test_rollback_no_publica(session):
    cliente = add_perfil(session)

    async def escenario():
        suscripcion = hub.suscribir(cliente.id)
        try:
            crear_notificacion(session, cliente.id, "aviso", "Nunca", "No debe llegar")
            session.flush()
            session.rollback()
            await asyncio.sleep(0.05)
            assert suscripcion.queue.empty()
        finally:
            hub.cancelar(suscripcion)

    asyncio.run(escenario())
    assert session.query(Notificacion).count() == 0


def test_websocket_rechaza_token_invalido(client):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/api/notificaciones/ws?token=no-valido"):
            pass


def test_websocket_recibe_notificaciones_nuevas(client, session):
    cliente = add_perfil(session)

    with client.websocket_connect(f"/api/notificaciones/ws?token={token_para(cliente.id)}") as ws:
        for _ in range(100):
            if hub.suscriptores(cliente.id):
                break
            time.sleep(0.01)
        assert hub.suscriptores(cliente.id) == 1

        _notificar(session, cliente, "Reserva confirmada")
        evento = ws.receive_json()

    assert evento["evento"] == "INSERT"
    assert evento["notificacion"]["titulo"] == "Reserva confirmada"
    assert evento["notificacion"]["destinatario_id"] == cliente.id
