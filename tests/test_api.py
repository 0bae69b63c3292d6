from datetime import timedelta

from strive_studio.core.fechas import utcnow
from tests.helpers import add_clase, add_disciplina, add_perfil, add_reserva, add_salon, auth_headers


def test_sin_token_responde_401(client):
    respuesta = client.get("/api/reservas/mis-reservas")
    assert respuesta.status_code == 401
    assert respuesta.json() == {"success": False, "error": "No autenticado", "kind": "authentication"}


def test_cliente_no_puede_crear_clases(client, session):
    cliente = add_perfil(session)
    salon = add_salon(session)
    disciplina = add_disciplina(session)

    respuesta = client.post("/api/clases", headers=auth_headers(cliente), json={
        "fecha_hora": (utcnow() + timedelta(days=1)).isoformat(),
        "salon_id": salon.id,
        "disciplina_id": disciplina.id,
    })
    assert respuesta.status_code == 403
    assert respuesta.json()["kind"] == "authorization"


def test_admin_crea_clase(client, session):
    admin = add_perfil(session, rol="admin")
    salon = add_salon(session, capacidad_maxima=15)
    disciplina = add_disciplina(session)

    respuesta = client.post("/api/clases", headers=auth_headers(admin), json={
        "fecha_hora": (utcnow() + timedelta(days=1)).isoformat(),
        "salon_id": salon.id,
        "disciplina_id": disciplina.id,
        "nombre_clase": "Cycling matutino",
    })
    assert respuesta.status_code == 201
    cuerpo = respuesta.json()
    assert cuerpo["success"] is True
    assert cuerpo["data"]["capacidad"] == 15
    assert cuerpo["data"]["espacios_disponibles"] == 15
    assert cuerpo["data"]["estado"] == "programada"


def test_eliminar_clase_con_reservas_responde_409(client, session):
    admin = add_perfil(session, rol="admin")
    clase = add_clase(session)
    add_reserva(session, clase, add_perfil(session))

    respuesta = client.delete(f"/api/clases/{clase.id}", headers=auth_headers(admin))
    assert respuesta.status_code == 409
    assert respuesta.json()["kind"] == "conflict"


def test_clase_inexistente_responde_404(client, session):
    admin = add_perfil(session, rol="admin")
    respuesta = client.get("/api/clases/no-existe", headers=auth_headers(admin))
    assert respuesta.status_code == 404
    assert respuesta.json() == {"success": False, "error": "Clase no encontrada", "kind": "not_found"}


def test_reservar_clase_llena(client, session):
    clase = add_clase(session, capacidad=1)
    add_reserva(session, clase, add_perfil(session))
    cliente = add_perfil(session)

    respuesta = client.post("/api/reservas", headers=auth_headers(cliente), json={"clase_id": clase.id})
    assert respuesta.status_code == 409
    assert respuesta.json()["error"] == "La clase está llena"

    respuesta = client.post(
        "/api/reservas", headers=auth_headers(cliente),
        json={"clase_id": clase.id, "unirse_lista_espera": True},
    )
    assert respuesta.status_code == 201
    assert respuesta.json()["data"]["posicion"] == 1


def test_reservar_y_cancelar(client, session):
    clase = add_clase(session, capacidad=5, horas=48)
    cliente = add_perfil(session)
    headers = auth_headers(cliente)

    respuesta = client.post("/api/reservas", headers=headers, json={"clase_id": clase.id})
    assert respuesta.status_code == 201
    reserva_id = respuesta.json()["data"]["id"]

    respuesta = client.post(f"/api/reservas/{reserva_id}/cancelar", headers=headers, json={})
    assert respuesta.status_code == 200
    datos = respuesta.json()["data"]
    assert datos["reserva"]["estado"] == "cancelada"
    assert datos["tardia"] is False
