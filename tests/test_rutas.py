from types import SimpleNamespace

import pytest

from strive_studio.core.rutas import destino_redireccion, es_ruta_publica
from tests.helpers import add_clase, add_coach, add_perfil, auth_headers


def _perfil(rol="cliente", activo=True, email_confirmado=True):
    return SimpleNamespace(rol=rol, activo=activo, email_confirmado=email_confirmado)


@pytest.mark.parametrize("ruta", ["/", "/login", "/registro", "/api/clases", "/onboarding/abc", "/health"])
def test_rutas_publicas(ruta):
    assert es_ruta_publica(ruta)
    assert destino_redireccion(ruta, False, None) is None


def test_prefijo_no_confunde_rutas_parecidas():
    assert not es_ruta_publica("/apis")
    assert not es_ruta_publica("/login-admin")


def test_sin_sesion_va_al_login_con_redirect():
    assert destino_redireccion("/coach/clases", False, None) == "/login?redirect=/coach/clases"


def test_sin_perfil_va_al_login():
    assert destino_redireccion("/cliente", True, None) == "/login"


def test_email_sin_confirmar():
    perfil = _perfil(email_confirmado=False)
    assert destino_redireccion("/cliente", True, perfil) == "/verificar-email"


def test_cuenta_desactivada():
    perfil = _perfil(activo=False)
    assert destino_redireccion("/cliente", True, perfil) == "/cuenta-desactivada"
    assert destino_redireccion("/cuenta-desactivada", True, perfil) is None


def test_rol_equivocado_va_a_su_dashboard():
    assert destino_redireccion("/admin/personal", True, _perfil("coach")) == "/coach"
    assert destino_redireccion("/coach", True, _perfil("coach")) is None
    assert destino_redireccion("/perfil", True, _perfil("staff")) is None


def test_middleware_redirige_sin_token(client):
    respuesta = client.get("/admin", follow_redirects=False)

    assert respuesta.status_code == 307
    assert respuesta.headers["location"] == "/login?redirect=/admin"


def test_middleware_token_invalido(client):
    respuesta = client.get("/staff", headers={"Authorization": "Bearer no-es-un-jwt"}, follow_redirects=False)

    assert respuesta.status_code == 307
    assert respuesta.headers["location"].startswith("/login")


def test_middleware_manda_al_cliente_a_su_dashboard(client, session):
    cliente = add_perfil(session)

    respuesta = client.get("/admin", headers=auth_headers(cliente), follow_redirects=False)

    assert respuesta.status_code == 307
    assert respuesta.headers["location"] == "/cliente"


def test_middleware_cuenta_inactiva(client, session):
    inactivo = add_perfil(session, activo=False)

    respuesta = client.get("/cliente", headers=auth_headers(inactivo), follow_redirects=False)

    assert respuesta.headers["location"] == "/cuenta-desactivada"


def test_dashboard_de_admin(client, session):
    admin = add_perfil(session, rol="admin")
    add_clase(session)

    respuesta = client.get("/admin", headers=auth_headers(admin))

    assert respuesta.status_code == 200
    data = respuesta.json()["data"]
    assert data["clases_sin_coach"] == 1
    assert len(data["proximas_clases"]) == 1


def test_dashboard_de_coach(client, session):
    coach = add_coach(session)
    add_clase(session, coach=coach)

    respuesta = client.get("/coach", headers=auth_headers(coach.perfil))

    assert respuesta.status_code == 200
    assert respuesta.json()["data"]["proximas_clases"][0]["coach"]["id"] == coach.id
