# tests/helpers.py
import uuid
from datetime import timedelta
from types import SimpleNamespace

from jose import jwt

from strive_studio.config import settings
from strive_studio.core.fechas import utcnow
from strive_studio.models.clase import Clase
from strive_studio.models.disciplina import Disciplina
from strive_studio.models.documento import DocumentoPersonal
from strive_studio.models.espacio import Espacio
from strive_studio.models.perfil import Perfil
from strive_studio.models.personal import Coach, Staff
from strive_studio.models.reserva import Reserva
from strive_studio.models.salon import Salon


class _FakeBucket:
    def __init__(self, client, bucket):
        self.client = client
        self.bucket = bucket

    def upload(self, path, content, options=None):
        self.client.subidos.append((self.bucket, path, content))
        return {"Key": f"{self.bucket}/{path}"}

    def get_public_url(self, path):
        return f"https://storage.test/{self.bucket}/{path}"


class _FakeStorage:
    def __init__(self, client):
        self.client = client

    def from_(self, bucket):
        return _FakeBucket(self.client, bucket)


class _FakeAuth:
    def __init__(self, client):
        self.client = client

    def sign_up(self, credentials):
        if credentials["email"] in self.client.usuarios:
            raise Exception("User already registered")
        user_id = str(uuid.uuid4())
        self.client.usuarios[credentials["email"]] = user_id
        return SimpleNamespace(user=SimpleNamespace(id=user_id))


class FakeSupabaseClient:
    """Cliente de supabase en memoria: storage y auth.sign_up."""

    def __init__(self):
        self.subidos = []
        self.usuarios = {}
        self.storage = _FakeStorage(self)
        self.auth = _FakeAuth(self)


def token_para(perfil_id, **claims):
    payload = {
        "sub": perfil_id,
        "aud": settings.JWT_AUDIENCE,
        "exp": utcnow() + timedelta(hours=1),
    }
    payload.update(claims)
    return jwt.encode(payload, settings.SUPABASE_JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def auth_headers(perfil):
    return {"Authorization": f"Bearer {token_para(perfil.id)}"}


def add_perfil(session, rol="cliente", email=None, nombre=None, activo=True, email_confirmado=True):
    perfil = Perfil(
        id=str(uuid.uuid4()),
        email=email or f"{rol}-{uuid.uuid4().hex[:8]}@example.com",
        nombre_completo=nombre or rol.capitalize(),
        rol=rol,
        activo=activo,
        email_confirmado=email_confirmado,
    )
    session.add(perfil)
    session.commit()
    session.refresh(perfil)
    return perfil


def add_coach(session, disciplinas="cycling", estado="aprobado", activo=True, nombre="Coach"):
    perfil = add_perfil(session, rol="coach", nombre=nombre)
    coach = Coach(id=perfil.id, disciplinas=disciplinas, estado=estado, activo=activo)
    session.add(coach)
    session.commit()
    session.refresh(coach)
    return coach


def add_staff(session, estado="pendiente", activo=False):
    perfil = add_perfil(session, rol="staff", nombre="Staff")
    staff = Staff(id=perfil.id, estado=estado, activo=activo)
    session.add(staff)
    session.commit()
    session.refresh(staff)
    return staff


def add_salon(session, capacidad_maxima=20, tipo="cycling", nombre="Salón Cycling"):
    salon = Salon(nombre=nombre, tipo=tipo, capacidad_maxima=capacidad_maxima, activo=True)
    session.add(salon)
    session.commit()
    session.refresh(salon)
    return salon


def add_disciplina(session, tipo="cycling", nombre=None):
    disciplina = Disciplina(nombre=nombre or f"{tipo.capitalize()} {uuid.uuid4().hex[:4]}", tipo=tipo)
    session.add(disciplina)
    session.commit()
    session.refresh(disciplina)
    return disciplina


def add_espacio(session, salon, numero, tipo_equipo="bici", usos=0, usos_para_mantenimiento=100):
    espacio = Espacio(
        salon_id=salon.id,
        numero=numero,
        tipo_equipo=tipo_equipo,
        usos_desde_mantenimiento=usos,
        usos_para_mantenimiento=usos_para_mantenimiento,
    )
    session.add(espacio)
    session.commit()
    session.refresh(espacio)
    return espacio


def add_clase(session, salon=None, disciplina=None, capacidad=10, horas=24, duracion=60,
              coach=None, reservas_count=0, estado="programada"):
    """Inserta la clase directo en la base; permite fechas pasadas."""
    salon = salon or add_salon(session)
    disciplina = disciplina or add_disciplina(session, tipo=salon.tipo)
    clase = Clase(
        fecha_hora=utcnow() + timedelta(hours=horas),
        duracion=duracion,
        salon_id=salon.id,
        disciplina_id=disciplina.id,
        coach_id=coach.id if coach else None,
        capacidad=capacidad,
        reservas_count=reservas_count,
        estado=estado,
    )
    session.add(clase)
    session.commit()
    session.refresh(clase)
    return clase


def add_reserva(session, clase, cliente, espacio=None, estado="confirmada"):
    reserva = Reserva(
        clase_id=clase.id,
        cliente_id=cliente.id,
        espacio_id=espacio.id if espacio else None,
        estado=estado,
    )
    session.add(reserva)
    if estado == "confirmada":
        clase.reservas_count += 1
    session.commit()
    session.refresh(reserva)
    return reserva


def add_documento(session, personal, tipo_documento="ine_frente", estado="pendiente", version=1, anterior=None):
    documento = DocumentoPersonal(
        tipo_documento=tipo_documento,
        url_archivo=f"https://storage.test/{tipo_documento}_v{version}.pdf",
        nombre_archivo=f"{tipo_documento}.pdf",
        estado=estado,
        version=version,
        documento_anterior_id=anterior.id if anterior else None,
    )
    if personal.tipo_personal == "coach":
        documento.coach_id = personal.id
    else:
        documento.staff_id = personal.id
    session.add(documento)
    session.commit()
    session.refresh(documento)
    return documento
