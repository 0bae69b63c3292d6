from .perfil import Perfil
from .disciplina import Disciplina, Especialidad
from .salon import Salon
from .espacio import Espacio
from .personal import Coach, Staff
from .clase import Clase
from .solicitud_clase import SolicitudClase
from .reserva import Reserva
from .lista_espera import ListaEspera
from .documento import DocumentoPersonal
from .invitacion import InvitacionPersonal
from .firma import FirmaDocumento
from .notificacion import Notificacion

__all__ = [
    "Perfil", "Disciplina", "Especialidad", "Salon", "Espacio", "Coach", "Staff",
    "Clase", "SolicitudClase", "Reserva", "ListaEspera", "DocumentoPersonal",
    "InvitacionPersonal", "FirmaDocumento", "Notificacion"
]
