from .comun import *
from .disciplina import *
from .espacio import *
from .clase import *
from .solicitud import *
from .reserva import *
from .personal import *
from .documento import *
from .onboarding import *
from .notificacion import *
