from datetime import datetime, timezone


def utcnow() -> datetime:
    """Hora actual en UTC, sin tzinfo (así se guarda en la base)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def a_utc(valor: datetime) -> datetime:
    """Normaliza una fecha recibida del cliente a UTC naive."""
    if valor.tzinfo is not None:
        return valor.astimezone(timezone.utc).replace(tzinfo=None)
    return valor
