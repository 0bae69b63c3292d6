import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from strive_studio.config import settings
from strive_studio.core.exceptions import AuthException
from strive_studio.database import get_db
from strive_studio.models.perfil import Perfil

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/v1/token", auto_error=False)


def verify_token(token: str) -> Optional[dict]:
    """Valida un JWT emitido por el servicio de auth. Retorna el payload o None."""
    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
        )
    except JWTError as e:
        logger.debug(f"[AUTH] Token inválido: {e}")
        return None


def token_de_request(request: Request, token: Optional[str] = None) -> Optional[str]:
    """El token llega por header Authorization o, desde el navegador, en cookie."""
    if token:
        return token
    return request.cookies.get(settings.ACCESS_TOKEN_COOKIE)


def perfil_desde_token(db: Session, token: Optional[str]) -> Optional[Perfil]:
    if not token:
        return None
    payload = verify_token(token)
    if payload is None:
        return None
    user_id = payload.get("sub")
    if user_id is None:
        return None
    return db.query(Perfil).filter(Perfil.id == user_id).first()


def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> Perfil:
    token = token_de_request(request, token)
    if token is None:
        raise AuthException("No autenticado")

    user = perfil_desde_token(db, token)
    if user is None:
        raise AuthException()
    return user
