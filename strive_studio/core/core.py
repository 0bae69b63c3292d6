from typing import Any, List

from strive_studio.core.exceptions import AuthorizationError


def allowed_roles(current_user: Any, required_roles: List[str]) -> bool:
    """
    Verifica si el rol del usuario actual está entre los roles permitidos.

    current_user es el Perfil retornado por get_current_user.
    """
    user_role = (current_user.rol or "").lower()
    return user_role in [r.lower() for r in required_roles]


def requerir_rol(current_user: Any, *roles: str) -> None:
    """Lanza AuthorizationError si el usuario no tiene alguno de los roles o está inactivo."""
    if current_user is None or not allowed_roles(current_user, list(roles)):
        raise AuthorizationError(
            f"Esta acción requiere rol {' o '.join(roles)}"
        )
    if not current_user.activo:
        raise AuthorizationError("Tu cuenta está desactivada")
