"""
Dependencias de autenticación para FastAPI.

Los tokens se emiten en otro servicio; acá solo se decodifican y se cargan
los permisos del usuario una vez por petición.
"""
from typing import FrozenSet
from uuid import UUID
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
import jwt

from app.database.database import get_report_db
from app.modules.auth.schemas import AuthContext
from app.modules.reports.crud import ReportCrud
from app.core.config import settings

# Security scheme
security = HTTPBearer()

class AuthDependencies:
    """Dependencias de autenticación reutilizables."""

    @staticmethod
    def get_auth_context(
        credentials: HTTPAuthorizationCredentials = Depends(security),
        db: Session = Depends(get_report_db)
    ) -> AuthContext:
        """
        Obtener contexto de autenticación con los permisos del usuario.
        """
        credentials_exception = HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No se pudieron validar las credenciales",
            headers={"WWW-Authenticate": "Bearer"},
        )

        try:
            payload = jwt.decode(
                credentials.credentials,
                settings.APP_SECRET_STRING,
                algorithms=[settings.ALGORITHM]
            )
            user_id = UUID(str(payload.get("sub")))
        except (jwt.PyJWTError, ValueError):
            raise credentials_exception

        permissions = ReportCrud(db).get_user_permissions(user_id)
        if permissions is None:
            raise credentials_exception

        return AuthContext(user_id=user_id, permissions=frozenset(permissions))

    @staticmethod
    def require_permission(permission: str):
        """
        Dependencia para requerir un permiso específico.
        """
        def permission_checker(auth_context: AuthContext = Depends(AuthDependencies.get_auth_context)):
            if not auth_context.has_permission(permission):
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail=f"Se requiere el permiso: {permission}"
                )
            return auth_context
        return permission_checker

# Instancias de dependencias
get_auth_context = AuthDependencies.get_auth_context
require_permission = AuthDependencies.require_permission


def get_current_permissions(
    auth_context: AuthContext = Depends(AuthDependencies.get_auth_context)
) -> FrozenSet[str]:
    """Permisos del usuario actual, cargados una vez por petición."""
    return auth_context.permissions
