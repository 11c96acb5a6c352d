"""
Dependencias específicas para el módulo de Reportes

- Alcance de categorías del usuario, resuelto una vez por petición
- Permisos requeridos por cada grupo de endpoints
"""

from typing import FrozenSet

from fastapi import Depends

from app.core.config import settings
from app.modules.auth.dependencies import AuthDependencies, get_current_permissions
from .permissions import PermissionScope, resolve_scope


def get_permission_scope(
    permissions: FrozenSet[str] = Depends(get_current_permissions)
) -> PermissionScope:
    """Categorías visibles para el usuario actual"""
    return resolve_scope(permissions)


require_balance_access = AuthDependencies.require_permission(settings.PERMISSION_VIEW_BALANCE)
require_statistics_access = AuthDependencies.require_permission(settings.PERMISSION_VIEW_STATISTICS)
require_expenses_access = AuthDependencies.require_permission(settings.PERMISSION_VIEW_EXPENSES)
