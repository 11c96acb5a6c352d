"""
Permission Filter

Resolves the caller's permission strings once per request into an explicit
`PermissionScope` that every query and aggregation receives as a parameter.
"""

from dataclasses import dataclass
from typing import Any, FrozenSet, Iterable, Optional
from uuid import UUID

from sqlalchemy import false

from app.core.config import settings


@dataclass(frozen=True)
class PermissionScope:
    """Categorías visibles para quien pide el reporte"""
    has_all_categories: bool
    allowed_category_ids: FrozenSet[UUID] = frozenset()

    @classmethod
    def unrestricted(cls) -> "PermissionScope":
        return cls(has_all_categories=True)

    @property
    def is_restricted(self) -> bool:
        return not self.has_all_categories

    @property
    def is_empty(self) -> bool:
        return self.is_restricted and not self.allowed_category_ids

    def allows(self, category_id: Optional[Any]) -> bool:
        if self.has_all_categories:
            return True
        if category_id is None:
            return False
        return _parse_uuid(category_id) in self.allowed_category_ids


def _parse_uuid(value: Any) -> Optional[UUID]:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value).strip())
    except (ValueError, AttributeError, TypeError):
        return None


def resolve_scope(
    permissions: Iterable[Any],
    all_categories_permission: Optional[str] = None,
    category_prefix: Optional[str] = None,
) -> PermissionScope:
    """
    Build the scope from permission strings.

    The all-categories grant wins. Otherwise each "<prefix><uuid>" entry adds
    that category; anything malformed is ignored. No grants at all means zero
    visible categories, never "all".
    """
    all_categories_permission = all_categories_permission or settings.PERMISSION_ALL_CATEGORIES
    category_prefix = category_prefix or settings.PERMISSION_CATEGORY_PREFIX

    permissions = [p for p in permissions if isinstance(p, str)]
    if all_categories_permission in permissions:
        return PermissionScope.unrestricted()

    allowed = set()
    for permission in permissions:
        if not permission.startswith(category_prefix):
            continue
        category_id = _parse_uuid(permission[len(category_prefix):])
        if category_id is not None:
            allowed.add(category_id)

    return PermissionScope(has_all_categories=False, allowed_category_ids=frozenset(allowed))


def apply_scope(scope: PermissionScope, query, category_column):
    """
    Narrow a query to the scope's categories.

    Must run before any count or aggregation. Rows without a category are
    only visible to an unrestricted scope.
    """
    if scope.has_all_categories:
        return query
    if not scope.allowed_category_ids:
        return query.filter(false())
    return query.filter(category_column.in_(sorted(scope.allowed_category_ids)))
