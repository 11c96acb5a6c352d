from pydantic import BaseModel
from typing import FrozenSet
from uuid import UUID


class AuthContext(BaseModel):
    user_id: UUID
    permissions: FrozenSet[str] = frozenset()

    def has_permission(self, permission: str) -> bool:
        return permission in self.permissions
