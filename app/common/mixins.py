"""
Common mixins for business models
"""
from sqlalchemy import Column, DateTime, Boolean, Uuid
from sqlalchemy.sql import func
from uuid import uuid4


class TimestampMixin:
    """Mixin for models that need timestamp tracking"""

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)


class BaseMixin(TimestampMixin):
    """UUID primary key plus timestamps for most business models"""

    id = Column(Uuid, primary_key=True, default=uuid4, index=True)


class SoftDeleteMixin:
    """Mixin for soft deactivation; rows are never deleted so history keeps pointing at them"""

    is_active = Column(Boolean, default=True, nullable=False)

    def deactivate(self):
        self.is_active = False

    def restore(self):
        self.is_active = True
