from sqlalchemy import Column, String, Boolean, JSON
from app.database.database import Base
from app.common.mixins import BaseMixin

class User(Base, BaseMixin):
    __tablename__ = "users"

    email = Column(String, unique=True, nullable=False)
    is_active = Column(Boolean, default=True)

    # Permission strings, e.g. "outputs:view_category:<uuid>"
    permissions = Column(JSON, nullable=False, default=list)
