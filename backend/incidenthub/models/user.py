from enum import Enum
from sqlalchemy import Column, Integer, String, Boolean, Enum as SAEnum
from sqlalchemy.sql import func
from incidenthub.core.database import Base, UTCDateTime

class Role(str, Enum):
    USER = "ROLE_USER"
    ADMIN = "ROLE_ADMIN"

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)  # bcrypt hash, never plaintext
    role = Column(SAEnum(Role, native_enum=False, length=20), nullable=False, default=Role.USER)
    enabled = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime(), server_default=func.now())

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def __repr__(self):
        return f"<User id={self.id} username={self.username!r} role={self.role}>"
