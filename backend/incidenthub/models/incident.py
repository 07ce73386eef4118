from enum import Enum
from sqlalchemy import Column, Integer, String, ForeignKey, Text, Index, Enum as SAEnum
from sqlalchemy.orm import relationship
from incidenthub.core.database import Base, UTCDateTime
from incidenthub.models.user import User

class Severity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def label(self) -> str:
        return self.value.capitalize()

class Status(str, Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    REJECTED = "REJECTED"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()

class Incident(Base):
    """Security incident filed by a reporter and triaged by administrators.

    Timestamps are stamped by IncidentService, not by the ORM.
    """
    __tablename__ = "incidents"
    __table_args__ = (
        Index("idx_status", "status"),
        Index("idx_severity", "severity"),
        Index("idx_reported_by", "reported_by_id"),
        Index("idx_created_at", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    severity = Column(SAEnum(Severity, native_enum=False, length=20), nullable=False)
    status = Column(SAEnum(Status, native_enum=False, length=20), nullable=False, default=Status.OPEN)
    admin_notes = Column(Text, nullable=True)
    reported_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(UTCDateTime(), nullable=False)
    updated_at = Column(UTCDateTime(), nullable=False)

    reported_by = relationship(User, lazy="joined")

    def __repr__(self):
        return f"<Incident id={self.id} status={self.status} severity={self.severity}>"
