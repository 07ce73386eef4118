from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from incidenthub.models.incident import Severity, Status

class IncidentCreate(BaseModel):
    title: str = Field(..., min_length=5, max_length=200)
    description: str = Field(..., min_length=10, max_length=5000)
    severity: Severity

class IncidentUpdate(BaseModel):
    status: Status
    admin_notes: Optional[str] = Field(None, max_length=5000)

class ReporterSummary(BaseModel):
    id: int
    username: str

    class Config:
        from_attributes = True

class IncidentResponse(BaseModel):
    id: int
    title: str
    description: str
    severity: Severity
    status: Status
    admin_notes: Optional[str]
    reported_by: ReporterSummary
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class IncidentStatistics(BaseModel):
    total: int = 0
    open: int = 0
    in_progress: int = 0
    resolved: int = 0
    critical: int = 0

class EnumOption(BaseModel):
    value: str
    label: str

def enum_options(enum_cls) -> list:
    return [EnumOption(value=member.value, label=member.label) for member in enum_cls]
