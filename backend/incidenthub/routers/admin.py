import logging
from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from incidenthub.core.database import get_db
from incidenthub.models.incident import Severity, Status
from incidenthub.models.user import User
from incidenthub.routers.auth import require_admin
from incidenthub.schemas.incident import IncidentResponse, IncidentUpdate, enum_options
from incidenthub.services.incident_service import IncidentService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
    responses={403: {"description": "Administrators only"}},
)

@router.get("/incidents")
async def view_all_incidents(
    status: Optional[Status] = None,
    severity: Optional[Severity] = None,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    logger.info("Admin %s viewing all incidents", admin.username)
    incidents = await IncidentService(db).get_all_incidents(admin, status=status, severity=severity)
    return {
        "incidents": [IncidentResponse.model_validate(i) for i in incidents],
        "statuses": enum_options(Status),
        "severities": enum_options(Severity),
    }

@router.get("/incidents/edit/{incident_id}")
async def show_edit_incident_form(
    incident_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    incident = await IncidentService(db).get_incident_by_id(incident_id, admin)
    return {
        "incident": IncidentResponse.model_validate(incident),
        "statuses": enum_options(Status),
    }

@router.post("/incidents/update/{incident_id}")
async def update_incident(
    incident_id: int,
    update_in: IncidentUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    incident = await IncidentService(db).update_incident(
        incident_id, update_in.status, update_in.admin_notes, admin
    )
    logger.info("Admin %s updated incident %s", admin.username, incident_id)
    return {
        "message": "Incident updated successfully",
        "redirect": "/admin/incidents",
        "incident": IncidentResponse.model_validate(incident),
    }

@router.post("/incidents/delete/{incident_id}")
async def delete_incident(
    incident_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await IncidentService(db).delete_incident(incident_id, admin)
    logger.info("Admin %s deleted incident %s", admin.username, incident_id)
    return {"message": "Incident deleted successfully", "redirect": "/admin/incidents"}
