import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from incidenthub.core.database import get_db
from incidenthub.models.incident import Severity
from incidenthub.models.user import User
from incidenthub.routers.auth import get_current_user
from incidenthub.schemas.incident import IncidentCreate, IncidentResponse, enum_options
from incidenthub.services.incident_service import IncidentService
from incidenthub.services.policy import is_admin

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["incidents"],
    responses={404: {"description": "Not found"}},
)

@router.get("/dashboard")
async def dashboard(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    logger.info("User %s accessing dashboard", current_user.username)
    stats = await IncidentService(db).get_statistics(current_user)
    return {
        "stats": stats,
        "username": current_user.username,
        "is_admin": is_admin(current_user),
    }

@router.get("/incidents/my")
async def my_incidents(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    logger.info("User %s viewing their incidents", current_user.username)
    incidents = await IncidentService(db).get_incidents_by_user(current_user)
    return {"incidents": [IncidentResponse.model_validate(i) for i in incidents]}

@router.get("/incidents/create")
async def show_create_incident_form(current_user: User = Depends(get_current_user)):
    return {
        "form": {"title": "", "description": "", "severity": None},
        "severities": enum_options(Severity),
    }

@router.post("/incidents/create", status_code=status.HTTP_201_CREATED)
async def create_incident(
    incident_in: IncidentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    incident = await IncidentService(db).create_incident(incident_in, current_user)
    logger.info("Incident created: ID=%s, User=%s", incident.id, current_user.username)
    return {
        "message": f"Incident created successfully with ID: {incident.id}",
        "redirect": "/incidents/my",
        "incident": IncidentResponse.model_validate(incident),
    }

@router.get("/incidents/{incident_id}")
async def view_incident(
    incident_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    incident = await IncidentService(db).get_incident_by_id(incident_id, current_user)
    return {
        "incident": IncidentResponse.model_validate(incident),
        "is_owner": incident.reported_by_id == current_user.id,
        "is_admin": is_admin(current_user),
    }
