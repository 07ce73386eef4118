import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from incidenthub.core.exceptions import ForbiddenError, NotFoundError
from incidenthub.models.incident import Incident, Severity, Status
from incidenthub.models.user import Role, User
from incidenthub.repositories.incidents import IncidentRepository
from incidenthub.schemas.incident import IncidentCreate, IncidentStatistics
from incidenthub.services.policy import REPORTER_ROLES, can_read, is_admin, requires_role

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IncidentService:
    """
    Authorization-checked CRUD over incidents.

    Every public method takes the acting user explicitly and runs as one
    transaction: writes are committed before returning, and a failure
    leaves the session uncommitted.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = IncidentRepository(db)

    async def _get_or_raise(self, incident_id: int) -> Incident:
        incident = await self.repo.get(incident_id)
        if incident is None:
            logger.warning("Incident not found with ID: %s", incident_id)
            raise NotFoundError(f"Incident not found with ID: {incident_id}")
        return incident

    @requires_role(*REPORTER_ROLES)
    async def create_incident(self, data: IncidentCreate, current_user: User) -> Incident:
        logger.info("Creating new incident by user: %s", current_user.username)
        now = utcnow()
        incident = Incident(
            title=data.title,
            description=data.description,
            severity=data.severity,
            status=Status.OPEN,
            reported_by=current_user,
            reported_by_id=current_user.id,
            created_at=now,
            updated_at=now,
        )
        await self.repo.add(incident)
        await self.db.commit()
        logger.info(
            "Incident created successfully with ID: %s by user: %s",
            incident.id, current_user.username,
        )
        return incident

    @requires_role(*REPORTER_ROLES)
    async def get_incidents_by_user(self, current_user: User) -> List[Incident]:
        logger.info("Fetching incidents for user: %s", current_user.username)
        return await self.repo.list_by_reporter(current_user)

    @requires_role(Role.ADMIN)
    async def get_all_incidents(
        self,
        current_user: User,
        status: Optional[Status] = None,
        severity: Optional[Severity] = None,
    ) -> List[Incident]:
        logger.info("Fetching all incidents (admin access) status=%s severity=%s", status, severity)
        return await self.repo.list_all(status=status, severity=severity)

    async def get_incident_by_id(self, incident_id: int, current_user: User) -> Incident:
        incident = await self._get_or_raise(incident_id)
        if not can_read(current_user, incident):
            logger.warning(
                "Unauthorized access attempt by user %s to incident %s",
                current_user.username, incident_id,
            )
            raise ForbiddenError("You do not have permission to view this incident")
        return incident

    @requires_role(Role.ADMIN)
    async def update_incident(
        self,
        incident_id: int,
        status: Status,
        admin_notes: Optional[str],
        current_user: User,
    ) -> Incident:
        logger.info("Admin %s updating incident ID: %s to status: %s",
                    current_user.username, incident_id, status)
        incident = await self._get_or_raise(incident_id)

        # No transition graph is enforced: any status may follow any other.
        incident.status = status
        if admin_notes is not None and admin_notes.strip():
            incident.admin_notes = admin_notes
        incident.updated_at = utcnow()

        await self.db.commit()
        logger.info("Incident ID: %s updated successfully to status: %s", incident_id, status)
        return incident

    @requires_role(Role.ADMIN)
    async def delete_incident(self, incident_id: int, current_user: User) -> None:
        logger.info("Admin %s deleting incident ID: %s", current_user.username, incident_id)
        incident = await self._get_or_raise(incident_id)
        await self.repo.delete(incident)
        await self.db.commit()
        logger.info("Incident ID: %s deleted successfully", incident_id)

    async def get_statistics(self, current_user: User) -> IncidentStatistics:
        if is_admin(current_user):
            return IncidentStatistics(
                total=await self.repo.count(),
                open=await self.repo.count_by_status(Status.OPEN),
                in_progress=await self.repo.count_by_status(Status.IN_PROGRESS),
                resolved=await self.repo.count_by_status(Status.RESOLVED),
                critical=await self.repo.count_by_severity(Severity.CRITICAL),
            )
        # Reporters only see their own total; the other counters stay zero.
        return IncidentStatistics(total=await self.repo.count_by_reporter(current_user))
