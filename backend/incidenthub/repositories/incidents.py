from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from incidenthub.models.incident import Incident, Severity, Status
from incidenthub.models.user import User


class IncidentRepository:
    """
    Thin data-access layer around the Incident model.

    Does not commit; transaction boundaries belong to the service layer.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    def _newest_first(self):
        return select(Incident).order_by(Incident.created_at.desc(), Incident.id.desc())

    async def get(self, incident_id: int) -> Optional[Incident]:
        return await self.db.get(Incident, incident_id)

    async def list_by_reporter(self, user: User) -> List[Incident]:
        result = await self.db.execute(
            self._newest_first().where(Incident.reported_by_id == user.id)
        )
        return list(result.scalars().all())

    async def list_all(
        self,
        status: Optional[Status] = None,
        severity: Optional[Severity] = None,
    ) -> List[Incident]:
        stmt = self._newest_first()
        if status is not None:
            stmt = stmt.where(Incident.status == status)
        if severity is not None:
            stmt = stmt.where(Incident.severity == severity)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def add(self, incident: Incident) -> Incident:
        self.db.add(incident)
        await self.db.flush()
        return incident

    async def delete(self, incident: Incident) -> None:
        await self.db.delete(incident)

    async def count(self) -> int:
        result = await self.db.execute(select(func.count(Incident.id)))
        return result.scalar_one()

    async def count_by_status(self, status: Status) -> int:
        result = await self.db.execute(
            select(func.count(Incident.id)).where(Incident.status == status)
        )
        return result.scalar_one()

    async def count_by_severity(self, severity: Severity) -> int:
        result = await self.db.execute(
            select(func.count(Incident.id)).where(Incident.severity == severity)
        )
        return result.scalar_one()

    async def count_by_reporter(self, user: User) -> int:
        result = await self.db.execute(
            select(func.count(Incident.id)).where(Incident.reported_by_id == user.id)
        )
        return result.scalar_one()
