"""Incident Manager — persistence of incidents and their linked documents."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from ..config import BotConfig
from ..documents.remote import DocumentFactory
from ..errors import DocumentError, NotFoundError, PersistenceError
from ..models.incident import IncidentRecord
from ..utils.logging import get_logger
from .incident import Incident, IncidentStatus

logger = get_logger("engine.incident_manager")

COMPONENT_SEPARATOR = ", "


class IncidentManager:
    """Loads and stores incidents. Incidents are never deleted, only closed."""

    def __init__(self, db_session_factory=None, document_factory: Optional[DocumentFactory] = None):
        self._db_session_factory = db_session_factory
        self._document_factory = document_factory

    @property
    def documents_enabled(self) -> bool:
        return self._document_factory is not None

    async def save(self, incident: Incident) -> Incident:
        """Insert when the incident has no id (or its row vanished), update otherwise."""
        incident.updated_at = datetime.now(timezone.utc)
        try:
            async with self._db_session_factory() as session:
                record = None
                if incident.id:
                    record = (await session.execute(
                        select(IncidentRecord).where(IncidentRecord.id == incident.id)
                    )).scalar_one_or_none()
                if record is None:
                    record = IncidentRecord(started_at=self._naive(incident.started_at))
                    if incident.id:
                        record.id = incident.id
                    session.add(record)
                self._fill_record(record, incident)
                await session.commit()
                await session.refresh(record)
        except SQLAlchemyError as e:
            raise PersistenceError("incident_save", f"incident #{incident.id}", e) from e

        created = not incident.id
        incident.id = record.id
        logger.info(
            "incident_created" if created else "incident_saved",
            id=incident.id,
            severity=incident.severity,
            status=incident.status.name,
        )
        return incident

    async def get(self, incident_id: int) -> Incident:
        try:
            async with self._db_session_factory() as session:
                record = (await session.execute(
                    select(IncidentRecord).where(IncidentRecord.id == incident_id)
                )).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise PersistenceError("incident_get", f"incident #{incident_id}", e) from e
        if record is None:
            raise NotFoundError(f"Incident #{incident_id} not found.")
        return self._to_incident(record)

    async def list_open(self) -> list[Incident]:
        try:
            async with self._db_session_factory() as session:
                records = (await session.execute(
                    select(IncidentRecord)
                    .where(IncidentRecord.status == int(IncidentStatus.OPEN))
                    .order_by(IncidentRecord.id)
                )).scalars().all()
        except SQLAlchemyError as e:
            raise PersistenceError("incident_list_open", None, e) from e
        return [self._to_incident(r) for r in records]

    async def attach_documents(self, incidents: list[Incident]) -> None:
        """Load linked documents so summaries can show their URL. Failures are skipped."""
        if self._document_factory is None:
            return
        for incident in incidents:
            if not incident.document_id or incident.document is not None:
                continue
            document = self._document_factory()
            try:
                await document.load_by_id(incident.document_id)
            except DocumentError as e:
                logger.warning("incident_document_unavailable", id=incident.id, document_id=incident.document_id, error=str(e))
                continue
            incident.document = document

    async def create_document(self, incident: Incident, config: BotConfig) -> Optional[str]:
        """Create the incident's shared document from the template and link it.

        Returns the document URL, or None when documents are not configured.
        """
        if self._document_factory is None:
            return None
        document = self._document_factory()
        title = f"{incident.started_at:%Y-%m-%d} {', '.join(incident.components)} outage (#{incident.id})"
        await document.create_from_template(title, config)
        incident.attach_document(document)
        await self.save(incident)
        return document.url()

    @staticmethod
    def _naive(value: datetime) -> datetime:
        # Stored as naive UTC
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def _fill_record(self, record: IncidentRecord, incident: Incident) -> None:
        record.severity = incident.severity
        record.components = COMPONENT_SEPARATOR.join(incident.components)
        record.updated_at = self._naive(incident.updated_at)
        record.status = int(incident.status)
        record.description = incident.description
        record.document_id = incident.document_id

    @staticmethod
    def _to_incident(record: IncidentRecord) -> Incident:
        return Incident(
            severity=record.severity,
            components=record.components.split(COMPONENT_SEPARATOR) if record.components else [],
            description=record.description or "",
            status=IncidentStatus(record.status),
            id=record.id,
            started_at=record.started_at.replace(tzinfo=timezone.utc),
            updated_at=record.updated_at.replace(tzinfo=timezone.utc),
            document_id=record.document_id,
        )
