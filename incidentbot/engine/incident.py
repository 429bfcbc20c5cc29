"""Incident — one tracked outage and its lifecycle."""

from datetime import datetime, timezone
from enum import IntEnum
from typing import TYPE_CHECKING, Iterable, Optional

from ..errors import InvalidSeverityError, InvalidTransitionError, UnknownComponentError

if TYPE_CHECKING:
    from ..documents.remote import RemoteDocument

# Things that can break from the public point of view
PUBLIC_COMPONENTS = (
    "Website",
    "Mobile apps",
    "Action API",
    "REST api",
    "Multimedia",
    "Thumbnails",
    "Other",
)

MIN_SEVERITY = 1
MAX_SEVERITY = 5
# Severities up to this one render as "degraded", above it as "down"
DEGRADED_MAX_SEVERITY = 3


class IncidentStatus(IntEnum):
    OPEN = 0
    CLOSED = 1


def validate_severity(severity: int) -> int:
    if not MIN_SEVERITY <= severity <= MAX_SEVERITY:
        raise InvalidSeverityError(severity)
    return severity


def normalize_components(components: Iterable[str]) -> tuple[str, ...]:
    """Map each input to its whitelist spelling, case-insensitively."""
    known = {c.lower(): c for c in PUBLIC_COMPONENTS}
    normalized = []
    for component in components:
        found = known.get(component.strip().lower())
        if found is None:
            raise UnknownComponentError(component)
        if found not in normalized:
            normalized.append(found)
    return tuple(normalized)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Incident:
    """An open or closed outage.

    The constructor validates severity and components, so an invalid
    incident never exists in memory and never reaches the database.
    ``id`` stays 0 until the first save.
    """

    def __init__(
        self,
        severity: int,
        components: Iterable[str],
        description: str = "",
        status: IncidentStatus = IncidentStatus.OPEN,
        id: int = 0,
        started_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
        document_id: Optional[str] = None,
    ) -> None:
        self._severity = validate_severity(severity)
        self._components = normalize_components(components)
        self.description = description
        self.status = IncidentStatus(status)
        self.id = id
        self.started_at = started_at or _now()
        self.updated_at = updated_at or self.started_at
        self.document_id = document_id
        self.document: Optional["RemoteDocument"] = None

    @property
    def severity(self) -> int:
        return self._severity

    @property
    def components(self) -> tuple[str, ...]:
        return self._components

    @property
    def is_open(self) -> bool:
        return self.status == IncidentStatus.OPEN

    # -- lifecycle ------------------------------------------------------

    def close(self) -> None:
        if not self.is_open:
            raise InvalidTransitionError(f"Incident #{self.id} is already closed.")
        self.status = IncidentStatus.CLOSED

    def _reopen_for_update(self) -> bool:
        if self.is_open:
            return False
        self.status = IncidentStatus.OPEN
        return True

    def update_severity(self, severity: int) -> bool:
        """Change severity. Returns True if the incident had to be reopened."""
        self._severity = validate_severity(severity)
        return self._reopen_for_update()

    def update_description(self, text: str, now: Optional[datetime] = None) -> bool:
        """Append to the description. Returns True if the incident had to be reopened."""
        if self.description:
            stamp = (now or _now()).strftime("%Y-%m-%d %H:%M:%S UTC")
            self.description = f"{self.description}\n\n--- Update at {stamp} ---\n{text}"
        else:
            self.description = text
        return self._reopen_for_update()

    # -- documents ------------------------------------------------------

    def attach_document(self, document: "RemoteDocument") -> None:
        self.document = document
        self.document_id = document.id()

    def document_url(self) -> Optional[str]:
        if self.document is None:
            return None
        return self.document.url()

    # -- rendering ------------------------------------------------------

    def summarize(self, extended: bool = False) -> str:
        if not self.is_open:
            return "Up"
        state = "degraded" if self._severity <= DEGRADED_MAX_SEVERITY else "down"
        reference = f"#{self.id}"
        url = self.document_url() if extended else None
        if url:
            reference += f" - docs at {url}"
        return f"{', '.join(self._components)} {state} ({reference})"

    def details(self) -> list[str]:
        state = "open" if self.is_open else "closed"
        lines = [
            f"Incident #{self.id} ({state}), severity {self._severity}",
            f"Components: {', '.join(self._components)}",
            f"Started: {self.started_at:%Y-%m-%d %H:%M} UTC, last update: {self.updated_at:%Y-%m-%d %H:%M} UTC",
        ]
        url = self.document_url()
        if url:
            lines.append(f"Document: {url}")
        if self.description:
            lines.append("Description:")
            lines.extend(self.description.splitlines())
        return lines

    def __repr__(self) -> str:
        return f"Incident(id={self.id}, severity={self._severity}, status={self.status.name})"
