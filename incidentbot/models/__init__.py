"""SQLAlchemy models package."""

from .base import Base
from .incident import IncidentRecord
from .topic import Topic
from .acl import AclEntry
from .contact import Contact

__all__ = ["Base", "IncidentRecord", "Topic", "AclEntry", "Contact"]
