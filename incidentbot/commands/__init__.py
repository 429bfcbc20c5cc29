"""Chat command surface, grouped by area.

Each factory returns fresh handler instances; a registry binds them to
its own context.
"""

from .admin import admin_commands
from .contacts import contact_commands
from .incidents import incident_commands
from .topics import topic_handlers

__all__ = ["admin_commands", "contact_commands", "incident_commands", "topic_handlers"]
