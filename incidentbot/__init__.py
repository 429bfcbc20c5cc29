"""incidentbot — chat bot that tracks outages and keeps channel topics in sync."""

__version__ = "1.0.0"
