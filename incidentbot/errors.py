"""Error taxonomy shared by commands, stores and the topic synchronizer."""

from typing import Optional


class BotError(Exception):
    """Base class for every error the bot reports to a chat user."""


class ValidationError(BotError):
    """User input that cannot be accepted. Replied verbatim, never persisted."""


class InvalidSeverityError(ValidationError):
    def __init__(self, severity) -> None:
        self.severity = severity
        super().__init__(f"Severity must be between 1 and 5, got {severity}")


class UnknownComponentError(ValidationError):
    def __init__(self, component: str) -> None:
        self.component = component
        super().__init__(f"Unknown component '{component}'")


class InvalidTransitionError(ValidationError):
    """An incident state change that the lifecycle does not allow."""


class AuthorizationDenied(BotError):
    """The sender may not run the command here."""


class NotFoundError(BotError):
    pass


class AlreadyExistsError(BotError):
    pass


class DuplicateIdentifierError(BotError):
    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"Cannot register handler with id '{identifier}' twice")


class PersistenceError(BotError):
    """The store could not be read or written."""

    def __init__(self, operation: str, entity: Optional[str] = None, cause: Optional[Exception] = None) -> None:
        self.operation = operation
        self.entity = entity
        self.cause = cause
        detail = f"{operation} failed"
        if entity is not None:
            detail += f" for {entity}"
        if cause is not None:
            detail += f": {cause}"
        super().__init__(detail)


class DocumentError(BotError):
    """A remote document could not be created or fetched."""
