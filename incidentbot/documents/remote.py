"""RemoteDocument — an externally owned document linked from an incident."""

from typing import TYPE_CHECKING, Callable, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..config import BotConfig


@runtime_checkable
class RemoteDocument(Protocol):
    async def create_from_template(self, title: str, config: "BotConfig") -> str:
        """Create a new document from the configured template and return its id.

        Raises DocumentError on failure.
        """
        ...

    async def load_by_id(self, document_id: str) -> None:
        """Fetch an existing document. Raises DocumentError if it can't be found."""
        ...

    def url(self) -> str:
        ...

    def id(self) -> str:
        ...


# Builds a fresh, unloaded document handle
DocumentFactory = Callable[[], RemoteDocument]
