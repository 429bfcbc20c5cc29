"""Process root — wires stores, handlers and the dispatch loop together.

A transport adapter owns the connection. It builds an ``IncidentBot``
with its ChatClient, awaits ``start()``, then feeds every parsed line to
``handle_line``.
"""

from typing import Optional

from .auth.acl import AuthorizationStore
from .chat.client import ChatClient
from .chat.dispatcher import TriggerDispatcher
from .chat.message import ChatMessage
from .commands import admin_commands, contact_commands, incident_commands, topic_handlers
from .config import BotConfig, get_config
from .context import BotContext
from .database import close_database, open_database
from .documents.google_doc import google_doc_factory
from .documents.remote import DocumentFactory
from .engine.contacts import ContactBook
from .engine.incident_manager import IncidentManager
from .engine.topic_sync import TopicStore, TopicSynchronizer
from .triggers.registry import HandlerRegistry
from .utils.logging import get_logger, setup_logging

logger = get_logger("incidentbot.main")


def build_context(
    config: BotConfig,
    client: ChatClient,
    session_factory,
    document_factory: Optional[DocumentFactory] = None,
) -> BotContext:
    incidents = IncidentManager(session_factory, document_factory=document_factory)
    topics = TopicStore(session_factory)
    return BotContext(
        config=config,
        client=client,
        acl=AuthorizationStore(session_factory, admins=config.admins),
        incidents=incidents,
        topics=topics,
        topic_sync=TopicSynchronizer(client, incidents, topics, config),
        contacts=ContactBook(session_factory),
    )


def build_registry(context: BotContext) -> HandlerRegistry:
    """Register every handler the bot knows about. Duplicate ids raise."""
    registry = HandlerRegistry(context)
    registry.register_all(admin_commands())
    for handler_id, handler in topic_handlers().items():
        registry.register(handler_id, handler)
    registry.register_all(incident_commands())
    registry.register_all(contact_commands())
    return registry


class IncidentBot:
    def __init__(
        self,
        client: ChatClient,
        config: Optional[BotConfig] = None,
        session_factory=None,
        document_factory: Optional[DocumentFactory] = None,
    ) -> None:
        self.config = config or get_config()
        self._session_factory = session_factory
        if document_factory is None:
            document_factory = google_doc_factory(self.config)
        self._document_factory = document_factory
        self.client = client
        self.dispatcher = TriggerDispatcher()
        self.context: Optional[BotContext] = None
        self.registry: Optional[HandlerRegistry] = None

    async def start(self) -> None:
        if self._session_factory is None:
            self._session_factory = await open_database(self.config)
        self.context = build_context(self.config, self.client, self._session_factory, self._document_factory)
        self.registry = build_registry(self.context)
        self.registry.install_into(self.dispatcher)
        logger.info(
            "incidentbot_started",
            nickname=self.config.nickname,
            channels=self.config.channels,
            handlers=len(self.registry),
            documents=self._document_factory is not None,
        )

    async def handle_line(self, message: ChatMessage) -> bool:
        return await self.dispatcher.dispatch(message)

    async def stop(self) -> None:
        if self.context is not None:
            await self.context.tasks.drain()
        await close_database()
        logger.info("incidentbot_stopped", **self.dispatcher.get_stats())


def create_bot(client: ChatClient, config: Optional[BotConfig] = None) -> IncidentBot:
    """Configure logging and build a bot from the environment."""
    config = config or get_config()
    setup_logging(config)
    return IncidentBot(client, config=config)
