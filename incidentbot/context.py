"""Collaborators shared by every command handler."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .chat.client import ChatClient
from .config import BotConfig
from .utils.tasks import BackgroundTasks

if TYPE_CHECKING:
    from .auth.acl import AuthorizationStore
    from .engine.contacts import ContactBook
    from .engine.incident_manager import IncidentManager
    from .engine.topic_sync import TopicStore, TopicSynchronizer


@dataclass
class BotContext:
    config: BotConfig
    client: ChatClient
    acl: "AuthorizationStore"
    incidents: "IncidentManager"
    topics: "TopicStore"
    topic_sync: "TopicSynchronizer"
    contacts: "ContactBook"
    tasks: BackgroundTasks = field(default_factory=BackgroundTasks)

    @property
    def nickname(self) -> str:
        return self.client.nickname
