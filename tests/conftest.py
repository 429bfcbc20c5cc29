"""Shared test fixtures."""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from incidentbot.chat.message import ChatMessage
from incidentbot.config import BotConfig
from incidentbot.main import build_context, build_registry
from incidentbot.models.base import Base

BOT_NICK = "BlabberBot"


class FakeChatClient:
    """Records everything the bot sends instead of talking to a server."""

    def __init__(self, nickname: str = BOT_NICK, failing_channels=()):
        self.nickname = nickname
        self.replies: list[tuple[str, str]] = []
        self.sent: list[tuple[str, str]] = []
        self.topics: list[tuple[str, str]] = []
        self.failing_channels = set(failing_channels)

    async def reply(self, message, text):
        destination = message.target if message.in_channel else message.sender
        self.replies.append((destination, text))

    async def send(self, target, text):
        self.sent.append((target, text))

    async def set_topic(self, channel, text):
        if channel in self.failing_channels:
            raise PermissionError(f"not a channel operator on {channel}")
        self.topics.append((channel, text))

    def reply_texts(self) -> list[str]:
        return [text for _, text in self.replies]


def _privmsg(content, sender="alice", target=BOT_NICK):
    return ChatMessage(command="PRIVMSG", sender=sender, target=target, content=content, params=[target])


def _public(content, sender="alice", channel="#ops", address=True):
    text = f"{BOT_NICK}: {content}" if address else content
    return ChatMessage(command="PRIVMSG", sender=sender, target=channel, content=text, params=[channel])


@pytest.fixture
def config():
    return BotConfig(
        _env_file=None,
        nickname=BOT_NICK,
        channels=["#ops", "#status"],
        public_channels=["#status"],
        admins=["root"],
        sing_delay=0.0,
    )


@pytest_asyncio.fixture
async def session_factory():
    """In-memory database shared by every session of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def client():
    return FakeChatClient()


@pytest.fixture
def context(config, client, session_factory):
    return build_context(config, client, session_factory)


@pytest.fixture
def registry(context):
    return build_registry(context)


@pytest.fixture
def privmsg():
    """Builder for private messages to the bot."""
    return _privmsg


@pytest.fixture
def public():
    """Builder for channel messages, addressed to the bot by default."""
    return _public
