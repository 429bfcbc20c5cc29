"""Topic synchronization — keeps the status segment of channel topics current.

A topic looks like ``<operator prose> | Status: <status> | <more prose>``.
Only the segment after ``| Status: `` and before the next ``|`` belongs to
the bot; everything else is rewritten byte for byte.
"""

import re
from typing import Iterable, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..chat.client import ChatClient
from ..config import BotConfig
from ..errors import NotFoundError, PersistenceError
from ..models.topic import Topic
from ..utils.logging import get_logger
from .incident_manager import IncidentManager

logger = get_logger("engine.topic_sync")

STATUS_SEPARATOR = "| Status: "
STATUS_UP = "Up"
SUMMARY_SEPARATOR = " / "

_STATUS_RE = re.compile(r"^(?P<prefix>.*)\| Status: (?P<segment>[^|]*)(?P<suffix>.*)$", re.DOTALL)


def render_topic(topic: str, status: str) -> Optional[str]:
    """Return the topic with its status segment set to `status`, or None if it already is."""
    match = _STATUS_RE.match(topic)
    if match is None:
        return f"{topic} {STATUS_SEPARATOR}{status}"
    if match.group("segment").rstrip() == status:
        return None
    suffix = match.group("suffix")
    padding = " " if suffix else ""
    return f"{match.group('prefix')}{STATUS_SEPARATOR}{status}{padding}{suffix}"


class TopicStore:
    """Last topic observed (or written) for each channel."""

    def __init__(self, db_session_factory) -> None:
        self._session_factory = db_session_factory

    async def get(self, channel: str) -> str:
        try:
            async with self._session_factory() as session:
                row = (await session.execute(
                    select(Topic).where(Topic.channel == channel)
                )).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise PersistenceError("topic_get", channel, e) from e
        if row is None:
            raise NotFoundError(f"No known topic for {channel}")
        return row.topic

    async def save(self, channel: str, topic: str) -> None:
        """Upsert, last writer wins.

        A row that vanished between read and write is inserted; a row
        inserted concurrently by another writer is overwritten.
        """
        try:
            async with self._session_factory() as session:
                row = (await session.execute(
                    select(Topic).where(Topic.channel == channel)
                )).scalar_one_or_none()
                if row is None:
                    session.add(Topic(channel=channel, topic=topic))
                else:
                    row.topic = topic
                try:
                    await session.commit()
                except IntegrityError:
                    await session.rollback()
                    logger.debug("topic_insert_conflict", channel=channel)
                    await session.execute(
                        update(Topic).where(Topic.channel == channel).values(topic=topic)
                    )
                    await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError("topic_save", channel, e) from e
        logger.debug("topic_saved", channel=channel)

    async def remove(self, channel: str) -> None:
        try:
            async with self._session_factory() as session:
                await session.execute(delete(Topic).where(Topic.channel == channel))
                await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError("topic_remove", channel, e) from e


class TopicSynchronizer:
    """Writes the open-incident status into channel topics."""

    def __init__(
        self,
        client: ChatClient,
        incidents: IncidentManager,
        topics: TopicStore,
        config: BotConfig,
    ) -> None:
        self._client = client
        self._incidents = incidents
        self._topics = topics
        self._config = config

    async def status_for(self, channel: str) -> str:
        incidents = await self._incidents.list_open()
        if not incidents:
            return STATUS_UP
        extended = self._config.is_public_channel(channel)
        if extended:
            await self._incidents.attach_documents(incidents)
        return SUMMARY_SEPARATOR.join(i.summarize(extended=extended) for i in incidents)

    async def sync(self, channel: str, current_topic: Optional[str] = None) -> bool:
        """Bring one channel's topic in line with the open incidents.

        Uses `current_topic` when given, the persisted topic otherwise.
        Returns True if a new topic was written.
        """
        status = await self.status_for(channel)
        topic = current_topic if current_topic is not None else await self._topics.get(channel)
        new_topic = render_topic(topic, status)
        if new_topic is None:
            logger.debug("topic_already_current", channel=channel)
            return False
        await self._client.set_topic(channel, new_topic)
        await self._topics.save(channel, new_topic)
        logger.info("topic_updated", channel=channel, status=status)
        return True

    async def sync_all(self, channels: Iterable[str]) -> dict[str, Exception]:
        """Sync every channel. One channel failing never stops the others."""
        failures: dict[str, Exception] = {}
        for channel in channels:
            try:
                await self.sync(channel)
            except Exception as e:
                logger.error("topic_update_failed", channel=channel, error=str(e))
                failures[channel] = e
        return failures
