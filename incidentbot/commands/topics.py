"""Passive topic handlers. None of them consumes the line."""

from ..chat.message import TOPIC, TOPIC_EVENTS, ChatMessage
from ..context import BotContext
from ..triggers.registry import EventHandler
from ..utils.logging import get_logger

logger = get_logger("commands.topics")


def is_topic_event(ctx: BotContext, message: ChatMessage) -> bool:
    return message.command in TOPIC_EVENTS and message.channel is not None


def is_foreign_topic_change(ctx: BotContext, message: ChatMessage) -> bool:
    return message.command == TOPIC and message.in_channel and message.sender != ctx.nickname


async def store_topic(ctx: BotContext, message: ChatMessage) -> bool:
    channel = message.channel
    ctx.tasks.spawn(ctx.topics.save(channel, message.topic_text), name=f"store_topic:{channel}")
    return False


async def log_topic(ctx: BotContext, message: ChatMessage) -> bool:
    logger.info("topic_observed", channel=message.channel, topic=message.topic_text, by=message.sender)
    return False


async def restore_status(ctx: BotContext, message: ChatMessage) -> bool:
    """Put the status segment back when an operator rewrites the topic."""
    channel = message.target
    if channel not in ctx.config.channels:
        return False
    try:
        await ctx.topic_sync.sync(channel, current_topic=message.content)
    except Exception as e:
        logger.error("topic_status_restore_failed", channel=channel, error=str(e))
    return False


def topic_handlers() -> dict[str, EventHandler]:
    return {
        "store_topic": EventHandler(is_topic_event, store_topic),
        "log_topic": EventHandler(is_topic_event, log_topic),
        "topic_status": EventHandler(is_foreign_topic_change, restore_status),
    }
