"""Incident commands: start, update, close, list and inspect outages."""

import re

from ..chat.message import ChatMessage
from ..context import BotContext
from ..engine.incident import Incident
from ..errors import DocumentError, ValidationError
from ..triggers.command import Command
from ..triggers.pattern import integer
from ..utils.logging import get_logger

logger = get_logger("commands.incidents")

_COMPONENT_SPLIT = re.compile(r",\s*")


async def propagate_status(ctx: BotContext, message: ChatMessage) -> None:
    """Refresh the topic of every joined channel.

    Failures are reported privately to whoever issued the command.
    """
    failures = await ctx.topic_sync.sync_all(ctx.config.channels)
    for channel, error in failures.items():
        await ctx.client.send(
            message.sender,
            f"Could not update the topic of {channel}: {error}. Check my permissions please.",
        )


async def start_incident(ctx: BotContext, message: ChatMessage, args: list) -> bool:
    severity, components = args
    try:
        incident = Incident(severity, _COMPONENT_SPLIT.split(components.strip()))
    except ValidationError as e:
        await ctx.client.reply(message, f"Invalid parameters: {e}")
        return True

    await ctx.incidents.save(incident)
    if ctx.incidents.documents_enabled:
        try:
            url = await ctx.incidents.create_document(incident, ctx.config)
            await ctx.client.send(message.sender, f"Incident document: {url}")
        except DocumentError as e:
            logger.error("incident_document_failed", id=incident.id, error=str(e))
            await ctx.client.reply(message, "Could not create the incident document, see logs for details.")

    await propagate_status(ctx, message)
    await ctx.client.reply(message, f"Incident saved: {incident.summarize()}")
    return True


async def update_incident(ctx: BotContext, message: ChatMessage, args: list) -> bool:
    incident_id, what, value = args
    incident = await ctx.incidents.get(incident_id)
    if what == "severity":
        try:
            severity = integer(value)
        except ValueError as e:
            raise ValidationError(f"Invalid <value>: {e}") from None
        reopened = incident.update_severity(severity)
    else:
        reopened = incident.update_description(value.rstrip())

    await ctx.incidents.save(incident)
    if reopened:
        await ctx.client.reply(message, f"Incident #{incident.id} was closed, reopening it.")
    await propagate_status(ctx, message)
    await ctx.client.reply(message, f"Incident updated: {incident.summarize()}")
    return True


async def close_incident(ctx: BotContext, message: ChatMessage, args: list) -> bool:
    incident = await ctx.incidents.get(args[0])
    incident.close()
    await ctx.incidents.save(incident)
    await propagate_status(ctx, message)
    await ctx.client.reply(message, f"Incident closed: {incident.id}")
    return True


async def list_incidents(ctx: BotContext, message: ChatMessage, args: list) -> bool:
    incidents = await ctx.incidents.list_open()
    if not incidents:
        await ctx.client.reply(message, "No open incidents. Status: Up")
        return True
    extended = message.in_channel and ctx.config.is_public_channel(message.target)
    if extended:
        await ctx.incidents.attach_documents(incidents)
    for incident in incidents:
        await ctx.client.reply(message, incident.summarize(extended=extended))
    return True


async def incident_details(ctx: BotContext, message: ChatMessage, args: list) -> bool:
    incident = await ctx.incidents.get(args[0])
    await ctx.incidents.attach_documents([incident])
    for line in incident.details():
        await ctx.client.reply(message, line)
    return True


def incident_commands() -> list[Command]:
    return [
        Command(
            "incident_start",
            start_incident,
            grammar=r"(?P<severity>\S+)\s+(?P<components_comma_sep>.+)",
            help_msg="Start an incident",
            public=True,
            converters={"severity": integer},
        ),
        Command(
            "incident_update",
            update_incident,
            grammar=r"(?P<id>\S+)\s+(?P<what>severity|description)\s+(?P<value>.+)",
            help_msg="Update an incident. You can update either severity or the incident description",
            public=True,
            converters={"id": integer},
        ),
        Command(
            "incident_close",
            close_incident,
            grammar=r"(?P<id>\S+)",
            help_msg="Closes an incident",
            public=True,
            converters={"id": integer},
        ),
        Command(
            "incidents",
            list_incidents,
            help_msg="Lists the open incidents",
            public=True,
            private=True,
        ),
        Command(
            "incident_details",
            incident_details,
            grammar=r"(?P<id>\S+)",
            help_msg="Shows everything known about an incident",
            public=True,
            private=True,
            converters={"id": integer},
        ),
    ]
