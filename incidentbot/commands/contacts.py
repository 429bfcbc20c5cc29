"""Contact commands, private message only."""

from ..chat.message import ChatMessage
from ..context import BotContext
from ..engine.contacts import ContactCard
from ..triggers.command import Command


async def add_contact(ctx: BotContext, message: ChatMessage, args: list) -> bool:
    name, phone, email = args
    await ctx.contacts.save(ContactCard(name, phone, email))
    await ctx.client.reply(message, "Contact added successfully.")
    return True


async def get_contact(ctx: BotContext, message: ChatMessage, args: list) -> bool:
    card = await ctx.contacts.get(args[0])
    if not card.phone:
        await ctx.client.reply(message, "No phone data for the contact")
    else:
        await ctx.client.reply(message, card.pretty())
    return True


async def remove_contact(ctx: BotContext, message: ChatMessage, args: list) -> bool:
    await ctx.contacts.remove(args[0])
    await ctx.client.reply(message, "Contact successfully removed.")
    return True


def contact_commands() -> list[Command]:
    return [
        Command(
            "contact_add",
            add_contact,
            grammar=r"(?P<name>\w+)\s+(?P<intl_phone>\+\d{5,15})\s+(?P<email>[^@\s]+@[^@\s]+)",
            help_msg="Add a contact (privmsg only)",
            private=True,
        ),
        Command(
            "contact_get",
            get_contact,
            grammar=r"(?P<name>\w+)",
            help_msg="Gets information about a contact (privmsg only)",
            private=True,
        ),
        Command(
            "contact_remove",
            remove_contact,
            grammar=r"(?P<name>\w+)",
            help_msg="Removes a contact (privmsg only)",
            private=True,
        ),
    ]
