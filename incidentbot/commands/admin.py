"""Bot housekeeping: ACL management, NickServ password, and a song."""

import asyncio

from ..chat.message import ChatMessage
from ..context import BotContext
from ..errors import AlreadyExistsError
from ..triggers.command import Command
from ..utils.logging import get_logger

logger = get_logger("commands.admin")

LYRICS = (
    "Never gonna give you up",
    "Never gonna let you down",
    "Never gonna run around and desert you",
    "Never gonna make you cry",
    "Never gonna say goodbye",
    "Never gonna tell a lie and hurt you",
)


async def sing(ctx: BotContext, message: ChatMessage, args: list) -> bool:
    for line in LYRICS:
        await ctx.client.reply(message, line)
        await asyncio.sleep(ctx.config.sing_delay)
    return True


async def acl_add(ctx: BotContext, message: ChatMessage, args: list) -> bool:
    command, identifier = args
    try:
        await ctx.acl.add(command, identifier)
    except AlreadyExistsError as e:
        await ctx.client.reply(message, str(e))
        return True
    logger.info("acl_granted", command=command, identifier=identifier, by=message.sender)
    await ctx.client.reply(message, "The ACL was saved.")
    return True


async def acl_remove(ctx: BotContext, message: ChatMessage, args: list) -> bool:
    command, identifier = args
    # NotFoundError ("This ACL is not present.") is replied by the command
    await ctx.acl.remove(command, identifier)
    logger.info("acl_revoked", command=command, identifier=identifier, by=message.sender)
    await ctx.client.reply(message, "The ACL was successfully removed.")
    return True


async def acl_get(ctx: BotContext, message: ChatMessage, args: list) -> bool:
    command = args[0]
    listing = await ctx.acl.list(command)
    await ctx.client.reply(message, f"ACL for {command}")
    await ctx.client.reply(message, "Admins:")
    for nick in sorted(ctx.config.admins):
        await ctx.client.reply(message, f"\t{nick}")
    await ctx.client.reply(message, "Users:")
    for nick in listing.nicks:
        await ctx.client.reply(message, f"\t{nick}")
    await ctx.client.reply(message, "Channels:")
    for channel in listing.channels:
        await ctx.client.reply(message, f"\t{channel}")
    return True


async def change_pass(ctx: BotContext, message: ChatMessage, args: list) -> bool:
    await ctx.client.send("NickServ", f"SET PASSWORD {args[0]}")
    logger.info("nickserv_password_changed", by=message.sender)
    await ctx.client.reply(message, "Password changed. Do not forget to change the configuration too.")
    return False


def admin_commands() -> list[Command]:
    return [
        Command(
            "sing",
            sing,
            help_msg="Sings for you a nice tune",
            public=True,
        ),
        Command(
            "acl_add",
            acl_add,
            grammar=r"(?P<command>\S+)\s+(?P<nick_or_chan>\S+)",
            help_msg="Adds the ability for a command to be used by a single user or in a channel",
            private=True,
        ),
        Command(
            "acl_remove",
            acl_remove,
            grammar=r"(?P<command>\S+)\s+(?P<nick_or_chan>\S+)",
            help_msg="Removes a user or channel from the ACL",
            private=True,
        ),
        Command(
            "acl_get",
            acl_get,
            grammar=r"(?P<command>\S+)",
            help_msg="Gets the defined ACLs for a command",
            private=True,
        ),
        Command(
            "change_pass",
            change_pass,
            grammar=r"(?P<password>\S+)",
            help_msg="Changes the nickserv password",
            private=True,
        ),
    ]
