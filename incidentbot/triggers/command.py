"""Command — an access-controlled, grammar-validated chat command.

A Command lets its author focus on business logic: addressing rules,
ACL enforcement, argument parsing and error reporting are handled here
uniformly for every command.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional

from ..chat.message import ChatMessage
from ..errors import AuthorizationDenied, NotFoundError, PersistenceError, ValidationError
from ..utils.logging import get_logger
from .pattern import PatternMatcher

if TYPE_CHECKING:
    from ..context import BotContext

logger = get_logger("triggers.command")

CommandAction = Callable[["BotContext", ChatMessage, list], Awaitable[bool]]
Converter = Callable[[str], Any]

NOT_ALLOWED = "You're not allowed to perform this action."
MALFORMED = "The command is not properly formatted."


class Command:
    """One `!<id>` chat command.

    Args:
        id: command identifier, also the ACL key.
        action: coroutine ``(ctx, message, args) -> bool``; True stops
            further handlers from seeing the line.
        grammar: regex fragment for the arguments. Use named groups to get
            a readable usage string.
        help_msg: one line for !help. Empty hides the command from !help.
        public: may be called as ``<nick>: !<id>`` in a channel.
        private: may be called as ``!<id>`` in a private message.
        converters: per-argument converters keyed by group name. A
            ValueError names the offending argument in the reply.
    """

    def __init__(
        self,
        id: str,
        action: CommandAction,
        grammar: str = "",
        help_msg: str = "",
        public: bool = False,
        private: bool = False,
        converters: Optional[dict[str, Converter]] = None,
    ) -> None:
        self.id = id
        self.action = action
        self.matcher = PatternMatcher(id, grammar)
        self.help_msg = help_msg
        self.public = public
        self.private = private
        self.converters = converters or {}
        self.context: Optional[BotContext] = None

    def bind(self, context: BotContext) -> None:
        self.context = context

    def _ctx(self) -> BotContext:
        if self.context is None:
            raise RuntimeError(f"command '{self.id}' used before registration")
        return self.context

    def _starts_command(self, text: str) -> bool:
        prefix = f"!{self.id}"
        if not text.startswith(prefix):
            return False
        rest = text[len(prefix):]
        return rest == "" or rest[0].isspace()

    def command_text(self, message: ChatMessage) -> str:
        """Message content with the `<nick>: ` address stripped."""
        address = f"{self._ctx().nickname}: "
        if message.in_channel and message.content.startswith(address):
            return message.content[len(address):]
        return message.content

    def is_addressed_to(self, message: ChatMessage) -> bool:
        if not message.is_privmsg:
            return False
        nickname = self._ctx().nickname
        if self.private and message.target == nickname:
            return self._starts_command(message.content)
        if self.public and message.in_channel:
            address = f"{nickname}: "
            return message.content.startswith(address) and self._starts_command(message.content[len(address):])
        return False

    async def authorize(self, message: ChatMessage) -> bool:
        ctx = self._ctx()
        if ctx.config.is_admin(message.sender):
            return True
        channel = message.target if message.in_channel else None
        try:
            return await ctx.acl.check(self.id, message.sender, channel)
        except PersistenceError as e:
            # Admins were let through above; everybody else is denied.
            logger.error("acl_lookup_failed", command=self.id, sender=message.sender, error=str(e))
            return False

    def _convert(self, args: list[Optional[str]]) -> list:
        converted = []
        for name, value in zip(self.matcher.argument_names, args):
            converter = self.converters.get(name)
            if converter is not None and value is not None:
                try:
                    value = converter(value)
                except ValueError as e:
                    raise ValidationError(f"Invalid <{name}>: {e}") from None
            converted.append(value)
        return converted

    async def execute(self, message: ChatMessage) -> bool:
        ctx = self._ctx()
        args = self.matcher.match(self.command_text(message))
        if args is None:
            await ctx.client.reply(message, MALFORMED)
            await ctx.client.reply(message, self.help())
            return False
        try:
            converted = self._convert(args)
        except ValidationError as e:
            await ctx.client.reply(message, str(e))
            await ctx.client.reply(message, self.help())
            return False

        try:
            return await self.action(ctx, message, converted)
        except ValidationError as e:
            await ctx.client.reply(message, str(e))
        except NotFoundError as e:
            logger.info("command_not_found", command=self.id, sender=message.sender, error=str(e))
            await ctx.client.reply(message, str(e))
        except PersistenceError as e:
            logger.error(
                "command_persistence_error",
                command=self.id,
                operation=e.operation,
                entity=e.entity,
                error=str(e),
            )
            await ctx.client.reply(message, "Could not complete the command, check the logs for details.")
        except Exception as e:
            logger.error("command_failed", command=self.id, sender=message.sender, error=str(e), exc_info=True)
            await ctx.client.reply(message, "Something went wrong, check the logs for details.")
        return True

    async def require_authorization(self, message: ChatMessage) -> None:
        if not await self.authorize(message):
            raise AuthorizationDenied(NOT_ALLOWED)

    async def handle(self, message: ChatMessage) -> bool:
        try:
            await self.require_authorization(message)
        except AuthorizationDenied as e:
            logger.info("command_denied", command=self.id, sender=message.sender, target=message.target)
            await self._ctx().client.reply(message, str(e))
            return False
        return await self.execute(message)

    def help(self) -> str:
        if not self.help_msg:
            return ""
        return f"{self.help_msg}. Format: {self.matcher.usage()}"

    def __repr__(self) -> str:
        return f"Command(id={self.id!r}, public={self.public}, private={self.private})"
