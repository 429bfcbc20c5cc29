"""Handler registry — every trigger the bot reacts to, keyed by identifier."""

from __future__ import annotations

from typing import TYPE_CHECKING, Awaitable, Callable, Iterable, Optional, Protocol, Union

from ..chat.message import ChatMessage
from ..errors import DuplicateIdentifierError
from ..utils.logging import get_logger
from .command import Command

if TYPE_CHECKING:
    from ..context import BotContext

logger = get_logger("triggers.registry")

HandlerCondition = Callable[["BotContext", ChatMessage], bool]
HandlerAction = Callable[["BotContext", ChatMessage], Awaitable[bool]]


class Subscriber(Protocol):
    def subscribe(self, condition, action) -> None: ...


class EventHandler:
    """A plain trigger: condition plus action, no ACL and no grammar.

    For interactive commands use Command instead.
    """

    def __init__(self, condition: HandlerCondition, action: HandlerAction, help_msg: str = "") -> None:
        self.condition = condition
        self.action = action
        self.help_msg = help_msg
        self.context: Optional[BotContext] = None

    def bind(self, context: BotContext) -> None:
        self.context = context

    def is_addressed_to(self, message: ChatMessage) -> bool:
        return self.condition(self.context, message)

    async def handle(self, message: ChatMessage) -> bool:
        return await self.action(self.context, message)

    def help(self) -> str:
        return self.help_msg


Handler = Union[EventHandler, Command]


class HandlerRegistry:
    """Table from identifier to handler.

    Built once by the process root before the dispatch loop starts.
    """

    def __init__(self, context: BotContext) -> None:
        self._handlers: dict[str, Handler] = {}
        self._context = context

    def register(self, id: str, handler: Handler) -> None:
        if id in self._handlers:
            raise DuplicateIdentifierError(id)
        handler.bind(self._context)
        self._handlers[id] = handler

    def register_command(self, command: Command) -> None:
        self.register(command.id, command)

    def register_all(self, commands: Iterable[Command]) -> None:
        """Register in order. The first failure propagates; earlier ones stay registered."""
        for command in commands:
            self.register_command(command)

    def deregister(self, id: str) -> None:
        self._handlers.pop(id, None)

    def get(self, id: str) -> Optional[Handler]:
        return self._handlers.get(id)

    def __contains__(self, id: str) -> bool:
        return id in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    def install_into(self, dispatcher: Subscriber) -> None:
        for id, handler in self._handlers.items():
            logger.info("registering_handler", id=id)
            dispatcher.subscribe(handler.is_addressed_to, handler.handle)
        dispatcher.subscribe(self._is_help_request, self._reply_help)

    # -- help -----------------------------------------------------------

    def _is_help_request(self, message: ChatMessage) -> bool:
        if not message.is_privmsg:
            return False
        nickname = self._context.nickname
        if message.target == nickname:
            return message.content == "!help"
        if message.in_channel:
            return message.content == f"{nickname}: !help"
        return False

    def help_lines(self) -> list[str]:
        lines = [
            f"{self._context.nickname} - irc bot for handling outages",
            "",
            "Available commands:",
            f"{'!help':<16}Prints this message",
        ]
        for id in sorted(self._handlers):
            help_text = self._handlers[id].help()
            if help_text:
                lines.append(f"{id:<16}{help_text}")
        return lines

    async def _reply_help(self, message: ChatMessage) -> bool:
        for line in self.help_lines():
            await self._context.client.reply(message, line)
        return True
