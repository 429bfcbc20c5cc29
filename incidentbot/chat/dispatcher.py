"""TriggerDispatcher — routes every inbound line to subscribed triggers."""

from typing import Awaitable, Callable

from ..utils.logging import get_logger
from .message import ChatMessage

logger = get_logger("chat.dispatcher")

Condition = Callable[[ChatMessage], bool]
Action = Callable[[ChatMessage], Awaitable[bool]]


class TriggerDispatcher:
    """In-process dispatch loop.

    A transport adapter feeds each parsed line to ``dispatch``. Every
    trigger whose condition holds gets its action awaited; an action
    returning True stops evaluation for that line. A failing trigger is
    logged and skipped so one bad handler never takes the loop down.
    """

    def __init__(self) -> None:
        self._triggers: list[tuple[Condition, Action]] = []
        self._total_dispatched: int = 0
        self._total_errors: int = 0

    def subscribe(self, condition: Condition, action: Action) -> None:
        self._triggers.append((condition, action))

    @property
    def trigger_count(self) -> int:
        return len(self._triggers)

    async def dispatch(self, message: ChatMessage) -> bool:
        """Evaluate all triggers for one line. Returns True if one consumed it."""
        self._total_dispatched += 1
        for condition, action in list(self._triggers):
            try:
                if not condition(message):
                    continue
                if await action(message):
                    return True
            except Exception as e:
                self._total_errors += 1
                logger.error(
                    "trigger_error",
                    command=message.command,
                    sender=message.sender,
                    target=message.target,
                    error=str(e),
                    exc_info=True,
                )
        return False

    def get_stats(self) -> dict:
        return {
            "triggers": len(self._triggers),
            "total_dispatched": self._total_dispatched,
            "total_errors": self._total_errors,
        }
