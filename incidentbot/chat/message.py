"""Inbound chat line as delivered by the transport."""

from dataclasses import dataclass, field
from typing import Optional

PRIVMSG = "PRIVMSG"
TOPIC = "TOPIC"
# Numeric topic replies sent on join (RFC 1459 section 6.2)
RPL_NOTOPIC = "331"
RPL_TOPIC = "332"

TOPIC_EVENTS = frozenset({TOPIC, RPL_TOPIC, RPL_NOTOPIC})


def is_channel(name: str) -> bool:
    return name.startswith("#")


@dataclass
class ChatMessage:
    """One protocol line.

    ``target`` is the channel for public lines and the bot's own nick for
    private ones. ``params`` holds the raw protocol parameters.
    """

    command: str
    sender: str
    target: str
    content: str = ""
    params: list[str] = field(default_factory=list)

    @property
    def is_privmsg(self) -> bool:
        return self.command == PRIVMSG

    @property
    def in_channel(self) -> bool:
        return is_channel(self.target)

    @property
    def channel(self) -> Optional[str]:
        """Channel the line refers to.

        Numeric topic replies are addressed to the bot and carry the
        channel as their second parameter.
        """
        if self.command in (RPL_TOPIC, RPL_NOTOPIC):
            return self.params[1] if len(self.params) > 1 else None
        return self.target if self.in_channel else None

    @property
    def topic_text(self) -> str:
        if self.command == RPL_NOTOPIC:
            return ""
        return self.content
