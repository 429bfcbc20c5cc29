"""Outbound primitives the bot needs from a chat transport."""

from typing import Protocol, runtime_checkable

from .message import ChatMessage


@runtime_checkable
class ChatClient(Protocol):
    """Connected chat session.

    Connection handling, TLS, SASL and flood control belong to the
    implementation; the bot only talks through these calls.
    """

    nickname: str

    async def reply(self, message: ChatMessage, text: str) -> None:
        """Answer in the channel for public lines, privately otherwise."""
        ...

    async def send(self, target: str, text: str) -> None:
        """Send a PRIVMSG to a nick or channel."""
        ...

    async def set_topic(self, channel: str, text: str) -> None:
        ...
