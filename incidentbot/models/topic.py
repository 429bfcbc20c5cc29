"""Last known topic of each channel."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Topic(Base):
    __tablename__ = "topics"

    channel: Mapped[str] = mapped_column(String(200), primary_key=True)
    topic: Mapped[str] = mapped_column(Text, nullable=False, default="")
