"""Incident model — persisted form of an outage."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class IncidentRecord(Base):
    __tablename__ = "incidents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    severity: Mapped[int] = mapped_column(Integer, nullable=False)
    components: Mapped[str] = mapped_column(Text, nullable=False)  # ", "-joined
    started_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    status: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)  # 0 open, 1 closed
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    document_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
