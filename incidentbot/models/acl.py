"""ACL entry model — one nick or channel allowed to run one command."""

from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class AclEntry(Base):
    __tablename__ = "acls"
    __table_args__ = (UniqueConstraint("command", "identifier", name="uq_acl_command_identifier"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    command: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    identifier: Mapped[str] = mapped_column(String(200), nullable=False)
