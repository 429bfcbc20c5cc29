"""Per-command access control lists."""

from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..chat.message import is_channel
from ..errors import AlreadyExistsError, NotFoundError, PersistenceError
from ..models.acl import AclEntry
from ..utils.logging import get_logger

logger = get_logger("auth.acl")


@dataclass
class AclListing:
    nicks: list[str] = field(default_factory=list)
    channels: list[str] = field(default_factory=list)


class AuthorizationStore:
    """Maps a command id to the nicks and channels allowed to run it.

    Configured admins are allowed everything and never hit the database.
    A command with no entries is usable by admins only.
    """

    def __init__(self, db_session_factory, admins: Optional[list[str]] = None) -> None:
        self._session_factory = db_session_factory
        self._admins = set(admins or [])

    def is_admin(self, nick: str) -> bool:
        return nick in self._admins

    async def check(self, command_id: str, sender: str, channel: Optional[str] = None) -> bool:
        if self.is_admin(sender):
            return True
        identifiers = [sender] if channel is None else [sender, channel]
        try:
            async with self._session_factory() as session:
                count = (await session.execute(
                    select(func.count(AclEntry.id)).where(
                        AclEntry.command == command_id,
                        AclEntry.identifier.in_(identifiers),
                    )
                )).scalar() or 0
        except SQLAlchemyError as e:
            raise PersistenceError("acl_check", command_id, e) from e
        return count > 0

    async def exists(self, command_id: str, identifier: str) -> bool:
        try:
            async with self._session_factory() as session:
                entry = (await session.execute(
                    select(AclEntry).where(
                        AclEntry.command == command_id,
                        AclEntry.identifier == identifier,
                    )
                )).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise PersistenceError("acl_lookup", f"{command_id}/{identifier}", e) from e
        return entry is not None

    async def add(self, command_id: str, identifier: str) -> None:
        if await self.exists(command_id, identifier):
            raise AlreadyExistsError("This ACL is already present.")
        try:
            async with self._session_factory() as session:
                session.add(AclEntry(command=command_id, identifier=identifier))
                await session.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent add of the same pair
            raise AlreadyExistsError("This ACL is already present.") from e
        except SQLAlchemyError as e:
            raise PersistenceError("acl_add", f"{command_id}/{identifier}", e) from e
        logger.info("acl_added", command=command_id, identifier=identifier)

    async def remove(self, command_id: str, identifier: str) -> None:
        if not await self.exists(command_id, identifier):
            raise NotFoundError("This ACL is not present.")
        try:
            async with self._session_factory() as session:
                await session.execute(
                    delete(AclEntry).where(
                        AclEntry.command == command_id,
                        AclEntry.identifier == identifier,
                    )
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError("acl_remove", f"{command_id}/{identifier}", e) from e
        logger.info("acl_removed", command=command_id, identifier=identifier)

    async def list(self, command_id: str) -> AclListing:
        try:
            async with self._session_factory() as session:
                identifiers = (await session.execute(
                    select(AclEntry.identifier).where(AclEntry.command == command_id)
                )).scalars().all()
        except SQLAlchemyError as e:
            raise PersistenceError("acl_list", command_id, e) from e
        listing = AclListing()
        for identifier in sorted(identifiers):
            if is_channel(identifier):
                listing.channels.append(identifier)
            else:
                listing.nicks.append(identifier)
        return listing
