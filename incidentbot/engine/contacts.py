"""Contact book — phone and email of people to reach during an outage."""

from dataclasses import dataclass

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..errors import NotFoundError, PersistenceError
from ..models.contact import Contact
from ..utils.logging import get_logger

logger = get_logger("engine.contacts")


@dataclass
class ContactCard:
    name: str
    phone: str
    email: str

    def pretty(self) -> str:
        return f"{self.name}: {self.phone} ({self.email})"


class ContactBook:
    def __init__(self, db_session_factory) -> None:
        self._session_factory = db_session_factory

    async def get(self, name: str) -> ContactCard:
        try:
            async with self._session_factory() as session:
                row = (await session.execute(
                    select(Contact).where(Contact.name == name)
                )).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise PersistenceError("contact_get", name, e) from e
        if row is None:
            raise NotFoundError("Couldn't find the contact you searched for")
        return ContactCard(row.name, row.phone, row.email)

    async def save(self, card: ContactCard) -> None:
        """Insert a new contact or overwrite the existing one with the same name."""
        try:
            async with self._session_factory() as session:
                row = (await session.execute(
                    select(Contact).where(Contact.name == card.name)
                )).scalar_one_or_none()
                if row is None:
                    session.add(Contact(name=card.name, phone=card.phone, email=card.email))
                else:
                    row.phone = card.phone
                    row.email = card.email
                try:
                    await session.commit()
                except IntegrityError:
                    # Added concurrently under the same name
                    await session.rollback()
                    await session.execute(
                        update(Contact)
                        .where(Contact.name == card.name)
                        .values(phone=card.phone, email=card.email)
                    )
                    await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError("contact_save", card.name, e) from e
        logger.info("contact_saved", name=card.name)

    async def remove(self, name: str) -> None:
        await self.get(name)
        try:
            async with self._session_factory() as session:
                await session.execute(delete(Contact).where(Contact.name == name))
                await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError("contact_remove", name, e) from e
        logger.info("contact_removed", name=name)
