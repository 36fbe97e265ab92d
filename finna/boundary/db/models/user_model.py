"""
User and library card ORM models.

A user is a local account; each library card links the account to a patron
record in one ILS datasource. cat_username is prefixed with the datasource
("helmet.12345").

Dependencies: sqlalchemy, finna.boundary.db.base
System role: Patron identity for online payments
"""

import uuid

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from finna.boundary.db.base import Base, TimestampMixin, UUIDMixin


class UserModel(Base, UUIDMixin, TimestampMixin):
    """
    Local user account.

    Attributes:
        username: Login name (unique)
        firstname: Given name, may be empty
        lastname: Family name, or a full name when firstname is empty
        email: Contact address used by payment providers
        cards: Library cards owned by the user
    """

    __tablename__ = "user"

    username: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    firstname: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    lastname: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    cards: Mapped[list["UserCardModel"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class UserCardModel(Base, UUIDMixin, TimestampMixin):
    """Library card linking a user to an ILS patron."""

    __tablename__ = "user_card"

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    card_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    cat_username: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    cat_password: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    user: Mapped[UserModel] = relationship(back_populates="cards")

    @property
    def source(self) -> str:
        """ILS datasource prefix of the card's cat_username."""
        return self.cat_username.split(".", 1)[0]
