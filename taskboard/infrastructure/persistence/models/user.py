"""User ORM model: one row per identity-provider subject."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.infrastructure.persistence.database import Base
from taskboard.infrastructure.persistence.models.mixins import BaseModelMixin


class User(BaseModelMixin, Base):
    """User model. Table: app_user. token_identifier (provider `sub`) is unique."""

    __tablename__ = "app_user"

    token_identifier: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    picture_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
