from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from tasktracker.db.session import Base
from tasktracker.models.common import UUIDMixin, TimestampMixin
from tasktracker.models.enums import UserRole

if TYPE_CHECKING:
    from tasktracker.models.task import Task

class User(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "users"
    email: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=UserRole.USER.value)  # admin|user

    tasks: Mapped[list["Task"]] = relationship(back_populates="user", passive_deletes=True)
