import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from tasktracker.db.session import Base
from tasktracker.models.common import UUIDMixin, TimestampMixin
from tasktracker.models.user import User

class Task(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "tasks"
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)  # todo|in_progress|completed|cancelled
    priority: Mapped[str] = mapped_column(String(20), nullable=False, index=True)  # low|medium|high
    due_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    user: Mapped[User] = relationship(back_populates="tasks")
