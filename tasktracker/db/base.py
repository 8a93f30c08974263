# Every mapped model, so relationship targets resolve and metadata is complete.
from tasktracker.db.session import Base  # noqa: F401
from tasktracker.models.task import Task  # noqa: F401
from tasktracker.models.user import User  # noqa: F401
