from sqlalchemy import func, select

from tasktracker.models.user import User
from tasktracker.repositories.base import Repository


def normalize_email(raw: str | None) -> str:
    return str(raw or "").strip().lower()


class UserRepository(Repository[User]):
    model = User
    sortable = Repository.sortable | {"email", "full_name", "role"}

    def get_by_email(self, email: str) -> User | None:
        normalized = normalize_email(email)
        if not normalized:
            return None
        return self.db.scalars(select(User).where(func.lower(User.email) == normalized).limit(1)).first()
