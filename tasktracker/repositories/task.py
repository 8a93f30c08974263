from tasktracker.models.task import Task
from tasktracker.repositories.base import Repository


class TaskRepository(Repository[Task]):
    model = Task
    sortable = Repository.sortable | {"title", "status", "priority", "due_date"}
