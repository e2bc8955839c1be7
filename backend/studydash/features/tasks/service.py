"""
Tasks feature: Service layer for task management.
"""

from supabase import Client

from studydash.core.database import run_query
from studydash.core.exceptions import NotFoundError
from studydash.core.notifications import DataChange, EventBus
from studydash.features.tasks.schemas import Task, TaskStatus


class TasksService:
    """CRUD operations for tasks."""

    def __init__(self, db: Client, bus: EventBus | None = None):
        self.db = db
        self.bus = bus

    def _notify(self, kind: DataChange, user_id: str, payload: dict | None = None):
        if self.bus is not None:
            self.bus.publish(kind, user_id, payload)

    def list_tasks(
        self,
        user_id: str,
        status: TaskStatus | None = None,
        source_provider: str | None = None,
    ) -> list[Task]:
        query = self.db.table("tasks").select("*").eq("user_id", user_id)
        if status is not None:
            query = query.eq("completion_status", status.value)
        if source_provider:
            query = query.eq("source_provider", source_provider)

        result = run_query(
            query.order("priority_score", desc=True).order("due_date", desc=False),
            "list tasks",
        )
        return [Task(**row) for row in result.data or []]

    def create_task(
        self,
        user_id: str,
        title: str,
        description: str = "",
        due_date: str | None = None,
        priority_score: int = 2,
        course_name: str | None = None,
    ) -> Task:
        result = run_query(
            self.db.table("tasks").insert({
                "user_id": user_id,
                "title": title,
                "description": description,
                "due_date": due_date,
                "priority_score": priority_score,
                "course_name": course_name,
                "completion_status": TaskStatus.PENDING.value,
            }),
            "create task",
        )
        task = Task(**result.data[0])
        self._notify(DataChange.TASK_CREATED, user_id, {"task_id": task.id})
        return task

    def update_task(self, user_id: str, task_id: str, update_data: dict) -> Task:
        clean_data = {
            k: (v.value if isinstance(v, TaskStatus) else v)
            for k, v in update_data.items()
            if v is not None
        }
        if not clean_data:
            result = run_query(
                self.db.table("tasks").select("*").eq("id", task_id).eq("user_id", user_id),
                "get task",
            )
        else:
            result = run_query(
                self.db.table("tasks").update(clean_data).eq("id", task_id).eq("user_id", user_id),
                "update task",
            )
        if not result.data:
            raise NotFoundError("Task", task_id)

        if clean_data:
            self._notify(DataChange.TASK_UPDATED, user_id, {"task_id": task_id})
        return Task(**result.data[0])

    def set_completed(self, user_id: str, task_id: str, completed: bool) -> Task:
        status = TaskStatus.COMPLETED if completed else TaskStatus.PENDING
        return self.update_task(user_id, task_id, {"completion_status": status})

    def delete_task(self, user_id: str, task_id: str) -> None:
        result = run_query(
            self.db.table("tasks").delete().eq("id", task_id).eq("user_id", user_id),
            "delete task",
        )
        if not result.data:
            raise NotFoundError("Task", task_id)
        self._notify(DataChange.TASK_DELETED, user_id, {"task_id": task_id})

    def clear_provider_tasks(self, user_id: str, source_provider: str) -> int:
        """Bulk delete every task synced from one provider. Returns the count."""
        result = run_query(
            self.db.table("tasks")
            .delete()
            .eq("user_id", user_id)
            .eq("source_provider", source_provider),
            "clear tasks",
        )
        count = len(result.data) if result.data else 0
        self._notify(DataChange.TASKS_CLEARED, user_id, {"source_provider": source_provider, "count": count})
        return count
