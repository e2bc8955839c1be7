"""
Tasks feature: Schemas for request/response models.
"""

from enum import Enum
from pydantic import BaseModel, ConfigDict, field_validator


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Task(BaseModel):
    """A row of the tasks table."""
    model_config = ConfigDict(extra="ignore")

    id: str
    title: str
    due_date: str | None = None
    priority_score: float | None = None
    completion_status: TaskStatus = TaskStatus.PENDING
    course_name: str | None = None
    source_provider: str | None = None
    description: str | None = None

    @field_validator("completion_status", mode="before")
    @classmethod
    def _null_status_is_pending(cls, v):
        return TaskStatus.PENDING if v is None else v

    @property
    def calendar_time(self) -> str | None:
        return self.due_date

    @property
    def due_time(self) -> str | None:
        return self.due_date

    @property
    def is_done(self) -> bool:
        return self.completion_status == TaskStatus.COMPLETED


class TaskCreate(BaseModel):
    title: str
    description: str = ""
    due_date: str | None = None
    priority_score: int = 2  # 0 none .. 4 critical
    course_name: str | None = None


class TaskUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    due_date: str | None = None
    priority_score: int | None = None
    completion_status: TaskStatus | None = None
    course_name: str | None = None


class AssignmentView(BaseModel):
    """A task or Canvas assignment with its derived status."""
    kind: str                 # "event" | "task"
    id: str
    title: str
    due: str | None = None
    status: str               # completed | overdue | due-today | due-tomorrow | upcoming
    priority: str | None = None
    source_provider: str | None = None
