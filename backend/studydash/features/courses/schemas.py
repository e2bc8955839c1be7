"""
Courses feature: Schemas for request/response models.
"""

from pydantic import BaseModel, Field, computed_field

from studydash.features.calendar.schemas import Event
from studydash.features.courses.appearance import IconId
from studydash.features.tasks.schemas import Task


class Course(BaseModel):
    """A group of Canvas events/tasks sharing one extracted course code and term.

    Derived on every load, never stored.
    """
    code: str
    term: str | None = None
    color: str
    icon: IconId
    events: list[Event] = []
    tasks: list[Task] = []
    total_assignments: int = 0
    completed_assignments: int = 0
    upcoming_assignments: int = 0

    @property
    def key(self) -> str:
        return f"{self.term}-{self.code}" if self.term else self.code

    @computed_field
    @property
    def completion_ratio(self) -> float:
        if not self.total_assignments:
            return 0.0
        return self.completed_assignments / self.total_assignments


class CourseList(BaseModel):
    term: str | None = None
    courses: list[Course]


class CourseOrderUpdate(BaseModel):
    order: list[str] = Field(default_factory=list)


class CourseColorUpdate(BaseModel):
    color: str  # "#rrggbb"


class CourseIconUpdate(BaseModel):
    icon: IconId
