"""
Typed records for Harvest API payloads.

Payloads are validated here, at the data-source boundary, so the aggregator
and renderer only ever see these models. Unknown fields are ignored.
"""

from datetime import date

from pydantic import BaseModel, Field


class NamedRef(BaseModel):
    """Embedded {id, name} reference (project, task, client, user)."""

    id: int
    name: str


class TimeEntry(BaseModel):
    """One recorded span of tracked work."""

    id: int
    spent_date: date
    hours: float = Field(ge=0)
    project: NamedRef
    task: NamedRef
    client: NamedRef | None = None
    notes: str | None = None
    is_running: bool = False


class TaskAssignment(BaseModel):
    """Task available on a project."""

    id: int
    task: NamedRef
    is_active: bool = True


class Project(BaseModel):
    """Trackable project, as listed by /projects or embedded in time entries."""

    id: int
    name: str
    code: str | None = None
    client: NamedRef | None = None
    task_assignments: list[TaskAssignment] | None = None


class HarvestUser(BaseModel):
    """The authenticated user (/users/me)."""

    id: int
    first_name: str = ""
    last_name: str = ""
    email: str | None = None


class TimeEntryPage(BaseModel):
    """One page of /time_entries."""

    time_entries: list[TimeEntry] = []
    total_pages: int = 1
    page: int = 1


class ProjectPage(BaseModel):
    """One page of /projects."""

    projects: list[Project] = []
    total_pages: int = 1
    page: int = 1


class TaskAssignmentPage(BaseModel):
    """One page of /projects/{id}/task_assignments."""

    task_assignments: list[TaskAssignment] = []
    total_pages: int = 1
    page: int = 1
