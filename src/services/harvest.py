"""
Time entry, project and timer operations against the Harvest API.
"""

from datetime import date, timedelta

from pydantic import ValidationError

from core.config import HARVEST_PER_PAGE, RECENT_PROJECT_DAYS
from core.errors import FetchError, HarvestAPIError
from core.harvest_client import HarvestClient
from core.time_range import format_iso_date
from models.harvest import (
    HarvestUser,
    Project,
    ProjectPage,
    TaskAssignment,
    TaskAssignmentPage,
    TimeEntry,
    TimeEntryPage,
)


def _validate(model, payload: dict, what: str):
    """Narrow a raw payload into a typed record."""
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        print(f"  Unexpected {what} payload: {e}")
        raise HarvestAPIError(f"Unexpected {what} response from Harvest API.")


async def fetch_current_user(client: HarvestClient) -> HarvestUser:
    """Fetch the authenticated user (/users/me)."""
    data = await client.request("/users/me")
    return _validate(HarvestUser, data, "user")


async def _fetch_entry_pages(client: HarvestClient, params: dict) -> list[TimeEntry]:
    """Fetch every page of /time_entries for the given filters."""
    entries: list[TimeEntry] = []
    page = 1
    while True:
        data = await client.request(
            "/time_entries", params={**params, "page": page, "per_page": HARVEST_PER_PAGE}
        )
        result = _validate(TimeEntryPage, data, "time entry")
        entries.extend(result.time_entries)
        if page >= result.total_pages or not result.time_entries:
            break
        page += 1
    return entries


async def fetch_time_entries(
    client: HarvestClient, user_id: int, from_date: date, to_date: date
) -> list[TimeEntry]:
    """
    Fetch all of a user's time entries within [from_date, to_date].

    Handles pagination. Any API failure is reported as FetchError.
    """
    params = {
        "from": format_iso_date(from_date),
        "to": format_iso_date(to_date),
        "user_id": user_id,
    }
    try:
        return await _fetch_entry_pages(client, params)
    except FetchError:
        raise
    except HarvestAPIError as e:
        raise FetchError(e.message, status_code=e.status_code) from e


async def fetch_running_entries(client: HarvestClient, user_id: int) -> list[TimeEntry]:
    """Fetch the user's running time entries (normally zero or one)."""
    return await _fetch_entry_pages(client, {"is_running": "true", "user_id": user_id})


async def get_managed_projects(client: HarvestClient) -> list[Project]:
    """Fetch all active projects visible to the user, following pagination."""
    projects: list[Project] = []
    page = 1
    while True:
        data = await client.request("/projects", params={"is_active": "true", "page": page})
        result = _validate(ProjectPage, data, "project")
        projects.extend(result.projects)
        if page >= result.total_pages:
            break
        page += 1
    return projects


async def get_recent_projects(
    client: HarvestClient, user_id: int, today: date | None = None
) -> list[Project]:
    """
    Distinct projects the user tracked time on recently.

    Covers projects the user cannot list through /projects (non-managers).
    """
    if today is None:
        today = date.today()
    since = today - timedelta(days=RECENT_PROJECT_DAYS)
    entries = await _fetch_entry_pages(
        client, {"from": format_iso_date(since), "user_id": user_id}
    )

    recent: dict[int, Project] = {}
    for entry in entries:
        if entry.project.id not in recent:
            recent[entry.project.id] = Project(
                id=entry.project.id, name=entry.project.name, client=entry.client
            )
    return list(recent.values())


async def fetch_task_assignments(client: HarvestClient, project: Project) -> list[TaskAssignment]:
    """Tasks for a project: embedded assignments if present, else fetched."""
    if project.task_assignments:
        return [a for a in project.task_assignments if a.is_active]

    assignments: list[TaskAssignment] = []
    page = 1
    while True:
        data = await client.request(
            f"/projects/{project.id}/task_assignments", params={"page": page}
        )
        result = _validate(TaskAssignmentPage, data, "task assignment")
        assignments.extend(result.task_assignments)
        if page >= result.total_pages:
            break
        page += 1
    return [a for a in assignments if a.is_active]


async def create_time_entry(
    client: HarvestClient, project_id: int, task_id: int, spent_date: date
) -> TimeEntry:
    """Create a time entry; Harvest starts a timer when no hours are given."""
    body = {
        "project_id": project_id,
        "task_id": task_id,
        "spent_date": format_iso_date(spent_date),
    }
    data = await client.request("/time_entries", method="POST", body=body)
    return _validate(TimeEntry, data, "time entry")


async def restart_time_entry(client: HarvestClient, entry_id: int) -> TimeEntry:
    """Restart a stopped time entry."""
    data = await client.request(f"/time_entries/{entry_id}/restart", method="PATCH")
    return _validate(TimeEntry, data, "time entry")


async def stop_time_entry(client: HarvestClient, entry_id: int) -> TimeEntry:
    """Stop a running time entry."""
    data = await client.request(f"/time_entries/{entry_id}/stop", method="PATCH")
    return _validate(TimeEntry, data, "time entry")
