"""
Per-connection Harvest state: current user, project picker cache, and the
running timer, plus the recurring poller that keeps the timer fresh.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import date

from core.config import DEFAULT_POLLING_INTERVAL_MINUTES
from core.errors import FetchError, HarvestAPIError
from core.harvest_client import HarvestClient
from models.harvest import Project, TaskAssignment, TimeEntry
from services.harvest import (
    create_time_entry,
    fetch_current_user,
    fetch_running_entries,
    fetch_task_assignments,
    fetch_time_entries,
    get_managed_projects,
    get_recent_projects,
    restart_time_entry,
    stop_time_entry,
)


@dataclass
class HarvestSession:
    """
    Explicit context for timer, picker and report operations.

    Attributes:
        client: Harvest API client
        user_id: Authenticated Harvest user id, once resolved
        projects: Cached picker list (managed + recently tracked projects)
        running_timer: Currently running time entry, if any
    """

    client: HarvestClient
    user_id: int | None = None
    projects: list[Project] = field(default_factory=list)
    running_timer: TimeEntry | None = None

    async def refresh_user(self) -> int | None:
        """Resolve the current user id; clears it when the lookup fails."""
        try:
            user = await fetch_current_user(self.client)
        except HarvestAPIError as e:
            print(f"Could not retrieve Harvest User ID: {e}")
            self.user_id = None
            return None
        self.user_id = user.id
        return self.user_id

    async def ensure_user(self) -> int:
        if self.user_id is None:
            await self.refresh_user()
        if self.user_id is None:
            raise HarvestAPIError("Harvest User ID not found. Cannot fetch your time entries.")
        return self.user_id

    async def fetch_entries(self, from_date: date, to_date: date) -> list[TimeEntry]:
        """Entry fetcher for query execution."""
        try:
            user_id = await self.ensure_user()
        except HarvestAPIError as e:
            raise FetchError(e.message, status_code=e.status_code) from e
        return await fetch_time_entries(self.client, user_id, from_date, to_date)

    async def refresh_projects(self, force: bool = False, today: date | None = None) -> list[Project]:
        """
        Build the picker list: active managed projects plus projects the user
        tracked recently, de-duplicated by id and sorted by name.
        """
        if self.projects and not force:
            return self.projects

        combined: dict[int, Project] = {}
        for project in await get_managed_projects(self.client):
            combined[project.id] = project

        if self.user_id is None:
            await self.refresh_user()
        if self.user_id is not None:
            for project in await get_recent_projects(self.client, self.user_id, today):
                combined.setdefault(project.id, project)

        self.projects = sorted(combined.values(), key=lambda p: p.name.lower())
        return self.projects

    def find_project(self, project_id: int) -> Project | None:
        for project in self.projects:
            if project.id == project_id:
                return project
        return None

    async def project_tasks(self, project_id: int) -> list[TaskAssignment]:
        """Task choices for a project from the picker list."""
        project = self.find_project(project_id)
        if project is None:
            await self.refresh_projects()
            project = self.find_project(project_id) or Project(id=project_id, name="")
        return await fetch_task_assignments(self.client, project)

    async def refresh_running_timer(self) -> TimeEntry | None:
        if self.user_id is None:
            return None
        running = await fetch_running_entries(self.client, self.user_id)
        self.running_timer = running[0] if running else None
        return self.running_timer

    def status_text(self) -> str:
        """Status bar text for the running timer."""
        if self.running_timer is None:
            return "Harvest: No timer running"
        timer = self.running_timer
        return f"Harvest: {timer.project.name} - {timer.task.name} ({timer.hours:.2f}h)"

    async def start_timer(self, project_id: int, task_id: int, today: date | None = None) -> TimeEntry:
        """
        Start tracking a project/task.

        Restarts today's existing entry for the same project and task instead
        of creating a duplicate.
        """
        if today is None:
            today = date.today()
        user_id = await self.ensure_user()

        existing = [
            entry
            for entry in await fetch_time_entries(self.client, user_id, today, today)
            if entry.project.id == project_id and entry.task.id == task_id
        ]
        if existing:
            entry = await restart_time_entry(self.client, existing[0].id)
            print("Harvest timer restarted!")
        else:
            entry = await create_time_entry(self.client, project_id, task_id, today)
            print("Harvest timer started!")

        await self.refresh_running_timer()
        return entry

    async def stop_timer(self) -> TimeEntry | None:
        """Stop the running timer; returns None when nothing was running."""
        if self.running_timer is None:
            return None
        entry = await stop_time_entry(self.client, self.running_timer.id)
        print("Harvest timer stopped.")
        await self.refresh_running_timer()
        return entry

    async def toggle_timer(self) -> TimeEntry | None:
        """
        Stop the running timer if there is one.

        Returns the stopped entry, or None when no timer was running and the
        caller should let the user pick a project to start.
        """
        await self.refresh_running_timer()
        return await self.stop_timer()


class TimerPoller:
    """Recurring refresh of a session's running timer."""

    def __init__(self, session: HarvestSession, interval_minutes: int = DEFAULT_POLLING_INTERVAL_MINUTES):
        if interval_minutes <= 0:
            interval_minutes = DEFAULT_POLLING_INTERVAL_MINUTES
        self.session = session
        self.interval_seconds = interval_minutes * 60
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def poll_once(self):
        try:
            await self.session.refresh_running_timer()
        except HarvestAPIError as e:
            print(f"Timer refresh failed: {e}")
        except Exception as e:
            print(f"Timer refresh failed unexpectedly: {type(e).__name__}: {e}")

    async def _run(self):
        while True:
            await self.poll_once()
            await asyncio.sleep(self.interval_seconds)

    def start(self):
        if not self.running:
            self._task = asyncio.create_task(self._run())

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
