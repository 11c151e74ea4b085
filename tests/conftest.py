"""
Pytest configuration and shared fixtures.
"""

import json
import os
import sys
import tempfile
from datetime import date
from pathlib import Path

import httpx
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

# Keep request logs out of the working tree and pin the API key
os.environ["HQL_DB_PATH"] = str(Path(tempfile.mkdtemp()) / "harvest-hql-test.db")
os.environ["HQL_API_KEY"] = "test-api-key"

from core.harvest_client import HarvestClient  # noqa: E402
from models.harvest import TimeEntry  # noqa: E402
from services.session import HarvestSession  # noqa: E402


def make_entry(
    entry_id: int = 1,
    project: str = "Proj A",
    task: str = "Task X",
    spent_date: str = "2025-01-01",
    hours: float = 1.0,
    project_id: int = 1,
    task_id: int = 10,
    is_running: bool = False,
) -> TimeEntry:
    """Build a validated TimeEntry from compact arguments."""
    return TimeEntry.model_validate(
        {
            "id": entry_id,
            "spent_date": spent_date,
            "hours": hours,
            "project": {"id": project_id, "name": project},
            "task": {"id": task_id, "name": task},
            "is_running": is_running,
        }
    )


def entry_payload(
    entry_id: int = 1,
    project_id: int = 100,
    project: str = "Proj A",
    task_id: int = 10,
    task: str = "Task X",
    spent_date: str = "2025-01-01",
    hours: float = 1.0,
    is_running: bool = False,
) -> dict:
    """Raw Harvest /time_entries record."""
    return {
        "id": entry_id,
        "spent_date": spent_date,
        "hours": hours,
        "notes": None,
        "is_running": is_running,
        "project": {"id": project_id, "name": project},
        "task": {"id": task_id, "name": task},
        "client": {"id": 7, "name": "Acme"},
        "user": {"id": 42, "name": "Test User"},
    }


@pytest.fixture
def today():
    """A fixed Wednesday."""
    return date(2025, 1, 15)


@pytest.fixture
def sample_entries():
    """Entries across two projects, in data-source order."""
    return [
        make_entry(1, "Proj A", "Task X", "2025-01-01", 2.5, project_id=1),
        make_entry(2, "Proj B", "Task Y", "2025-01-01", 3.0, project_id=2),
        make_entry(3, "Proj A", "Task Y", "2025-01-02", 1.0, project_id=1),
    ]


class FakeHarvest:
    """In-memory stand-in for the Harvest endpoints the session uses."""

    def __init__(self, entries=None, projects=None, tasks=None, user_status=200):
        self.entries = entries or []
        self.projects = projects or []
        self.tasks = tasks or {}
        self.user_status = user_status
        self.calls: list[tuple[str, str]] = []
        self.next_id = 1000

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/v2")
        self.calls.append((request.method, path))
        params = request.url.params

        if path == "/users/me":
            if self.user_status != 200:
                return httpx.Response(self.user_status, json={"message": "Nope"})
            return httpx.Response(200, json={"id": 42, "first_name": "Test"})

        if path == "/projects":
            return httpx.Response(200, json={"projects": self.projects, "total_pages": 1})

        if path.endswith("/task_assignments"):
            project_id = int(path.split("/")[2])
            assignments = [
                {"id": task_id, "task": {"id": task_id, "name": name}}
                for task_id, name in self.tasks.get(project_id, [])
            ]
            return httpx.Response(200, json={"task_assignments": assignments, "total_pages": 1})

        if path == "/time_entries" and request.method == "GET":
            entries = self.entries
            if params.get("is_running") == "true":
                entries = [e for e in entries if e["is_running"]]
            return httpx.Response(200, json={"time_entries": entries, "total_pages": 1})

        if path == "/time_entries" and request.method == "POST":
            payload = json.loads(request.content)
            self.next_id += 1
            entry = entry_payload(
                self.next_id,
                project_id=payload["project_id"],
                task_id=payload["task_id"],
                spent_date=payload["spent_date"],
                hours=0.0,
                is_running=True,
            )
            self.entries.append(entry)
            return httpx.Response(201, json=entry)

        if path.endswith(("/restart", "/stop")):
            entry_id = int(path.split("/")[2])
            entry = next(e for e in self.entries if e["id"] == entry_id)
            entry["is_running"] = path.endswith("/restart")
            return httpx.Response(200, json=entry)

        return httpx.Response(404, json={"message": "Not found"})


def make_session(
    fake: FakeHarvest, user_id: int | None = 42, token: str = "token"
) -> HarvestSession:
    """HarvestSession wired to a FakeHarvest."""
    client = HarvestClient(
        access_token=token,
        account_id="123",
        base_url="https://harvest.test/v2",
        transport=httpx.MockTransport(fake),
    )
    return HarvestSession(client=client, user_id=user_id)
