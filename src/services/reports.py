"""
Report aggregation for HQL queries.

Turns a list of time entries into either a flat list view or a per-project
summary view. Hours are never rounded here; rounding happens at render time.
"""

from dataclasses import dataclass
from datetime import date

from core.query import ReportType
from models.harvest import TimeEntry


@dataclass(frozen=True)
class ListRow:
    """One time entry projected for the list report."""

    project_name: str
    task_name: str
    date: date
    hours: float


@dataclass(frozen=True)
class ListView:
    rows: tuple[ListRow, ...]


@dataclass(frozen=True)
class ProjectTotal:
    """Aggregated hours for one project name."""

    project_name: str
    hours: float


@dataclass(frozen=True)
class SummaryView:
    total_hours: float
    project_totals: tuple[ProjectTotal, ...]

    def share(self, project_total: ProjectTotal) -> float:
        """Percentage of the total; 0 when nothing was tracked."""
        if self.total_hours <= 0:
            return 0.0
        return project_total.hours / self.total_hours * 100


@dataclass(frozen=True)
class NoEntries:
    """No time entries matched the query."""


ReportView = ListView | SummaryView | NoEntries


def build_list_view(entries: list[TimeEntry]) -> ListView:
    """Project entries to list rows, preserving input order."""
    return ListView(
        rows=tuple(
            ListRow(
                project_name=entry.project.name,
                task_name=entry.task.name,
                date=entry.spent_date,
                hours=entry.hours,
            )
            for entry in entries
        )
    )


def build_summary_view(entries: list[TimeEntry]) -> SummaryView:
    """
    Group hours by project name, sorted by hours descending.

    Projects are keyed by display name, so two projects sharing a name are
    merged. Ties keep first-encountered order (sorted() is stable and dicts
    keep insertion order).
    """
    total_hours = 0.0
    hours_by_project: dict[str, float] = {}

    for entry in entries:
        total_hours += entry.hours
        name = entry.project.name
        hours_by_project[name] = hours_by_project.get(name, 0.0) + entry.hours

    ordered = sorted(hours_by_project.items(), key=lambda item: item[1], reverse=True)
    return SummaryView(
        total_hours=total_hours,
        project_totals=tuple(ProjectTotal(project_name=n, hours=h) for n, h in ordered),
    )


def aggregate(entries: list[TimeEntry], report_type: ReportType) -> ReportView:
    """
    Aggregate entries for the requested report type.

    Returns:
        NoEntries for an empty entry list, otherwise a ListView or SummaryView
    """
    if not entries:
        return NoEntries()
    if report_type == ReportType.LIST:
        return build_list_view(entries)
    return build_summary_view(entries)
