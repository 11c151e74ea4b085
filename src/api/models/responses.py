"""Pydantic request/response models for API endpoints."""

from datetime import date

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response."""

    status: str  # "healthy" or "unhealthy"
    version: str
    credentials_configured: bool
    timestamp: str  # ISO 8601 UTC
    error: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    code: str
    details: list[str] = []


class ErrorCodes:
    """Error code constants."""

    INVALID_REQUEST = "INVALID_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    HARVEST_API_ERROR = "HARVEST_API_ERROR"
    NO_RUNNING_TIMER = "NO_RUNNING_TIMER"
    NO_TASKS = "NO_TASKS"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class QueryRequest(BaseModel):
    """An HQL block to evaluate, with its location for static freezes."""

    source: str
    document_id: str | None = None
    line_start: int | None = Field(default=None, ge=0)
    line_end: int | None = Field(default=None, ge=0)
    today: date | None = None


class QueryResponse(BaseModel):
    """Result of evaluating an HQL block."""

    state: str
    failed: bool
    query_type: str | None = None
    from_date: date | None = None
    to_date: date | None = None
    display: dict
    markup: str | None = None
    rewritten: bool = False


class TimerStartRequest(BaseModel):
    project_id: int
    task_id: int


class TimeEntryResponse(BaseModel):
    id: int
    project: str
    task: str
    spent_date: date
    hours: float
    is_running: bool


class TimerResponse(BaseModel):
    """Running timer state as shown in the status bar."""

    running: bool
    status_text: str
    entry: TimeEntryResponse | None = None
    action: str | None = None  # "started", "stopped", "select_project"


class ProjectResponse(BaseModel):
    id: int
    name: str
    client_name: str


class TaskResponse(BaseModel):
    id: int
    name: str
