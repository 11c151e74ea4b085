"""API Pydantic models."""

from .responses import (
    ErrorCodes,
    ErrorResponse,
    HealthResponse,
    ProjectResponse,
    QueryRequest,
    QueryResponse,
    TaskResponse,
    TimeEntryResponse,
    TimerResponse,
    TimerStartRequest,
)

__all__ = [
    "HealthResponse",
    "ErrorResponse",
    "ErrorCodes",
    "QueryRequest",
    "QueryResponse",
    "TimerStartRequest",
    "TimeEntryResponse",
    "TimerResponse",
    "ProjectResponse",
    "TaskResponse",
]
