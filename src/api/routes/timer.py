"""Timer endpoints: status, start, stop, toggle."""

from fastapi import APIRouter, Depends, HTTPException, status

from api.dependencies import get_session, verify_api_key
from api.models.responses import (
    ErrorCodes,
    TimeEntryResponse,
    TimerResponse,
    TimerStartRequest,
)
from core.errors import HarvestAPIError
from models.harvest import TimeEntry
from services.session import HarvestSession

router = APIRouter(prefix="/v1/timer", dependencies=[Depends(verify_api_key)])


def harvest_error(e: HarvestAPIError) -> HTTPException:
    """Map a Harvest API failure to a 502 with the standard error body."""
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail={
            "error": e.message,
            "code": ErrorCodes.HARVEST_API_ERROR,
            "details": [f"Harvest status: {e.status_code}"] if e.status_code else [],
        },
    )


def entry_response(entry: TimeEntry | None) -> TimeEntryResponse | None:
    if entry is None:
        return None
    return TimeEntryResponse(
        id=entry.id,
        project=entry.project.name,
        task=entry.task.name,
        spent_date=entry.spent_date,
        hours=entry.hours,
        is_running=entry.is_running,
    )


def timer_response(session: HarvestSession, action: str | None = None) -> TimerResponse:
    return TimerResponse(
        running=session.running_timer is not None,
        status_text=session.status_text(),
        entry=entry_response(session.running_timer),
        action=action,
    )


@router.get("", response_model=TimerResponse)
async def get_timer(session: HarvestSession = Depends(get_session)):
    """Refresh and return the running timer."""
    try:
        await session.refresh_running_timer()
    except HarvestAPIError as e:
        raise harvest_error(e)
    return timer_response(session)


@router.post("/start", response_model=TimerResponse)
async def start_timer(body: TimerStartRequest, session: HarvestSession = Depends(get_session)):
    """Start (or restart today's) timer for a project/task."""
    try:
        await session.start_timer(body.project_id, body.task_id)
    except HarvestAPIError as e:
        raise harvest_error(e)
    return timer_response(session, action="started")


@router.post("/stop", response_model=TimerResponse)
async def stop_timer(session: HarvestSession = Depends(get_session)):
    """Stop the running timer."""
    try:
        await session.refresh_running_timer()
        stopped = await session.stop_timer()
    except HarvestAPIError as e:
        raise harvest_error(e)

    if stopped is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "error": "No timer is currently running.",
                "code": ErrorCodes.NO_RUNNING_TIMER,
                "details": [],
            },
        )
    return timer_response(session, action="stopped")


@router.post("/toggle", response_model=TimerResponse)
async def toggle_timer(session: HarvestSession = Depends(get_session)):
    """
    Stop the running timer, or ask the host to open the project picker.
    """
    try:
        stopped = await session.toggle_timer()
    except HarvestAPIError as e:
        raise harvest_error(e)
    return timer_response(session, action="stopped" if stopped else "select_project")
