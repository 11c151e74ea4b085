"""Project and task picker endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from api.dependencies import get_session, verify_api_key
from api.models.responses import ErrorCodes, ProjectResponse, TaskResponse
from api.routes.timer import harvest_error
from core.errors import HarvestAPIError
from services.session import HarvestSession

router = APIRouter(prefix="/v1/projects", dependencies=[Depends(verify_api_key)])


@router.get("", response_model=list[ProjectResponse])
async def list_projects(
    refresh: bool = Query(False, description="Bypass the cached project list"),
    session: HarvestSession = Depends(get_session),
):
    """Trackable projects, sorted by name."""
    try:
        projects = await session.refresh_projects(force=refresh)
    except HarvestAPIError as e:
        raise harvest_error(e)

    return [
        ProjectResponse(
            id=project.id,
            name=project.name,
            client_name=project.client.name if project.client else "No Client",
        )
        for project in projects
    ]


@router.get("/{project_id}/tasks", response_model=list[TaskResponse])
async def list_project_tasks(project_id: int, session: HarvestSession = Depends(get_session)):
    """Tasks that can be tracked on a project."""
    try:
        assignments = await session.project_tasks(project_id)
    except HarvestAPIError as e:
        raise harvest_error(e)

    if not assignments:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "error": "No tasks found for this project.",
                "code": ErrorCodes.NO_TASKS,
                "details": [],
            },
        )
    return [TaskResponse(id=a.task.id, name=a.task.name) for a in assignments]
