"""HQL query evaluation endpoint."""

import time

from fastapi import APIRouter, Depends, HTTPException, Request, status

from api.dependencies import get_rewriter, get_session, verify_api_key
from api.logging import RequestLog, safe_log_request
from api.models.responses import ErrorCodes, QueryRequest, QueryResponse
from services.documents import BlockLocation, VaultDocumentRewriter
from services.executor import ExecutionState, execute
from services.session import HarvestSession

router = APIRouter(prefix="/v1")


def get_client_ip(request: Request) -> str:
    """Extract client IP from request, handling proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def block_location(body: QueryRequest) -> BlockLocation | None:
    """Block location for a static freeze, if the host sent one."""
    if body.document_id is None or body.line_start is None or body.line_end is None:
        return None
    if body.line_end < body.line_start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "Invalid block location",
                "code": ErrorCodes.INVALID_REQUEST,
                "details": ["line_end must not be before line_start"],
            },
        )
    return BlockLocation(
        document_id=body.document_id, line_start=body.line_start, line_end=body.line_end
    )


@router.post("/queries/render", response_model=QueryResponse)
async def render_query_endpoint(
    request: Request,
    body: QueryRequest,
    session: HarvestSession = Depends(get_session),
    rewriter: VaultDocumentRewriter = Depends(get_rewriter),
    _api_key: str = Depends(verify_api_key),
):
    """
    Evaluate one HQL block.

    Parse, fetch and rewrite failures are reported in the response display,
    not as HTTP errors: the host replaces the block with whatever is returned.
    """
    start_time = time.time()

    request_log = RequestLog(
        endpoint="/v1/queries/render",
        method="POST",
        client_ip=get_client_ip(request),
        query_source=body.source,
    )

    try:
        result = await execute(
            body.source,
            session.fetch_entries,
            rewriter=rewriter,
            block=block_location(body),
            today=body.today,
        )

        request_log.status_code = 200
        request_log.execution_state = result.state.value
        if result.query is not None:
            request_log.query_type = result.query.type.value
            request_log.from_date = result.query.from_iso
            request_log.to_date = result.query.to_iso
        if result.state == ExecutionState.DONE:
            request_log.entries_fetched = result.entry_count
            request_log.total_hours = result.total_hours
        if result.failed:
            detail_type = {
                ExecutionState.PARSE_FAILED: "query_error",
                ExecutionState.FETCH_FAILED: "harvest_error",
                ExecutionState.REWRITE_FAILED: "rewrite",
            }[result.state]
            request_log.details.append((detail_type, result.display.children[0].text))
        elif result.rewritten:
            request_log.details.append(("rewrite", f"Froze block in {body.document_id}"))

        return QueryResponse(
            state=result.state.value,
            failed=result.failed,
            query_type=result.query.type.value if result.query else None,
            from_date=result.query.from_date if result.query else None,
            to_date=result.query.to_date if result.query else None,
            display=result.display.to_dict(),
            markup=result.markup,
            rewritten=result.rewritten,
        )

    except HTTPException as e:
        request_log.status_code = e.status_code
        if isinstance(e.detail, dict):
            request_log.error_code = e.detail.get("code")
            request_log.error_message = e.detail.get("error")
        else:
            request_log.error_message = str(e.detail)
        raise

    except Exception as e:
        request_log.status_code = 500
        request_log.error_code = ErrorCodes.INTERNAL_ERROR
        request_log.error_message = str(e)

        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "Internal server error",
                "code": ErrorCodes.INTERNAL_ERROR,
                "details": [],
            },
        )

    finally:
        request_log.processing_time_ms = int((time.time() - start_time) * 1000)
        safe_log_request(request_log)
