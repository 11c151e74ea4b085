"""Tests for SQLite request logging."""

from api.logging import RequestLog, log_request
from core.database import get_connection


def test_log_request_writes_request_and_details(tmp_path):
    db_path = tmp_path / "logs" / "requests.db"
    log = RequestLog(
        endpoint="/v1/queries/render",
        method="POST",
        query_source="LIST TODAY",
        query_type="LIST",
        execution_state="parse_failed",
        status_code=200,
    )
    log.details.append(("query_error", "Query is too short."))
    log_request(log, db_path=db_path)

    conn = get_connection(db_path)
    try:
        row = conn.execute(
            "SELECT endpoint, query_type, execution_state FROM api_requests WHERE request_id = ?",
            (log.request_id,),
        ).fetchone()
        details = conn.execute(
            "SELECT detail_type, message FROM api_request_details WHERE request_id = ?",
            (log.request_id,),
        ).fetchall()
    finally:
        conn.close()

    assert tuple(row) == ("/v1/queries/render", "LIST", "parse_failed")
    assert [tuple(d) for d in details] == [("query_error", "Query is too short.")]
