"""
Cleanup trigger endpoint.

Runs one retention sweep per request. Intended to be hit by an external
scheduler; ``?dryRun=true`` reports what would be deleted without deleting.
"""

from __future__ import annotations

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from retention_service.core.exceptions import (
    BASE_HEADERS,
    MethodNotAllowedError,
    error_response,
)
from retention_service.core.state import get_app_state
from retention_service.logging import get_logger
from retention_service.routers.objects import ALL_METHODS
from retention_service.schemas import SweepReportResponse

router = APIRouter()


@router.api_route("/cleanup", methods=ALL_METHODS, response_model=SweepReportResponse)
async def cleanup(request: Request) -> Response:
    """
    Run a sweep over shares and assets.

    Per-item failures are listed in ``errors`` and still return 200. A sweep
    that cannot start, or that could not list any collection, returns 500.
    """
    if request.method not in ("GET", "POST"):
        raise MethodNotAllowedError(request.method)

    dry_run = request.query_params.get("dryRun") == "true"
    logger = get_logger(__name__)

    try:
        sweeper = get_app_state().sweeper
        report = await sweeper.run_sweep(simulate=dry_run)
    except Exception:
        logger.exception("Cleanup failed", extra={"dry_run": dry_run})
        return error_response(500, "Cleanup failed")

    if report.nothing_listed:
        logger.error(
            "Cleanup failed: no collection could be listed",
            extra={"dry_run": dry_run, "errors": [error.describe() for error in report.errors]},
        )
        return error_response(report.status_code, "Cleanup failed")

    body = SweepReportResponse.model_validate(report.to_dict())
    return JSONResponse(
        content=body.model_dump(by_alias=True),
        status_code=report.status_code,
        headers=BASE_HEADERS,
    )
