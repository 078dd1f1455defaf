"""
Object read endpoints and bulk asset delete.

Each route accepts every verb and dispatches on the method itself so that
unsupported verbs get the same ``{"error": ...}`` body as every other error.
"""

from __future__ import annotations

import json

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from retention_service.core.exceptions import (
    BASE_HEADERS,
    BadRequestError,
    MethodNotAllowedError,
)
from retention_service.core.state import get_app_state
from retention_service.logging import get_logger
from retention_service.models import Collection
from retention_service.schemas import DeleteAssetsRequest, DeleteAssetsResponse

router = APIRouter()

ALL_METHODS = ["GET", "HEAD", "OPTIONS", "POST", "PUT", "DELETE", "PATCH"]


async def _serve(collection: Collection, request: Request) -> Response:
    retrieval = get_app_state().retrieval
    method = request.method

    if method == "OPTIONS":
        return retrieval.preflight(request.headers.get("origin"))
    if method not in ("GET", "HEAD"):
        raise MethodNotAllowedError(method)

    key = request.query_params.get("id")
    if method == "HEAD":
        return await retrieval.fetch_metadata_only(collection, key)
    return await retrieval.fetch_object(collection, key)


@router.api_route("/asset", methods=ALL_METHODS)
async def asset(request: Request) -> Response:
    """Serve an asset by ``?id=``. GET returns bytes, HEAD headers only."""
    return await _serve(Collection.ASSETS, request)


@router.api_route("/share", methods=ALL_METHODS)
async def share(request: Request) -> Response:
    """Serve a share document by ``?id=``."""
    return await _serve(Collection.SHARES, request)


@router.api_route(
    "/assets/delete",
    methods=ALL_METHODS,
    response_model=DeleteAssetsResponse,
)
async def delete_assets(request: Request) -> Response:
    """
    Delete a batch of assets by id.

    Deletes run one at a time. A failing id is logged and skipped; the
    response counts the ids whose delete call succeeded.
    """
    state = get_app_state()
    if request.method == "OPTIONS":
        return state.retrieval.preflight(request.headers.get("origin"), methods="POST,OPTIONS")
    if request.method != "POST":
        raise MethodNotAllowedError(request.method)

    body = await request.body()
    if not body:
        raise BadRequestError("Missing body")
    try:
        payload = DeleteAssetsRequest.model_validate(json.loads(body))
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
        raise BadRequestError("Invalid JSON payload") from e

    ids = payload.normalized_ids()
    if not ids:
        raise BadRequestError("No asset ids provided")

    logger = get_logger(__name__)
    store = state.collections[Collection.ASSETS]
    deleted = 0
    for asset_id in ids:
        try:
            await store.delete(asset_id)
            deleted += 1
        except Exception as e:
            logger.warning(
                f"Failed to delete asset {asset_id}",
                extra={"key": asset_id, "error": str(e), "error_type": type(e).__name__},
            )

    logger.info("Bulk asset delete finished", extra={"requested": len(ids), "deleted": deleted})
    return JSONResponse(
        content=DeleteAssetsResponse(deleted=deleted).model_dump(),
        headers=BASE_HEADERS,
    )
