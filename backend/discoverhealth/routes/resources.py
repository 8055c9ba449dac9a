"""
DiscoverHealth Backend — Healthcare Resource Route Handlers
=============================================================

What:  Region search, resource creation, recommendations and reviews.
How:   Thin handlers: extract path/body, delegate to the services, shape the
       response. Mutating routes depend on require_login, which rejects
       anonymous callers with 401 before any field rule runs.

Order of checks on mutating routes:
    1. JSON decoding (400): FastAPI reads the body before resolving any
       dependency, so an undecodable body is a 400 even without a session
    2. require_login (401)
    3. body types, then field rules in the services (400)

    GET  /resources/{region}
    POST /resources
    POST /resources/{resource_id}/recommend
    POST /resources/{resource_id}/reviews
"""

import logging
from typing import List

from fastapi import APIRouter, Depends

from discoverhealth.daos.session_dao import SessionData
from discoverhealth.routes.deps import get_services, require_login
from discoverhealth.schemas.common import ErrorResponse, MessageResponse
from discoverhealth.schemas.resource import (
    ResourceCreate,
    ResourceCreated,
    ResourceResponse,
    ReviewCreate,
    ReviewCreated,
)
from discoverhealth.services import Services

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/resources", tags=["Resources"])

_AUTH_RESPONSES = {401: {"description": "Not logged in", "model": ErrorResponse}}


@router.get(
    "/{region}",
    response_model=List[ResourceResponse],
    responses={
        400: {"description": "Invalid region", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List healthcare resources in a region",
    description="Exact, case-sensitive match on region. Returns an empty list when nothing matches.",
)
async def search_resources(
    region: str,
    services: Services = Depends(get_services),
) -> List[ResourceResponse]:
    return await services.resources.search_by_region(region)


@router.post(
    "",
    status_code=201,
    response_model=ResourceCreated,
    responses={
        400: {"description": "Validation error", "model": ErrorResponse},
        **_AUTH_RESPONSES,
    },
    summary="Add a healthcare resource",
)
async def create_resource(
    payload: ResourceCreate,
    session: SessionData = Depends(require_login),
    services: Services = Depends(get_services),
) -> ResourceCreated:
    resource_id = await services.resources.create(payload, session)
    return ResourceCreated(id=resource_id)


@router.post(
    "/{resource_id}/recommend",
    response_model=MessageResponse,
    responses={
        404: {"description": "Resource not found", "model": ErrorResponse},
        **_AUTH_RESPONSES,
    },
    summary="Recommend a resource",
)
async def recommend_resource(
    resource_id: int,
    session: SessionData = Depends(require_login),
    services: Services = Depends(get_services),
) -> MessageResponse:
    await services.resources.recommend(resource_id)
    logger.info("User %s recommended resource %s", session.user_id, resource_id)
    return MessageResponse(message="Recommendation added")


@router.post(
    "/{resource_id}/reviews",
    status_code=201,
    response_model=ReviewCreated,
    responses={
        400: {"description": "Empty review", "model": ErrorResponse},
        404: {"description": "Resource not found", "model": ErrorResponse},
        **_AUTH_RESPONSES,
    },
    summary="Review a resource",
)
async def create_review(
    resource_id: int,
    payload: ReviewCreate,
    session: SessionData = Depends(require_login),
    services: Services = Depends(get_services),
) -> ReviewCreated:
    review_id = await services.reviews.create(resource_id, payload.review, session)
    return ReviewCreated(id=review_id)
