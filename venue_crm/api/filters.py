"""
FastAPI router module for saved filters and role default views.

Endpoints:
- GET /filters/role: Current dashboard role
- PUT /filters/role: Switch the dashboard role
- GET /filters/default-view/{filter_type}: Default view for a role (query ?role=)
- GET /filters/{filter_type}: Predefined plus custom filters for a list
- POST /filters: Create or replace a custom filter
- DELETE /filters/{filter_type}/{filter_id}: Delete a custom filter

Predefined filters are read-only: saving under one of their ids leaves them
unchanged and deleting one answers 404.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query

from venue_crm.core.dependencies import FilterServiceDep
from venue_crm.models import ErrorResponse, FilterType, SavedFilter, UserRole

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/filters", tags=["filters"])


# Role routes come first so "/role" is not captured by "/{filter_type}"
@router.get("/role", response_model=UserRole)
def get_role(service: FilterServiceDep):
    return UserRole(role=service.get_current_role())


@router.put("/role", response_model=UserRole)
def put_role(body: UserRole, service: FilterServiceDep):
    service.set_current_role(body.role)
    logger.info(f"Dashboard role set to {body.role}")
    return body


@router.get("/default-view/{filter_type}", response_model=Optional[SavedFilter])
def get_default_view(
    filter_type: FilterType,
    service: FilterServiceDep,
    role: Optional[str] = Query(default=None, description="Defaults to the current role"),
):
    """
    Return the filter a role opens the list with.

    Returns null when the role has no default for this list.
    """
    return service.get_default_view(role or service.get_current_role(), filter_type)


@router.get("/{filter_type}", response_model=List[SavedFilter])
def list_filters(filter_type: FilterType, service: FilterServiceDep):
    return service.get_saved_filters(filter_type)


@router.post("", response_model=SavedFilter)
def save_filter(saved: SavedFilter, service: FilterServiceDep):
    return service.save_filter(saved)


@router.delete(
    "/{filter_type}/{filter_id}",
    responses={404: {"model": ErrorResponse}},
)
def delete_filter(filter_type: FilterType, filter_id: str, service: FilterServiceDep):
    if not service.delete_filter(filter_id, filter_type):
        logger.warning(f"DELETE /filters rejected: no custom filter {filter_id}")
        raise HTTPException(status_code=404, detail=f"Filter not found: {filter_id}")
    return {"deleted": filter_id}
