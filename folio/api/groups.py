"""Group routes."""

from typing import Optional

from fastapi import APIRouter, Depends

from ..core.deadline import Deadline
from ..schemas import CreateGroupRequest, CreateGroupResponse
from ..services import AuthorizationCoordinator
from .deps import get_coordinator, get_deadline

router = APIRouter(prefix="/groups", tags=["groups"])


@router.post("", response_model=CreateGroupResponse, status_code=201)
def create_group(
    data: CreateGroupRequest,
    coordinator: AuthorizationCoordinator = Depends(get_coordinator),
    deadline: Optional[Deadline] = Depends(get_deadline),
):
    """Create a group. No caller identity is required."""
    return coordinator.create_group(data, deadline)
