"""Share route."""

from typing import Optional

from fastapi import APIRouter, Depends

from ..core.auth import Caller, optional_caller
from ..core.deadline import Deadline
from ..schemas import ShareObjectRequest, ShareObjectResponse
from ..services import AuthorizationCoordinator
from .deps import get_coordinator, get_deadline

router = APIRouter(tags=["sharing"])


@router.put("/share", response_model=ShareObjectResponse)
def share_object(
    data: ShareObjectRequest,
    coordinator: AuthorizationCoordinator = Depends(get_coordinator),
    caller: Optional[Caller] = Depends(optional_caller),
    deadline: Optional[Deadline] = Depends(get_deadline),
):
    """Grant a relation on an object.

    Under SHARE_POLICY=open (the default) this endpoint checks nothing:
    anyone can grant anything. Set SHARE_POLICY=owner to require ownership.
    """
    return coordinator.share_object(data, caller, deadline)
