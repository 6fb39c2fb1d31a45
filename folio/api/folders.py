"""Folder routes. Authorization lives in the coordinator, not here."""

from typing import List, Optional

from fastapi import APIRouter, Depends

from ..core.auth import Caller, optional_caller
from ..core.deadline import Deadline
from ..schemas import CreateFolderRequest, CreateFolderResponse, FolderResponse
from ..services import AuthorizationCoordinator
from .deps import get_coordinator, get_deadline

router = APIRouter(prefix="/folders", tags=["folders"])


@router.post("", response_model=CreateFolderResponse, status_code=201)
def create_folder(
    data: CreateFolderRequest,
    coordinator: AuthorizationCoordinator = Depends(get_coordinator),
    caller: Optional[Caller] = Depends(optional_caller),
    deadline: Optional[Deadline] = Depends(get_deadline),
):
    """Create a folder owned by the caller."""
    return coordinator.create_folder(data, caller, deadline)


@router.get("", response_model=List[FolderResponse])
def list_folders(
    coordinator: AuthorizationCoordinator = Depends(get_coordinator),
    caller: Optional[Caller] = Depends(optional_caller),
    deadline: Optional[Deadline] = Depends(get_deadline),
):
    """List folders the caller can view."""
    return coordinator.list_folders(caller, deadline)


@router.get("/{folder_id}", response_model=FolderResponse)
def get_folder(
    folder_id: str,
    coordinator: AuthorizationCoordinator = Depends(get_coordinator),
    caller: Optional[Caller] = Depends(optional_caller),
    deadline: Optional[Deadline] = Depends(get_deadline),
):
    return coordinator.get_folder(folder_id, caller, deadline)
