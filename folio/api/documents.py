"""Document routes. Authorization lives in the coordinator, not here."""

from typing import List, Optional

from fastapi import APIRouter, Depends

from ..core.auth import Caller, optional_caller
from ..core.deadline import Deadline
from ..schemas import CreateDocumentRequest, CreateDocumentResponse, DocumentResponse
from ..services import AuthorizationCoordinator
from .deps import get_coordinator, get_deadline

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("", response_model=CreateDocumentResponse, status_code=201)
def create_document(
    data: CreateDocumentRequest,
    coordinator: AuthorizationCoordinator = Depends(get_coordinator),
    caller: Optional[Caller] = Depends(optional_caller),
    deadline: Optional[Deadline] = Depends(get_deadline),
):
    """Create a document owned by the caller, optionally inside a folder."""
    return coordinator.create_document(data, caller, deadline)


@router.get("", response_model=List[DocumentResponse])
def list_documents(
    coordinator: AuthorizationCoordinator = Depends(get_coordinator),
    caller: Optional[Caller] = Depends(optional_caller),
    deadline: Optional[Deadline] = Depends(get_deadline),
):
    """List documents the caller can view, directly or through a folder or group."""
    return coordinator.list_documents(caller, deadline)


@router.get("/{document_id}", response_model=DocumentResponse)
def get_document(
    document_id: str,
    coordinator: AuthorizationCoordinator = Depends(get_coordinator),
    caller: Optional[Caller] = Depends(optional_caller),
    deadline: Optional[Deadline] = Depends(get_deadline),
):
    return coordinator.get_document(document_id, caller, deadline)
