"""Pydantic schemas for coordinator requests and responses."""

from .folder import CreateFolderRequest, CreateFolderResponse, FolderResponse
from .document import CreateDocumentRequest, CreateDocumentResponse, DocumentResponse
from .group import CreateGroupRequest, CreateGroupResponse
from .share import ShareObjectRequest, ShareObjectResponse

__all__ = [
    "CreateFolderRequest",
    "CreateFolderResponse",
    "FolderResponse",
    "CreateDocumentRequest",
    "CreateDocumentResponse",
    "DocumentResponse",
    "CreateGroupRequest",
    "CreateGroupResponse",
    "ShareObjectRequest",
    "ShareObjectResponse",
]
