"""Data access repositories."""

from .base import BaseRepository
from .folder_repository import FolderRepository
from .document_repository import DocumentRepository
from .group_repository import GroupRepository
from .write_intent_repository import WriteIntentRepository

__all__ = [
    "BaseRepository",
    "FolderRepository",
    "DocumentRepository",
    "GroupRepository",
    "WriteIntentRepository",
]
