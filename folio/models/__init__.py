"""Database models."""

from .folder import Folder
from .document import Document
from .group import GroupMember
from .write_intent import WriteIntent

__all__ = ["Folder", "Document", "GroupMember", "WriteIntent"]
