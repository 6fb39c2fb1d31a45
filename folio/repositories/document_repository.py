"""Repository for document rows."""

from ..exceptions import DocumentNotFoundError
from ..models.document import Document
from .base import BaseRepository


class DocumentRepository(BaseRepository[Document]):
    model_class = Document
    not_found_error = DocumentNotFoundError

    def create(self, document_id: str, name: str, parent: str = "") -> Document:
        return self.add(Document(id=document_id, name=name, parent=parent or ""))
