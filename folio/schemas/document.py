"""Document request and response schemas."""

from pydantic import BaseModel, field_validator


class CreateDocumentRequest(BaseModel):
    """Schema for creating a document.

    ``parent`` is a folder id; empty means the document has no parent.
    """
    name: str
    parent: str = ""

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Document name cannot be empty")
        return v

    @field_validator('parent')
    @classmethod
    def validate_parent(cls, v: str) -> str:
        v = v.strip()
        # Accept "folder:<id>" as well as a bare id; the row stores the bare id.
        if v.startswith("folder:"):
            v = v[len("folder:"):]
        return v


class CreateDocumentResponse(BaseModel):
    id: str


class DocumentResponse(BaseModel):
    """Schema for document metadata response."""
    id: str
    name: str
    parent: str = ""

    class Config:
        from_attributes = True
