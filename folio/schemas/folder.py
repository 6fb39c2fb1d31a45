"""Folder request and response schemas."""

from pydantic import BaseModel, field_validator


class CreateFolderRequest(BaseModel):
    """Schema for creating a folder."""
    name: str

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Folder name cannot be empty")
        return v


class CreateFolderResponse(BaseModel):
    id: str


class FolderResponse(BaseModel):
    """Schema for folder metadata response."""
    id: str
    name: str

    class Config:
        from_attributes = True
