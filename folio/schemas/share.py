"""Share schemas."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from ..relationships.tuples import OBJECT_TYPES, split_object


class ShareObjectRequest(BaseModel):
    """Grant *relation* on *object* to *user_id* (JSON field ``user``)."""
    object: str
    relation: Literal["owner", "viewer", "member", "parent"]
    user_id: str = Field(alias="user")

    @field_validator('object')
    @classmethod
    def validate_object(cls, v: str) -> str:
        v = v.strip()
        object_type, _ = split_object(v)
        if object_type not in OBJECT_TYPES:
            raise ValueError(
                f"Object type must be one of {sorted(OBJECT_TYPES)}, got '{object_type}'"
            )
        return v

    @field_validator('user_id')
    @classmethod
    def validate_user_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("user cannot be empty")
        return v

    class Config:
        populate_by_name = True


class ShareObjectResponse(BaseModel):
    pass
