"""Group schemas."""

from typing import List

from pydantic import BaseModel, field_validator

from ..relationships.tuples import USER, subject_ref, subject_type


class CreateGroupRequest(BaseModel):
    """Schema for creating a group.

    Members are normalized to subject form (``bob`` -> ``user:bob``) and kept
    in the order given; duplicates are dropped after normalizing, so each
    member yields exactly one row and one fact.
    """
    name: str
    members: List[str] = []

    @field_validator('members')
    @classmethod
    def validate_members(cls, v: List[str]) -> List[str]:
        seen: list[str] = []
        for member in v:
            member = member.strip()
            if not member:
                raise ValueError("Group members cannot be empty strings")
            member = subject_ref(member)
            if subject_type(member) != USER:
                raise ValueError(f"Group members must be users, got '{member}'")
            if member not in seen:
                seen.append(member)
        return seen


class CreateGroupResponse(BaseModel):
    id: str
