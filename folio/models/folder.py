"""Folder model."""

from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func
from ..database import Base


class Folder(Base):
    """Top-level folder. Its owner lives in the relationship store, not here."""

    __tablename__ = "folders"

    id = Column(String(64), primary_key=True)
    name = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
