"""
Draft document model.

A draft is the auto-saved edit buffer of one record, stored under the edit
session id (``<entity>:<record id>``).
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin(BaseModel):
    """Mixin providing timestamp fields for models."""

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class Draft(TimestampMixin):
    """Auto-saved edit buffer of one record."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="_id")
    entity: str = ""
    payload: Any = None
    revision: int = 0

    @staticmethod
    def entity_of(session_id: str) -> str:
        """``candidate:42`` -> ``candidate``; ids without a prefix have no entity."""
        entity, sep, _ = session_id.partition(":")
        return entity if sep else ""
