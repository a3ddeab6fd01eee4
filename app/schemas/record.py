"""
Pydantic schemas for record event endpoints.
"""

from typing import Any, Dict, Literal

from pydantic import BaseModel, Field


class RecordEventRequest(BaseModel):
    """A record change submitted against a record type."""

    type: Literal["created", "updated", "deleted"] = Field(..., description="Kind of change")
    data: Dict[str, Any] = Field(default_factory=dict, description="Record values keyed by field name")
