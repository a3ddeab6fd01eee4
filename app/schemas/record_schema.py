"""
Pydantic schemas for the record-type schema endpoints.
"""

from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional


class FieldRequest(BaseModel):
    """A field to add to a record-type schema, as submitted by the user."""

    name: Optional[str] = Field(None, description="Property name, unique within the schema")
    title: Optional[str] = Field(None, description="Display label")
    type: Optional[str] = Field(None, description="Field type (text, select, email, phone, currency, date, ...)")
    enum: Optional[List[str]] = Field(None, description="Options, required for select fields")
    required: Optional[bool] = Field(False, description="Whether records must provide a value")
    default: Optional[str] = Field(None, description="Default value")


class AddFieldRequest(BaseModel):
    """Request body for adding a field."""

    field: Optional[FieldRequest] = None


class RemoveFieldRequest(BaseModel):
    """Request body for removing a field."""

    model_config = ConfigDict(populate_by_name=True)

    field_name: Optional[str] = Field(None, alias="fieldName")
