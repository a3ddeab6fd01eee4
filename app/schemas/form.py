"""
Pydantic schemas for form registry endpoints.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.models.database_models import FormDefinition


class CreateFormRequest(BaseModel):
    """Request schema for registering a custom record type."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    customer_id: Optional[str] = Field(None, description="Tenant identifier")
    form_id: Optional[str] = Field(None, description="Record-type key, stored lower-cased")
    form_title: Optional[str] = Field(None, description="Display name")
    integration_key: Optional[str] = Field(None, description="Connection that owns the record type's data")


class FormResponse(BaseModel):
    """A form registration as returned by the API."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "customerId": "T1",
                "formId": "activities",
                "formTitle": "Activities",
                "type": "default",
                "integrationKey": None,
                "createdAt": "2024-01-15T10:30:45.123456",
                "updatedAt": "2024-01-15T10:30:45.123456"
            }
        }
    )

    customer_id: str
    form_id: str
    form_title: str
    type: str
    integration_key: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_form(cls, form: FormDefinition) -> "FormResponse":
        return cls(
            customer_id=form.tenant_id,
            form_id=form.form_id,
            form_title=form.form_title,
            type=form.type,
            integration_key=form.integration_key,
            created_at=form.created_at,
            updated_at=form.updated_at
        )
