"""
Schema Service.
Entry point for reading and mutating record-type schemas; every operation
checks the form registry before the schema store is touched.
"""

from typing import Any, Dict, Optional
import logging

from app.core.exceptions import NotFoundException, ValidationException
from app.core.form_registry import FormRegistry
from app.core.schema_store import SchemaStore, validate_field_request
from app.models.database_models import FormDefinition
from app.schemas.record_schema import FieldRequest

logger = logging.getLogger(__name__)


class SchemaService:
    """Service for record-type schema operations."""

    def __init__(self, form_registry: FormRegistry, schema_store: SchemaStore):
        self.form_registry = form_registry
        self.schema_store = schema_store

    def _require_form(self, tenant_id: str, record_type: str) -> FormDefinition:
        form = self.form_registry.get(tenant_id, record_type)
        if form is None:
            logger.info(f"Schema request for unregistered form {tenant_id}/{record_type}")
            raise NotFoundException("Form", record_type)
        return form

    def get_schema(self, tenant_id: str, record_type: str) -> Dict[str, Any]:
        """
        Get the schema of a registered record type, creating it on first access.

        Args:
            tenant_id: Tenant identifier
            record_type: Record-type key (case-insensitive)

        Returns:
            JSON-Schema shaped dictionary

        Raises:
            NotFoundException: If the record type is not registered for the tenant
        """
        record_type = record_type.lower()
        self._require_form(tenant_id, record_type)
        return self.schema_store.get_or_create(tenant_id, record_type).to_json_schema()

    def add_field(self, tenant_id: str, record_type: str, field: Optional[FieldRequest]) -> Dict[str, Any]:
        """
        Add or replace a field on a registered record type.

        Raises:
            ValidationException: If the field is malformed
            NotFoundException: If the record type is not registered for the tenant
        """
        record_type = record_type.lower()
        validate_field_request(field)
        self._require_form(tenant_id, record_type)
        return self.schema_store.add_field(tenant_id, record_type, field).to_json_schema()

    def remove_field(self, tenant_id: str, record_type: str, field_name: Optional[str]) -> Dict[str, Any]:
        """
        Remove a field from a registered record type.

        Raises:
            ValidationException: If no field name is given
            NotFoundException: If the record type is not registered or has no schema yet
        """
        record_type = record_type.lower()
        if not field_name:
            raise ValidationException("Field name is required")
        self._require_form(tenant_id, record_type)
        return self.schema_store.remove_field(tenant_id, record_type, field_name).to_json_schema()
