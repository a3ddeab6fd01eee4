"""
Repository interfaces for form registrations and field schemas.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

from app.models.database_models import FormDefinition, RecordSchema


class SchemaRepository(ABC):
    """Persistence for record-type schemas, one row per (tenant, record type)."""

    @abstractmethod
    def find(self, tenant_id: str, record_type: str) -> Optional[RecordSchema]:
        """Return the stored schema, or None when no row exists."""

    @abstractmethod
    def insert_if_absent(
        self,
        tenant_id: str,
        record_type: str,
        properties: Dict[str, Dict[str, Any]],
        required: List[str]
    ) -> Tuple[RecordSchema, bool]:
        """
        Atomically create the schema row unless one already exists.

        Returns:
            Tuple of (stored schema, whether this call created it)
        """

    @abstractmethod
    def set_field(
        self,
        tenant_id: str,
        record_type: str,
        field_name: str,
        definition: Dict[str, Any],
        required: bool = False
    ) -> Optional[RecordSchema]:
        """
        Atomically set one property and optionally add it to `required`.

        Returns:
            Updated schema, or None when no row exists
        """

    @abstractmethod
    def remove_field(
        self,
        tenant_id: str,
        record_type: str,
        field_name: str
    ) -> Optional[RecordSchema]:
        """
        Atomically drop one property and pull it from `required`.

        Returns:
            Updated schema, or None when no row exists
        """


class FormRepository(ABC):
    """Persistence for form registrations, one row per (tenant, form id)."""

    @abstractmethod
    def find(self, tenant_id: str, form_id: str) -> Optional[FormDefinition]:
        """Return the registration, or None."""

    @abstractmethod
    def upsert_defaults(self, tenant_id: str, forms: Sequence[Tuple[str, str]]) -> None:
        """
        Create or refresh built-in registrations.

        Existing default rows only get their title and updated_at refreshed;
        rows registered as custom are left untouched.

        Args:
            tenant_id: Tenant identifier
            forms: (form_id, form_title) pairs
        """

    @abstractmethod
    def insert_custom(self, form: FormDefinition) -> FormDefinition:
        """Insert a custom registration; a duplicate identity is an error."""

    @abstractmethod
    def list_for_tenant(self, tenant_id: str) -> List[FormDefinition]:
        """Return all registrations of a tenant, default-first then by title."""
