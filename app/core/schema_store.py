"""
Schema Store.
Lazily creates record-type schemas from the default catalog and applies
field-level mutations while keeping the schema structurally valid.
"""

from typing import Optional
import logging

from app.core.default_schemas import DefaultSchemaCatalog, default_catalog, minimal_schema
from app.core.exceptions import NotFoundException, ValidationException
from app.core.repositories import SchemaRepository
from app.core.schema_metrics import SchemaMetrics, schema_metrics
from app.models.database_models import SELECT_TYPE, FieldDefinition, RecordSchema, normalize_schema
from app.schemas.record_schema import FieldRequest

logger = logging.getLogger(__name__)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def validate_field_request(field: Optional[FieldRequest]) -> FieldRequest:
    """
    Check that a field request can be stored.

    Raises:
        ValidationException: If name, type or title is missing, or a select
            field comes without options
    """
    if field is None or _is_blank(field.name) or _is_blank(field.type) or _is_blank(field.title):
        raise ValidationException(
            "Invalid field data",
            details={"required_attributes": ["name", "type", "title"]}
        )
    if field.type == SELECT_TYPE and not field.enum:
        raise ValidationException(
            "Select fields must have options",
            details={"field": field.name}
        )
    return field


class SchemaStore:
    """Creation-on-first-access and mutation of record-type schemas."""

    def __init__(
        self,
        repository: SchemaRepository,
        catalog: Optional[DefaultSchemaCatalog] = None,
        metrics: Optional[SchemaMetrics] = None
    ):
        self.repository = repository
        self.catalog = catalog or default_catalog
        self.metrics = metrics or schema_metrics

    def get_or_create(self, tenant_id: str, record_type: str) -> RecordSchema:
        """
        Return the schema for a (tenant, record type), creating it if absent.

        New schemas are seeded from the catalog, or from the minimal
        `{id, name}` schema when the catalog has no entry. Creation is an
        atomic insert-if-absent, so concurrent callers end up with one row.

        Args:
            tenant_id: Tenant identifier
            record_type: Lower-cased record-type key

        Returns:
            Stored schema
        """
        schema = self.repository.find(tenant_id, record_type)
        if schema:
            return schema

        seed = self.catalog.lookup(record_type)
        from_catalog = seed is not None
        if not from_catalog:
            logger.warning(
                f"No default schema found for form type: {record_type}, using minimal schema",
                extra={"tenant_id": tenant_id, "record_type": record_type, "catalog_miss": True}
            )
            seed = minimal_schema()

        properties, required = normalize_schema(seed["properties"], seed["required"])
        schema, created = self.repository.insert_if_absent(tenant_id, record_type, properties, required)

        if created:
            self.metrics.record_creation(tenant_id, record_type, from_catalog)
            logger.info(
                f"Schema created for {tenant_id}/{record_type} "
                f"({'catalog' if from_catalog else 'minimal default'}) with {len(schema.properties)} fields"
            )
        return schema

    def add_field(self, tenant_id: str, record_type: str, field: Optional[FieldRequest]) -> RecordSchema:
        """
        Insert or replace a field, creating the schema first if needed.

        Args:
            tenant_id: Tenant identifier
            record_type: Lower-cased record-type key
            field: Requested field

        Returns:
            Updated schema

        Raises:
            ValidationException: If the field request is malformed
        """
        field = validate_field_request(field)
        definition = FieldDefinition.from_request(
            field_type=field.type,
            title=field.title,
            enum=field.enum,
            default=field.default
        ).to_dict()

        self.get_or_create(tenant_id, record_type)
        schema = self.repository.set_field(
            tenant_id, record_type, field.name, definition, required=bool(field.required)
        )
        if schema is None:
            raise NotFoundException("Schema", f"{tenant_id}/{record_type}")

        logger.info(f"Field '{field.name}' set on schema {tenant_id}/{record_type} (version {schema.version})")
        return schema

    def remove_field(self, tenant_id: str, record_type: str, field_name: str) -> RecordSchema:
        """
        Remove a field and drop it from the required list.

        Removing a field that does not exist is a no-op.

        Raises:
            NotFoundException: If no schema row exists
        """
        schema = self.repository.remove_field(tenant_id, record_type, field_name)
        if schema is None:
            raise NotFoundException("Schema", f"{tenant_id}/{record_type}")

        logger.info(f"Field '{field_name}' removed from schema {tenant_id}/{record_type} (version {schema.version})")
        return schema
