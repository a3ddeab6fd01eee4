"""
In-memory implementations of the repositories.
Used by the test suite and for local development without PostgreSQL.
Each operation holds one lock, so read-modify-write steps are atomic.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple
from datetime import datetime
import copy
import logging
import threading

from app.core.exceptions import DatabaseException
from app.core.repositories import FormRepository, SchemaRepository
from app.models.database_models import (
    FORM_TYPE_CUSTOM,
    FORM_TYPE_DEFAULT,
    FormDefinition,
    RecordSchema,
    sort_forms
)

logger = logging.getLogger(__name__)


def _new_schema_row(
    tenant_id: str,
    record_type: str,
    properties: Any,
    required: Any
) -> Dict[str, Any]:
    now = datetime.utcnow()
    return {
        "tenant_id": tenant_id,
        "record_type": record_type,
        "properties": copy.deepcopy(properties),
        "required": list(required),
        "version": 1,
        "created_at": now,
        "updated_at": now
    }


def _schema_from_row(row: Dict[str, Any]) -> RecordSchema:
    return RecordSchema(
        tenant_id=row["tenant_id"],
        record_type=row["record_type"],
        properties=copy.deepcopy(row["properties"]),
        required=list(row["required"]),
        version=row["version"],
        created_at=row["created_at"],
        updated_at=row["updated_at"]
    )


class InMemorySchemaRepository(SchemaRepository):
    """
    Field schemas kept in a dictionary keyed by (tenant, record type).

    Rows are stored as raw documents, the same way the `field_schemas`
    table stores JSONB, and are only normalized when read back.
    """

    def __init__(self):
        self._rows: Dict[Tuple[str, str], Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def find(self, tenant_id: str, record_type: str) -> Optional[RecordSchema]:
        with self._lock:
            row = self._rows.get((tenant_id, record_type))
            return _schema_from_row(row) if row else None

    def insert_if_absent(
        self,
        tenant_id: str,
        record_type: str,
        properties: Dict[str, Dict[str, Any]],
        required: List[str]
    ) -> Tuple[RecordSchema, bool]:
        with self._lock:
            key = (tenant_id, record_type)
            existing = self._rows.get(key)
            if existing:
                return _schema_from_row(existing), False
            row = _new_schema_row(tenant_id, record_type, properties, required)
            self._rows[key] = row
            logger.debug(f"Created in-memory schema row {tenant_id}/{record_type}")
            return _schema_from_row(row), True

    def set_field(
        self,
        tenant_id: str,
        record_type: str,
        field_name: str,
        definition: Dict[str, Any],
        required: bool = False
    ) -> Optional[RecordSchema]:
        with self._lock:
            row = self._rows.get((tenant_id, record_type))
            if not row:
                return None
            if not isinstance(row["properties"], dict):
                row["properties"] = {}
            row["properties"][field_name] = copy.deepcopy(definition)
            if required and field_name not in row["required"]:
                row["required"].append(field_name)
            row["version"] += 1
            row["updated_at"] = datetime.utcnow()
            return _schema_from_row(row)

    def remove_field(self, tenant_id: str, record_type: str, field_name: str) -> Optional[RecordSchema]:
        with self._lock:
            row = self._rows.get((tenant_id, record_type))
            if not row:
                return None
            if isinstance(row["properties"], dict):
                row["properties"].pop(field_name, None)
            row["required"] = [name for name in row["required"] if name != field_name]
            row["version"] += 1
            row["updated_at"] = datetime.utcnow()
            return _schema_from_row(row)

    def count(self, tenant_id: Optional[str] = None) -> int:
        """Number of stored rows, optionally for one tenant only."""
        with self._lock:
            if tenant_id is None:
                return len(self._rows)
            return sum(1 for row_tenant, _ in self._rows if row_tenant == tenant_id)

    def raw_row(self, tenant_id: str, record_type: str) -> Optional[Dict[str, Any]]:
        """Stored document as-is, without read normalization."""
        with self._lock:
            row = self._rows.get((tenant_id, record_type))
            return copy.deepcopy(row) if row else None

    def put_raw_row(self, tenant_id: str, record_type: str, properties: Any, required: List[Any]) -> None:
        """Store a document verbatim, bypassing write normalization (legacy rows)."""
        with self._lock:
            self._rows[(tenant_id, record_type)] = _new_schema_row(tenant_id, record_type, properties, required)


class InMemoryFormRepository(FormRepository):
    """Form registrations kept in a dictionary keyed by (tenant, form id)."""

    def __init__(self):
        self._forms: Dict[Tuple[str, str], FormDefinition] = {}
        self._lock = threading.Lock()

    def find(self, tenant_id: str, form_id: str) -> Optional[FormDefinition]:
        with self._lock:
            form = self._forms.get((tenant_id, form_id))
            return copy.deepcopy(form) if form else None

    def upsert_defaults(self, tenant_id: str, forms: Sequence[Tuple[str, str]]) -> None:
        """Insert missing built-in rows; refresh the title of existing default rows only."""
        with self._lock:
            now = datetime.utcnow()
            for form_id, form_title in forms:
                existing = self._forms.get((tenant_id, form_id))
                if existing is None:
                    self._forms[(tenant_id, form_id)] = FormDefinition(
                        tenant_id=tenant_id,
                        form_id=form_id,
                        form_title=form_title,
                        type=FORM_TYPE_DEFAULT,
                        created_at=now,
                        updated_at=now
                    )
                elif existing.type == FORM_TYPE_DEFAULT:
                    existing.form_title = form_title
                    existing.updated_at = now

    def insert_custom(self, form: FormDefinition) -> FormDefinition:
        with self._lock:
            key = (form.tenant_id, form.form_id)
            if key in self._forms:
                raise DatabaseException(f"Duplicate form registration: {form.tenant_id}/{form.form_id}")
            now = datetime.utcnow()
            stored = FormDefinition(
                tenant_id=form.tenant_id,
                form_id=form.form_id,
                form_title=form.form_title,
                type=FORM_TYPE_CUSTOM,
                integration_key=form.integration_key,
                created_at=now,
                updated_at=now
            )
            self._forms[key] = stored
            return copy.deepcopy(stored)

    def list_for_tenant(self, tenant_id: str) -> List[FormDefinition]:
        with self._lock:
            forms = [copy.deepcopy(form) for (form_tenant, _), form in self._forms.items() if form_tenant == tenant_id]
        return sort_forms(forms)
