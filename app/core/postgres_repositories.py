"""
PostgreSQL implementations of the repositories.
Field mutations are single UPDATE statements on the JSONB document so
concurrent edits of one schema never overwrite each other.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple
from psycopg2.extras import Json
import logging

from app.core.database import DatabaseManager, get_db_manager
from app.core.repositories import FormRepository, SchemaRepository
from app.models.database_models import FORM_TYPE_CUSTOM, FormDefinition, RecordSchema

logger = logging.getLogger(__name__)

SCHEMA_COLUMNS = "tenant_id, record_type, properties, required, version, created_at, updated_at"
FORM_COLUMNS = "tenant_id, form_id, form_title, type, integration_key, created_at, updated_at"


def _schema_from_row(row) -> RecordSchema:
    tenant_id, record_type, properties, required, version, created_at, updated_at = row
    return RecordSchema(
        tenant_id=tenant_id,
        record_type=record_type,
        properties=properties or {},
        required=required or [],
        version=version,
        created_at=created_at,
        updated_at=updated_at
    )


def _form_from_row(row) -> FormDefinition:
    tenant_id, form_id, form_title, form_type, integration_key, created_at, updated_at = row
    return FormDefinition(
        tenant_id=tenant_id,
        form_id=form_id,
        form_title=form_title,
        type=form_type,
        integration_key=integration_key,
        created_at=created_at,
        updated_at=updated_at
    )


class PostgresSchemaRepository(SchemaRepository):
    """Field schemas stored in the `field_schemas` table."""

    def __init__(self, db_manager: Optional[DatabaseManager] = None):
        self.db_manager = db_manager or get_db_manager()

    def find(self, tenant_id: str, record_type: str) -> Optional[RecordSchema]:
        row = self.db_manager.execute_query(
            f"SELECT {SCHEMA_COLUMNS} FROM field_schemas WHERE tenant_id = %s AND record_type = %s",
            (tenant_id, record_type),
            fetch_one=True
        )
        return _schema_from_row(row) if row else None

    def insert_if_absent(
        self,
        tenant_id: str,
        record_type: str,
        properties: Dict[str, Dict[str, Any]],
        required: List[str]
    ) -> Tuple[RecordSchema, bool]:
        with self.db_manager.get_connection() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(f"""
                    INSERT INTO field_schemas (tenant_id, record_type, properties, required)
                    VALUES (%s, %s, %s, %s)
                    ON CONFLICT (tenant_id, record_type) DO NOTHING
                    RETURNING {SCHEMA_COLUMNS}
                    """,
                    (tenant_id, record_type, Json(properties), Json(required))
                )
                row = cursor.fetchone()
                if row:
                    return _schema_from_row(row), True

                # Another writer won the race; its row is committed by now
                logger.debug(f"Schema row already present for {tenant_id}/{record_type}, reading it back")
                cursor.execute(
                    f"SELECT {SCHEMA_COLUMNS} FROM field_schemas WHERE tenant_id = %s AND record_type = %s",
                    (tenant_id, record_type)
                )
                return _schema_from_row(cursor.fetchone()), False
            finally:
                cursor.close()

    def set_field(
        self,
        tenant_id: str,
        record_type: str,
        field_name: str,
        definition: Dict[str, Any],
        required: bool = False
    ) -> Optional[RecordSchema]:
        with self.db_manager.get_connection() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(f"""
                    UPDATE field_schemas
                    SET properties = CASE WHEN jsonb_typeof(properties) = 'object' THEN properties ELSE '{{}}'::jsonb END
                            || jsonb_build_object(%s::text, %s::jsonb),
                        required = CASE
                            WHEN %s AND NOT (required ? %s::text)
                            THEN required || jsonb_build_array(%s::text)
                            ELSE required
                        END,
                        version = version + 1,
                        updated_at = CURRENT_TIMESTAMP
                    WHERE tenant_id = %s AND record_type = %s
                    RETURNING {SCHEMA_COLUMNS}
                    """,
                    (
                        field_name,
                        Json(definition),
                        bool(required),
                        field_name,
                        field_name,
                        tenant_id,
                        record_type
                    )
                )
                row = cursor.fetchone()
                return _schema_from_row(row) if row else None
            finally:
                cursor.close()

    def remove_field(
        self,
        tenant_id: str,
        record_type: str,
        field_name: str
    ) -> Optional[RecordSchema]:
        with self.db_manager.get_connection() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(f"""
                    UPDATE field_schemas
                    SET properties = CASE WHEN jsonb_typeof(properties) = 'object' THEN properties ELSE '{{}}'::jsonb END
                            - %s::text,
                        required = required - %s::text,
                        version = version + 1,
                        updated_at = CURRENT_TIMESTAMP
                    WHERE tenant_id = %s AND record_type = %s
                    RETURNING {SCHEMA_COLUMNS}
                    """,
                    (field_name, field_name, tenant_id, record_type)
                )
                row = cursor.fetchone()
                return _schema_from_row(row) if row else None
            finally:
                cursor.close()


class PostgresFormRepository(FormRepository):
    """Form registrations stored in the `form_definitions` table."""

    def __init__(self, db_manager: Optional[DatabaseManager] = None):
        self.db_manager = db_manager or get_db_manager()

    def find(self, tenant_id: str, form_id: str) -> Optional[FormDefinition]:
        row = self.db_manager.execute_query(
            f"SELECT {FORM_COLUMNS} FROM form_definitions WHERE tenant_id = %s AND form_id = %s",
            (tenant_id, form_id),
            fetch_one=True
        )
        return _form_from_row(row) if row else None

    def upsert_defaults(self, tenant_id: str, forms: Sequence[Tuple[str, str]]) -> None:
        with self.db_manager.get_connection() as conn:
            cursor = conn.cursor()
            try:
                for form_id, form_title in forms:
                    cursor.execute("""
                        INSERT INTO form_definitions (tenant_id, form_id, form_title, type)
                        VALUES (%s, %s, %s, 'default')
                        ON CONFLICT (tenant_id, form_id) DO UPDATE
                        SET form_title = EXCLUDED.form_title,
                            updated_at = CURRENT_TIMESTAMP
                        WHERE form_definitions.type = 'default'
                        """,
                        (tenant_id, form_id, form_title)
                    )
            finally:
                cursor.close()

    def insert_custom(self, form: FormDefinition) -> FormDefinition:
        with self.db_manager.get_connection() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(f"""
                    INSERT INTO form_definitions (tenant_id, form_id, form_title, type, integration_key)
                    VALUES (%s, %s, %s, %s, %s)
                    RETURNING {FORM_COLUMNS}
                    """,
                    (form.tenant_id, form.form_id, form.form_title, FORM_TYPE_CUSTOM, form.integration_key)
                )
                return _form_from_row(cursor.fetchone())
            finally:
                cursor.close()

    def list_for_tenant(self, tenant_id: str) -> List[FormDefinition]:
        rows = self.db_manager.execute_query(f"""
            SELECT {FORM_COLUMNS} FROM form_definitions
            WHERE tenant_id = %s
            ORDER BY CASE WHEN type = 'default' THEN 0 ELSE 1 END, form_title ASC
            """,
            (tenant_id,)
        )
        return [_form_from_row(row) for row in rows]
