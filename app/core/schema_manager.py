"""
Schema management utilities.
Creates the tables backing the form registry and the field schemas.
"""

from app.core.database import get_db_manager
from app.core.exceptions import DatabaseException
import logging

logger = logging.getLogger(__name__)

class SchemaManager:
    """Manages the database tables used by the service."""

    @staticmethod
    def initialize_tables() -> bool:
        """
        Create tables and indexes if they do not exist.

        The unique constraints on (tenant_id, form_id) and
        (tenant_id, record_type) are what keep concurrent creators from
        producing duplicate rows.

        Returns:
            True if tables are ready

        Raises:
            DatabaseException: If table creation fails
        """
        db_manager = get_db_manager()

        try:
            with db_manager.get_connection() as conn:
                cursor = conn.cursor()
                try:
                    cursor.execute("""
                        CREATE TABLE IF NOT EXISTS form_definitions (
                            tenant_id VARCHAR(255) NOT NULL,
                            form_id VARCHAR(255) NOT NULL,
                            form_title VARCHAR(255) NOT NULL,
                            type VARCHAR(20) NOT NULL DEFAULT 'default',
                            integration_key VARCHAR(255),
                            created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
                            updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
                            CONSTRAINT uq_form_definitions_tenant_form UNIQUE (tenant_id, form_id),
                            CONSTRAINT check_form_type CHECK (type IN ('default', 'custom'))
                        )
                    """)

                    cursor.execute("""
                        CREATE TABLE IF NOT EXISTS field_schemas (
                            tenant_id VARCHAR(255) NOT NULL,
                            record_type VARCHAR(255) NOT NULL,
                            properties JSONB NOT NULL DEFAULT '{}'::jsonb,
                            required JSONB NOT NULL DEFAULT '[]'::jsonb,
                            version INT NOT NULL DEFAULT 1,
                            created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
                            updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
                            CONSTRAINT uq_field_schemas_tenant_record_type UNIQUE (tenant_id, record_type)
                        )
                    """)

                    cursor.execute(
                        "CREATE INDEX IF NOT EXISTS idx_form_definitions_tenant ON form_definitions(tenant_id)"
                    )

                    conn.commit()
                    logger.info("Form registry and field schema tables initialized")
                    return True

                finally:
                    cursor.close()

        except Exception as e:
            logger.error(f"Failed to initialize tables: {str(e)}")
            raise DatabaseException(f"Failed to initialize tables: {str(e)}")
