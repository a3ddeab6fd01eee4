"""
Schema API Routes.
Read and mutate the field schema of a record type for a tenant.
"""

from fastapi import APIRouter, Depends
from typing import Any, Dict, Optional
from app.schemas.record_schema import AddFieldRequest, RemoveFieldRequest
from app.core.schema_service import SchemaService
from app.core.exceptions import AppException, DatabaseException
from app.api.dependencies import get_schema_service
from app.core.responses import ERROR_RESPONSES
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schema", tags=["Schema"], responses=ERROR_RESPONSES)


@router.get("/{record_type}/{tenant_id}", response_model=Dict[str, Any])
async def get_schema(
    record_type: str,
    tenant_id: str,
    service: SchemaService = Depends(get_schema_service)
):
    """
    Get the schema of a record type.
    The schema is created from the default catalog on first access.
    """
    try:
        schema = service.get_schema(tenant_id, record_type)
        return {"schema": schema}
    except AppException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error in get_schema: {str(e)}", exc_info=True)
        raise DatabaseException(f"Failed to fetch schema: {str(e)}", public_message="Failed to fetch schema")


@router.post("/{record_type}/{tenant_id}", response_model=Dict[str, Any])
async def add_field(
    record_type: str,
    tenant_id: str,
    request: Optional[AddFieldRequest] = None,
    service: SchemaService = Depends(get_schema_service)
):
    """Add a field to a record type, replacing any field of the same name."""
    try:
        field = request.field if request else None
        schema = service.add_field(tenant_id, record_type, field)
        return {"schema": schema}
    except AppException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error in add_field: {str(e)}", exc_info=True)
        raise DatabaseException(f"Failed to add field: {str(e)}", public_message="Failed to add field")


@router.delete("/{record_type}/{tenant_id}", response_model=Dict[str, Any])
async def remove_field(
    record_type: str,
    tenant_id: str,
    request: Optional[RemoveFieldRequest] = None,
    service: SchemaService = Depends(get_schema_service)
):
    """Remove a field from a record type. Removing an unknown field is a no-op."""
    try:
        field_name = request.field_name if request else None
        schema = service.remove_field(tenant_id, record_type, field_name)
        return {"schema": schema}
    except AppException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error in remove_field: {str(e)}", exc_info=True)
        raise DatabaseException(f"Failed to remove field: {str(e)}", public_message="Failed to remove field")
