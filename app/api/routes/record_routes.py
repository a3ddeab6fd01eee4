"""
Record API Routes.
Submit record changes for delivery to the integration webhooks.
"""

from fastapi import APIRouter, Depends
from typing import Any, Dict
from app.schemas.record import RecordEventRequest
from app.core.record_service import RecordService
from app.core.exceptions import AppException
from app.api.dependencies import get_record_service
from app.core.responses import ERROR_RESPONSES, ErrorResponse
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/records",
    tags=["Records"],
    responses={**ERROR_RESPONSES, 502: {"model": ErrorResponse, "description": "Record event could not be delivered"}}
)


@router.post("/{record_type}/{tenant_id}", response_model=Dict[str, Any])
async def submit_record_event(
    record_type: str,
    tenant_id: str,
    request: RecordEventRequest,
    service: RecordService = Depends(get_record_service)
):
    """
    Submit a created, updated or deleted record.
    Created records are checked against the required fields of their schema.
    """
    try:
        return service.submit_event(tenant_id, record_type, request)
    except AppException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error in submit_record_event: {str(e)}", exc_info=True)
        raise AppException(f"Failed to submit record event: {str(e)}")
