"""
Form API Routes.
List the record types registered for a tenant and register custom ones.
"""

from fastapi import APIRouter, Depends, Query
from typing import Any, Dict, Optional
from app.schemas.form import CreateFormRequest, FormResponse
from app.core.form_registry import CREATE_FORM_FAILED, FormRegistry
from app.core.exceptions import AppException, DatabaseException
from app.api.dependencies import get_form_registry
from app.core.responses import ERROR_RESPONSES
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/forms", tags=["Forms"], responses=ERROR_RESPONSES)


@router.get("", response_model=Dict[str, Any])
async def list_forms(
    customer_id: Optional[str] = Query(None, alias="customerId", description="Tenant identifier"),
    registry: FormRegistry = Depends(get_form_registry)
):
    """
    List the tenant's record types.
    Built-in record types are registered first if they are missing.
    """
    try:
        forms = registry.list_and_reconcile(customer_id)
        return {
            "forms": [
                FormResponse.from_form(form).model_dump(by_alias=True, mode="json")
                for form in forms
            ]
        }
    except AppException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error in list_forms: {str(e)}", exc_info=True)
        raise DatabaseException(f"Failed to list forms: {str(e)}", public_message="Failed to fetch forms")


@router.post("", response_model=Dict[str, Any])
async def create_form(
    request: CreateFormRequest,
    registry: FormRegistry = Depends(get_form_registry)
):
    """
    Register a custom record type.
    The integration field mapping is provisioned before the form is stored.
    """
    try:
        form = registry.register_custom(request)
        return FormResponse.from_form(form).model_dump(by_alias=True, mode="json")
    except AppException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error in create_form: {str(e)}", exc_info=True)
        raise DatabaseException(f"Failed to create form: {str(e)}", public_message=CREATE_FORM_FAILED)
