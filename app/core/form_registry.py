"""
Form Registry.
Tracks which record types (built-in and custom) exist for a tenant.
"""

from typing import List, Optional, Sequence, Tuple
import logging
import re

from app.core.default_schemas import BUILT_IN_FORMS
from app.core.exceptions import AppException, DatabaseException, UpstreamProvisioningException, ValidationException
from app.core.integration_client import IntegrationClient
from app.core.repositories import FormRepository
from app.models.database_models import FORM_TYPE_CUSTOM, FormDefinition
from app.schemas.form import CreateFormRequest

logger = logging.getLogger(__name__)

CREATE_FORM_FAILED = "Failed to create form and integration resources"

INTEGRATION_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


def _require_customer_id(tenant_id: Optional[str]) -> str:
    if not tenant_id or not tenant_id.strip():
        raise ValidationException("Customer ID is required")
    return tenant_id


class FormRegistry:
    """Registry of record types per tenant."""

    def __init__(
        self,
        repository: FormRepository,
        integration_client: Optional[IntegrationClient] = None,
        built_in_forms: Sequence[Tuple[str, str]] = BUILT_IN_FORMS
    ):
        self.repository = repository
        self.integration_client = integration_client
        self.built_in_forms = tuple(built_in_forms)

    def get(self, tenant_id: str, form_id: str) -> Optional[FormDefinition]:
        """Look up a registration by its case-insensitive form id."""
        return self.repository.find(tenant_id, (form_id or "").lower())

    def reconcile_defaults(self, tenant_id: str) -> None:
        """
        Make sure every built-in record type is registered for the tenant.

        Idempotent: missing rows are created, existing default rows only get
        their title and timestamp refreshed, and the form id and type of
        existing rows are never changed.
        """
        tenant_id = _require_customer_id(tenant_id)
        self.repository.upsert_defaults(tenant_id, self.built_in_forms)
        logger.debug(f"Reconciled {len(self.built_in_forms)} built-in forms for tenant {tenant_id}")

    def list_and_reconcile(self, tenant_id: Optional[str]) -> List[FormDefinition]:
        """
        Reconcile built-in forms and list every registration of the tenant.

        Args:
            tenant_id: Tenant identifier

        Returns:
            Registrations ordered default-first, then by title

        Raises:
            ValidationException: If tenant_id is missing
        """
        tenant_id = _require_customer_id(tenant_id)
        self.reconcile_defaults(tenant_id)
        forms = self.repository.list_for_tenant(tenant_id)
        logger.info(f"Listed {len(forms)} forms for tenant {tenant_id}")
        return forms

    def register_custom(self, request: CreateFormRequest) -> FormDefinition:
        """
        Register a custom record type backed by an integration connection.

        The remote field mapping is provisioned first; the local row is only
        written once that succeeded, so a failed provisioning leaves no
        local registration behind.

        Args:
            request: Custom form request

        Returns:
            Created registration

        Raises:
            ValidationException: If customer id, form id, title or integration key is missing,
                or the integration key is not a single URL-safe token
            UpstreamProvisioningException: If the remote field mapping cannot be provisioned
        """
        tenant_id = _require_customer_id(request.customer_id)
        missing = [
            name for name, value in (
                ("formId", request.form_id),
                ("formTitle", request.form_title),
                ("integrationKey", request.integration_key),
            )
            if not value or not value.strip()
        ]
        if missing:
            raise ValidationException(
                f"Missing required fields: {', '.join(missing)}",
                details={"missing_fields": missing}
            )

        if not INTEGRATION_KEY_PATTERN.match(request.integration_key):
            raise ValidationException(
                "Integration key may only contain letters, digits, hyphens and underscores",
                details={"field": "integrationKey"}
            )

        form_id = request.form_id.strip().lower()

        self._provision_field_mapping(tenant_id, request.integration_key, form_id)

        try:
            form = self.repository.insert_custom(FormDefinition(
                tenant_id=tenant_id,
                form_id=form_id,
                form_title=request.form_title,
                type=FORM_TYPE_CUSTOM,
                integration_key=request.integration_key
            ))
        except DatabaseException as e:
            logger.error(f"Failed to store custom form {tenant_id}/{form_id}: {e.message}")
            raise DatabaseException(e.message, details=e.details, public_message=CREATE_FORM_FAILED)
        logger.info(f"Custom form '{form_id}' registered for tenant {tenant_id}")
        return form

    def _provision_field_mapping(self, tenant_id: str, integration_key: str, form_id: str) -> None:
        if self.integration_client is None:
            logger.error("Integration client is not configured, cannot provision field mapping")
            raise UpstreamProvisioningException(CREATE_FORM_FAILED)
        try:
            self.integration_client.get_field_mapping(
                customer_id=tenant_id,
                integration_key=integration_key,
                instance_key=form_id,
                auto_create=True
            )
        except AppException as e:
            logger.error(
                f"Field mapping provisioning failed for {tenant_id}/{form_id}: {e.message}",
                extra={"tenant_id": tenant_id, "form_id": form_id, "integration_key": integration_key}
            )
            raise UpstreamProvisioningException(CREATE_FORM_FAILED, details=e.details)
        except Exception as e:
            logger.error(
                f"Unexpected error provisioning field mapping for {tenant_id}/{form_id}: {str(e)}",
                exc_info=True
            )
            raise UpstreamProvisioningException(CREATE_FORM_FAILED)
