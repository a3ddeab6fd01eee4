"""
Record Service.
Submission path for record changes: checks the record type and its schema,
then hands the event to the webhook relay.
"""

import time
from typing import Any, Dict
import logging

from app.core.exceptions import NotFoundException, ValidationException
from app.core.form_registry import FormRegistry
from app.core.schema_store import SchemaStore
from app.core.webhook_service import WebhookRelay
from app.schemas.record import RecordEventRequest

logger = logging.getLogger(__name__)


def generate_record_id() -> str:
    """Generate an id of the form REC + last 8 digits of the epoch milliseconds."""
    return f"REC{str(int(time.time() * 1000))[-8:]}"


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class RecordService:
    """Service for record submissions."""

    def __init__(self, form_registry: FormRegistry, schema_store: SchemaStore, relay: WebhookRelay):
        self.form_registry = form_registry
        self.schema_store = schema_store
        self.relay = relay

    def submit_event(self, tenant_id: str, record_type: str, request: RecordEventRequest) -> Dict[str, Any]:
        """
        Validate a record change and relay it.

        Created records get an id when none is supplied and must provide
        every required schema field; updates and deletes must name the
        record id.

        Args:
            tenant_id: Tenant identifier
            record_type: Record-type key (case-insensitive)
            request: Record event

        Returns:
            Delivered record data and the webhook response

        Raises:
            NotFoundException: If the record type is not registered
            ValidationException: If the record data is incomplete
            WebhookDeliveryException: If the relay fails
        """
        record_type = record_type.lower()
        form = self.form_registry.get(tenant_id, record_type)
        if form is None:
            raise NotFoundException("Form", record_type)

        data = dict(request.data)
        data["recordType"] = record_type

        if request.type == "created":
            if _is_empty(data.get("id")):
                data["id"] = generate_record_id()
            schema = self.schema_store.get_or_create(tenant_id, record_type)
            missing = [name for name in schema.required if _is_empty(data.get(name))]
            if missing:
                raise ValidationException(
                    f"Missing required fields: {', '.join(missing)}",
                    details={"missing_fields": missing}
                )
        elif _is_empty(data.get("id")):
            raise ValidationException("Record id is required")

        response = self.relay.send(
            event_type=request.type,
            data=data,
            customer_id=tenant_id,
            record_type=record_type,
            is_custom=form.is_custom
        )
        logger.info(f"Record {data['id']} {request.type} event relayed for {tenant_id}/{record_type}")
        return {"delivered": True, "record": data, "webhookResponse": response}
