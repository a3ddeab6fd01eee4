"""
Webhook Relay Service.
Forwards record events to the integration platform's app-event webhooks.
"""

import requests
from typing import Any, Dict, Mapping, Optional
import logging

from app.config import settings
from app.core.exceptions import WebhookDeliveryException

logger = logging.getLogger(__name__)


class WebhookRelay:
    """Routes record events to the webhook endpoint of their record type."""

    def __init__(
        self,
        default_urls: Mapping[str, str],
        custom_url: str,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the relay.

        Args:
            default_urls: Dedicated endpoints of built-in record types
            custom_url: Endpoint shared by custom record types and built-ins
                without a dedicated endpoint
            timeout: Request timeout in seconds
            session: Optional requests session
        """
        self.default_urls = dict(default_urls)
        self.custom_url = custom_url
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls) -> "WebhookRelay":
        return cls(
            default_urls={"activities": settings.WEBHOOK_ACTIVITIES_URL},
            custom_url=settings.WEBHOOK_CUSTOM_URL,
            timeout=settings.WEBHOOK_TIMEOUT_SECONDS
        )

    def resolve_url(self, record_type: str, is_custom: bool) -> str:
        """Select the webhook endpoint for a record type."""
        url = self.custom_url
        if not is_custom and self.default_urls.get(record_type):
            url = self.default_urls[record_type]
        if not url or not url.strip():
            raise WebhookDeliveryException(f"No webhook URL configured for record type: {record_type}")
        return url

    def build_payload(
        self,
        event_type: str,
        data: Dict[str, Any],
        customer_id: str,
        record_type: str,
        is_custom: bool
    ) -> Dict[str, Any]:
        """Build the event payload; custom record types carry their instance key."""
        payload: Dict[str, Any] = {
            "type": event_type,
            "data": data,
            "customerId": customer_id
        }
        if is_custom:
            payload["instanceKey"] = record_type
        return payload

    def send(
        self,
        event_type: str,
        data: Dict[str, Any],
        customer_id: str,
        record_type: str,
        is_custom: bool
    ) -> Any:
        """
        Deliver a record event.

        Args:
            event_type: created, updated or deleted
            data: Record data
            customer_id: Tenant identifier
            record_type: Record-type key
            is_custom: Whether the record type is a custom one

        Returns:
            Parsed JSON response, or the response text for non-JSON replies

        Raises:
            WebhookDeliveryException: If the request fails or returns a non-2xx status
        """
        url = self.resolve_url(record_type, is_custom)
        payload = self.build_payload(event_type, data, customer_id, record_type, is_custom)

        logger.info(
            f"Webhook routing - recordType: {record_type}, custom: {is_custom}, event: {event_type}",
            extra={"record_type": record_type, "event_type": event_type, "customer_id": customer_id}
        )

        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Error sending webhook: {str(e)}", extra={"record_type": record_type})
            raise WebhookDeliveryException("Webhook delivery failed")

        if not response.ok:
            logger.error(f"Webhook failed ({response.status_code}): {response.text}")
            raise WebhookDeliveryException(
                f"Webhook failed: {response.status_code} {response.reason}",
                details={"status_code": response.status_code}
            )

        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            try:
                return response.json()
            except ValueError:
                logger.warning("Webhook response declared JSON but could not be parsed")
        return response.text
