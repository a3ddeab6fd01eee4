"""
Integration Platform Client.
Provisions remote field-mapping resources for custom record types.
"""

import httpx
import jwt
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from urllib.parse import quote

from app.config import settings
from app.core.exceptions import UpstreamProvisioningException

logger = logging.getLogger(__name__)

# Field-mapping resource every custom record type is bound to
OBJECTS_RESOURCE = "objects"


class IntegrationClient:
    """HTTP client for the integration platform, acting on behalf of one customer."""

    def __init__(
        self,
        base_url: str,
        workspace_key: str,
        workspace_secret: str,
        token_expiration_minutes: int = 60,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.workspace_key = workspace_key
        self.workspace_secret = workspace_secret
        self.token_expiration_minutes = token_expiration_minutes
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls) -> "IntegrationClient":
        return cls(
            base_url=settings.INTEGRATION_API_URL,
            workspace_key=settings.INTEGRATION_WORKSPACE_KEY,
            workspace_secret=settings.INTEGRATION_WORKSPACE_SECRET,
            token_expiration_minutes=settings.INTEGRATION_TOKEN_EXPIRATION_MINUTES,
            timeout=settings.INTEGRATION_TIMEOUT_SECONDS
        )

    def create_customer_token(self, customer_id: str, customer_name: Optional[str] = None) -> str:
        """
        Create the customer access token expected by the platform.

        Args:
            customer_id: Tenant identifier, used as the platform customer id
            customer_name: Optional display name

        Returns:
            Signed JWT
        """
        if not self.workspace_key or not self.workspace_secret:
            raise UpstreamProvisioningException("Integration platform credentials are not configured")

        payload = {
            "id": customer_id,
            "name": customer_name or customer_id,
            "iss": self.workspace_key,
            "exp": datetime.now(timezone.utc) + timedelta(minutes=self.token_expiration_minutes)
        }
        return jwt.encode(payload, self.workspace_secret, algorithm="HS512")

    def get_field_mapping(
        self,
        customer_id: str,
        integration_key: str,
        instance_key: str,
        resource: str = OBJECTS_RESOURCE,
        auto_create: bool = True
    ) -> Dict[str, Any]:
        """
        Get (and by default create) a field-mapping instance for a connection.

        The call is idempotent on the platform side: repeated calls with the
        same instance key return the same mapping.

        Args:
            customer_id: Tenant identifier
            integration_key: Connection that owns the record type's data
            instance_key: Lower-cased form id
            resource: Field-mapping selector
            auto_create: Create the instance if it does not exist

        Returns:
            Field-mapping instance as returned by the platform

        Raises:
            UpstreamProvisioningException: On transport errors or non-2xx responses
        """
        token = self.create_customer_token(customer_id)
        url = (
            f"{self.base_url}/connections/{quote(integration_key, safe='')}"
            f"/field-mappings/{quote(resource, safe='')}"
        )
        params = {"instanceKey": instance_key, "autoCreate": "true" if auto_create else "false"}

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.get(
                    url,
                    params=params,
                    headers={"Authorization": f"Bearer {token}", "Accept": "application/json"}
                )
                response.raise_for_status()
                logger.info(
                    f"Field mapping '{resource}' ready for instance {instance_key} on connection {integration_key}"
                )
                return response.json() if response.content else {}
        except httpx.HTTPStatusError as exc:
            logger.error(
                f"Field mapping request failed ({exc.response.status_code}): {exc.response.text}",
                extra={"integration_key": integration_key, "instance_key": instance_key}
            )
            raise UpstreamProvisioningException(
                "Field mapping provisioning failed",
                details={"status_code": exc.response.status_code}
            )
        except httpx.HTTPError as exc:
            logger.error(
                f"Field mapping request error: {str(exc)}",
                extra={"integration_key": integration_key, "instance_key": instance_key}
            )
            raise UpstreamProvisioningException("Field mapping provisioning failed")
