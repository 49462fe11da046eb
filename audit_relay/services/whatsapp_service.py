from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from audit_relay.core.config import Settings
from audit_relay.core.errors import ConfigurationError, DeliveryError
from audit_relay.core.phone import mask_phone

logger = logging.getLogger(__name__)

SEND_ENDPOINT = "send"


class WhatsAppClient:
    """HTTP client for the WhatsApp messaging provider (one call, no retry)."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient) -> None:
        self._settings = settings
        self._client = client

    @property
    def configured(self) -> bool:
        return self._settings.whatsapp_configured

    async def send_text(self, number: str, message: str) -> Optional[str]:
        """Send ``message`` to an already normalized number and return the provider message id."""
        if not self.configured:
            raise ConfigurationError("WhatsApp service not configured.")

        payload = {
            "number": number,
            "type": "text",
            "message": message,
            "instance_id": self._settings.whatsapp_instance_id,
            "access_token": self._settings.whatsapp_access_token,
        }
        url = f"{self._settings.whatsapp_api_url.rstrip('/')}/{SEND_ENDPOINT}"

        try:
            response = await self._client.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self._settings.whatsapp_timeout,
            )
        except httpx.TimeoutException as exc:
            raise DeliveryError(f"WhatsApp API timed out: {exc}" if str(exc) else "WhatsApp API timed out") from exc
        except httpx.HTTPError as exc:
            raise DeliveryError(str(exc) or "Request failed") from exc

        data = _json_body(response)
        if data.get("status") == "error" or response.status_code >= 400:
            error = data.get("message") or "WhatsApp API error"
            logger.warning(
                "WhatsApp API rejected message to %s (HTTP %s): %s",
                mask_phone(number),
                response.status_code,
                error,
            )
            raise DeliveryError(str(error), status_code=response.status_code)

        message_id = data.get("message_id")
        logger.info("WhatsApp report delivered to %s (message_id=%s)", mask_phone(number), message_id)
        return str(message_id) if message_id is not None else None


def _json_body(response: httpx.Response) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
