from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Sequence

from pydantic import ValidationError

from audit_relay.core.config import Settings
from audit_relay.core.errors import ConfigurationError, DeliveryError, InputValidationError
from audit_relay.core.phone import mask_phone, normalize_phone
from audit_relay.schemas.dispatch import (
    RecipientResult,
    ReportData,
    ReportDispatchRequest,
    ReportDispatchResponse,
)
from audit_relay.services.quota_service import AuditQuotaTracker
from audit_relay.services.report_formatter import format_report_message
from audit_relay.services.whatsapp_service import WhatsAppClient

logger = logging.getLogger(__name__)

INVALID_PHONE_MESSAGE = "Invalid phone number."


class ReportDispatchService:
    """Sends one formatted audit report to every requested recipient.

    A client over its quota is refused before anything else is looked at.
    The quota is charged once per request that reaches the delivery stage.
    """

    def __init__(
        self,
        settings: Settings,
        quota: AuditQuotaTracker,
        whatsapp: WhatsAppClient,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._settings = settings
        self._quota = quota
        self._whatsapp = whatsapp
        self._clock = clock

    async def dispatch(self, client_key: str, request: ReportDispatchRequest) -> ReportDispatchResponse:
        self._quota.ensure_allowed(client_key)
        recipients = request.recipients()
        report = self._validate(recipients, request.report_data)

        if not self._whatsapp.configured:
            logger.error("WhatsApp credentials missing")
            raise ConfigurationError("WhatsApp service not configured.")

        message_text = format_report_message(
            report,
            now=self._clock() if self._clock else None,
            brand=self._settings.report_brand_name,
            tz_name=self._settings.report_timezone,
        )

        results = await asyncio.gather(
            *(self._deliver(recipient, message_text) for recipient in recipients)
        )

        count = self._quota.charge(client_key)
        delivered = sum(1 for result in results if result.success)
        logger.info(
            "Audit report for %s: %s/%s delivered (audit %s/%s)",
            client_key,
            delivered,
            len(results),
            count,
            self._quota.limit,
        )
        return ReportDispatchResponse(
            success=True,
            message="WhatsApp reports sent successfully.",
            results=list(results),
            limit=self._quota.limit,
            audits_remaining=self._quota.remaining(count),
        )

    def _validate(self, recipients: Sequence[Any], report_data: dict[str, Any] | None) -> ReportData:
        if not recipients or not report_data:
            raise InputValidationError("Phone numbers and report data are required.")
        max_recipients = self._settings.max_phone_numbers_per_request
        if len(recipients) > max_recipients:
            raise InputValidationError(
                f"Limit exceeded: Maximum {max_recipients} phone numbers allowed per request."
            )
        try:
            return ReportData.model_validate(report_data)
        except ValidationError as exc:
            raise InputValidationError(
                "Invalid report data.",
                debug=str(exc),
            ) from exc

    async def _deliver(self, recipient: Any, message_text: str) -> RecipientResult:
        number = normalize_phone(recipient)
        if number is None:
            logger.info("Skipping invalid phone number %s", mask_phone(recipient))
            return RecipientResult.failed(str(recipient), INVALID_PHONE_MESSAGE)

        try:
            message_id = await self._whatsapp.send_text(number, message_text)
        except DeliveryError as exc:
            return RecipientResult.failed(number, str(exc) or "Request failed")
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected failure sending report to %s", mask_phone(number))
            return RecipientResult.failed(number, str(exc) or "Request failed")
        return RecipientResult.delivered(number, message_id)

