from __future__ import annotations

import logging
import re

import httpx

from smsgate.core.config import settings
from smsgate.schemas.sms_v1 import TwilioSmsProviderConfiguration
from smsgate.sms.errors import SmsConfigurationError, SmsParseError, SmsSendError
from smsgate.sms.senders.base import E164_PHONE_NUMBER, AbstractSmsSender

log = logging.getLogger("sms_senders.twilio")

# Phone Number SID or Messaging Service SID accepted in place of an E.164 sender.
TWILIO_SENDER_SID = re.compile(r"^(PN|MG).*$")


def _truncate(s: str, n: int = 200) -> str:
    s = s or ""
    return s if len(s) <= n else s[:n] + "…"


class TwilioSmsSender(AbstractSmsSender):
    def __init__(
        self,
        configuration: TwilioSmsProviderConfiguration,
        *,
        api_base: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        super().__init__()
        if not configuration.account_sid or not configuration.account_token or not configuration.number_from:
            raise SmsConfigurationError(
                "Invalid twilio sms provider configuration: accountSid, accountToken and numberFrom should be specified!"
            )
        self.number_from = self._validate_sender(configuration.number_from)
        self.account_sid = configuration.account_sid
        base = (api_base or settings.TWILIO_API_BASE).rstrip("/")
        self._messages_url = f"{base}/2010-04-01/Accounts/{self.account_sid}/Messages.json"
        self._client = httpx.Client(
            auth=(configuration.account_sid, configuration.account_token),
            timeout=timeout if timeout is not None else settings.SMS_HTTP_TIMEOUT_S,
            headers={"User-Agent": "smsgate"},
            transport=transport,
        )

    @staticmethod
    def _validate_sender(number_from: str) -> str:
        number_from = number_from.strip()
        if not E164_PHONE_NUMBER.match(number_from) and not TWILIO_SENDER_SID.match(number_from):
            raise SmsParseError(
                "Invalid phone number format. Phone number must be in E.164 format/Phone Number's SID/Messaging Service SID."
            )
        return number_from

    def send_sms(self, number_to: str, message: str) -> int:
        number_to = self.validate_phone_number(number_to)
        message = self.prepare_message(message)

        data = {"To": number_to, "Body": message}
        if self.number_from.startswith("MG"):
            data["MessagingServiceSid"] = self.number_from
        else:
            data["From"] = self.number_from

        try:
            resp = self._client.post(self._messages_url, data=data)
        except httpx.HTTPError as e:
            raise SmsSendError(f"Twilio request failed: {type(e).__name__}") from e

        try:
            body = resp.json()
        except ValueError:
            body = {}

        if resp.status_code >= 400:
            detail = body.get("message") if isinstance(body, dict) else None
            raise SmsSendError(detail or f"twilio_http_{resp.status_code}:{_truncate(resp.text)}")

        segments = body.get("num_segments") if isinstance(body, dict) else None
        try:
            return int(segments)
        except (TypeError, ValueError):
            return self.count_message_segments(message)

    def _release(self) -> None:
        self._client.close()
