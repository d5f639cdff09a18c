from __future__ import annotations

import logging

from smsgate.schemas.sms_v1 import LogSmsProviderConfiguration
from smsgate.sms.senders.base import AbstractSmsSender

log = logging.getLogger("sms_senders.log")


class LogSmsSender(AbstractSmsSender):
    """Writes to the log; no real send. For development and smoke tests."""

    def __init__(self, configuration: LogSmsProviderConfiguration):
        super().__init__()
        self.number_from = configuration.number_from

    def send_sms(self, number_to: str, message: str) -> int:
        number_to = self.validate_phone_number(number_to)
        message = self.prepare_message(message)
        segments = self.count_message_segments(message)
        log.info("LOG sms to=...%s from=%s len=%s segments=%s", number_to[-4:], self.number_from, len(message), segments)
        return segments
