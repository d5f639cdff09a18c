from __future__ import annotations

import logging
import math
import re
from abc import ABC, abstractmethod
from typing import Protocol

from smsgate.sms.errors import SmsParseError

log = logging.getLogger("sms_senders")

E164_PHONE_NUMBER = re.compile(r"^\+[1-9]\d{1,14}$")

MAX_SMS_MESSAGE_LENGTH = 1600
MAX_SMS_SEGMENT_LENGTH = 70


class SmsSender(Protocol):
    def send_sms(self, number_to: str, message: str) -> int: ...

    def destroy(self) -> None: ...


class AbstractSmsSender(ABC):
    """Shared number validation and message preparation for provider senders."""

    def __init__(self) -> None:
        self._destroyed = False

    @abstractmethod
    def send_sms(self, number_to: str, message: str) -> int: ...

    def destroy(self) -> None:
        if self._destroyed:
            return
        self._destroyed = True
        self._release()

    def _release(self) -> None:
        """Close provider resources. Called at most once."""

    @staticmethod
    def validate_phone_number(phone_number: str) -> str:
        phone_number = (phone_number or "").strip()
        if not E164_PHONE_NUMBER.match(phone_number):
            raise SmsParseError("Invalid phone number format. Phone number must be in E.164 format.")
        return phone_number

    @staticmethod
    def prepare_message(message: str) -> str:
        message = message or ""
        # Templated bodies often arrive JSON-quoted with escaped newlines.
        if message.startswith('"'):
            message = message[1:]
        if message.endswith('"'):
            message = message[:-1]
        message = message.replace("\\n", "\n")
        if len(message) > MAX_SMS_MESSAGE_LENGTH:
            log.warning("SMS message exceeds %s characters and will be truncated", MAX_SMS_MESSAGE_LENGTH)
            message = message[:MAX_SMS_MESSAGE_LENGTH]
        return message

    @staticmethod
    def count_message_segments(message: str) -> int:
        return math.ceil(len(message) / MAX_SMS_SEGMENT_LENGTH)
