from __future__ import annotations

from smsgate.schemas.sms_v1 import (
    LogSmsProviderConfiguration,
    SmsProviderConfiguration,
    TwilioSmsProviderConfiguration,
)
from smsgate.sms.errors import SmsConfigurationError
from smsgate.sms.senders.base import SmsSender
from smsgate.sms.senders.log import LogSmsSender
from smsgate.sms.senders.twilio import TwilioSmsSender


def create_sms_sender(configuration: SmsProviderConfiguration) -> SmsSender:
    if isinstance(configuration, TwilioSmsProviderConfiguration):
        return TwilioSmsSender(configuration)
    if isinstance(configuration, LogSmsProviderConfiguration):
        return LogSmsSender(configuration)
    raise SmsConfigurationError(f"No SMS sender for provider type={getattr(configuration, 'type', None)}")
