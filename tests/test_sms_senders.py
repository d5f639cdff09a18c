from __future__ import annotations

from urllib.parse import parse_qs

import httpx
from pydantic import ValidationError
import pytest

from smsgate.schemas.sms_v1 import (
    LogSmsProviderConfiguration,
    TwilioSmsProviderConfiguration,
    parse_provider_configuration,
)
from smsgate.sms.errors import SmsConfigurationError, SmsParseError, SmsSendError, root_cause
from smsgate.sms.senders.base import MAX_SMS_MESSAGE_LENGTH, AbstractSmsSender
from smsgate.sms.senders.log import LogSmsSender
from smsgate.sms.senders.registry import create_sms_sender
from smsgate.sms.senders.twilio import TwilioSmsSender


def _twilio_config(**overrides) -> TwilioSmsProviderConfiguration:
    data = {"type": "TWILIO", "numberFrom": "+15550001111", "accountSid": "AC123", "accountToken": "tok"}
    data.update(overrides)
    return parse_provider_configuration(data)


def _twilio(handler, **overrides) -> TwilioSmsSender:
    return TwilioSmsSender(
        _twilio_config(**overrides),
        api_base="https://twilio.test",
        timeout=1.0,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.parametrize("number", ["+15551234567", " +442071838750 ", "+12"])
def test_validate_phone_number_accepts_e164(number):
    assert AbstractSmsSender.validate_phone_number(number) == number.strip()


@pytest.mark.parametrize("number", ["15551234567", "+05551234567", "+1", "+1555123456789012", "+1 555 123", ""])
def test_validate_phone_number_rejects_non_e164(number):
    with pytest.raises(SmsParseError, match="E.164"):
        AbstractSmsSender.validate_phone_number(number)


def test_prepare_message_unquotes_and_expands_newlines():
    assert AbstractSmsSender.prepare_message('"line1\\nline2"') == "line1\nline2"


def test_prepare_message_truncates_long_bodies():
    msg = AbstractSmsSender.prepare_message("x" * (MAX_SMS_MESSAGE_LENGTH + 50))
    assert len(msg) == MAX_SMS_MESSAGE_LENGTH


def test_count_message_segments():
    assert AbstractSmsSender.count_message_segments("a" * 70) == 1
    assert AbstractSmsSender.count_message_segments("a" * 71) == 2


def test_parse_provider_configuration_by_type():
    cfg = parse_provider_configuration({"type": "LOG", "numberFrom": "+15550000000"})
    assert isinstance(cfg, LogSmsProviderConfiguration)
    assert cfg.number_from == "+15550000000"

    with pytest.raises(ValidationError):
        parse_provider_configuration({"type": "CARRIER_PIGEON"})


def test_factory_builds_sender_per_provider_type():
    assert isinstance(create_sms_sender(LogSmsProviderConfiguration()), LogSmsSender)
    sender = create_sms_sender(_twilio_config())
    try:
        assert isinstance(sender, TwilioSmsSender)
    finally:
        sender.destroy()


def test_factory_rejects_unknown_configuration():
    with pytest.raises(SmsConfigurationError):
        create_sms_sender(object())


def test_log_sender_validates_and_counts_segments():
    sender = LogSmsSender(LogSmsProviderConfiguration())
    assert sender.send_sms("+15551234567", "y" * 71) == 2
    with pytest.raises(SmsParseError):
        sender.send_sms("not-a-number", "hi")


def test_twilio_sender_requires_credentials():
    with pytest.raises(SmsConfigurationError, match="accountSid, accountToken and numberFrom"):
        TwilioSmsSender(_twilio_config(accountToken=""))


def test_twilio_sender_rejects_bad_origin_number():
    with pytest.raises(SmsParseError):
        TwilioSmsSender(_twilio_config(numberFrom="5550001111"))


def test_twilio_sender_posts_message_and_returns_segments():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("authorization")
        seen["form"] = parse_qs(request.content.decode())
        return httpx.Response(201, json={"sid": "SM1", "num_segments": "2"})

    sender = _twilio(handler)
    try:
        assert sender.send_sms("+15551234567", "hello") == 2
    finally:
        sender.destroy()

    assert seen["url"] == "https://twilio.test/2010-04-01/Accounts/AC123/Messages.json"
    assert seen["auth"].startswith("Basic ")
    assert seen["form"] == {"To": ["+15551234567"], "Body": ["hello"], "From": ["+15550001111"]}


def test_twilio_sender_uses_messaging_service_sid():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["form"] = parse_qs(request.content.decode())
        return httpx.Response(201, json={"sid": "SM1"})

    sender = _twilio(handler, numberFrom="MG0123456789")
    assert sender.send_sms("+15551234567", "hello") == 1
    assert seen["form"]["MessagingServiceSid"] == ["MG0123456789"]
    assert "From" not in seen["form"]


def test_twilio_sender_surfaces_provider_rejection():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"code": 21211, "message": "The 'To' number is not valid."})

    sender = _twilio(handler)
    with pytest.raises(SmsSendError, match="The 'To' number is not valid."):
        sender.send_sms("+15551234567", "hello")


def test_twilio_sender_chains_transport_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused")

    sender = _twilio(handler)
    with pytest.raises(SmsSendError) as exc_info:
        sender.send_sms("+15551234567", "hello")
    assert root_cause(exc_info.value) == "connection refused"


def test_destroy_is_idempotent():
    closed = {"n": 0}
    sender = _twilio(lambda request: httpx.Response(201, json={}))
    original = sender._client.close

    def counting_close():
        closed["n"] += 1
        original()

    sender._client.close = counting_close
    sender.destroy()
    sender.destroy()
    assert closed["n"] == 1


def test_abstract_sender_requires_send_sms():
    with pytest.raises(TypeError):
        AbstractSmsSender()
