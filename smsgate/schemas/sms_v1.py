from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class TwilioSmsProviderConfiguration(_CamelModel):
    type: Literal["TWILIO"] = "TWILIO"
    number_from: str = Field(default="", alias="numberFrom")
    account_sid: str = Field(default="", alias="accountSid")
    account_token: str = Field(default="", alias="accountToken")


class LogSmsProviderConfiguration(_CamelModel):
    """Dry-run provider: messages go to the application log only."""

    type: Literal["LOG"] = "LOG"
    number_from: str | None = Field(default=None, alias="numberFrom")


SmsProviderConfiguration = Annotated[
    TwilioSmsProviderConfiguration | LogSmsProviderConfiguration,
    Field(discriminator="type"),
]

_configuration_adapter = TypeAdapter(SmsProviderConfiguration)


def parse_provider_configuration(obj: Any) -> SmsProviderConfiguration:
    """Validate a stored JSON value into a provider configuration.

    Raises pydantic.ValidationError for unknown `type` values or malformed fields.
    """
    return _configuration_adapter.validate_python(obj)


class TestSmsRequest(_CamelModel):
    # Not a test case; keeps pytest from trying to collect it.
    __test__ = False

    # Validated by the service so a bad provider surfaces as a configuration error.
    provider_configuration: dict[str, Any] = Field(alias="providerConfiguration")
    number_to: str = Field(alias="numberTo")
    message: str


class SendSmsRequest(_CamelModel):
    numbers_to: list[str] = Field(alias="numbersTo", min_length=1)
    message: str


class AdminSettingsIn(_CamelModel):
    key: str = Field(min_length=1, max_length=255)
    json_value: dict[str, Any] = Field(alias="jsonValue")
