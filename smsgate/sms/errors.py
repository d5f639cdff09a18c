from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    NOT_CONFIGURED = "NOT_CONFIGURED"
    CONFIGURATION_INVALID = "CONFIGURATION_INVALID"
    SEND_FAILURE = "SEND_FAILURE"


class DispatchError(Exception):
    """The only error the SMS service surfaces to its callers."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


class SmsProviderError(Exception):
    pass


class SmsConfigurationError(SmsProviderError):
    pass


class SmsParseError(SmsProviderError):
    pass


class SmsSendError(SmsProviderError):
    pass


def root_cause(exc: BaseException) -> str:
    """Message of the innermost exception in an explicit or implicit chain."""

    seen: set[int] = set()
    current = exc
    while id(current) not in seen:
        seen.add(id(current))
        nxt = current.__cause__
        if nxt is None and not current.__suppress_context__:
            nxt = current.__context__
        if nxt is None:
            break
        current = nxt
    return str(current) or type(current).__name__
