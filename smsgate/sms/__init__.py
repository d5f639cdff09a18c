"""Outbound SMS dispatch: the active provider sender and the errors it surfaces."""

from smsgate.sms.errors import DispatchError, ErrorKind, root_cause
from smsgate.sms.service import SmsService

__all__ = ["DispatchError", "ErrorKind", "SmsService", "root_cause"]
