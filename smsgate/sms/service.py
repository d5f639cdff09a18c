from __future__ import annotations

import logging
import threading
from typing import Callable, Protocol, Sequence

from smsgate.models.tables import SYSTEM_TENANT_ID
from smsgate.schemas.sms_v1 import SmsProviderConfiguration, TestSmsRequest, parse_provider_configuration
from smsgate.sms.errors import DispatchError, ErrorKind, root_cause
from smsgate.sms.senders.base import SmsSender
from smsgate.sms.senders.registry import create_sms_sender

log = logging.getLogger("sms_service")

SenderFactory = Callable[[SmsProviderConfiguration], SmsSender]


class SettingsStore(Protocol):
    def find_by_key(self, tenant_id: str, key: str) -> dict | None: ...


def _destroy_quietly(sender: SmsSender) -> None:
    try:
        sender.destroy()
    except Exception:
        log.exception("Failed to destroy SMS sender %s", type(sender).__name__)


class _SenderLease:
    """An installed sender and the sends currently using it.

    The sender is destroyed once it has been retired and the last
    in-flight send has released it, whichever happens last.
    """

    def __init__(self, sender: SmsSender):
        self.sender = sender
        self._lock = threading.Lock()
        self._in_flight = 0
        self._retired = False
        self._destroyed = False

    def acquire(self) -> None:
        with self._lock:
            self._in_flight += 1

    def release(self) -> None:
        with self._lock:
            self._in_flight -= 1
            destroy = self._should_destroy()
        if destroy:
            _destroy_quietly(self.sender)

    def retire(self) -> None:
        with self._lock:
            self._retired = True
            destroy = self._should_destroy()
        if destroy:
            _destroy_quietly(self.sender)

    def _should_destroy(self) -> bool:
        if self._retired and self._in_flight == 0 and not self._destroyed:
            self._destroyed = True
            return True
        return False


class SmsService:
    """Holds the active provider sender and forwards outbound SMS to it.

    The active sender is rebuilt from the system-scope admin settings on
    `start()` and on every `refresh_configuration()`. A failed refresh keeps
    the previous sender. Test sends use a throwaway sender and never touch
    the active one.
    """

    def __init__(
        self,
        *,
        settings_store: SettingsStore,
        sender_factory: SenderFactory = create_sms_sender,
        settings_key: str = "sms",
        tenant_id: str = SYSTEM_TENANT_ID,
    ):
        self._store = settings_store
        self._factory = sender_factory
        self._settings_key = settings_key
        self._tenant_id = tenant_id
        self._lock = threading.Lock()
        self._active: _SenderLease | None = None
        self._stopped = False

    @property
    def is_configured(self) -> bool:
        with self._lock:
            return self._active is not None

    def start(self) -> None:
        with self._lock:
            self._stopped = False
        self.refresh_configuration()

    def stop(self) -> None:
        with self._lock:
            self._stopped = True
            lease, self._active = self._active, None
        if lease is not None:
            lease.retire()
            log.info("SMS sender released on shutdown")

    def refresh_configuration(self) -> bool:
        """Rebuild the active sender from stored settings. Never raises.

        Returns True only when a new sender was installed.
        """

        try:
            json_value = self._store.find_by_key(self._tenant_id, self._settings_key)
        except Exception:
            log.exception("Failed to load SMS settings key=%s", self._settings_key)
            return False

        if json_value is None:
            log.info("No SMS settings stored under key=%s; SMS provider not configured", self._settings_key)
            return False

        try:
            configuration = parse_provider_configuration(json_value)
            sender = self._factory(configuration)
        except Exception:
            log.error("Failed to create SMS sender kind=%s", ErrorKind.CONFIGURATION_INVALID.value, exc_info=True)
            return False

        with self._lock:
            stopped = self._stopped
            previous = self._active
            if not stopped:
                self._active = _SenderLease(sender)
        if stopped:
            # stop() ran while the sender was being built.
            _destroy_quietly(sender)
            log.info("SMS service stopped; discarding new sender provider=%s", configuration.type)
            return False
        if previous is not None:
            previous.retire()
        log.info("SMS sender installed provider=%s replaced=%s", configuration.type, previous is not None)
        return True

    def send(self, number_to: str, message: str) -> int:
        with self._lock:
            lease = self._active
            if lease is None:
                raise DispatchError(ErrorKind.NOT_CONFIGURED, "Unable to send SMS: no SMS provider configured!")
            lease.acquire()
        try:
            return self._send_via(lease.sender, number_to, message)
        finally:
            lease.release()

    def send_batch(self, numbers_to: Sequence[str], message: str) -> list[int]:
        """Send sequentially; the first failure stops the batch and propagates.

        Messages already sent before the failure are not rolled back.
        """

        return [self.send(number_to, message) for number_to in numbers_to]

    def send_test(self, request: TestSmsRequest) -> int:
        try:
            configuration = parse_provider_configuration(request.provider_configuration)
            sender = self._factory(configuration)
        except Exception as e:
            raise self._wrap(e, ErrorKind.CONFIGURATION_INVALID, "Invalid SMS provider configuration") from e
        try:
            return self._send_via(sender, request.number_to, request.message)
        finally:
            _destroy_quietly(sender)

    def _send_via(self, sender: SmsSender, number_to: str, message: str) -> int:
        try:
            return sender.send_sms(number_to, message)
        except Exception as e:
            raise self._wrap(e, ErrorKind.SEND_FAILURE, "Unable to send SMS") from e

    @staticmethod
    def _wrap(exc: Exception, kind: ErrorKind, prefix: str) -> DispatchError:
        message = root_cause(exc)
        log.warning("%s: %s", prefix, message, exc_info=exc)
        return DispatchError(kind, f"{prefix}: {message}")
