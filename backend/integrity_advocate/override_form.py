"""
State for the session-status override form.

The form keeps its values in an OverrideFormState instead of shared globals.
Change events go through a Debouncer so validation runs once per burst of input.
"""
import re
import threading

from .status import ParticipantStatus

REASON_RE = re.compile(r'^[a-zA-Z0-9._-]{0,32}$')
DEBOUNCE_DELAY = 0.6


class Debouncer:
    """Trailing-edge debounce: each call() restarts the timer; `func` runs once after `delay` seconds of quiet."""

    def __init__(self, func, delay=DEBOUNCE_DELAY):
        self.func = func
        self.delay = delay
        self._timer = None
        self._lock = threading.Lock()

    def call(self, *args, **kwargs):
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.delay, self.func, args=args, kwargs=kwargs)
            self._timer.daemon = True
            self._timer.start()

    def cancel(self):
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def flush(self, *args, **kwargs):
        """Drop any pending call and run `func` now."""
        self.cancel()
        return self.func(*args, **kwargs)

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None and self._timer.is_alive()


class OverrideFormState:
    def __init__(self, original_status=None, status=None, reason=''):
        self.original_status = original_status
        self.status = status
        self.reason = reason
        self.reason_valid = True
        self.status_valid = False
        self.save_enabled = False
        self.debouncer = Debouncer(self.validate)

    @staticmethod
    def is_reason_valid(reason) -> bool:
        return REASON_RE.match(reason or '') is not None

    @staticmethod
    def is_status_valid(status) -> bool:
        return ParticipantStatus.is_override_status(status)

    def validate(self) -> bool:
        self.reason_valid = self.is_reason_valid(self.reason)
        self.status_valid = self.is_status_valid(self.status)
        self.save_enabled = self.reason_valid and self.status_valid
        return self.save_enabled

    def on_reason_change(self, reason):
        self.reason = reason
        self.debouncer.call()

    def on_status_change(self, status):
        self.status = status
        self.debouncer.call()

    def reset(self):
        self.debouncer.cancel()
        self.status = self.original_status
        self.reason = ''
        self.reason_valid = True
        self.status_valid = False
        self.save_enabled = False

    def as_payload(self, target_user_id, override_user_id, block_instance_id, module_id) -> dict:
        return {
            'status': self.status,
            'reason': self.reason,
            'target_user_id': target_user_id,
            'override_user_id': override_user_id,
            'block_instance_id': block_instance_id,
            'module_id': module_id,
        }
