"""Operator panels - input values for a subsystem and display of its snapshots"""

import threading
import time

from greenhouse.errors import ValidationError

START_KEYS = {
    "temperature": ("start_temp", "start temperature"),
    "humidity": ("start_humidity", "start humidity"),
    "moisture": ("start_moisture", "start moisture"),
}

EXTERNAL_RATE_KEYS = {
    "temperature": ("temp_rate", "temperature effect"),
    "humidity": ("humidity_rate", "humidity effect"),
    "moisture": ("moisture_rate", "soil moisture effect"),
}

REFRESH_MIN = 1
REFRESH_MAX = 10
EXTERNAL_RATE_LIMIT = 5


def parse_number(raw, label):
    """Parse an operator text field the way a float text box does."""
    if raw is None or isinstance(raw, bool):
        raise ValidationError(f"Please enter a valid {label}")
    try:
        return float(str(raw).strip())
    except ValueError:
        raise ValidationError(f"Please enter a valid {label}") from None


def parse_external_rate(quantity, raw):
    """External drift for one quantity, limited to the slider range."""
    label = EXTERNAL_RATE_KEYS[quantity][1]
    rate = parse_number(raw, label)
    if not -EXTERNAL_RATE_LIMIT <= rate <= EXTERNAL_RATE_LIMIT:
        raise ValidationError(
            f"The {label} must be between -{EXTERNAL_RATE_LIMIT} and {EXTERNAL_RATE_LIMIT}"
        )
    return rate


class SettingsPanel:
    """
    Panel backed by one section of the settings file.

    Values are read the way text fields are read: every getter parses
    on demand and raises ValidationError with a user facing message.
    Snapshots are printed and, if a publisher is set, forwarded to it.
    """

    def __init__(self, code, settings, publisher=None, silent=False):
        self.code = code
        self.settings = settings if settings is not None else {}
        self.name = self.settings.get("name", code.capitalize())
        self.silent = silent
        self._publisher = publisher
        self._lock = threading.Lock()
        self._snapshot = None
        self._errors = []
        self.status = ""
        self.editable = True
        self.enabled = True

    def set_publisher(self, publisher):
        self._publisher = publisher

    # ========== INPUTS ==========

    def _get_number(self, key, label):
        return parse_number(self.settings.get(key), label)

    def get_start_value(self, quantity):
        key, label = START_KEYS[quantity]
        return self._get_number(key, label)

    def get_desired_upper(self):
        return self._get_number("upper", "upper bound")

    def get_desired_lower(self):
        return self._get_number("lower", "lower bound")

    def get_rate(self, key="rate", label="rate"):
        return self._get_number(key, label)

    def get_external_rate(self, quantity):
        key = EXTERNAL_RATE_KEYS[quantity][0]
        return parse_external_rate(quantity, self.settings.get(key))

    def get_refresh_interval(self):
        """Refresh interval in whole seconds, 1..10."""
        raw = self.settings.get("refresh")
        try:
            seconds = int(str(raw).strip())
        except ValueError:
            raise ValidationError("Please enter a valid refresh rate") from None
        if not REFRESH_MIN <= seconds <= REFRESH_MAX:
            raise ValidationError(
                f"Refresh rate must be between {REFRESH_MIN} and {REFRESH_MAX} seconds"
            )
        return seconds

    # ========== DISPLAY ==========

    def display_snapshot(self, snapshot):
        with self._lock:
            self._snapshot = dict(snapshot)
        if not self.silent:
            print(f"[{self.code.upper()}] {self.describe(snapshot)}")
        if self._publisher is not None:
            self._publisher.enqueue({
                "subsystem": self.code,
                "value": snapshot,
                "ts": time.time(),
            })

    def display_error(self, message):
        with self._lock:
            self._errors.append(message)
        print(f"[{self.code.upper()}] ERROR: {message}")

    def display_status(self, message):
        with self._lock:
            self.status = message
        if not self.silent:
            print(f"[{self.code.upper()}] {message}")

    def set_editable(self, value):
        """Lock the start value inputs while a run is in progress."""
        self.editable = bool(value)

    def enable(self, value):
        """Disable every input, used for playback."""
        self.enabled = bool(value)

    # ========== STATE ==========

    def get_snapshot(self):
        with self._lock:
            return dict(self._snapshot) if self._snapshot is not None else None

    def get_errors(self):
        with self._lock:
            return list(self._errors)

    @staticmethod
    def describe(snapshot):
        if "device" in snapshot:
            return (f"{snapshot['current']:.2f}  band=[{snapshot['lower']:g}, "
                    f"{snapshot['upper']:g}]  {snapshot['device']}")
        parts = []
        for name in ("temperature", "humidity", "moisture"):
            if name in snapshot:
                q = snapshot[name]
                parts.append(f"{name}={q['current']:.2f} ({q['rate']:+g}/tick)")
        return "  ".join(parts)
