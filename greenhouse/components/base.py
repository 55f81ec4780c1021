"""Base bounded quantity - shared state and validation for every sensor model"""

import threading

from greenhouse.errors import InvalidRateError, OutOfRangeError


def clamp(x, lo, hi):
    return lo if x < lo else hi if x > hi else x


class BoundedQuantity:
    """
    Base class for one physical quantity kept inside hard limits.

    Every public accessor takes the instance lock, so the owning worker
    loop and the display side can call in from different threads.
    Subclasses define HARD_MIN / HARD_MAX / LABEL / UNIT and step().
    """

    CODE = None
    TAG = None
    LABEL = "Quantity"
    UNIT = ""
    HARD_MIN = 0.0
    HARD_MAX = 0.0

    OFF = "Off"

    def __init__(self):
        self._lock = threading.Lock()
        self._current = 0.0
        self._upper = 0.0
        self._lower = 0.0

    # ========== SET ==========

    def set_desired_range(self, upper, lower):
        """Store the band; it may exceed the hard limits."""
        with self._lock:
            self._upper = float(upper)
            self._lower = float(lower)

    def set_current(self, value):
        """Accept a reading only inside [HARD_MIN, HARD_MAX]."""
        value = float(value)
        if not self.HARD_MIN <= value <= self.HARD_MAX:
            raise OutOfRangeError(self.LABEL, value, self.HARD_MIN, self.HARD_MAX, self.UNIT)
        with self._lock:
            self._current = value

    # ========== GET ==========

    def get_current(self):
        with self._lock:
            return self._current

    def get_range(self):
        """Return (upper, lower)"""
        with self._lock:
            return (self._upper, self._lower)

    def device_status(self):
        with self._lock:
            return self._device_status_locked()

    def get_state(self):
        """Snapshot of everything a display needs, taken atomically."""
        with self._lock:
            return self._state_locked()

    # ========== PROCESS ==========

    def step(self):
        with self._lock:
            self._step_locked()
            self._current = clamp(self._current, self.HARD_MIN, self.HARD_MAX)

    def _step_locked(self):
        raise NotImplementedError("Subclasses must implement _step_locked()")

    def _device_status_locked(self):
        raise NotImplementedError("Subclasses must implement _device_status_locked()")

    def _state_locked(self):
        return {
            "current": self._current,
            "upper": self._upper,
            "lower": self._lower,
            "device": self._device_status_locked(),
        }


class OneWayQuantity(BoundedQuantity):
    """
    A quantity with a single raising actuator (humidifier, sprinkler).
    Above the band the device just switches off; nothing lowers it.
    """

    RATE_LABEL = "Rate"
    ON = "On"

    def __init__(self):
        super().__init__()
        self._rate = 0.0
        self._device_on = False

    def set_rise_rate(self, rate):
        rate = float(rate)
        if rate <= 0:
            raise InvalidRateError(self.RATE_LABEL, rate)
        with self._lock:
            self._rate = rate

    def get_rise_rate(self):
        with self._lock:
            return self._rate

    def is_device_on(self):
        with self._lock:
            return self._device_on

    def restore(self, current, upper, lower, rate, device_on):
        """Load a full recorded state, validating like the live setters."""
        self.set_current(current)
        self.set_rise_rate(rate)
        with self._lock:
            self._upper = float(upper)
            self._lower = float(lower)
            self._device_on = bool(device_on)

    def _step_locked(self):
        if self._lower > self._current >= self.HARD_MIN:
            self._device_on = True
            self._current += self._rate
        else:
            # above the band or inside it: one-way device has nothing to do
            self._device_on = False

    def _device_status_locked(self):
        return self.ON if self._device_on else self.OFF

    def _state_locked(self):
        state = super()._state_locked()
        state["rate"] = self._rate
        state["device_on"] = self._device_on
        return state
