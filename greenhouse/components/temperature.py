"""Temperature model - furnace and air conditioner control"""

from greenhouse.components.base import BoundedQuantity
from greenhouse.errors import InvalidRateError


class TemperatureModel(BoundedQuantity):
    """
    Two-actuator temperature model.
    Furnace raises by heat_rate below the band, air conditioner lowers
    by cool_rate above it. Both devices are never on together.
    """

    CODE = "temperature"
    TAG = "T"
    LABEL = "Temperature"
    UNIT = "°C"
    HARD_MIN = -273.15  # absolute zero
    HARD_MAX = 300.00

    HEATING = "Heating"
    COOLING = "Cooling"

    def __init__(self):
        super().__init__()
        self._heat_rate = 0.0
        self._cool_rate = 0.0  # stored negative
        self._furnace = False
        self._aircon = False

    # ========== SET ==========

    def set_rise_rate(self, rate):
        """Furnace rate; must be positive."""
        rate = float(rate)
        if rate <= 0:
            raise InvalidRateError("Heating rate", rate)
        with self._lock:
            self._heat_rate = rate

    def set_fall_rate(self, rate):
        """Air conditioner rate; sign is normalised, never fails."""
        with self._lock:
            self._cool_rate = -abs(float(rate))

    def restore(self, current, upper, lower, heat_rate, cool_rate, furnace_on, aircon_on):
        """Load a full recorded state, validating like the live setters."""
        self.set_current(current)
        self.set_rise_rate(heat_rate)
        self.set_fall_rate(cool_rate)
        with self._lock:
            self._upper = float(upper)
            self._lower = float(lower)
            self._set_devices_locked(bool(furnace_on), bool(aircon_on) and not furnace_on)

    # ========== GET ==========

    def get_rates(self):
        """Return (heat_rate, cool_rate_magnitude)"""
        with self._lock:
            return (self._heat_rate, abs(self._cool_rate))

    def get_devices(self):
        """Return (furnace_on, aircon_on)"""
        with self._lock:
            return (self._furnace, self._aircon)

    # ========== DEVICES ==========

    def _set_devices_locked(self, furnace, aircon):
        self._furnace = furnace
        self._aircon = aircon

    def _step_locked(self):
        if self._current < self._lower:
            self._set_devices_locked(True, False)
            self._current += self._heat_rate
        elif self._current > self._upper:
            self._set_devices_locked(False, True)
            self._current += self._cool_rate
        else:
            self._set_devices_locked(False, False)

    def _device_status_locked(self):
        if self._furnace:
            return self.HEATING
        if self._aircon:
            return self.COOLING
        return self.OFF

    def _state_locked(self):
        state = super()._state_locked()
        state.update({
            "heat_rate": self._heat_rate,
            "cool_rate": abs(self._cool_rate),
            "furnace_on": self._furnace,
            "aircon_on": self._aircon,
        })
        return state
