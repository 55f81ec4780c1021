"""Environment model - external drift acting on the greenhouse"""

import threading

from greenhouse.components.base import clamp
from greenhouse.components.humidity import HumidityModel
from greenhouse.components.moisture import MoistureModel
from greenhouse.components.temperature import TemperatureModel
from greenhouse.errors import OutOfRangeError


class _Drift:
    """One externally perturbed quantity: start value, current value, rate per tick."""

    def __init__(self, model):
        self.label = model.LABEL
        self.unit = model.UNIT
        self.minimum = model.HARD_MIN
        self.maximum = model.HARD_MAX
        self.start = 0.0
        self.current = 0.0
        self.rate = 0.0

    def apply(self):
        # saturate at the physical limits; this is an external force, not input
        self.current = clamp(self.current + self.rate, self.minimum, self.maximum)

    def check(self, value):
        value = float(value)
        if not self.minimum <= value <= self.maximum:
            raise OutOfRangeError(self.label, value, self.minimum, self.maximum, self.unit)
        return value


class EnvironmentModel:
    """
    Holds temperature, humidity and soil moisture as seen from outside
    the greenhouse and drifts each of them by its external rate per tick.
    """

    CODE = "environment"
    TAG = "E"
    QUANTITIES = ("temperature", "humidity", "moisture")

    def __init__(self):
        self._lock = threading.Lock()
        self._drifts = {
            "temperature": _Drift(TemperatureModel),
            "humidity": _Drift(HumidityModel),
            "moisture": _Drift(MoistureModel),
        }

    # ========== SET ==========

    def set_current(self, name, value, start=False):
        """Take a reading from a sensor; start=True also records the start snapshot."""
        drift = self._drifts[name]
        value = drift.check(value)
        with self._lock:
            drift.current = value
            if start:
                drift.start = value

    def set_external_rate(self, name, rate):
        with self._lock:
            self._drifts[name].rate = float(rate)

    def restore(self, starts, rates):
        """
        Load recorded start values and external rates (name -> value dicts).
        Nothing changes unless every start value is inside its hard limits.
        """
        checked = {name: self._drifts[name].check(starts[name]) for name in self.QUANTITIES}
        with self._lock:
            for name in self.QUANTITIES:
                drift = self._drifts[name]
                drift.start = checked[name]
                drift.current = drift.start
                drift.rate = float(rates[name])

    # ========== GET ==========

    def get_current(self, name):
        with self._lock:
            return self._drifts[name].current

    def get_start(self, name):
        with self._lock:
            return self._drifts[name].start

    def get_external_rate(self, name):
        with self._lock:
            return self._drifts[name].rate

    def get_state(self):
        with self._lock:
            state = {}
            for name, drift in self._drifts.items():
                state[name] = {
                    "start": drift.start,
                    "current": drift.current,
                    "rate": drift.rate,
                }
            return state

    # ========== PROCESS ==========

    def process_env(self):
        with self._lock:
            for drift in self._drifts.values():
                drift.apply()
