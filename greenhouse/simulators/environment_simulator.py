"""Environment simulator - applies external drift and pushes it into the sensor models"""

from greenhouse import records
from greenhouse.errors import GreenhouseError, ValidationError
from greenhouse.panels import EXTERNAL_RATE_KEYS, START_KEYS, parse_external_rate
from greenhouse.records import Record


class EnvironmentSimulator:
    """
    External effects subsystem.

    Setup seeds every sensor model with its start value. Each tick reads
    the sensors, drifts the readings by the external rates (saturating
    at the hard limits) and hands the results back to the sensors.
    """

    CODE = 'environment'
    TAG = records.ENVIRONMENT

    def __init__(self, model, panel, sensors):
        self.model = model
        self.panel = panel
        self.sensors = sensors

    def setup(self):
        starts = {name: self.panel.get_start_value(name) for name in self.model.QUANTITIES}
        rates = {name: self.panel.get_external_rate(name) for name in self.model.QUANTITIES}
        refresh = self.panel.get_refresh_interval()

        for name in self.model.QUANTITIES:
            self.sensors[name].set_current(starts[name])
        for name in self.model.QUANTITIES:
            self.model.set_current(name, starts[name], start=True)
            self.model.set_external_rate(name, rates[name])
        return refresh

    def tick(self):
        for name in self.model.QUANTITIES:
            self.model.set_current(name, self.sensors[name].get_current())

        self.model.process_env()

        failures = []
        for name in self.model.QUANTITIES:
            try:
                self.sensors[name].set_current(self.model.get_current(name))
            except GreenhouseError as exc:
                failures.append(str(exc))
        if failures:
            raise ValidationError("; ".join(failures))
        return self.model.get_state()

    def record(self, interval):
        fields = {}
        for name in self.model.QUANTITIES:
            fields[START_KEYS[name][0]] = self.model.get_start(name)
            fields[EXTERNAL_RATE_KEYS[name][0]] = self.model.get_external_rate(name)
        return Record(self.TAG, fields, interval)

    def replay(self, record):
        f = record.fields
        self.model.restore(
            {name: f[START_KEYS[name][0]] for name in self.model.QUANTITIES},
            {name: f[EXTERNAL_RATE_KEYS[name][0]] for name in self.model.QUANTITIES},
        )
        return self.model.get_state()

    def apply_update(self, values):
        by_field = {field: name for name, (field, _) in EXTERNAL_RATE_KEYS.items()}
        unknown = set(values) - set(by_field)
        if unknown:
            raise ValidationError(f"Unknown setting(s): {', '.join(sorted(unknown))}")

        rates = {by_field[field]: parse_external_rate(by_field[field], value)
                 for field, value in values.items()}
        for name, rate in rates.items():
            self.model.set_external_rate(name, rate)
