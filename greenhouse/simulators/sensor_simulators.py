"""Sensor simulators - temperature, humidity and soil moisture subsystems"""

from greenhouse import records
from greenhouse.errors import InvalidRateError, ValidationError
from greenhouse.panels import parse_number
from greenhouse.records import Record


def _check_keys(values, allowed):
    unknown = set(values) - set(allowed)
    if unknown:
        raise ValidationError(f"Unknown setting(s): {', '.join(sorted(unknown))}")


def _positive(value, label, error_label):
    rate = parse_number(value, label)
    if rate <= 0:
        raise InvalidRateError(error_label, rate)
    return rate


def _band(model, values):
    """Parse a partial band update against the model's current band."""
    upper, lower = model.get_range()
    return (parse_number(values.get('upper', upper), 'upper bound'),
            parse_number(values.get('lower', lower), 'lower bound'))


class TemperatureSimulator:
    """Temperature subsystem: furnace below the band, air conditioner above it."""

    CODE = 'temperature'
    TAG = records.TEMPERATURE

    def __init__(self, model, panel):
        self.model = model
        self.panel = panel

    def setup(self):
        """Push panel values into the model; returns the refresh interval in seconds."""
        self.model.set_fall_rate(self.panel.get_rate('cool_rate', 'cooling rate'))
        self.model.set_rise_rate(self.panel.get_rate('heat_rate', 'heating rate'))
        self.model.set_desired_range(self.panel.get_desired_upper(), self.panel.get_desired_lower())
        return self.panel.get_refresh_interval()

    def tick(self):
        self.model.step()
        return self.model.get_state()

    def record(self, interval):
        s = self.model.get_state()
        return Record(self.TAG, {
            'current': s['current'],
            'upper': s['upper'],
            'lower': s['lower'],
            'heat_rate': s['heat_rate'],
            'cool_rate': s['cool_rate'],
            'furnace_on': s['furnace_on'],
            'aircon_on': s['aircon_on'],
        }, interval)

    def replay(self, record):
        f = record.fields
        self.model.restore(f['current'], f['upper'], f['lower'], f['heat_rate'],
                           f['cool_rate'], f['furnace_on'], f['aircon_on'])
        return self.model.get_state()

    def apply_update(self, values):
        """Validate every field first; a rejected update changes nothing."""
        _check_keys(values, ('upper', 'lower', 'heat_rate', 'cool_rate'))
        heat = cool = band = None
        if 'heat_rate' in values:
            heat = _positive(values['heat_rate'], 'heating rate', 'Heating rate')
        if 'cool_rate' in values:
            cool = parse_number(values['cool_rate'], 'cooling rate')
        if 'upper' in values or 'lower' in values:
            band = _band(self.model, values)

        if heat is not None:
            self.model.set_rise_rate(heat)
        if cool is not None:
            self.model.set_fall_rate(cool)
        if band is not None:
            self.model.set_desired_range(*band)


class OneWaySimulator:
    """Shared behaviour for the humidifier and sprinkler subsystems."""

    CODE = None
    TAG = None
    RATE_LABEL = 'rate'

    def __init__(self, model, panel):
        self.model = model
        self.panel = panel

    def setup(self):
        self.model.set_rise_rate(self.panel.get_rate('rate', self.RATE_LABEL))
        self.model.set_desired_range(self.panel.get_desired_upper(), self.panel.get_desired_lower())
        return self.panel.get_refresh_interval()

    def tick(self):
        self.model.step()
        return self.model.get_state()

    def record(self, interval):
        s = self.model.get_state()
        return Record(self.TAG, {
            'current': s['current'],
            'upper': s['upper'],
            'lower': s['lower'],
            'rate': s['rate'],
            'device_on': s['device_on'],
        }, interval)

    def replay(self, record):
        f = record.fields
        self.model.restore(f['current'], f['upper'], f['lower'], f['rate'], f['device_on'])
        return self.model.get_state()

    def apply_update(self, values):
        _check_keys(values, ('upper', 'lower', 'rate'))
        rate = band = None
        if 'rate' in values:
            rate = _positive(values['rate'], self.RATE_LABEL, self.model.RATE_LABEL)
        if 'upper' in values or 'lower' in values:
            band = _band(self.model, values)

        if rate is not None:
            self.model.set_rise_rate(rate)
        if band is not None:
            self.model.set_desired_range(*band)


class HumiditySimulator(OneWaySimulator):
    CODE = 'humidity'
    TAG = records.HUMIDITY
    RATE_LABEL = 'humidity rate'


class MoistureSimulator(OneWaySimulator):
    CODE = 'moisture'
    TAG = records.MOISTURE
    RATE_LABEL = 'moisture rate'
