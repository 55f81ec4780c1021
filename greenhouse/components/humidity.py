"""Humidity model - one way humidifier"""

from greenhouse.components.base import OneWayQuantity


class HumidityModel(OneWayQuantity):
    """
    Humidity in percent. Only a humidifier is installed, so the model
    can raise humidity back into the band but never lower it.
    """

    CODE = "humidity"
    TAG = "H"
    LABEL = "Humidity"
    UNIT = "%"
    HARD_MIN = 0.0
    HARD_MAX = 100.0
    RATE_LABEL = "Humidity rate"
