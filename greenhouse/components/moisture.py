"""Soil moisture model - one way sprinkler"""

from greenhouse.components.base import OneWayQuantity


class MoistureModel(OneWayQuantity):
    """Soil moisture in percent, raised by the sprinkler system only."""

    CODE = "moisture"
    TAG = "M"
    LABEL = "Soil moisture"
    UNIT = "%"
    HARD_MIN = 0.0
    HARD_MAX = 100.0
    RATE_LABEL = "Moisture rate"
