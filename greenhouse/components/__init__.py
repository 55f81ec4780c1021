from greenhouse.components.base import BoundedQuantity, OneWayQuantity, clamp
from greenhouse.components.temperature import TemperatureModel
from greenhouse.components.humidity import HumidityModel
from greenhouse.components.moisture import MoistureModel
from greenhouse.components.environment import EnvironmentModel

__all__ = [
    'BoundedQuantity',
    'OneWayQuantity',
    'clamp',
    'TemperatureModel',
    'HumidityModel',
    'MoistureModel',
    'EnvironmentModel',
]
