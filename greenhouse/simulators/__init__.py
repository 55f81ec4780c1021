from greenhouse.simulators.base_simulator import WorkerLoop
from greenhouse.simulators.sensor_simulators import (
    TemperatureSimulator,
    HumiditySimulator,
    MoistureSimulator,
)
from greenhouse.simulators.environment_simulator import EnvironmentSimulator

__all__ = [
    'WorkerLoop',
    'TemperatureSimulator',
    'HumiditySimulator',
    'MoistureSimulator',
    'EnvironmentSimulator',
]
