from greenhouse.controllers.simulation_state import SimulationStateMachine
from greenhouse.controllers.greenhouse_controller import GreenhouseController

__all__ = [
    'SimulationStateMachine',
    'GreenhouseController',
]
