"""Greenhouse life-support simulator."""

__version__ = "1.0.0"

from greenhouse.controllers import GreenhouseController
from greenhouse.settings import load_settings

__all__ = [
    "GreenhouseController",
    "load_settings",
    "__version__",
]
