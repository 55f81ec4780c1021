"""Greenhouse simulator exceptions"""


class GreenhouseError(Exception):
    """Base class for every error raised by the simulator."""


class ValidationError(GreenhouseError):
    """Operator input failed a domain constraint."""


class OutOfRangeError(ValidationError):
    """
    A quantity was set outside its hard physical limits.
    The model keeps its previous value.
    """

    def __init__(self, label, value, minimum, maximum, unit=""):
        self.label = label
        self.value = value
        self.minimum = minimum
        self.maximum = maximum
        self.unit = unit
        super().__init__(
            f"{label} out of bounds. Please enter a value between "
            f"{minimum}{unit} and {maximum}{unit}"
        )


class InvalidRateError(ValidationError):
    """A one-way actuator was given a rate that is not positive."""

    def __init__(self, label, rate):
        self.label = label
        self.rate = rate
        super().__init__(f"{label} must be a positive number.")


class PlaybackFormatError(GreenhouseError):
    """A recorded line with a known tag could not be parsed."""

    def __init__(self, line, reason="Incorrect data. File might be corrupted."):
        self.line = line
        self.reason = reason
        super().__init__(reason)


class SimulationStateError(GreenhouseError):
    """A lifecycle command is not legal in the current run state."""


class ModeConflictError(SimulationStateError):
    """Save and playback were both requested for the same run."""
