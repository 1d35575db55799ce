"""Exception hierarchy for the predator/prey engine."""


class SimulationError(Exception):
    """Root of all engine exceptions."""


class ConfigurationError(SimulationError):
    """Invalid world parameters (bad dimensions, counts over capacity, ...)."""
