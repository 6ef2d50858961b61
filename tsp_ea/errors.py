class TSPError(Exception):
    """Base class for every error raised by tsp_ea."""


class ConfigurationError(TSPError, ValueError):
    """Unknown operator kind or an out-of-range run parameter."""


class InvalidInstanceError(TSPError, ValueError):
    """Distance matrix or instance file that cannot describe a TSP instance."""


class InvalidGenomeError(TSPError, ValueError):
    """Tour whose length does not match the instance."""


class OutOfRangeError(TSPError, IndexError):
    """City index outside [0, n)."""
