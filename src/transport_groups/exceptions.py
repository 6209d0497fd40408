"""Exception hierarchy for transport group optimization."""


class TransportOptimizationError(Exception):
    """Base class for all errors raised by the optimization engine."""


class ConfigurationError(TransportOptimizationError):
    """
    The run cannot start with the supplied configuration.

    Raised before any assignment is attempted, e.g. when no vehicle survives
    the availability filter.
    """


class ValidationError(TransportOptimizationError, ValueError):
    """
    A single passenger or vehicle record is malformed.

    In lenient mode the engine skips the record and records a warning;
    in strict mode the error propagates to the caller.
    """

    def __init__(self, message: str, record_id: str | None = None):
        super().__init__(message)
        self.record_id = record_id
