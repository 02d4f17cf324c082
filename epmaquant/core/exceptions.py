"""
Exception hierarchy for EPMAQuant.

Domain and mismatch errors also derive from ``ValueError`` so callers that
only catch the built-in type keep working.
"""


class EPMAQuantError(Exception):
    """Base class for all errors raised by EPMAQuant."""

    pass


class DomainError(EPMAQuantError, ValueError):
    """A physical model was asked for a value outside its domain of validity.

    Raised for overvoltage at or below one, for depth distributions requested
    from a model that has none, and for degenerate model parameters.
    """

    pass


class ModelModeError(DomainError):
    """A characteristic-line operation was called on a continuum model, or vice versa."""

    pass


class MismatchError(EPMAQuantError, ValueError):
    """Correction models or lines that must share a subshell do not."""

    pass


class QuantificationError(EPMAQuantError):
    """
    A quantification run was aborted by a fatal error.

    Parameters
    ----------
    label : str
        Label of the run
    step : int
        Iteration step in which the error occurred (0 before the first step)
    message : str
        Description of the failure
    """

    def __init__(self, label: str, step: int, message: str):
        self.label = label
        self.step = step
        self.message = message
        super().__init__(f"{label}: quantification aborted at step {step}: {message}")

    def __reduce__(self):
        return (self.__class__, (self.label, self.step, self.message))
