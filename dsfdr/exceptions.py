"""Exceptions raised by the data splitting procedures."""

from typing import Optional


class DSError(Exception):
    """Base class for all errors raised by dsfdr."""


class InvalidConfiguration(DSError, ValueError):
    """
    Invalid arguments passed to an entry point.

    Raised before any split is drawn, e.g. for a target FDR outside (0, 1),
    ``num_split < 1`` or mismatched matrix dimensions.
    """


class InsufficientSamples(DSError, ValueError):
    """Too few observations to split the data into two usable halves."""


class FitFailure(DSError, RuntimeError):
    """
    The fit oracle failed on one half of a split.

    Parameters
    ----------
    message : str
        Description of the failure.
    trial : int, optional
        Index of the split (trial) on which the failure happened. Set by
        the multiple data splitting driver.
    half : int, optional
        Which half of the split (1 or 2) was being fitted.
    node : int, optional
        Response column of the nodewise regression, for graph selection.
    """

    def __init__(
        self,
        message: str,
        trial: Optional[int] = None,
        half: Optional[int] = None,
        node: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.trial = trial
        self.half = half
        self.node = node

    def __str__(self) -> str:
        where = []
        if self.node is not None:
            where.append(f"node {self.node}")
        if self.trial is not None:
            where.append(f"trial {self.trial}")
        if self.half is not None:
            where.append(f"half {self.half}")
        if where:
            return f"{self.message} ({', '.join(where)})"
        return self.message

    def __reduce__(self):
        # Keep the context attributes across process boundaries
        return (self.__class__, (self.message, self.trial, self.half, self.node))
