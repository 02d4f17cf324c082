"""
Rules for elements present in the unknown but not measured.
"""

from abc import ABC, abstractmethod
from typing import Dict, Mapping


class UnmeasuredElementRule(ABC):
    """Abstract rule completing a composition with unmeasured elements."""

    @abstractmethod
    def compute(self, measured: Mapping[str, float]) -> Dict[str, float]:
        """
        Return the full composition given the measured mass fractions.

        Parameters
        ----------
        measured : Mapping[str, float]
            Mass fractions of the measured elements

        Returns
        -------
        dict
            Mass fractions of measured and unmeasured elements
        """
        pass


class NullUnmeasuredRule(UnmeasuredElementRule):
    """No unmeasured elements."""

    def compute(self, measured: Mapping[str, float]) -> Dict[str, float]:
        return dict(measured)


class ElementByDifference(UnmeasuredElementRule):
    """
    Assign one unmeasured element the balance 1 - sum(measured), floored at 0.

    Parameters
    ----------
    element : str
        Symbol of the element computed by difference
    """

    def __init__(self, element: str):
        self.element = element

    def compute(self, measured: Mapping[str, float]) -> Dict[str, float]:
        if self.element in measured:
            raise ValueError(f"{self.element} is measured and cannot be computed by difference")
        result = dict(measured)
        result[self.element] = max(0.0, 1.0 - sum(measured.values()))
        return result
