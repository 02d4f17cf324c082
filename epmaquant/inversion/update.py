"""
Fixed-point update rules for the composition iteration.

Each element's mass fraction is updated from the ratio of its measured to
calculated k-ratio. Writing g(C) = C * k_meas / k_calc(C), the naive rule
iterates C <- g(C); Wegstein's method accelerates (or damps) it with a
secant estimate of g's slope.
"""

from abc import ABC, abstractmethod
from typing import Dict, Mapping, Sequence, TYPE_CHECKING

from epmaquant.core.constants import EPSILON
from epmaquant.core.logging_config import get_logger

if TYPE_CHECKING:
    from epmaquant.inversion.iteration import IterationState

logger = get_logger("inversion.update")


def _naive(state: "IterationState", measured: Mapping[str, float], elm: str) -> float:
    kcalc = state.kcalc[elm]
    if kcalc <= 0.0:
        return 0.0
    return state.composition[elm] * measured[elm] / kcalc


class UpdateRule(ABC):
    """Abstract rule producing the next composition estimate."""

    name = "abstract"

    @abstractmethod
    def update(
        self, history: Sequence["IterationState"], measured: Mapping[str, float]
    ) -> Dict[str, float]:
        """
        Compute the next mass fractions of the measured elements.

        Parameters
        ----------
        history : Sequence[IterationState]
            All states so far, most recent last
        measured : Mapping[str, float]
            Measured k-ratio per element

        Returns
        -------
        dict
            Element -> next mass fraction
        """
        pass


class NaiveUpdateRule(UpdateRule):
    """C <- C * k_meas / k_calc."""

    name = "naive"

    def update(
        self, history: Sequence["IterationState"], measured: Mapping[str, float]
    ) -> Dict[str, float]:
        last = history[-1]
        return {elm: _naive(last, measured, elm) for elm in measured}


class WegsteinUpdateRule(UpdateRule):
    """
    Wegstein's accelerated fixed-point update, element by element.

    With s the secant slope of g between the last two iterates,
    q = s / (s - 1) and C <- q C + (1 - q) g(C). q is clipped to
    [q_min, q_max]; q < 0 extrapolates, 0 < q < 1 damps. The first step, a
    degenerate secant or a non-positive result fall back to the naive update.

    Parameters
    ----------
    q_min : float
        Lower bound on q (default: -5.0)
    q_max : float
        Upper bound on q, below 1 (default: 0.95)
    """

    name = "wegstein"

    def __init__(self, q_min: float = -5.0, q_max: float = 0.95):
        if not q_min < q_max < 1.0:
            raise ValueError("Wegstein bounds must satisfy q_min < q_max < 1")
        self.q_min = q_min
        self.q_max = q_max

    def update(
        self, history: Sequence["IterationState"], measured: Mapping[str, float]
    ) -> Dict[str, float]:
        last = history[-1]
        if len(history) < 2:
            return {elm: _naive(last, measured, elm) for elm in measured}
        prev = history[-2]

        result = {}
        for elm in measured:
            g1 = _naive(last, measured, elm)
            x1 = last.composition[elm]
            x0 = prev.composition[elm]
            dx = x1 - x0
            if abs(dx) <= EPSILON * max(abs(x1), 1.0):
                result[elm] = g1
                continue
            g0 = _naive(prev, measured, elm)
            s = (g1 - g0) / dx
            if abs(s - 1.0) <= EPSILON:
                result[elm] = g1
                continue
            q = min(max(s / (s - 1.0), self.q_min), self.q_max)
            x_next = q * x1 + (1.0 - q) * g1
            if x_next <= 0.0:
                logger.debug(f"Wegstein step for {elm} left the domain; using naive update")
                x_next = g1
            result[elm] = x_next
        return result
