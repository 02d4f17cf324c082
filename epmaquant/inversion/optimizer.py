"""
Selection of one k-ratio per element from redundant measurements.
"""

from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Dict, List, Sequence

from epmaquant.core.logging_config import get_logger
from epmaquant.inversion.kratio import KRatio

logger = get_logger("inversion.optimizer")


class KRatioOptimizer(ABC):
    """Abstract policy choosing the k-ratios that drive a quantification."""

    @abstractmethod
    def optimize(self, kratios: Sequence[KRatio]) -> List[KRatio]:
        """Return exactly one k-ratio per element present in ``kratios``."""
        pass


class SimpleKRatioOptimizer(KRatioOptimizer):
    """
    Keep the most significant k-ratio of each element.

    K-ratios whose lines are excited with an overvoltage of at least
    ``min_overvoltage`` are preferred; if an element has none, all of its
    k-ratios are considered. Among the candidates the highest k / sigma wins
    (an unknown uncertainty counts as infinite significance), ties going to
    the higher overvoltage.

    Parameters
    ----------
    min_overvoltage : float
        Preferred minimum overvoltage (default: 1.5)
    """

    def __init__(self, min_overvoltage: float = 1.5):
        if min_overvoltage < 1.0:
            raise ValueError("min_overvoltage must be at least 1.0")
        self.min_overvoltage = min_overvoltage

    def optimize(self, kratios: Sequence[KRatio]) -> List[KRatio]:
        by_element: Dict[str, List[KRatio]] = OrderedDict()
        for kr in kratios:
            by_element.setdefault(kr.element, []).append(kr)

        selected = []
        for elm, candidates in by_element.items():
            preferred = [kr for kr in candidates if kr.min_overvoltage >= self.min_overvoltage]
            if not preferred:
                logger.warning(
                    f"No k-ratio for {elm} reaches overvoltage {self.min_overvoltage}; "
                    f"choosing among all {len(candidates)}"
                )
                preferred = candidates
            best = max(preferred, key=lambda kr: (kr.significance, kr.min_overvoltage))
            if len(candidates) > 1:
                logger.debug(f"Selected {best} from {len(candidates)} candidates")
            selected.append(best)
        return selected
