"""
Null matrix correction: Castaing's first approximation, k = C.
"""

from epmaquant.atomic.structures import CharXRay
from epmaquant.correction.base import MatrixCorrection


class NullCorrection(MatrixCorrection):
    """
    Matrix correction that applies no correction.

    ``F`` and ``Fchi`` are identically one, so Z = A = 1 for any pair.
    There is no depth distribution; :meth:`phi` raises ``DomainError``.
    """

    name = "Null"

    def F(self) -> float:
        return 1.0

    def Fchi(self, xray: CharXRay, toa: float) -> float:
        self._check_xray(xray)
        return 1.0
