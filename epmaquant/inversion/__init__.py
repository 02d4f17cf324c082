"""
Quantification: from measured k-ratios to composition.

This module provides k-ratio containers, the redundant k-ratio optimizer,
fixed-point update rules, unmeasured-element rules, the iteration driver and
batch processing.
"""

from epmaquant.inversion.kratio import KRatio, MeasurementConditions, elements
from epmaquant.inversion.optimizer import KRatioOptimizer, SimpleKRatioOptimizer
from epmaquant.inversion.update import UpdateRule, NaiveUpdateRule, WegsteinUpdateRule
from epmaquant.inversion.unmeasured import (
    UnmeasuredElementRule,
    NullUnmeasuredRule,
    ElementByDifference,
)
from epmaquant.inversion.iteration import (
    Iteration,
    IterationResult,
    IterationState,
    IterationStatus,
    quantify,
)
from epmaquant.inversion.batch import BatchOutcome, quantify_batch, tally

__all__ = [
    # K-ratios
    "KRatio",
    "MeasurementConditions",
    "elements",
    "KRatioOptimizer",
    "SimpleKRatioOptimizer",
    # Update rules
    "UpdateRule",
    "NaiveUpdateRule",
    "WegsteinUpdateRule",
    # Unmeasured elements
    "UnmeasuredElementRule",
    "NullUnmeasuredRule",
    "ElementByDifference",
    # Iteration
    "Iteration",
    "IterationResult",
    "IterationState",
    "IterationStatus",
    "quantify",
    # Batch
    "BatchOutcome",
    "quantify_batch",
    "tally",
]
