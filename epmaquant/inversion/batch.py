"""
Batch quantification of independent unknowns.
"""

import os
from concurrent.futures import ThreadPoolExecutor, ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from epmaquant.core.exceptions import QuantificationError
from epmaquant.core.logging_config import get_logger
from epmaquant.inversion.iteration import Iteration, IterationResult
from epmaquant.inversion.kratio import KRatio

logger = get_logger("inversion.batch")


@dataclass
class BatchOutcome:
    """
    Outcome of one request in a batch.

    Exactly one of ``result`` and ``error`` is set.
    """

    label: str
    result: Optional[IterationResult] = None
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def converged(self) -> bool:
        return self.result is not None and self.result.converged


def _run(iteration: Iteration, label: str, kratios: Sequence[KRatio]) -> IterationResult:
    return iteration.iterate(label, kratios)


def quantify_batch(
    requests: Sequence[Tuple[str, Sequence[KRatio]]],
    iteration: Optional[Iteration] = None,
    n_workers: Optional[int] = None,
    use_processes: bool = False,
) -> List[BatchOutcome]:
    """
    Quantify several unknowns in parallel.

    Parameters
    ----------
    requests : Sequence[Tuple[str, Sequence[KRatio]]]
        (label, k-ratios) pairs
    iteration : Iteration, optional
        Shared iteration settings (default: ``Iteration()``)
    n_workers : int, optional
        Number of worker threads/processes. If None, uses CPU count.
    use_processes : bool
        If True, use processes instead of threads

    Returns
    -------
    List[BatchOutcome]
        One outcome per request, in request order. Requests that fail record
        the error message instead of a result.
    """
    if not requests:
        return []

    if iteration is None:
        iteration = Iteration()
    if n_workers is None:
        n_workers = os.cpu_count() or 1

    logger.info(f"Quantifying {len(requests)} unknowns with {n_workers} workers")

    executor_class = ProcessPoolExecutor if use_processes else ThreadPoolExecutor

    with executor_class(max_workers=n_workers) as executor:
        futures = {
            executor.submit(_run, iteration, label, kratios): i
            for i, (label, kratios) in enumerate(requests)
        }

        completed: Dict[int, BatchOutcome] = {}
        for future in as_completed(futures):
            idx = futures[future]
            label = requests[idx][0]
            try:
                completed[idx] = BatchOutcome(label, result=future.result())
            except (QuantificationError, ValueError) as e:
                logger.error(f"Error quantifying {label}: {e}")
                completed[idx] = BatchOutcome(label, error=str(e))

        outcomes = [completed[i] for i in range(len(requests))]

    logger.info(f"Completed batch quantification of {len(outcomes)} unknowns")
    return outcomes


def tally(outcomes: Sequence[BatchOutcome]) -> Dict[str, int]:
    """
    Count batch outcomes.

    Returns
    -------
    dict
        Keys ``converged``, ``not_converged``, ``failed`` and ``total``
    """
    counts = {"converged": 0, "not_converged": 0, "failed": 0}
    for outcome in outcomes:
        if outcome.failed:
            counts["failed"] += 1
        elif outcome.converged:
            counts["converged"] += 1
        else:
            counts["not_converged"] += 1
    counts["total"] = len(outcomes)
    return counts
