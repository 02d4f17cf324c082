"""
Iterative quantification: from measured k-ratios to mass fractions.

Algorithm:
1. Seed each measured element with C = k * C_std (no matrix correction)
2. Complete the composition with the unmeasured-element rule
3. Build unknown and standard corrections from the current composition and
   compute the calculated k-ratios
4. Stop when every measured/calculated ratio is within tolerance of one
5. Otherwise derive the next composition with the update rule and repeat

Each step depends only on the composition snapshot it is given; correction
models are rebuilt from scratch every step.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set, Type

import numpy as np
import pandas as pd

from epmaquant.atomic.database import get_database
from epmaquant.atomic.material import Material
from epmaquant.core.abc import XrayDataSource
from epmaquant.core.exceptions import DomainError, MismatchError, QuantificationError
from epmaquant.core.logging_config import get_logger
from epmaquant.correction.base import MatrixCorrection
from epmaquant.correction.fluorescence import FluorescenceCorrection, ReedFluorescence
from epmaquant.correction.xpp import XPP
from epmaquant.correction.zaf import multi_k_ratio, multi_zaf
from epmaquant.inversion.kratio import KRatio
from epmaquant.inversion.optimizer import KRatioOptimizer, SimpleKRatioOptimizer
from epmaquant.inversion.result_base import ResultTableMixin
from epmaquant.inversion.unmeasured import NullUnmeasuredRule, UnmeasuredElementRule
from epmaquant.inversion.update import UpdateRule, WegsteinUpdateRule

logger = get_logger("inversion.iteration")


class IterationStatus(Enum):
    """Terminal status of a quantification run."""

    CONVERGED = "converged"
    NOT_CONVERGED = "not_converged"


@dataclass(frozen=True)
class IterationState:
    """
    One step of the iteration.

    Attributes
    ----------
    step : int
        Step number, starting at 1
    composition : Material
        Trial composition (measured and unmeasured elements)
    kcalc : Dict[str, float]
        Calculated k-ratio per measured element
    ratios : Dict[str, float]
        Measured over calculated k-ratio per measured element
    """

    step: int
    composition: Material
    kcalc: Dict[str, float]
    ratios: Dict[str, float]

    @property
    def residuals(self) -> Dict[str, float]:
        """ratio - 1 per measured element."""
        return {elm: r - 1.0 for elm, r in self.ratios.items()}

    @property
    def max_residual(self) -> float:
        if not self.ratios:
            return 0.0
        return max(abs(r - 1.0) for r in self.ratios.values())


@dataclass
class IterationResult(ResultTableMixin):
    """
    Outcome of a quantification run.

    Attributes
    ----------
    label : str
        Label of the unknown
    status : IterationStatus
        Terminal status
    history : List[IterationState]
        Every evaluated state, in order
    kratios : List[KRatio]
        The k-ratios that drove the iteration
    """

    label: str
    status: IterationStatus
    history: List[IterationState]
    kratios: List[KRatio]
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def converged(self) -> bool:
        return self.status is IterationStatus.CONVERGED

    @property
    def iterations(self) -> int:
        return len(self.history)

    @property
    def final(self) -> IterationState:
        return self.history[-1]

    @property
    def composition(self) -> Material:
        """Final composition, named after the label."""
        return self.final.composition

    @property
    def residuals(self) -> Dict[str, float]:
        return self.final.residuals

    @property
    def measured(self) -> Dict[str, float]:
        return {kr.element: kr.k for kr in self.kratios}

    def summary(self) -> pd.DataFrame:
        """
        Tabulate the final state.

        Returns
        -------
        pd.DataFrame
            One row per element with columns Element, C, Cnorm, kmeas, kcalc,
            ratio (k columns are NaN for unmeasured elements)
        """
        comp = self.composition
        total = comp.total()
        measured = self.measured
        rows = []
        for elm in comp.elements:
            rows.append(
                {
                    "Element": elm,
                    "C": comp[elm],
                    "Cnorm": comp[elm] / total if total > 0 else np.nan,
                    "kmeas": measured.get(elm, np.nan),
                    "kcalc": self.final.kcalc.get(elm, np.nan),
                    "ratio": self.final.ratios.get(elm, np.nan),
                }
            )
        return pd.DataFrame(rows, columns=["Element", "C", "Cnorm", "kmeas", "kcalc", "ratio"])

    def format_table(self) -> str:
        """Human-readable summary of the final state."""
        lines = [self._format_header(f"Quantification of {self.label}")]
        lines.extend(
            self._format_key_values(
                [
                    ("Status", self.status.value),
                    ("Iterations", self.iterations),
                    ("Max |k_meas/k_calc - 1|", f"{self.final.max_residual:.2e}"),
                ]
            )
        )
        lines.extend(
            self._format_composition_table(
                dict(self.composition.mass_fractions), self.measured, self.final.kcalc
            )
        )
        lines.append(self._format_footer())
        return "\n".join(lines)


class Iteration:
    """
    Iterative quantification of an unknown from its k-ratios.

    Parameters
    ----------
    mc_type : type
        Matrix-correction class (default: XPP)
    fc_type : type
        Fluorescence class (default: ReedFluorescence)
    updater : UpdateRule, optional
        Update rule (default: Wegstein)
    unmeasured : UnmeasuredElementRule, optional
        Completion rule for unmeasured elements (default: none)
    optimizer : KRatioOptimizer, optional
        Applied to the k-ratios before iterating; without one, each element
        must have exactly one k-ratio
    max_iterations : int
        Maximum number of evaluated steps
    tolerance : float
        Convergence threshold on max |k_meas / k_calc - 1|
    composition_tolerance : float
        The run also stops once no mass fraction changes by more than this
    consecutive : int
        Number of consecutive steps that must meet ``tolerance``
    database : XrayDataSource, optional
        Data source to preload (default: shared database)
    """

    def __init__(
        self,
        mc_type: Type[MatrixCorrection] = XPP,
        fc_type: Type[FluorescenceCorrection] = ReedFluorescence,
        updater: Optional[UpdateRule] = None,
        unmeasured: Optional[UnmeasuredElementRule] = None,
        optimizer: Optional[KRatioOptimizer] = None,
        max_iterations: int = 100,
        tolerance: float = 1.0e-4,
        composition_tolerance: float = 1.0e-7,
        consecutive: int = 1,
        database: Optional[XrayDataSource] = None,
    ):
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        if consecutive < 1:
            raise ValueError("consecutive must be at least 1")
        if tolerance <= 0.0 or composition_tolerance <= 0.0:
            raise ValueError("Tolerances must be positive")
        self.mc_type = mc_type
        self.fc_type = fc_type
        self.updater = updater if updater is not None else WegsteinUpdateRule()
        self.unmeasured = unmeasured if unmeasured is not None else NullUnmeasuredRule()
        self.optimizer = optimizer
        self.max_iterations = max_iterations
        self.tolerance = tolerance
        self.composition_tolerance = composition_tolerance
        self.consecutive = consecutive
        self.database = database

    @classmethod
    def from_config(
        cls, config: Mapping[str, Any], unmeasured: Optional[UnmeasuredElementRule] = None
    ) -> "Iteration":
        """
        Build an iteration from the ``quantification`` section of a configuration.

        Parameters
        ----------
        config : dict
            Configuration dictionary (see ``epmaquant.core.config``)
        unmeasured : UnmeasuredElementRule, optional
            Completion rule for unmeasured elements

        Raises
        ------
        ValueError
            If the configuration is invalid
        """
        from epmaquant.core.config import merged_quant_config, validate_quant_config
        from epmaquant.core.factory import (
            FluorescenceFactory,
            MatrixCorrectionFactory,
            UpdateRuleFactory,
        )

        if "quantification" in config:
            validate_quant_config(config)
        q = merged_quant_config(config)
        rule_kwargs = q["wegstein"] if q["update_rule"] == "wegstein" else {}
        return cls(
            mc_type=MatrixCorrectionFactory.get(q["matrix_correction"]),
            fc_type=FluorescenceFactory.get(q["fluorescence"]),
            updater=UpdateRuleFactory.create(q["update_rule"], **rule_kwargs),
            unmeasured=unmeasured,
            optimizer=SimpleKRatioOptimizer(q["optimizer"]["min_overvoltage"]),
            max_iterations=q["max_iterations"],
            tolerance=q["tolerance"],
            composition_tolerance=q["composition_tolerance"],
            consecutive=q["consecutive"],
        )

    @staticmethod
    def initial_composition(kratios: Sequence[KRatio]) -> Dict[str, float]:
        """First approximation C = k * C_std for each measured element."""
        return {kr.element: max(kr.k, 0.0) * kr.standard[kr.element] for kr in kratios}

    def evaluate(
        self,
        label: str,
        step: int,
        fractions: Mapping[str, float],
        kratios: Sequence[KRatio],
    ) -> IterationState:
        """
        Compute the calculated k-ratios for one trial composition.

        Parameters
        ----------
        label : str
            Name given to the trial material
        step : int
            Step number recorded in the state
        fractions : Mapping[str, float]
            Mass fractions of the measured elements
        kratios : Sequence[KRatio]
            One k-ratio per measured element

        Returns
        -------
        IterationState

        Raises
        ------
        DomainError, MismatchError
            If a correction cannot be built or evaluated
        """
        composition = Material(label, self.unmeasured.compute(fractions))
        kcalc = {}
        ratios = {}
        for kr in kratios:
            unk_cond, std_cond = kr.unk_conditions, kr.std_conditions
            unk = multi_zaf(
                self.mc_type,
                self.fc_type,
                composition,
                kr.xrays,
                unk_cond.beam_energy,
                unk_cond.coating,
            )
            std = multi_zaf(
                self.mc_type,
                self.fc_type,
                kr.standard,
                kr.xrays,
                std_cond.beam_energy,
                std_cond.coating,
            )
            k = multi_k_ratio(unk, std, unk_cond.takeoff_angle, std_cond.takeoff_angle)
            k_meas = max(kr.k, 0.0)
            if k > 0.0:
                ratio = k_meas / k
            elif k_meas == 0.0:
                ratio = 1.0
            else:
                raise DomainError(f"Calculated k-ratio for {kr.element} vanished")
            kcalc[kr.element] = k
            ratios[kr.element] = ratio
        return IterationState(step, composition, kcalc, ratios)

    def update(
        self, history: Sequence[IterationState], measured: Mapping[str, float]
    ) -> Dict[str, float]:
        """Next mass fractions of the measured elements from the update rule."""
        return self.updater.update(history, measured)

    def _preload(self, kratios: Sequence[KRatio]) -> None:
        symbols: Set[str] = set()
        for kr in kratios:
            symbols.add(kr.element)
            symbols.update(kr.standard.elements)
            for cond in (kr.unk_conditions, kr.std_conditions):
                layer = getattr(cond.coating, "layer", None)
                if layer is not None:
                    symbols.update(layer.material.elements)
        symbols.update(self.unmeasured.compute({}).keys())
        (self.database or get_database()).preload(symbols)

    def _stalled(self, history: Sequence[IterationState], elements: Sequence[str]) -> bool:
        if len(history) < 2:
            return False
        last, prev = history[-1].composition, history[-2].composition
        return max(abs(last[elm] - prev[elm]) for elm in elements) < self.composition_tolerance

    def iterate(
        self,
        label: str,
        kratios: Sequence[KRatio],
        initial: Optional[Mapping[str, float]] = None,
    ) -> IterationResult:
        """
        Quantify an unknown.

        Parameters
        ----------
        label : str
            Label of the unknown
        kratios : Sequence[KRatio]
            Measured k-ratios
        initial : Mapping[str, float], optional
            Starting mass fractions of the measured elements (default:
            :meth:`initial_composition`)

        Returns
        -------
        IterationResult
            Status ``CONVERGED``, or ``NOT_CONVERGED`` with the last state
            after ``max_iterations`` steps

        Raises
        ------
        ValueError
            If an element has more than one k-ratio and no optimizer is set
        QuantificationError
            If a correction model fails during a step
        """
        kratios = list(kratios)
        if not kratios:
            raise ValueError(f"{label}: no k-ratios to quantify")
        if self.optimizer is not None:
            kratios = self.optimizer.optimize(kratios)
        elements = [kr.element for kr in kratios]
        if len(set(elements)) != len(elements):
            raise ValueError(f"{label}: more than one k-ratio per element; apply an optimizer")

        try:
            self._preload(kratios)
        except ValueError as e:
            raise QuantificationError(label, 0, str(e)) from e
        for kr in kratios:
            if kr.k < 0.0:
                logger.warning(f"{label}: negative k-ratio for {kr.element} ({kr.k:.4g}) set to 0")
        measured = {kr.element: max(kr.k, 0.0) for kr in kratios}
        fractions = dict(initial) if initial is not None else self.initial_composition(kratios)

        logger.info(
            f"Quantifying {label}: {len(kratios)} k-ratios with {self.mc_type.__name__}, "
            f"{self.fc_type.__name__} and {type(self.updater).__name__}"
        )

        history: List[IterationState] = []
        streak = 0
        for step in range(1, self.max_iterations + 1):
            try:
                state = self.evaluate(label, step, fractions, kratios)
            except (DomainError, MismatchError) as e:
                logger.error(f"{label}: step {step} failed: {e}")
                raise QuantificationError(label, step, str(e)) from e
            history.append(state)
            logger.debug(f"{label}: step {step} max residual {state.max_residual:.3e}")

            streak = streak + 1 if state.max_residual < self.tolerance else 0
            if streak >= self.consecutive or self._stalled(history, elements):
                logger.info(f"{label}: converged in {step} steps")
                return IterationResult(label, IterationStatus.CONVERGED, history, kratios)

            fractions = self.update(history, measured)

        logger.warning(
            f"{label}: not converged after {self.max_iterations} steps "
            f"(max residual {history[-1].max_residual:.3e})"
        )
        return IterationResult(label, IterationStatus.NOT_CONVERGED, history, kratios)


def quantify(
    label: str,
    kratios: Sequence[KRatio],
    mc_type: Type[MatrixCorrection] = XPP,
    fc_type: Type[FluorescenceCorrection] = ReedFluorescence,
    updater: Optional[UpdateRule] = None,
    optimizer: Optional[KRatioOptimizer] = None,
    strip: Sequence[str] = (),
    unmeasured: Optional[UnmeasuredElementRule] = None,
    **kwargs,
) -> IterationResult:
    """
    Quantify an unknown with the usual defaults.

    Parameters
    ----------
    label : str
        Label of the unknown
    kratios : Sequence[KRatio]
        Measured k-ratios, possibly several per element
    mc_type, fc_type : type
        Correction classes (default: XPP with Reed fluorescence)
    updater : UpdateRule, optional
        Update rule (default: Wegstein)
    optimizer : KRatioOptimizer, optional
        Default: ``SimpleKRatioOptimizer(1.5)``
    strip : Sequence[str]
        Elements whose k-ratios are discarded (e.g. the coating element)
    unmeasured : UnmeasuredElementRule, optional
        Completion rule for unmeasured elements
    **kwargs
        Further :class:`Iteration` arguments (tolerances, max_iterations)

    Returns
    -------
    IterationResult
    """
    kept = [kr for kr in kratios if kr.element not in strip]
    iteration = Iteration(
        mc_type,
        fc_type,
        updater=updater,
        unmeasured=unmeasured,
        optimizer=optimizer if optimizer is not None else SimpleKRatioOptimizer(1.5),
        **kwargs,
    )
    return iteration.iterate(label, kept)
