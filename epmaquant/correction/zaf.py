"""
Combination of matrix, fluorescence and coating corrections into ZAF factors.

For a measured line the calculated k-ratio between an unknown and a standard
is

    k = Z * A * F * c * C_unk / C_std

where Z and A come from the matrix-correction models, F from the
fluorescence models and c from the coatings, each taken as an
unknown-over-standard ratio.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Type, Union

import numpy as np
import pandas as pd

from epmaquant.atomic.database import get_database
from epmaquant.atomic.material import Material
from epmaquant.atomic.structures import AtomicSubShell, CharXRay
from epmaquant.core.exceptions import MismatchError
from epmaquant.core.logging_config import get_logger
from epmaquant.core.units import convert_angle
from epmaquant.correction.base import MatrixCorrection, matrix_correction
from epmaquant.correction.coating import CoatingCorrection, NullCoating
from epmaquant.correction.fluorescence import FluorescenceCorrection

logger = get_logger("correction.zaf")

SUMMARY_COLUMNS = [
    "Unknown",
    "E0unk",
    "TOAunk",
    "Standard",
    "E0std",
    "TOAstd",
    "Xray",
    "Z",
    "A",
    "F",
    "c",
    "ZAF",
    "k",
]


@dataclass(frozen=True)
class ZAFCorrection:
    """
    A matrix, a fluorescence and a coating correction for one material,
    subshell and beam energy.

    Attributes
    ----------
    za : MatrixCorrection
        Atomic-number and absorption model
    f : FluorescenceCorrection
        Fluorescence model
    coating : CoatingCorrection
        Coating model

    Raises
    ------
    MismatchError
        If the matrix and fluorescence models disagree on material, subshell
        or beam energy
    """

    za: MatrixCorrection
    f: FluorescenceCorrection
    coating: CoatingCorrection = field(default_factory=NullCoating)

    def __post_init__(self):
        if self.za.subshell != self.f.subshell:
            raise MismatchError(
                f"Matrix correction for {self.za.subshell} paired with "
                f"fluorescence correction for {self.f.subshell}"
            )
        if self.za.material != self.f.material or self.za.e0 != self.f.e0:
            raise MismatchError("Matrix and fluorescence corrections describe different samples")

    @property
    def material(self) -> Material:
        return self.za.material

    @property
    def subshell(self) -> AtomicSubShell:
        return self.za.subshell

    @property
    def beam_energy(self) -> float:
        return self.za.e0


def _matrix(corr: Union[ZAFCorrection, MatrixCorrection]) -> MatrixCorrection:
    return corr.za if isinstance(corr, ZAFCorrection) else corr


def Z(
    unk: Union[ZAFCorrection, MatrixCorrection], std: Union[ZAFCorrection, MatrixCorrection]
) -> float:
    """
    Atomic-number correction F(unk) / F(std).

    Raises
    ------
    MismatchError
        If unknown and standard were built for different subshells
    """
    unk, std = _matrix(unk), _matrix(std)
    if unk.subshell != std.subshell:
        raise MismatchError(
            f"Atomic-number correction needs one subshell, got {unk.subshell} "
            f"and {std.subshell}"
        )
    return unk.F() / std.F()


def ZA(
    unk: Union[ZAFCorrection, MatrixCorrection],
    std: Union[ZAFCorrection, MatrixCorrection],
    xray: CharXRay,
    toa_unk: float,
    toa_std: float,
) -> float:
    """
    Combined atomic-number and absorption correction Fchi(unk) / Fchi(std).

    Raises
    ------
    MismatchError
        If either model was built for a subshell other than ``xray.inner``
    """
    return _matrix(unk).Fchi(xray, toa_unk) / _matrix(std).Fchi(xray, toa_std)


def A(
    unk: Union[ZAFCorrection, MatrixCorrection],
    std: Union[ZAFCorrection, MatrixCorrection],
    xray: CharXRay,
    toa_unk: float,
    toa_std: float,
) -> float:
    """Absorption correction ZA / Z."""
    return ZA(unk, std, xray, toa_unk, toa_std) / Z(unk, std)


def F_corr(
    unk: ZAFCorrection, std: ZAFCorrection, xray: CharXRay, toa_unk: float, toa_std: float
) -> float:
    """Fluorescence correction F(unk) / F(std)."""
    return unk.f.F(xray, toa_unk) / std.f.F(xray, toa_std)


def coating(
    unk: ZAFCorrection, std: ZAFCorrection, xray: CharXRay, toa_unk: float, toa_std: float
) -> float:
    """Coating correction: ratio of the coating transmissions."""
    return unk.coating.transmission(xray, toa_unk) / std.coating.transmission(xray, toa_std)


def ZAFc(
    unk: ZAFCorrection, std: ZAFCorrection, xray: CharXRay, toa_unk: float, toa_std: float
) -> float:
    """
    Total correction Z * A * F * c for one line.

    Parameters
    ----------
    unk, std : ZAFCorrection
        Corrections for the unknown and the standard, built for ``xray.inner``
    xray : CharXRay
        Measured line
    toa_unk, toa_std : float
        Take-off angles in radians

    Returns
    -------
    float
    """
    return (
        Z(unk, std)
        * A(unk, std, xray, toa_unk, toa_std)
        * F_corr(unk, std, xray, toa_unk, toa_std)
        * coating(unk, std, xray, toa_unk, toa_std)
    )


def k_ratio(
    unk: ZAFCorrection, std: ZAFCorrection, xray: CharXRay, toa_unk: float, toa_std: float
) -> float:
    """Calculated k-ratio ZAFc * C_unk / C_std for one line."""
    corr = ZAFc(unk, std, xray, toa_unk, toa_std)
    return corr * unk.material[xray.element] / std.material[xray.element]


# ============================================================================
# Construction
# ============================================================================


def zaf(
    za: MatrixCorrection,
    f: FluorescenceCorrection,
    coating: Optional[CoatingCorrection] = None,
) -> ZAFCorrection:
    """Bundle prebuilt models into a :class:`ZAFCorrection`."""
    return ZAFCorrection(za, f, coating if coating is not None else NullCoating())


def ZAF(
    mc_type: Type[MatrixCorrection],
    fc_type: Type[FluorescenceCorrection],
    material: Material,
    subshell: AtomicSubShell,
    e0: float,
    coating: Optional[CoatingCorrection] = None,
) -> ZAFCorrection:
    """
    Build a :class:`ZAFCorrection` from model classes.

    Parameters
    ----------
    mc_type : type
        Matrix-correction class (e.g. ``XPP``)
    fc_type : type
        Fluorescence class (e.g. ``ReedFluorescence``)
    material : Material
        Sample material
    subshell : AtomicSubShell
        Ionized subshell
    e0 : float
        Beam energy in eV
    coating : CoatingCorrection, optional
        Surface coating (default: none)

    Raises
    ------
    DomainError
        If ``e0`` does not exceed the edge energy
    """
    return zaf(
        matrix_correction(mc_type, material, subshell, e0),
        fc_type(material, subshell, e0),
        coating,
    )


def ZAF_pair(
    mc_type: Type[MatrixCorrection],
    fc_type: Type[FluorescenceCorrection],
    unk: Material,
    std: Material,
    subshell: AtomicSubShell,
    e0: float,
    unk_coating: Optional[CoatingCorrection] = None,
    std_coating: Optional[CoatingCorrection] = None,
    std_e0: Optional[float] = None,
) -> Tuple[ZAFCorrection, ZAFCorrection]:
    """
    Build matched corrections for an unknown and a standard.

    ``std_e0`` defaults to ``e0``.
    """
    return (
        ZAF(mc_type, fc_type, unk, subshell, e0, unk_coating),
        ZAF(mc_type, fc_type, std, subshell, std_e0 if std_e0 is not None else e0, std_coating),
    )


# ============================================================================
# Multiple lines
# ============================================================================


class MultiZAF:
    """
    Corrections for a set of lines of one element that may originate from
    several subshells.

    Parameters
    ----------
    xrays : Sequence[CharXRay]
        Lines measured together, all of one element
    zafs : Mapping[AtomicSubShell, ZAFCorrection]
        One correction per inner subshell of ``xrays``

    Raises
    ------
    ValueError
        If ``xrays`` is empty or mixes elements
    MismatchError
        If a line's subshell has no correction
    """

    def __init__(self, xrays: Sequence[CharXRay], zafs: Mapping[AtomicSubShell, ZAFCorrection]):
        xrays = tuple(xrays)
        if not xrays:
            raise ValueError("MultiZAF needs at least one line")
        elements = {x.element for x in xrays}
        if len(elements) != 1:
            raise ValueError(f"MultiZAF lines must share one element, got {sorted(elements)}")
        for x in xrays:
            if x.inner not in zafs:
                raise MismatchError(f"No correction for {x.inner} (line {x})")
        self.xrays = xrays
        self.zafs = dict(zafs)
        first = next(iter(self.zafs.values()))
        self.material = first.material
        self.beam_energy = first.beam_energy

    @property
    def element(self) -> str:
        return self.xrays[0].element

    def for_xray(self, xray: CharXRay) -> ZAFCorrection:
        """The correction for the subshell ``xray`` originates from."""
        try:
            return self.zafs[xray.inner]
        except KeyError:
            raise MismatchError(f"No correction for {xray.inner} (line {xray})") from None

    def __repr__(self) -> str:
        lines = ", ".join(x.name for x in self.xrays)
        return f"MultiZAF[{self.material.name}, {self.element} {lines}]"


def multi_zaf(
    mc_type: Type[MatrixCorrection],
    fc_type: Type[FluorescenceCorrection],
    material: Material,
    xrays: Iterable[CharXRay],
    e0: float,
    coating: Optional[CoatingCorrection] = None,
) -> MultiZAF:
    """Build a :class:`MultiZAF` with one correction per distinct inner subshell."""
    xrays = tuple(xrays)
    zafs: Dict[AtomicSubShell, ZAFCorrection] = {}
    for x in xrays:
        if x.inner not in zafs:
            zafs[x.inner] = ZAF(mc_type, fc_type, material, x.inner, e0, coating)
    logger.debug(f"Built {len(zafs)} corrections for {material.name} at {e0:.0f} eV")
    return MultiZAF(xrays, zafs)


def multi_zaf_pair(
    mc_type: Type[MatrixCorrection],
    fc_type: Type[FluorescenceCorrection],
    unk: Material,
    std: Material,
    xrays: Iterable[CharXRay],
    e0: float,
    unk_coating: Optional[CoatingCorrection] = None,
    std_coating: Optional[CoatingCorrection] = None,
    std_e0: Optional[float] = None,
) -> Tuple[MultiZAF, MultiZAF]:
    """Build matched :class:`MultiZAF` for an unknown and a standard."""
    xrays = tuple(xrays)
    return (
        multi_zaf(mc_type, fc_type, unk, xrays, e0, unk_coating),
        multi_zaf(
            mc_type, fc_type, std, xrays, std_e0 if std_e0 is not None else e0, std_coating
        ),
    )


def gZAFc(unk: MultiZAF, std: MultiZAF, toa_unk: float, toa_std: float) -> float:
    """
    Line-weight averaged ZAFc over the lines of a :class:`MultiZAF` pair.

    Raises
    ------
    MismatchError
        If unknown and standard cover different lines
    """
    if set(unk.xrays) != set(std.xrays):
        raise MismatchError("Unknown and standard MultiZAF cover different lines")
    weights = np.array([x.weight for x in unk.xrays])
    corrs = np.array(
        [ZAFc(unk.for_xray(x), std.for_xray(x), x, toa_unk, toa_std) for x in unk.xrays]
    )
    if weights.sum() <= 0.0:
        return float(corrs.mean())
    return float(np.dot(weights, corrs) / weights.sum())


def multi_k_ratio(unk: MultiZAF, std: MultiZAF, toa_unk: float, toa_std: float) -> float:
    """Calculated k-ratio gZAFc * C_unk / C_std for a MultiZAF pair."""
    elm = unk.element
    return gZAFc(unk, std, toa_unk, toa_std) * unk.material[elm] / std.material[elm]


# ============================================================================
# Tabulation
# ============================================================================


def _as_pair_lines(
    unk: Union[ZAFCorrection, MultiZAF], xrays: Optional[Iterable[CharXRay]]
) -> List[CharXRay]:
    if xrays is not None:
        return list(xrays)
    if isinstance(unk, MultiZAF):
        return list(unk.xrays)
    return get_database().characteristic(unk.subshell.element, unk.subshell.shell, 1.0e-9)


def summarize(
    unk: Union[ZAFCorrection, MultiZAF],
    std: Union[ZAFCorrection, MultiZAF],
    toa_unk: float,
    toa_std: float,
    xrays: Optional[Iterable[CharXRay]] = None,
) -> pd.DataFrame:
    """
    Tabulate the correction factors line by line.

    Parameters
    ----------
    unk, std : ZAFCorrection or MultiZAF
        Corrections for the unknown and the standard
    toa_unk, toa_std : float
        Take-off angles in radians
    xrays : iterable of CharXRay, optional
        Lines to tabulate (default: the MultiZAF lines, or every line of the
        correction's subshell)

    Returns
    -------
    pd.DataFrame
        Columns Unknown, E0unk (eV), TOAunk (deg), Standard, E0std (eV),
        TOAstd (deg), Xray, Z, A, F, c, ZAF, k
    """
    rows = []
    for xray in _as_pair_lines(unk, xrays):
        u = unk.for_xray(xray) if isinstance(unk, MultiZAF) else unk
        s = std.for_xray(xray) if isinstance(std, MultiZAF) else std
        z = Z(u, s)
        a = A(u, s, xray, toa_unk, toa_std)
        f = F_corr(u, s, xray, toa_unk, toa_std)
        c = coating(u, s, xray, toa_unk, toa_std)
        corr = z * a * f * c
        rows.append(
            {
                "Unknown": u.material.name,
                "E0unk": u.beam_energy,
                "TOAunk": convert_angle(toa_unk, "rad", "deg"),
                "Standard": s.material.name,
                "E0std": s.beam_energy,
                "TOAstd": convert_angle(toa_std, "rad", "deg"),
                "Xray": str(xray),
                "Z": z,
                "A": a,
                "F": f,
                "c": c,
                "ZAF": corr,
                "k": corr * u.material[xray.element] / s.material[xray.element],
            }
        )
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def summarize_all(
    pairs: Union[
        Mapping[object, Tuple[ZAFCorrection, ZAFCorrection]],
        Iterable[Tuple[ZAFCorrection, ZAFCorrection]],
    ],
    toa_unk: float,
    toa_std: float,
) -> pd.DataFrame:
    """Concatenate :func:`summarize` over several unknown/standard pairs."""
    if isinstance(pairs, Mapping):
        pairs = pairs.values()
    frames = [summarize(unk, std, toa_unk, toa_std) for unk, std in pairs]
    if not frames:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)
    return pd.concat(frames, ignore_index=True)
