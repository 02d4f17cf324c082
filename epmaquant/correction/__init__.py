"""
Matrix, fluorescence and coating corrections.

This module provides:
- phi(rho z) matrix-correction models (Null, XPP, CitZAF, Riveros1993)
- Fluorescence corrections (Null, Reed)
- Coating corrections
- ZAF combination of unknown/standard pairs and tabular summaries
"""

from epmaquant.correction.base import MatrixCorrection, matrix_correction, continuum_correction
from epmaquant.correction.null import NullCorrection
from epmaquant.correction.xpp import XPP
from epmaquant.correction.citzaf import CitZAF
from epmaquant.correction.riveros import Riveros1993
from epmaquant.correction.fluorescence import (
    FluorescenceCorrection,
    NullFluorescence,
    ReedFluorescence,
    fluorescence_correction,
)
from epmaquant.correction.coating import (
    CoatingCorrection,
    NullCoating,
    Coating,
    Layer,
    carbon_coating,
)
from epmaquant.correction.physics import chi, mac
from epmaquant.correction.zaf import (
    ZAFCorrection,
    MultiZAF,
    Z,
    A,
    ZA,
    F_corr,
    ZAFc,
    k_ratio,
    multi_k_ratio,
    gZAFc,
    ZAF,
    ZAF_pair,
    multi_zaf,
    multi_zaf_pair,
    summarize,
    summarize_all,
)

__all__ = [
    # Matrix corrections
    "MatrixCorrection",
    "matrix_correction",
    "continuum_correction",
    "NullCorrection",
    "XPP",
    "CitZAF",
    "Riveros1993",
    # Fluorescence
    "FluorescenceCorrection",
    "NullFluorescence",
    "ReedFluorescence",
    "fluorescence_correction",
    # Coatings
    "CoatingCorrection",
    "NullCoating",
    "Coating",
    "Layer",
    "carbon_coating",
    # Physics
    "chi",
    "mac",
    # ZAF
    "ZAFCorrection",
    "MultiZAF",
    "Z",
    "A",
    "ZA",
    "F_corr",
    "ZAFc",
    "k_ratio",
    "multi_k_ratio",
    "gZAFc",
    "ZAF",
    "ZAF_pair",
    "multi_zaf",
    "multi_zaf_pair",
    "summarize",
    "summarize_all",
]
