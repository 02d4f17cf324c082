"""
Tests for ZAF combination, multi-line corrections and tabulation.
"""

import numpy as np
import pandas as pd
import pytest

from epmaquant.atomic.material import Material, pure
from epmaquant.core.exceptions import MismatchError
from epmaquant.correction.coating import NullCoating, carbon_coating
from epmaquant.correction.fluorescence import NullFluorescence, ReedFluorescence
from epmaquant.correction.null import NullCorrection
from epmaquant.correction.xpp import XPP
from epmaquant.correction.zaf import (
    SUMMARY_COLUMNS,
    MultiZAF,
    ZAF,
    ZAF_pair,
    ZAFCorrection,
    ZAFc,
    Z,
    A,
    F_corr,
    gZAFc,
    k_ratio,
    multi_k_ratio,
    multi_zaf,
    multi_zaf_pair,
    summarize,
    summarize_all,
    zaf,
)

TOA = np.radians(40.0)


# ==============================================================================
# Single-Subshell Corrections
# ==============================================================================


class TestZAFCorrection:
    def test_identical_samples(self, fe_ni, fe_k, fe_ka):
        """Unknown and standard of one material need no correction."""
        unk, std = ZAF_pair(XPP, ReedFluorescence, fe_ni, fe_ni, fe_k, 15000.0)
        assert ZAFc(unk, std, fe_ka[0], TOA, TOA) == pytest.approx(1.0)
        assert k_ratio(unk, std, fe_ka[0], TOA, TOA) == pytest.approx(1.0)

    def test_factors_multiply(self, fe_ni, fe_k, fe_ka):
        unk, std = ZAF_pair(XPP, ReedFluorescence, fe_ni, pure("Fe"), fe_k, 15000.0)
        x = fe_ka[0]
        product = Z(unk, std) * A(unk, std, x, TOA, TOA) * F_corr(unk, std, x, TOA, TOA)
        assert ZAFc(unk, std, x, TOA, TOA) == pytest.approx(product)

    def test_alloy_against_pure(self, fe_ni, fe_k, fe_ka):
        """Fe in Fe-Ni is fluoresced by Ni, so k exceeds C / C_std * Z * A."""
        unk, std = ZAF_pair(XPP, ReedFluorescence, fe_ni, pure("Fe"), fe_k, 15000.0)
        assert F_corr(unk, std, fe_ka[0], TOA, TOA) > 1.0
        k = k_ratio(unk, std, fe_ka[0], TOA, TOA)
        assert 0.4 < k < 0.7

    def test_null_models_give_first_approximation(self, fe_ni, fe_k, fe_ka):
        unk, std = ZAF_pair(NullCorrection, NullFluorescence, fe_ni, pure("Fe"), fe_k, 15000.0)
        assert k_ratio(unk, std, fe_ka[0], TOA, TOA) == pytest.approx(0.5)

    def test_coating_factor(self, fe_ni, db):
        o_k = db.subshell("O", "K")
        o_ka = db.characteristic("O", "Ka")[0]
        glass = Material("glass", {"O": 0.4, "Si": 0.6})
        unk, std = ZAF_pair(
            XPP,
            NullFluorescence,
            glass,
            glass,
            o_k,
            15000.0,
            unk_coating=carbon_coating(5.0),
            std_coating=carbon_coating(20.0),
        )
        assert ZAFc(unk, std, o_ka, TOA, TOA) > 1.0

    def test_mismatched_models(self, fe_ni, fe_k, db):
        za = XPP(fe_ni, fe_k, 15000.0)
        f = NullFluorescence(fe_ni, db.subshell("Ni", "K"), 15000.0)
        with pytest.raises(MismatchError, match="paired with"):
            ZAFCorrection(za, f)

    def test_different_samples(self, fe_ni, fe_k):
        za = XPP(fe_ni, fe_k, 15000.0)
        with pytest.raises(MismatchError, match="different samples"):
            zaf(za, NullFluorescence(fe_ni, fe_k, 20000.0))

    def test_atomic_number_needs_one_subshell(self, fe_ni, fe_k, db):
        a = ZAF(XPP, NullFluorescence, fe_ni, fe_k, 15000.0)
        b = ZAF(XPP, NullFluorescence, fe_ni, db.subshell("Ni", "K"), 15000.0)
        with pytest.raises(MismatchError, match="one subshell"):
            Z(a, b)

    def test_default_coating(self, fe_ni, fe_k):
        corr = ZAF(XPP, NullFluorescence, fe_ni, fe_k, 15000.0)
        assert corr.coating == NullCoating()
        assert corr.material is fe_ni
        assert corr.beam_energy == 15000.0


# ==============================================================================
# Multiple Lines
# ==============================================================================


class TestMultiZAF:
    def test_one_correction_per_subshell(self, db):
        lines = db.characteristic("Ba", "L", max_energy=15000.0)
        glass = Material("BaO", {"Ba": 0.9, "O": 0.1})
        m = multi_zaf(XPP, NullFluorescence, glass, lines, 15000.0)
        assert set(m.zafs) == {x.inner for x in lines}
        assert m.element == "Ba"
        for x in lines:
            assert m.for_xray(x).subshell == x.inner

    def test_identical_samples(self, db):
        lines = db.characteristic("Ba", "L", max_energy=15000.0)
        glass = Material("BaO", {"Ba": 0.9, "O": 0.1})
        unk, std = multi_zaf_pair(XPP, ReedFluorescence, glass, glass, lines, 15000.0)
        assert gZAFc(unk, std, TOA, TOA) == pytest.approx(1.0)
        assert multi_k_ratio(unk, std, TOA, TOA) == pytest.approx(1.0)

    def test_single_line_matches_zafc(self, fe_ni, fe_k, fe_ka):
        unk, std = multi_zaf_pair(XPP, ReedFluorescence, fe_ni, pure("Fe"), fe_ka[:1], 15000.0)
        single = ZAF_pair(XPP, ReedFluorescence, fe_ni, pure("Fe"), fe_k, 15000.0)
        assert gZAFc(unk, std, TOA, TOA) == pytest.approx(ZAFc(*single, fe_ka[0], TOA, TOA))

    def test_empty(self):
        with pytest.raises(ValueError, match="at least one line"):
            MultiZAF([], {})

    def test_mixed_elements(self, fe_ni, fe_ka, ni_ka):
        with pytest.raises(ValueError, match="share one element"):
            multi_zaf(XPP, NullFluorescence, fe_ni, [fe_ka[0], ni_ka[0]], 15000.0)

    def test_missing_subshell(self, fe_ni, fe_ka, ni_ka):
        m = multi_zaf(XPP, NullFluorescence, fe_ni, fe_ka, 15000.0)
        with pytest.raises(MismatchError):
            m.for_xray(ni_ka[0])

    def test_different_lines(self, db, fe_ni, fe_ka):
        fe_kb = db.characteristic("Fe", "Kb")
        unk = multi_zaf(XPP, NullFluorescence, fe_ni, fe_ka, 15000.0)
        std = multi_zaf(XPP, NullFluorescence, pure("Fe"), fe_kb, 15000.0)
        with pytest.raises(MismatchError, match="different lines"):
            gZAFc(unk, std, TOA, TOA)


# ==============================================================================
# Tabulation
# ==============================================================================


class TestSummarize:
    def test_columns_and_units(self, fe_ni, fe_k, fe_ka):
        unk, std = ZAF_pair(XPP, ReedFluorescence, fe_ni, pure("Fe"), fe_k, 15000.0)
        df = summarize(unk, std, TOA, TOA, fe_ka)
        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == SUMMARY_COLUMNS
        assert len(df) == len(fe_ka)
        assert df["E0unk"].iloc[0] == 15000.0
        assert df["TOAunk"].iloc[0] == pytest.approx(40.0)
        assert df["Unknown"].iloc[0] == "FeNi"
        assert np.allclose(df["ZAF"], df["Z"] * df["A"] * df["F"] * df["c"])

    def test_default_lines(self, fe_ni, fe_k):
        unk, std = ZAF_pair(XPP, NullFluorescence, fe_ni, pure("Fe"), fe_k, 15000.0)
        df = summarize(unk, std, TOA, TOA)
        assert len(df) > 0
        assert df["Xray"].str.startswith("Fe K").all()

    def test_multi_zaf(self, fe_ni, fe_ka):
        unk, std = multi_zaf_pair(XPP, NullFluorescence, fe_ni, pure("Fe"), fe_ka, 15000.0)
        assert len(summarize(unk, std, TOA, TOA)) == len(fe_ka)

    def test_summarize_all(self, db, fe_ni, fe_k):
        pairs = {
            "Fe": ZAF_pair(XPP, NullFluorescence, fe_ni, pure("Fe"), fe_k, 15000.0),
            "Ni": ZAF_pair(
                XPP, NullFluorescence, fe_ni, pure("Ni"), db.subshell("Ni", "K"), 15000.0
            ),
        }
        df = summarize_all(pairs, TOA, TOA)
        assert set(df["Standard"]) == {"Pure Fe", "Pure Ni"}

    def test_summarize_all_empty(self):
        assert list(summarize_all([], TOA, TOA).columns) == SUMMARY_COLUMNS
