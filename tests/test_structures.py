"""
Tests for elements, subshells, characteristic lines and materials.
"""

import pickle

import pytest

from epmaquant.atomic.material import Material, pure
from epmaquant.atomic.structures import AtomicSubShell, CharXRay, Element
from epmaquant.core.exceptions import DomainError


# ==============================================================================
# Data Structures
# ==============================================================================


class TestStructures:
    def test_element(self):
        fe = Element("Fe", 26, 55.845)
        assert fe.z == 26
        with pytest.raises(AttributeError):
            fe.z = 27

    def test_subshell_equality_ignores_tabulated_values(self):
        """Subshells compare on element and shell name only."""
        a = AtomicSubShell("Fe", "K", 7112.0, 0.35, 8.0)
        b = AtomicSubShell("Fe", "K", 7110.9)
        assert a == b
        assert hash(a) == hash(b)
        assert a != AtomicSubShell("Fe", "L3", 706.8)

    def test_subshell_family_and_str(self):
        sub = AtomicSubShell("Ba", "L3", 5247.0)
        assert sub.family == "L"
        assert str(sub) == "Ba L3"

    def test_charxray(self):
        k = AtomicSubShell("Fe", "K", 7112.0)
        ka1 = CharXRay("Fe", "Ka1", 6403.8, 0.58, k, "L3")
        assert ka1.family == "Ka"
        assert ka1.edge_energy == 7112.0
        assert str(ka1) == "Fe Ka1"
        assert ka1 == CharXRay("Fe", "Ka1", 6404.0, 0.5, k)


# ==============================================================================
# Materials
# ==============================================================================


class TestMaterial:
    def test_missing_element_reads_zero(self):
        mat = Material("Alloy", {"Fe": 0.7, "Ni": 0.3})
        assert mat["Cr"] == 0.0
        assert "Cr" not in mat
        assert "Fe" in mat

    def test_zero_fraction_not_contained(self):
        mat = Material("Alloy", {"Fe": 1.0, "Ni": 0.0})
        assert "Ni" not in mat
        assert mat.elements == ("Fe", "Ni")

    @pytest.mark.parametrize("value", [-0.1, float("nan"), float("inf")])
    def test_invalid_fraction(self, value):
        with pytest.raises(ValueError, match="Invalid mass fraction"):
            Material("Bad", {"Fe": value})

    def test_invalid_density(self):
        with pytest.raises(ValueError, match="Density"):
            Material("Bad", {"Fe": 1.0}, density=0.0)

    def test_immutable(self):
        mat = Material("Alloy", {"Fe": 0.7})
        with pytest.raises(TypeError):
            mat.mass_fractions["Fe"] = 0.5

    def test_total_and_normalized(self):
        mat = Material("Low", {"Fe": 0.45, "Ni": 0.45})
        assert mat.total() == pytest.approx(0.9)
        norm = mat.normalized()
        assert norm.total() == pytest.approx(1.0)
        assert norm["Fe"] == pytest.approx(0.5)
        assert norm.name == "Low"

    def test_normalize_empty(self):
        with pytest.raises(DomainError, match="total mass fraction is zero"):
            Material("Empty", {"Fe": 0.0}).normalized()

    def test_from_formula(self):
        sio2 = Material.from_formula("SiO2")
        assert sio2.name == "SiO2"
        assert sio2["O"] == pytest.approx(0.5326, abs=1.0e-3)
        assert sio2.total() == pytest.approx(1.0)

    def test_from_formula_invalid(self):
        with pytest.raises(ValueError):
            Material.from_formula("")

    def test_atomic_fractions(self, sio2):
        fractions = sio2.atomic_fractions()
        assert fractions["O"] == pytest.approx(2.0 / 3.0, rel=1.0e-6)
        assert fractions["Si"] == pytest.approx(1.0 / 3.0, rel=1.0e-6)

    def test_pure(self):
        fe = pure("Fe")
        assert fe.name == "Pure Fe"
        assert fe["Fe"] == 1.0
        assert fe.density == pytest.approx(7.87, rel=0.01)

    def test_equality_and_hash(self):
        a = Material("A", {"Fe": 0.5, "Ni": 0.5})
        b = Material("A", {"Ni": 0.5, "Fe": 0.5})
        assert a == b
        assert hash(a) == hash(b)
        assert a != a.with_name("B")

    def test_pickle(self, sio2):
        assert pickle.loads(pickle.dumps(sio2)) == sio2
