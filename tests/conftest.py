"""
Pytest configuration and shared fixtures for EPMAQuant tests.

This module provides:
- The shared X-ray database and common lines, materials and conditions
- The glass regression scenario (O, Si, Zn, Ba against oxide/metal standards)
- Factory fixtures for building k-ratios
- Configuration fixtures
"""

import os
import tempfile
from pathlib import Path

import pytest

from epmaquant.atomic.database import get_database
from epmaquant.atomic.material import Material, pure
from epmaquant.correction.coating import carbon_coating
from epmaquant.inversion.kratio import KRatio, MeasurementConditions


@pytest.fixture
def db():
    """Shared X-ray database."""
    return get_database()


@pytest.fixture
def fe_ka(db):
    """Fe Ka lines."""
    return db.characteristic("Fe", "Ka")


@pytest.fixture
def ni_ka(db):
    """Ni Ka lines."""
    return db.characteristic("Ni", "Ka")


@pytest.fixture
def fe_k(db):
    """Fe K subshell."""
    return db.subshell("Fe", "K")


@pytest.fixture
def sio2():
    """Quartz."""
    return Material.from_formula("SiO2", density=2.65)


@pytest.fixture
def fe_ni():
    """Equal-mass Fe-Ni alloy."""
    return Material("FeNi", {"Fe": 0.5, "Ni": 0.5})


@pytest.fixture
def conditions():
    """Uncoated 15 keV, 40 degree take-off conditions."""
    return MeasurementConditions.from_degrees(15000.0, 40.0)


@pytest.fixture
def make_kratio(db, conditions):
    """
    Factory fixture for k-ratios.

    Returns a function ``(element, family, standard, k, ...)`` building a
    KRatio of the ``family`` lines of ``element``.
    """

    def _create(
        element,
        family,
        standard,
        k,
        uncertainty=0.0,
        unk_conditions=None,
        std_conditions=None,
    ):
        return KRatio(
            element=element,
            xrays=db.characteristic(element, family),
            unk_conditions=unk_conditions or conditions,
            std_conditions=std_conditions or conditions,
            standard=standard,
            k=k,
            uncertainty=uncertainty,
        )

    return _create


# ==============================================================================
# Glass Regression Scenario
# ==============================================================================


@pytest.fixture
def glass_kratios(db):
    """
    K-ratios of a Ba-Zn silicate glass.

    O Ka, Si Ka, Zn Ka and Ba La at 15 keV and 40 degrees take-off, against
    SiO2, SiO2, Zn and BaCl, with 7 nm carbon on the unknown and 15 nm on the
    standards.
    """
    unk = MeasurementConditions.from_degrees(15000.0, 40.0, carbon_coating(7.0))
    std = MeasurementConditions.from_degrees(15000.0, 40.0, carbon_coating(15.0))
    sio2 = Material.from_formula("SiO2")
    bacl = Material.from_formula("BaCl")
    measured = [
        ("O", "Ka", sio2, 0.746227, 0.001),
        ("Si", "Ka", sio2, 0.441263, 0.0012),
        ("Zn", "Ka", pure("Zn"), 0.027776, 0.0002),
        ("Ba", "La", bacl, 0.447794, 0.002),
    ]
    return [
        KRatio(elm, db.characteristic(elm, family), unk, std, standard, k, sigma)
        for elm, family, standard, k, sigma in measured
    ]


# ==============================================================================
# Configuration Fixtures
# ==============================================================================


@pytest.fixture
def sample_config_dict():
    """Create a sample configuration dictionary."""
    return {
        "quantification": {
            "matrix_correction": "xpp",
            "fluorescence": "reed",
            "update_rule": "wegstein",
            "max_iterations": 50,
            "tolerance": 1.0e-5,
            "wegstein": {"q_min": -3.0, "q_max": 0.9},
            "optimizer": {"min_overvoltage": 2.0},
        }
    }


@pytest.fixture
def temp_config_file(sample_config_dict):
    """Create a temporary YAML config file."""
    import yaml

    config_fd, config_path = tempfile.mkstemp(suffix=".yaml")
    os.close(config_fd)  # Close file descriptor to prevent leaks

    with open(config_path, "w") as f:
        yaml.dump(sample_config_dict, f)

    yield config_path

    Path(config_path).unlink()
