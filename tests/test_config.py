"""
Tests for configuration management module.
"""

import pytest
import tempfile
from pathlib import Path
import json

from epmaquant.core.config import (
    DEFAULT_QUANT_CONFIG,
    load_config,
    merged_quant_config,
    save_config,
    validate_quant_config,
)
from epmaquant.correction.fluorescence import ReedFluorescence
from epmaquant.correction.xpp import XPP
from epmaquant.inversion.iteration import Iteration
from epmaquant.inversion.update import NaiveUpdateRule, WegsteinUpdateRule


def test_load_config_yaml(temp_config_file):
    """Test loading YAML configuration."""
    config = load_config(temp_config_file)
    assert "quantification" in config
    assert config["quantification"]["matrix_correction"] == "xpp"
    assert config["quantification"]["max_iterations"] == 50


def test_load_config_json(sample_config_dict):
    """Test loading JSON configuration."""
    config_fd, config_path = tempfile.mkstemp(suffix=".json")

    try:
        with open(config_path, "w") as f:
            json.dump(sample_config_dict, f)

        config = load_config(config_path)
        assert config["quantification"]["tolerance"] == 1.0e-5
    finally:
        Path(config_path).unlink()


def test_load_config_not_found():
    """Test loading non-existent config file."""
    with pytest.raises(FileNotFoundError):
        load_config("nonexistent.yaml")


def test_load_config_invalid_format():
    """Test loading invalid file format."""
    config_fd, config_path = tempfile.mkstemp(suffix=".txt")

    try:
        with open(config_path, "w") as f:
            f.write("not yaml or json")

        with pytest.raises(ValueError, match="Unsupported config file format"):
            load_config(config_path)
    finally:
        Path(config_path).unlink()


def test_save_config_yaml(sample_config_dict):
    """Test saving YAML configuration."""
    config_fd, config_path = tempfile.mkstemp(suffix=".yaml")
    Path(config_path).unlink()  # Remove temp file

    try:
        save_config(sample_config_dict, config_path)
        assert Path(config_path).exists()

        loaded = load_config(config_path)
        assert loaded == sample_config_dict
    finally:
        if Path(config_path).exists():
            Path(config_path).unlink()


def test_save_config_json(sample_config_dict):
    """Test saving JSON configuration."""
    config_fd, config_path = tempfile.mkstemp(suffix=".json")
    Path(config_path).unlink()

    try:
        save_config(sample_config_dict, config_path)
        loaded = load_config(config_path)
        assert loaded["quantification"]["wegstein"]["q_min"] == -3.0
    finally:
        if Path(config_path).exists():
            Path(config_path).unlink()


def test_save_config_unknown_suffix_writes_yaml(sample_config_dict, tmp_path):
    """Unknown suffixes are replaced by .yaml."""
    save_config(sample_config_dict, tmp_path / "settings.cfg")
    assert (tmp_path / "settings.yaml").exists()
    assert not (tmp_path / "settings.cfg").exists()


def test_validate_quant_config_valid(sample_config_dict):
    """Test validating a valid quantification configuration."""
    assert validate_quant_config(sample_config_dict) is True


def test_validate_default_config():
    """The built-in defaults validate."""
    assert validate_quant_config(DEFAULT_QUANT_CONFIG) is True


def test_validate_quant_config_missing_section():
    """Test validating config without quantification section."""
    with pytest.raises(ValueError, match="must contain 'quantification' section"):
        validate_quant_config({"instrument": {}})


@pytest.mark.parametrize(
    "key, value",
    [
        ("matrix_correction", "pap2000"),
        ("fluorescence", "armstrong"),
        ("update_rule", "newton"),
    ],
)
def test_validate_quant_config_invalid_choice(key, value):
    """Unregistered model and rule names are rejected."""
    with pytest.raises(ValueError, match=f"Invalid {key}"):
        validate_quant_config({"quantification": {key: value}})


def test_validate_quant_config_invalid_iterations():
    with pytest.raises(ValueError, match="'max_iterations' must be a positive integer"):
        validate_quant_config({"quantification": {"max_iterations": 0}})
    with pytest.raises(ValueError, match="'max_iterations' must be a positive integer"):
        validate_quant_config({"quantification": {"max_iterations": 2.5}})


def test_validate_quant_config_invalid_tolerance():
    with pytest.raises(ValueError, match="'tolerance' must be positive"):
        validate_quant_config({"quantification": {"tolerance": 0.0}})


def test_validate_quant_config_invalid_wegstein_bounds():
    with pytest.raises(ValueError, match="Wegstein bounds"):
        validate_quant_config({"quantification": {"wegstein": {"q_max": 1.2}}})


def test_validate_quant_config_invalid_overvoltage():
    with pytest.raises(ValueError, match="min_overvoltage"):
        validate_quant_config({"quantification": {"optimizer": {"min_overvoltage": 0.8}}})


def test_merged_quant_config_fills_defaults(sample_config_dict):
    """Nested sections merge key by key."""
    merged = merged_quant_config(sample_config_dict)
    assert merged["max_iterations"] == 50
    assert merged["composition_tolerance"] == 1.0e-7
    assert merged["wegstein"] == {"q_min": -3.0, "q_max": 0.9}
    assert merged["optimizer"]["min_overvoltage"] == 2.0


def test_merged_quant_config_empty():
    assert merged_quant_config({}) == DEFAULT_QUANT_CONFIG["quantification"]


def test_iteration_from_config(sample_config_dict):
    """The configuration selects models, rule and tolerances."""
    iteration = Iteration.from_config(sample_config_dict)
    assert iteration.mc_type is XPP
    assert iteration.fc_type is ReedFluorescence
    assert isinstance(iteration.updater, WegsteinUpdateRule)
    assert iteration.updater.q_min == -3.0
    assert iteration.updater.q_max == 0.9
    assert iteration.max_iterations == 50
    assert iteration.tolerance == 1.0e-5
    assert iteration.optimizer.min_overvoltage == 2.0


def test_iteration_from_config_naive():
    iteration = Iteration.from_config(
        {"quantification": {"update_rule": "naive", "matrix_correction": "citzaf"}}
    )
    assert isinstance(iteration.updater, NaiveUpdateRule)
    assert iteration.mc_type.name == "CitZAF"


def test_iteration_from_config_file(temp_config_file):
    iteration = Iteration.from_config(load_config(temp_config_file))
    assert iteration.max_iterations == 50


def test_iteration_from_invalid_config():
    with pytest.raises(ValueError, match="Invalid matrix_correction"):
        Iteration.from_config({"quantification": {"matrix_correction": "pap2000"}})


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
