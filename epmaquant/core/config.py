"""
Configuration management for EPMAQuant.

Provides utilities for loading and validating YAML/JSON configuration files
for matrix-correction models, update rules and solver tolerances.
"""

import json
from pathlib import Path
from typing import Dict, Any, Union
import logging

import yaml

logger = logging.getLogger(__name__)


DEFAULT_QUANT_CONFIG: Dict[str, Any] = {
    "quantification": {
        "matrix_correction": "xpp",
        "fluorescence": "reed",
        "update_rule": "wegstein",
        "max_iterations": 100,
        "tolerance": 1.0e-4,
        "composition_tolerance": 1.0e-7,
        "consecutive": 1,
        "wegstein": {"q_min": -5.0, "q_max": 0.95},
        "optimizer": {"min_overvoltage": 1.5},
    }
}


def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load configuration from YAML or JSON file.

    Parameters
    ----------
    config_path : str or Path
        Path to configuration file (.yaml, .yml, or .json)

    Returns
    -------
    dict
        Configuration dictionary

    Raises
    ------
    FileNotFoundError
        If config file does not exist
    ValueError
        If file format is not supported
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    suffix = config_path.suffix.lower()

    with open(config_path, "r") as f:
        if suffix in [".yaml", ".yml"]:
            config = yaml.safe_load(f)
        elif suffix == ".json":
            config = json.load(f)
        else:
            raise ValueError(
                f"Unsupported config file format: {suffix}. " "Use .yaml, .yml, or .json"
            )

    logger.info(f"Loaded configuration from {config_path}")
    return config


def validate_quant_config(config: Dict[str, Any]) -> bool:
    """
    Validate the quantification section of a configuration.

    Only keys that are present are checked; missing keys fall back to
    ``DEFAULT_QUANT_CONFIG``.

    Parameters
    ----------
    config : dict
        Configuration dictionary

    Returns
    -------
    bool
        True if valid

    Raises
    ------
    ValueError
        If configuration is invalid
    """
    from epmaquant.core.factory import (
        MatrixCorrectionFactory,
        FluorescenceFactory,
        UpdateRuleFactory,
    )

    if "quantification" not in config:
        raise ValueError("Configuration must contain 'quantification' section")

    quant = config["quantification"]
    if not isinstance(quant, dict):
        raise ValueError("'quantification' section must be a mapping")

    # Model names must be registered
    choices = [
        ("matrix_correction", MatrixCorrectionFactory.list_models()),
        ("fluorescence", FluorescenceFactory.list_models()),
        ("update_rule", UpdateRuleFactory.list_rules()),
    ]
    for key, valid in choices:
        if key in quant and quant[key] not in valid:
            raise ValueError(f"Invalid {key}: {quant[key]}. " f"Must be one of: {valid}")

    if "max_iterations" in quant:
        max_iter = quant["max_iterations"]
        if not isinstance(max_iter, int) or isinstance(max_iter, bool) or max_iter < 1:
            raise ValueError("'max_iterations' must be a positive integer")

    if "consecutive" in quant:
        consecutive = quant["consecutive"]
        if not isinstance(consecutive, int) or isinstance(consecutive, bool) or consecutive < 1:
            raise ValueError("'consecutive' must be a positive integer")

    for key in ["tolerance", "composition_tolerance"]:
        if key in quant and quant[key] <= 0:
            raise ValueError(f"'{key}' must be positive")

    if "wegstein" in quant:
        bounds = quant["wegstein"]
        q_min = bounds.get("q_min", -5.0)
        q_max = bounds.get("q_max", 0.95)
        if not q_min < q_max < 1.0:
            raise ValueError("Wegstein bounds must satisfy q_min < q_max < 1")

    if "optimizer" in quant:
        min_u = quant["optimizer"].get("min_overvoltage", 1.5)
        if min_u < 1.0:
            raise ValueError("'optimizer.min_overvoltage' must be at least 1.0")

    return True


def merged_quant_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Return the quantification section with defaults filled in.

    Parameters
    ----------
    config : dict
        Configuration dictionary (may omit the ``quantification`` section)

    Returns
    -------
    dict
        Complete quantification settings
    """
    merged = dict(DEFAULT_QUANT_CONFIG["quantification"])
    user = config.get("quantification") or {}
    for key, value in user.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def save_config(config: Dict[str, Any], config_path: Union[str, Path]) -> None:
    """
    Save configuration to YAML or JSON file.

    Parameters
    ----------
    config : dict
        Configuration dictionary
    config_path : str or Path
        Path to output file; unknown suffixes are written as YAML
    """
    config_path = Path(config_path)
    suffix = config_path.suffix.lower()

    if suffix == ".json":
        with open(config_path, "w") as f:
            json.dump(config, f, indent=2)
    else:
        if suffix not in [".yaml", ".yml"]:
            config_path = config_path.with_suffix(".yaml")
        with open(config_path, "w") as f:
            yaml.dump(config, f, default_flow_style=False, sort_keys=False)

    logger.info(f"Saved configuration to {config_path}")
