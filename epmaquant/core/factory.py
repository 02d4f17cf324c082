"""
Factory patterns for creating correction models and update rules.
"""

from typing import Dict, Type

from epmaquant.atomic.material import Material
from epmaquant.atomic.structures import AtomicSubShell
from epmaquant.core.logging_config import get_logger
from epmaquant.correction.base import MatrixCorrection
from epmaquant.correction.citzaf import CitZAF
from epmaquant.correction.fluorescence import (
    FluorescenceCorrection,
    NullFluorescence,
    ReedFluorescence,
)
from epmaquant.correction.null import NullCorrection
from epmaquant.correction.riveros import Riveros1993
from epmaquant.correction.xpp import XPP
from epmaquant.inversion.update import NaiveUpdateRule, UpdateRule, WegsteinUpdateRule

logger = get_logger("core.factory")


class MatrixCorrectionFactory:
    """Factory for phi(rho z) matrix-correction models."""

    _models: Dict[str, Type[MatrixCorrection]] = {}

    @classmethod
    def register(cls, name: str, model_class: Type[MatrixCorrection]) -> None:
        """
        Register a matrix-correction class.

        Parameters
        ----------
        name : str
            Model name
        model_class : Type[MatrixCorrection]
            Model class
        """
        cls._models[name] = model_class
        logger.debug(f"Registered matrix correction: {name}")

    @classmethod
    def get(cls, name: str) -> Type[MatrixCorrection]:
        """
        Look up a registered model class.

        Raises
        ------
        ValueError
            If model name is not registered
        """
        if name not in cls._models:
            available = ", ".join(cls._models.keys())
            raise ValueError(f"Unknown matrix correction: {name}. Available: {available}")
        return cls._models[name]

    @classmethod
    def create(
        cls, name: str, material: Material, subshell: AtomicSubShell, beam_energy: float
    ) -> MatrixCorrection:
        """
        Create a matrix-correction instance.

        Parameters
        ----------
        name : str
            Model name
        material : Material
            Sample composition
        subshell : AtomicSubShell
            Ionized subshell
        beam_energy : float
            Beam energy in eV

        Returns
        -------
        MatrixCorrection
            Model instance

        Raises
        ------
        ValueError
            If model name is not registered
        """
        return cls.get(name)(material, subshell, beam_energy)

    @classmethod
    def list_models(cls) -> list:
        """List available model names."""
        return list(cls._models.keys())


class FluorescenceFactory:
    """Factory for secondary-fluorescence corrections."""

    _models: Dict[str, Type[FluorescenceCorrection]] = {}

    @classmethod
    def register(cls, name: str, model_class: Type[FluorescenceCorrection]) -> None:
        cls._models[name] = model_class
        logger.debug(f"Registered fluorescence correction: {name}")

    @classmethod
    def get(cls, name: str) -> Type[FluorescenceCorrection]:
        if name not in cls._models:
            available = ", ".join(cls._models.keys())
            raise ValueError(f"Unknown fluorescence correction: {name}. Available: {available}")
        return cls._models[name]

    @classmethod
    def create(
        cls, name: str, material: Material, subshell: AtomicSubShell, beam_energy: float
    ) -> FluorescenceCorrection:
        """Create a fluorescence-correction instance."""
        return cls.get(name)(material, subshell, beam_energy)

    @classmethod
    def list_models(cls) -> list:
        """List available model names."""
        return list(cls._models.keys())


class UpdateRuleFactory:
    """Factory for composition update rules."""

    _rules: Dict[str, Type[UpdateRule]] = {}

    @classmethod
    def register(cls, name: str, rule_class: Type[UpdateRule]) -> None:
        cls._rules[name] = rule_class
        logger.debug(f"Registered update rule: {name}")

    @classmethod
    def create(cls, name: str, **kwargs) -> UpdateRule:
        """
        Create an update rule.

        Parameters
        ----------
        name : str
            Rule name
        **kwargs
            Arguments for the rule constructor

        Raises
        ------
        ValueError
            If rule name is not registered
        """
        if name not in cls._rules:
            available = ", ".join(cls._rules.keys())
            raise ValueError(f"Unknown update rule: {name}. Available: {available}")
        return cls._rules[name](**kwargs)

    @classmethod
    def list_rules(cls) -> list:
        """List available rule names."""
        return list(cls._rules.keys())


# Register default implementations
MatrixCorrectionFactory.register("null", NullCorrection)
MatrixCorrectionFactory.register("xpp", XPP)
MatrixCorrectionFactory.register("citzaf", CitZAF)
MatrixCorrectionFactory.register("riveros1993", Riveros1993)
FluorescenceFactory.register("null", NullFluorescence)
FluorescenceFactory.register("reed", ReedFluorescence)
UpdateRuleFactory.register("naive", NaiveUpdateRule)
UpdateRuleFactory.register("wegstein", WegsteinUpdateRule)
