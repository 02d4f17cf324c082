"""
Tests for the model and update-rule factories.
"""

import pytest

from epmaquant.atomic.material import pure
from epmaquant.core.factory import (
    FluorescenceFactory,
    MatrixCorrectionFactory,
    UpdateRuleFactory,
)
from epmaquant.correction.citzaf import CitZAF
from epmaquant.correction.fluorescence import NullFluorescence, ReedFluorescence
from epmaquant.correction.null import NullCorrection
from epmaquant.correction.riveros import Riveros1993
from epmaquant.correction.xpp import XPP
from epmaquant.inversion.update import NaiveUpdateRule, WegsteinUpdateRule


class TestMatrixCorrectionFactory:
    def test_default_models_registered(self):
        models = MatrixCorrectionFactory.list_models()
        for name in ["null", "xpp", "citzaf", "riveros1993"]:
            assert name in models

    @pytest.mark.parametrize(
        "name, cls",
        [
            ("null", NullCorrection),
            ("xpp", XPP),
            ("citzaf", CitZAF),
            ("riveros1993", Riveros1993),
        ],
    )
    def test_get(self, name, cls):
        assert MatrixCorrectionFactory.get(name) is cls

    def test_create(self, fe_k):
        model = MatrixCorrectionFactory.create("xpp", pure("Fe"), fe_k, 15000.0)
        assert isinstance(model, XPP)
        assert model.beam_energy == 15000.0

    def test_unknown_model(self):
        with pytest.raises(ValueError, match="Unknown matrix correction: pap"):
            MatrixCorrectionFactory.get("pap")

    def test_register(self):
        class Custom(NullCorrection):
            name = "Custom"

        MatrixCorrectionFactory.register("custom_test", Custom)
        try:
            assert MatrixCorrectionFactory.get("custom_test") is Custom
        finally:
            MatrixCorrectionFactory._models.pop("custom_test")


class TestFluorescenceFactory:
    def test_default_models_registered(self):
        assert FluorescenceFactory.list_models() == ["null", "reed"]

    def test_create(self, fe_k):
        assert isinstance(
            FluorescenceFactory.create("reed", pure("Fe"), fe_k, 15000.0), ReedFluorescence
        )
        assert FluorescenceFactory.get("null") is NullFluorescence

    def test_unknown_model(self):
        with pytest.raises(ValueError, match="Unknown fluorescence correction"):
            FluorescenceFactory.get("armstrong")


class TestUpdateRuleFactory:
    def test_default_rules_registered(self):
        assert set(UpdateRuleFactory.list_rules()) >= {"naive", "wegstein"}

    def test_create_with_arguments(self):
        rule = UpdateRuleFactory.create("wegstein", q_min=-2.0, q_max=0.5)
        assert isinstance(rule, WegsteinUpdateRule)
        assert rule.q_min == -2.0
        assert isinstance(UpdateRuleFactory.create("naive"), NaiveUpdateRule)

    def test_unknown_rule(self):
        with pytest.raises(ValueError, match="Unknown update rule"):
            UpdateRuleFactory.create("newton")
