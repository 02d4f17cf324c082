"""
Tests for batch quantification.
"""

import pytest

from epmaquant.atomic.material import pure
from epmaquant.inversion.batch import BatchOutcome, quantify_batch, tally
from epmaquant.inversion.iteration import Iteration
from epmaquant.inversion.kratio import MeasurementConditions


@pytest.fixture
def requests(make_kratio):
    low = MeasurementConditions.from_degrees(9000.0, 40.0)
    return [
        ("iron", [make_kratio("Fe", "Ka", pure("Fe"), 1.0)]),
        ("zinc below edge", [make_kratio("Zn", "Ka", pure("Zn"), 0.9, 0.0, low, low)]),
        ("nickel", [make_kratio("Ni", "Ka", pure("Ni"), 1.0)]),
        ("empty", []),
    ]


class TestQuantifyBatch:
    def test_outcomes_in_request_order(self, requests):
        outcomes = quantify_batch(requests, n_workers=2)
        assert [o.label for o in outcomes] == [label for label, _ in requests]

    def test_failures_are_recorded(self, requests):
        outcomes = quantify_batch(requests, n_workers=2)
        iron, zinc, nickel, empty = outcomes
        assert iron.converged
        assert nickel.result.composition["Ni"] == pytest.approx(1.0)
        assert zinc.failed
        assert zinc.result is None
        assert "aborted at step 1" in zinc.error
        assert empty.failed
        assert "no k-ratios" in empty.error

    def test_shared_iteration(self, requests):
        iteration = Iteration(max_iterations=1)
        outcomes = quantify_batch(requests[:1], iteration=iteration, n_workers=1)
        assert outcomes[0].result.iterations == 1

    def test_empty_batch(self):
        assert quantify_batch([]) == []

    def test_processes(self, make_kratio):
        requests = [
            (f"iron {i}", [make_kratio("Fe", "Ka", pure("Fe"), 1.0)]) for i in range(2)
        ]
        outcomes = quantify_batch(requests, n_workers=2, use_processes=True)
        assert all(o.converged for o in outcomes)
        assert outcomes[1].label == "iron 1"


class TestTally:
    def test_counts(self, requests):
        counts = tally(quantify_batch(requests, n_workers=2))
        assert counts == {"converged": 2, "not_converged": 0, "failed": 2, "total": 4}

    def test_not_converged(self):
        outcome = BatchOutcome("x")
        assert not outcome.failed
        assert not outcome.converged
        assert tally([outcome])["not_converged"] == 1
