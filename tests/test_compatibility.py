"""
Tests for passenger compatibility scoring.
"""

import itertools

import numpy as np
import pytest

from transport_groups.optimisation.compatibility import CompatibilityEvaluator
from transport_groups.optimisation.config import CompatibilityConfig


@pytest.fixture
def mixed_passengers(make_passenger):
    return [
        make_passenger("a", special_requirements=["smoking"], pickup_location="Station"),
        make_passenger("b", special_requirements=["non_smoking"], pickup_location="Station"),
        make_passenger("c", avoidances=["d"], group_preferences=["d"], dropoff_location=None),
        make_passenger("d", group_preferences=["c"], dropoff_location=None),
        make_passenger("e", special_requirements=["pets"], dropoff_location="Venue"),
        make_passenger("f", special_requirements=["allergic-to-pets"], dropoff_location="Venue"),
        make_passenger("g", group_preferences=["h"]),
        make_passenger("h", group_preferences=["g"]),
    ]


class TestPairwiseCompatibility:
    """Test hard compatibility between two passengers."""

    def test_symmetry(self, mixed_passengers):
        """Test compatibility and pair scores are symmetric for every pair."""
        evaluator = CompatibilityEvaluator()
        for a, b in itertools.combinations(mixed_passengers, 2):
            assert evaluator.are_compatible(a, b) == evaluator.are_compatible(b, a)
            assert evaluator.pair_score(a, b) == evaluator.pair_score(b, a)

        print("✅ Compatibility is symmetric")

    def test_requirement_conflicts(self, mixed_passengers):
        """Test mutually exclusive requirement tags."""
        evaluator = CompatibilityEvaluator()
        by_id = {p.guest_id: p for p in mixed_passengers}

        assert not evaluator.are_compatible(by_id["a"], by_id["b"])
        assert not evaluator.are_compatible(by_id["e"], by_id["f"])
        assert evaluator.are_compatible(by_id["a"], by_id["e"])

    def test_avoidance_in_either_direction(self, mixed_passengers):
        """Test one-sided avoidance makes the pair incompatible."""
        evaluator = CompatibilityEvaluator()
        by_id = {p.guest_id: p for p in mixed_passengers}

        assert evaluator.avoids(by_id["c"], by_id["d"])
        assert evaluator.avoids(by_id["d"], by_id["c"])
        assert not evaluator.are_compatible(by_id["d"], by_id["c"])


class TestPairScore:
    """Test base score and bonuses."""

    def test_compatible_pair_caps_at_one(self, mixed_passengers):
        """Test bonuses never push a pair above the cap."""
        evaluator = CompatibilityEvaluator()
        by_id = {p.guest_id: p for p in mixed_passengers}
        assert evaluator.pair_score(by_id["g"], by_id["h"]) == 1.0

    def test_incompatible_pair_with_bonuses(self, mixed_passengers):
        """Test bonuses still apply on top of a zero base."""
        evaluator = CompatibilityEvaluator()
        by_id = {p.guest_id: p for p in mixed_passengers}

        # shared pickup only
        assert evaluator.pair_score(by_id["a"], by_id["b"]) == pytest.approx(0.3)
        # mutual preference, but avoidance zeroes the base
        assert evaluator.pair_score(by_id["c"], by_id["d"]) == pytest.approx(0.5)

    def test_preference_bonus_can_be_disabled(self, mixed_passengers):
        """Test prioritize_group_preferences gates the preference bonus."""
        evaluator = CompatibilityEvaluator(prioritize_group_preferences=False)
        by_id = {p.guest_id: p for p in mixed_passengers}
        assert evaluator.pair_score(by_id["c"], by_id["d"]) == 0.0

    def test_one_sided_preference_has_no_bonus(self, make_passenger):
        """Test the preference bonus requires both riders to opt in."""
        evaluator = CompatibilityEvaluator()
        a = make_passenger("a", avoidances=["b"], group_preferences=["b"], dropoff_location=None)
        b = make_passenger("b")
        assert evaluator.pair_score(a, b) == 0.0

    def test_empty_locations_do_not_match(self, make_passenger):
        """Test two unknown locations are not a shared stop."""
        evaluator = CompatibilityEvaluator()
        a = make_passenger("a", pickup_location=None, dropoff_location=None, avoidances=["b"])
        b = make_passenger("b", pickup_location=None, dropoff_location=None)
        assert evaluator.pair_score(a, b) == 0.0


class TestMatricesAndAggregate:
    """Test matrix helpers used by the group builder."""

    def test_matrices_are_symmetric(self, mixed_passengers):
        """Test every matrix equals its transpose."""
        evaluator = CompatibilityEvaluator()
        scores = evaluator.pair_score_matrix(mixed_passengers)
        compatible = evaluator.compatibility_matrix(mixed_passengers)
        avoiding = evaluator.avoidance_matrix(mixed_passengers)

        assert scores.shape == (8, 8)
        assert np.array_equal(scores, scores.T)
        assert np.array_equal(compatible, compatible.T)
        assert np.array_equal(avoiding, avoiding.T)
        assert avoiding.sum() == 2  # c/d in both triangles

    def test_aggregate(self):
        """Test mean over unordered pairs and the small-set rule."""
        matrix = np.array(
            [
                [1.0, 1.0, 0.0],
                [1.0, 1.0, 0.5],
                [0.0, 0.5, 1.0],
            ]
        )
        assert CompatibilityEvaluator.aggregate(matrix, []) == 1.0
        assert CompatibilityEvaluator.aggregate(matrix, [2]) == 1.0
        assert CompatibilityEvaluator.aggregate(matrix, [0, 1]) == 1.0
        assert CompatibilityEvaluator.aggregate(matrix, [0, 1, 2]) == pytest.approx(0.5)

    def test_threshold(self):
        """Test admission uses greater-or-equal."""
        evaluator = CompatibilityEvaluator(CompatibilityConfig(admission_threshold=0.7))
        assert evaluator.meets_threshold(0.7)
        assert not evaluator.meets_threshold(0.69)

    def test_config_validation(self):
        """Test invalid thresholds are rejected."""
        with pytest.raises(ValueError, match="admission_threshold"):
            CompatibilityConfig(admission_threshold=1.5)
