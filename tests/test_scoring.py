"""
Tests for seed vehicle scoring.
"""

import pytest

from transport_groups.models import VehicleType
from transport_groups.optimisation.config import OptimizationOptions, ScoringWeights
from transport_groups.optimisation.scoring import COMFORT_RANKING, VehicleScorer, comfort_score


class TestVehicleScorer:
    """Test the weighted vehicle score."""

    def test_score_strictly_increases_as_cost_decreases(self, make_vehicle, make_passenger):
        """Test cheaper vehicles always score higher with minimize_cost on."""
        scorer = VehicleScorer()
        seed = make_passenger("p1")
        costs = [10.0, 5.0, 2.0, 1.0, 0.5, 0.0]
        scores = [scorer.score(make_vehicle(f"v{i}", cost_per_unit=c), seed) for i, c in enumerate(costs)]

        assert all(later > earlier for earlier, later in zip(scores, scores[1:]))
        print(f"✅ Scores by decreasing cost: {[round(s, 2) for s in scores]}")

    def test_score_components(self, make_vehicle, make_passenger):
        """Test each term of the score with default weights."""
        seed = make_passenger("p1", special_requirements=["child_seat"])
        vehicle = make_vehicle("v1", capacity=2, cost_per_unit=1.0, features=["child_seats"],
                               type=VehicleType.LIMOUSINE)

        scorer = VehicleScorer(options=OptimizationOptions(maximize_comfort=True))
        # 0.5*30 + 0.5*25 + 1.0*20 + 25
        assert scorer.score(vehicle, seed) == pytest.approx(72.5)

        plain = VehicleScorer(options=OptimizationOptions(minimize_cost=False, respect_special_requirements=False))
        assert plain.score(vehicle, seed) == pytest.approx(15.0)

    def test_capacity_efficiency_saturates(self, make_vehicle):
        """Test vehicles at or above the preferred size score the same capacity term."""
        scorer = VehicleScorer(ScoringWeights(preferred_group_size=4))
        assert scorer.capacity_efficiency(make_vehicle("v1", capacity=4)) == 1.0
        assert scorer.capacity_efficiency(make_vehicle("v2", capacity=40)) == 1.0
        assert scorer.capacity_efficiency(make_vehicle("v3", capacity=1)) == 0.25

    def test_comfort_ranking(self):
        """Test comfort ranks are normalised to (0, 1]."""
        assert COMFORT_RANKING[0] == VehicleType.LIMOUSINE
        assert comfort_score(VehicleType.LIMOUSINE) == 1.0
        assert comfort_score(VehicleType.BUS) == pytest.approx(0.2)
        assert comfort_score(VehicleType.VAN) > comfort_score(VehicleType.CAR)

    def test_select_best_prefers_higher_score(self, make_vehicle, make_passenger):
        """Test the best vehicle is picked among candidates only."""
        scorer = VehicleScorer()
        vehicles = [
            make_vehicle("pricey", cost_per_unit=4.0),
            make_vehicle("cheap", cost_per_unit=0.5),
            make_vehicle("free", cost_per_unit=0.0),
        ]
        seed = make_passenger("p1")

        assert scorer.select_best(vehicles, [0, 1, 2], seed) == 2
        assert scorer.select_best(vehicles, [0, 1], seed) == 1
        assert scorer.select_best(vehicles, [], seed) is None

    def test_select_best_ties_keep_pool_order(self, make_vehicle, make_passenger):
        """Test equal scores resolve to the earliest candidate."""
        scorer = VehicleScorer()
        vehicles = [make_vehicle("first"), make_vehicle("second")]
        assert scorer.select_best(vehicles, [0, 1], make_passenger("p1")) == 0

    def test_weights_validation(self):
        """Test negative weights are rejected."""
        with pytest.raises(ValueError, match="cost_weight"):
            ScoringWeights(cost_weight=-1)
        with pytest.raises(ValueError, match="preferred_group_size"):
            ScoringWeights(preferred_group_size=0)
