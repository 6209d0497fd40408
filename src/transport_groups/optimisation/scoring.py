"""
Vehicle scoring for seed passengers.

When a new group is opened the scorer ranks the unused candidate vehicles
for the seed passenger:

    score = capacity_weight * min(capacity / preferred_group_size, 1)
          + cost_weight * 1 / (1 + cost_per_unit)      if minimize_cost
          + comfort_weight * comfort rank              if maximize_comfort
          + requirement_match_weight                   if a seed requirement matches a feature

The highest score wins and ties keep pool order, so the ranking of the
availability filter breaks ties.
"""

import logging
from collections.abc import Sequence

from ..models import Passenger, Vehicle, VehicleType
from .config import OptimizationOptions, ScoringWeights
from .utils import feature_matches

logger = logging.getLogger(__name__)

# Most comfortable first
COMFORT_RANKING = (
    VehicleType.LIMOUSINE,
    VehicleType.VAN,
    VehicleType.SHUTTLE,
    VehicleType.CAR,
    VehicleType.BUS,
)


def comfort_score(vehicle_type: VehicleType) -> float:
    """Ordinal comfort rank normalised to (0, 1]; limousine is 1.0, bus 0.2."""
    rank = COMFORT_RANKING.index(vehicle_type)
    return (len(COMFORT_RANKING) - rank) / len(COMFORT_RANKING)


class VehicleScorer:
    """Weighted multi-factor score of a vehicle for a seed passenger."""

    def __init__(self, weights: ScoringWeights | None = None, options: OptimizationOptions | None = None):
        self.weights = weights or ScoringWeights()
        self.options = options or OptimizationOptions()

    def capacity_efficiency(self, vehicle: Vehicle) -> float:
        return min(vehicle.capacity / self.weights.preferred_group_size, 1.0)

    @staticmethod
    def cost_score(vehicle: Vehicle) -> float:
        return 1.0 / (1.0 + vehicle.cost_per_unit)

    def score(self, vehicle: Vehicle, passenger: Passenger) -> float:
        w = self.weights
        total = self.capacity_efficiency(vehicle) * w.capacity_weight

        if self.options.minimize_cost:
            total += self.cost_score(vehicle) * w.cost_weight

        if self.options.maximize_comfort:
            total += comfort_score(vehicle.type) * w.comfort_weight

        if self.options.respect_special_requirements and any(
            feature_matches(req, vehicle.features) for req in passenger.special_requirements
        ):
            total += w.requirement_match_weight

        return total

    def select_best(
        self, vehicles: Sequence[Vehicle], candidates: Sequence[int], passenger: Passenger
    ) -> int | None:
        """
        Position of the highest scoring candidate vehicle.

        Args:
            vehicles: Ranked vehicle pool
            candidates: Pool positions eligible for this seed, in pool order
            passenger: Seed passenger

        Returns:
            Pool position of the best vehicle, or None if there are no candidates
        """
        best_index = None
        best_score = float("-inf")
        for index in candidates:
            score = self.score(vehicles[index], passenger)
            # strict comparison keeps the earliest candidate on ties
            if score > best_score:
                best_index, best_score = index, score

        if best_index is not None:
            logger.debug(
                "Seed %s -> vehicle %s (score %.2f)", passenger.guest_id, vehicles[best_index].id, best_score
            )
        return best_index
