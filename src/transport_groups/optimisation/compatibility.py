"""
Pairwise and group compatibility scoring between passengers.

Two passengers are incompatible when either avoids the other, or when their
requirement tags contain a mutually exclusive pair (a smoker and a rider who
asked for a non-smoking vehicle). Compatible pairs score a base of 1 plus
bonuses for mutual ride preferences and shared stops, capped per pair. The
score of a group is the mean pair score, so adding a poorly matched rider
pulls the whole group below the admission threshold.

For a run, the group builder asks for the pair-score matrix once and then
aggregates over index subsets, rather than rescoring pairs per candidate.
"""

from collections.abc import Sequence

import numpy as np

from ..models import Passenger
from .config import CompatibilityConfig
from .utils import location_key, normalise_tag

# Requirement tags that cannot share a vehicle
CONFLICTING_REQUIREMENTS = (
    ("smoking", "non_smoking"),
    ("pets", "allergic_to_pets"),
    ("pets", "pet_allergic"),
    ("loud_music", "quiet_environment"),
)


class CompatibilityEvaluator:
    """
    Score how well passengers ride together.

    Args:
        config: Threshold and bonus values
        prioritize_group_preferences: Apply the mutual preference bonus
        conflicts: Pairs of mutually exclusive requirement tags
    """

    def __init__(
        self,
        config: CompatibilityConfig | None = None,
        prioritize_group_preferences: bool = True,
        conflicts: Sequence[tuple[str, str]] = CONFLICTING_REQUIREMENTS,
    ):
        self.config = config or CompatibilityConfig()
        self.prioritize_group_preferences = prioritize_group_preferences
        self.conflicts = tuple((normalise_tag(a), normalise_tag(b)) for a, b in conflicts)

    @staticmethod
    def avoids(a: Passenger, b: Passenger) -> bool:
        """Whether either passenger lists the other as someone to avoid."""
        return b.guest_id in a.avoidances or a.guest_id in b.avoidances

    def has_requirement_conflict(self, a: Passenger, b: Passenger) -> bool:
        tags_a = {normalise_tag(t) for t in a.special_requirements}
        tags_b = {normalise_tag(t) for t in b.special_requirements}
        for first, second in self.conflicts:
            if (first in tags_a and second in tags_b) or (second in tags_a and first in tags_b):
                return True
        return False

    def are_compatible(self, a: Passenger, b: Passenger) -> bool:
        """Symmetric hard compatibility between two passengers."""
        return not self.avoids(a, b) and not self.has_requirement_conflict(a, b)

    @staticmethod
    def prefer_each_other(a: Passenger, b: Passenger) -> bool:
        return b.guest_id in a.group_preferences and a.guest_id in b.group_preferences

    @staticmethod
    def share_location(a: Passenger, b: Passenger) -> bool:
        pickup = location_key(a.pickup_location)
        dropoff = location_key(a.dropoff_location)
        return (bool(pickup) and pickup == location_key(b.pickup_location)) or (
            bool(dropoff) and dropoff == location_key(b.dropoff_location)
        )

    def pair_score(self, a: Passenger, b: Passenger) -> float:
        """Base compatibility plus bonuses, capped at ``max_pair_score``."""
        score = 1.0 if self.are_compatible(a, b) else 0.0
        if self.prioritize_group_preferences and self.prefer_each_other(a, b):
            score += self.config.preference_bonus
        if self.share_location(a, b):
            score += self.config.shared_location_bonus
        return min(score, self.config.max_pair_score)

    def pair_score_matrix(self, passengers: Sequence[Passenger]) -> np.ndarray:
        """Symmetric matrix of pair scores; the diagonal is 1."""
        n = len(passengers)
        matrix = np.ones((n, n), dtype=float)
        for i in range(n):
            for j in range(i + 1, n):
                matrix[i, j] = matrix[j, i] = self.pair_score(passengers[i], passengers[j])
        return matrix

    def compatibility_matrix(self, passengers: Sequence[Passenger]) -> np.ndarray:
        """Symmetric boolean matrix of hard compatibility."""
        n = len(passengers)
        matrix = np.ones((n, n), dtype=bool)
        for i in range(n):
            for j in range(i + 1, n):
                matrix[i, j] = matrix[j, i] = self.are_compatible(passengers[i], passengers[j])
        return matrix

    def avoidance_matrix(self, passengers: Sequence[Passenger]) -> np.ndarray:
        """Symmetric boolean matrix, True where one passenger avoids the other."""
        n = len(passengers)
        matrix = np.zeros((n, n), dtype=bool)
        for i in range(n):
            for j in range(i + 1, n):
                matrix[i, j] = matrix[j, i] = self.avoids(passengers[i], passengers[j])
        return matrix

    @staticmethod
    def aggregate(matrix: np.ndarray, indices: Sequence[int]) -> float:
        """Mean pair score over the unordered pairs of ``indices``; 1.0 for 0 or 1 members."""
        n = len(indices)
        if n <= 1:
            return 1.0
        sub = matrix[np.ix_(indices, indices)]
        upper = np.triu_indices(n, k=1)
        return float(sub[upper].mean())

    def group_score(self, passengers: Sequence[Passenger]) -> float:
        """Aggregate compatibility score of a passenger set."""
        return self.aggregate(self.pair_score_matrix(passengers), list(range(len(passengers))))

    def meets_threshold(self, score: float) -> bool:
        return score >= self.config.admission_threshold
