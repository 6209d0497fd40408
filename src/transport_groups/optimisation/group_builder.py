"""
Greedy seed-and-grow construction of ride groups.

Buckets are processed in precedence order (mobility, child, elderly,
regular). Within a bucket the highest priority unassigned passenger seeds a
new group in the best scoring unused vehicle that can carry them; the group
then grows from the bucket's remaining passengers followed by the
unconstrained regular passengers, admitting each candidate that

1. still fits in the vehicle,
2. is carried by the vehicle for every requirement category they have,
3. does not avoid (and is not avoided by) any member,
4. is fully compatible with every member when special requirements are
   respected, and
5. keeps the mean pair score of the group at or above the admission
   threshold.

Run state is kept in position-indexed numpy arrays that live only for the
duration of a single ``build`` call.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import numpy as np

from ..models import Passenger, TransportGroup, Vehicle
from .classification import BUCKET_ORDER, ConstraintClassifier, RequirementCategory, VehicleCapabilityMatcher
from .compatibility import CompatibilityEvaluator
from .config import OptimizationOptions
from .routing import RouteSynthesizer
from .scoring import VehicleScorer

logger = logging.getLogger(__name__)


@dataclass
class BuildOutcome:
    """Raw output of the group builder, before metrics are computed."""

    groups: list[TransportGroup] = field(default_factory=list)
    unassigned: list[Passenger] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    cancelled: bool = False


def sort_bucket(passengers: Sequence[Passenger], indices: Sequence[int]) -> list[int]:
    """Priority desc, then requirement count desc, then preference count desc (stable)."""
    return sorted(
        indices,
        key=lambda i: (
            -passengers[i].priority,
            -len(passengers[i].special_requirements),
            -len(passengers[i].group_preferences),
        ),
    )


class GroupBuilder:
    """
    Assign passengers to vehicles bucket by bucket.

    Args:
        options: Run options
        id_generator: Zero-argument callable producing group identifiers
        classifier: Requirement bucket classifier
        matcher: Vehicle capability matcher
        evaluator: Compatibility evaluator
        scorer: Vehicle scorer for seeds
        route_synthesizer: Route and estimate builder
    """

    def __init__(
        self,
        options: OptimizationOptions,
        id_generator: Callable[[], str],
        classifier: ConstraintClassifier | None = None,
        matcher: VehicleCapabilityMatcher | None = None,
        evaluator: CompatibilityEvaluator | None = None,
        scorer: VehicleScorer | None = None,
        route_synthesizer: RouteSynthesizer | None = None,
    ):
        self.options = options
        self.id_generator = id_generator
        self.classifier = classifier or ConstraintClassifier()
        self.matcher = matcher or VehicleCapabilityMatcher(self.classifier)
        self.evaluator = evaluator or CompatibilityEvaluator(
            prioritize_group_preferences=options.prioritize_group_preferences
        )
        self.scorer = scorer or VehicleScorer(options=options)
        self.route_synthesizer = route_synthesizer or RouteSynthesizer(optimize_routes=options.optimize_routes)

    def build(
        self,
        passengers: Sequence[Passenger],
        vehicles: Sequence[Vehicle],
        should_cancel: Callable[[], bool] | None = None,
    ) -> BuildOutcome:
        """
        Form ride groups.

        Args:
            passengers: Preprocessed passengers
            vehicles: Filtered and ranked vehicle pool
            should_cancel: Polled before each seed; returning True stops the
                run and reports every unplaced passenger as unassigned

        Returns:
            BuildOutcome with groups, unassigned passengers and warnings
        """
        outcome = BuildOutcome()

        passenger_assigned = np.zeros(len(passengers), dtype=bool)
        passenger_unassigned = np.zeros(len(passengers), dtype=bool)
        vehicle_used = np.zeros(len(vehicles), dtype=bool)

        pair_scores = self.evaluator.pair_score_matrix(passengers)
        compatible = self.evaluator.compatibility_matrix(passengers)
        avoiding = self.evaluator.avoidance_matrix(passengers)

        buckets = {
            category: sort_bucket(passengers, members)
            for category, members in self.classifier.partition(passengers).items()
        }
        regular = buckets[RequirementCategory.REGULAR]

        def is_open(index: int) -> bool:
            return not passenger_assigned[index] and not passenger_unassigned[index]

        def mark_unassigned(index: int):
            passenger_unassigned[index] = True
            outcome.unassigned.append(passengers[index])

        for category in BUCKET_ORDER:
            queue = buckets[category]
            if not queue:
                continue

            logger.info(
                "🔄 Processing %s bucket: %d passenger(s), %d candidate vehicle(s)",
                category.value,
                len(queue),
                len(self.matcher.candidate_indices(vehicles, category, vehicle_used)),
            )

            # Own bucket first, then regular passengers
            grow_pool = queue if category == RequirementCategory.REGULAR else queue + regular

            while True:
                if should_cancel is not None and should_cancel():
                    outcome.cancelled = True
                    break

                seed = next((i for i in queue if is_open(i)), None)
                if seed is None:
                    break

                candidates = self.matcher.candidate_indices(vehicles, category, vehicle_used)
                if not candidates:
                    break

                seed_passenger = passengers[seed]
                fitting = [v for v in candidates if self.matcher.can_fit(seed_passenger, vehicles[v])]
                vehicle_index = self.scorer.select_best(vehicles, fitting, seed_passenger)
                if vehicle_index is None:
                    mark_unassigned(seed)
                    outcome.warnings.append(
                        f"No suitable vehicle available for passenger {seed_passenger.guest_name} "
                        f"({seed_passenger.guest_id})"
                    )
                    logger.debug("No fitting vehicle for seed %s", seed_passenger.guest_id)
                    continue

                vehicle = vehicles[vehicle_index]
                members = self._grow(
                    seed, vehicle, grow_pool, passengers, is_open, pair_scores, compatible, avoiding
                )

                vehicle_used[vehicle_index] = True
                passenger_assigned[members] = True
                outcome.groups.append(self._finalize([passengers[i] for i in members], vehicle))

            if outcome.cancelled:
                break

            leftover = [i for i in queue if is_open(i)]
            if leftover:
                for index in leftover:
                    mark_unassigned(index)
                guest_ids = ", ".join(passengers[i].guest_id for i in leftover)
                outcome.warnings.append(
                    f"No suitable {category.value} vehicles left for {len(leftover)} passenger(s): {guest_ids}"
                )
                logger.warning(
                    "⚠️ %s bucket ran out of vehicles: %d passenger(s) unassigned", category.value, len(leftover)
                )

        if outcome.cancelled:
            remaining = [i for i in range(len(passengers)) if is_open(i)]
            for index in remaining:
                mark_unassigned(index)
            outcome.warnings.append(f"Optimization cancelled; {len(remaining)} passenger(s) left unassigned")
            logger.warning("🛑 Optimization cancelled with %d passenger(s) unplaced", len(remaining))

        logger.info(
            "✅ Built %d group(s); %d passenger(s) unassigned", len(outcome.groups), len(outcome.unassigned)
        )
        return outcome

    def _grow(
        self,
        seed: int,
        vehicle: Vehicle,
        pool: Sequence[int],
        passengers: Sequence[Passenger],
        is_open: Callable[[int], bool],
        pair_scores: np.ndarray,
        compatible: np.ndarray,
        avoiding: np.ndarray,
    ) -> list[int]:
        """Admit candidates from ``pool`` into the group seeded by ``seed``."""
        members = [seed]
        for candidate in pool:
            if len(members) >= vehicle.capacity:
                break
            if candidate in members or not is_open(candidate):
                continue
            if not self.matcher.can_fit(passengers[candidate], vehicle):
                continue
            if avoiding[candidate, members].any():
                continue
            if self.options.respect_special_requirements and not compatible[candidate, members].all():
                continue
            score = self.evaluator.aggregate(pair_scores, members + [candidate])
            if not self.evaluator.meets_threshold(score):
                logger.debug(
                    "Candidate %s rejected for %s (score %.2f)", passengers[candidate].guest_id, vehicle.id, score
                )
                continue
            members.append(candidate)
        return members

    def _finalize(self, members: list[Passenger], vehicle: Vehicle) -> TransportGroup:
        plan = self.route_synthesizer.plan(members, vehicle)
        group = TransportGroup(
            id=self.id_generator(),
            vehicle_id=vehicle.id,
            vehicle_name=vehicle.name,
            capacity=vehicle.capacity,
            passengers=tuple(members),
            route=plan.stops,
            estimated_duration=plan.estimated_duration,
            estimated_cost=plan.estimated_cost,
            capacity_utilization=len(members) / vehicle.capacity * 100,
            requirements_covered=self.matcher.requirements_covered(members, vehicle),
        )
        logger.debug("Group %s: %d/%d seats in %s", group.id, len(members), vehicle.capacity, vehicle.id)
        return group
