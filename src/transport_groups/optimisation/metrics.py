"""
Run metrics, warnings and recommendations.

The optimization score is a weighted composite on a 0-100 scale:

    score = assignment_rate * 40 + average_utilization * 30
          + requirement_coverage * 20 + vehicle_efficiency * 10

where each term is a fraction in [0, 1]. Weights and every warning or
recommendation threshold come from ``MetricsThresholds``.
"""

import logging
from collections.abc import Sequence

import numpy as np

from ..models import OptimizationMetrics, OptimizationResult, Passenger, TransportGroup
from .config import MetricsThresholds, OptimizationOptions, ScoringWeights
from .group_builder import BuildOutcome
from .utils import unique_in_order

logger = logging.getLogger(__name__)


class MetricsEngine:
    """
    Compute metrics for a finished run and assemble the result report.

    Args:
        thresholds: Score weights and report thresholds
        options: Run options (minimize_vehicles, optimize_routes, ...)
        weights: Scoring weights; ``preferred_group_size`` is the ideal
            number of passengers per vehicle for vehicle efficiency
    """

    def __init__(
        self,
        thresholds: MetricsThresholds | None = None,
        options: OptimizationOptions | None = None,
        weights: ScoringWeights | None = None,
    ):
        self.thresholds = thresholds or MetricsThresholds()
        self.options = options or OptimizationOptions()
        self.weights = weights or ScoringWeights()

    @staticmethod
    def capacity_utilization(group: TransportGroup) -> float:
        return group.occupancy / group.capacity * 100

    def average_utilization(self, groups: Sequence[TransportGroup]) -> float:
        if not groups:
            return 0.0
        return float(np.mean([self.capacity_utilization(g) for g in groups]))

    @staticmethod
    def requirements_coverage(passengers: Sequence[Passenger], groups: Sequence[TransportGroup]) -> float:
        """Share of distinct requested requirements covered by some group's vehicle."""
        requested = unique_in_order(tag for p in passengers for tag in p.special_requirements)
        if not requested:
            return 100.0
        covered = {tag for g in groups for tag in g.requirements_covered}
        return sum(1 for tag in requested if tag in covered) / len(requested) * 100

    @staticmethod
    def satisfaction(passengers: Sequence[Passenger], groups: Sequence[TransportGroup]) -> float:
        """Share of declared co-rider preferences that ended up in the same group."""
        group_of = {p.guest_id: g.id for g in groups for p in g.passengers}
        declared = 0
        met = 0
        for passenger in passengers:
            for preferred in passenger.group_preferences:
                if preferred == passenger.guest_id:
                    continue
                declared += 1
                own_group = group_of.get(passenger.guest_id)
                if own_group is not None and own_group == group_of.get(preferred):
                    met += 1
        if declared == 0:
            return 100.0
        return met / declared * 100

    def vehicle_efficiency(self, total_passengers: int, group_count: int) -> float:
        if not self.options.minimize_vehicles or group_count == 0:
            return 1.0
        return min(1.0, total_passengers / (group_count * self.weights.preferred_group_size))

    def optimization_score(
        self,
        total_passengers: int,
        assigned: int,
        average_utilization: float,
        coverage: float,
        group_count: int,
    ) -> float:
        if total_passengers == 0:
            return 100.0
        t = self.thresholds
        score = (
            assigned / total_passengers * t.assignment_weight
            + average_utilization / 100 * t.utilization_weight
            + coverage / 100 * t.coverage_weight
            + self.vehicle_efficiency(total_passengers, group_count) * t.vehicle_efficiency_weight
        )
        return float(np.clip(score, 0.0, 100.0))

    def compute(self, passengers: Sequence[Passenger], outcome: BuildOutcome) -> OptimizationMetrics:
        groups = outcome.groups
        assigned = sum(g.occupancy for g in groups)
        average_utilization = self.average_utilization(groups)
        coverage = self.requirements_coverage(passengers, groups)

        return OptimizationMetrics(
            total_vehicles_used=len(groups),
            average_capacity_utilization=average_utilization,
            total_estimated_duration=float(sum(g.estimated_duration for g in groups)),
            total_estimated_cost=float(sum(g.estimated_cost for g in groups)),
            optimization_score=self.optimization_score(
                len(passengers), assigned, average_utilization, coverage, len(groups)
            ),
            satisfaction_score=self.satisfaction(passengers, groups),
            unassigned_count=len(outcome.unassigned),
            special_requirements_coverage=coverage,
        )

    def warnings(self, metrics: OptimizationMetrics, groups: Sequence[TransportGroup]) -> list[str]:
        t = self.thresholds
        warnings = []

        if metrics.unassigned_count > 0:
            warnings.append(f"{metrics.unassigned_count} passengers could not be assigned to any vehicle")

        if metrics.average_capacity_utilization < t.low_utilization_warning:
            warnings.append("Low capacity utilization - consider using fewer or smaller vehicles")

        if metrics.special_requirements_coverage < t.low_coverage_warning:
            warnings.append("Some special requirements may not be fully covered by assigned vehicles")

        underutilized = sum(1 for g in groups if self.capacity_utilization(g) < t.underutilized_group_warning)
        if underutilized > 0:
            warnings.append(f"{underutilized} vehicles are significantly underutilized")

        for group in groups:
            if group.estimated_duration > self.options.max_travel_time:
                warnings.append(
                    f"Group {group.id} estimated duration of {group.estimated_duration:.0f} minutes "
                    f"exceeds the {self.options.max_travel_time} minute travel limit"
                )

        if not self.options.allow_partial_filling:
            partial = sum(1 for g in groups if g.occupancy < g.capacity)
            if partial > 0:
                warnings.append(f"{partial} groups are only partially filled")

        return warnings

    def recommendations(self, metrics: OptimizationMetrics, groups: Sequence[TransportGroup]) -> list[str]:
        t = self.thresholds
        recommendations = []

        if metrics.average_capacity_utilization < t.consolidate_recommendation:
            recommendations.append("Consider consolidating passengers into fewer vehicles to improve efficiency")

        if metrics.special_requirements_coverage < t.coverage_recommendation:
            recommendations.append("Review vehicle features to ensure all special requirements can be accommodated")

        if metrics.optimization_score < t.score_recommendation:
            recommendations.append("Consider adjusting optimization parameters or adding more suitable vehicles")

        if any(g.estimated_cost > t.high_cost_recommendation for g in groups):
            recommendations.append("Some routes have high estimated costs - consider route optimization")

        if not self.options.optimize_routes:
            recommendations.append("Enable route optimization to potentially reduce travel time and costs")

        return recommendations

    def build_result(
        self,
        passengers: Sequence[Passenger],
        outcome: BuildOutcome,
        rejected: Sequence[str] = (),
    ) -> OptimizationResult:
        """
        Assemble the final result.

        Warnings are ordered: builder warnings, rejected record messages,
        then metric-based warnings.
        """
        metrics = self.compute(passengers, outcome)
        warnings = list(outcome.warnings) + list(rejected) + self.warnings(metrics, outcome.groups)

        logger.info(
            "📊 Score %.1f | utilization %.1f%% | coverage %.1f%% | satisfaction %.1f%%",
            metrics.optimization_score,
            metrics.average_capacity_utilization,
            metrics.special_requirements_coverage,
            metrics.satisfaction_score,
        )

        return OptimizationResult(
            groups=list(outcome.groups),
            unassigned_passengers=list(outcome.unassigned),
            metrics=metrics,
            warnings=warnings,
            recommendations=self.recommendations(metrics, outcome.groups),
        )
