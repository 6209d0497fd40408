"""
Transport group optimization runner.

This module wires the pipeline together and is the main entry point of the
package:

    records -> preprocessing -> vehicle availability filter
            -> classification -> group builder -> metrics -> OptimizationResult

Every tunable value comes from an ``OptimizationConfigManager``; per-run
objective options can be overridden on each call.

Usage:
```python
from transport_groups.optimisation.config import OptimizationConfigManager
from transport_groups.optimisation.runners import TransportGroupOptimizer

config_manager = OptimizationConfigManager('config.yaml')
optimizer = TransportGroupOptimizer(config_manager)

result = optimizer.optimize(passengers, vehicles, options={"maxTravelTime": 90})
print(f"Groups: {len(result.groups)}, score: {result.metrics.optimization_score:.1f}")
```
"""

import itertools
import logging
import time
import uuid
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from ...models import OptimizationResult, Passenger, Vehicle
from ...store import BaseTransportStore
from ..classification import ConstraintClassifier, VehicleCapabilityMatcher
from ..compatibility import CompatibilityEvaluator
from ..config import OptimizationConfigManager, OptimizationOptions
from ..group_builder import GroupBuilder
from ..metrics import MetricsEngine
from ..preprocessing import ensure_utc, filter_available_vehicles, preprocess_passengers, preprocess_vehicles
from ..routing import BaseDistanceProvider, RouteSynthesizer
from ..scoring import VehicleScorer

logger = logging.getLogger(__name__)


def sequential_id_generator(prefix: str = "group", width: int = 3) -> Callable[[], str]:
    """Deterministic identifiers: ``group-001``, ``group-002``, ..."""
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter):0{width}d}"


def uuid_id_generator() -> str:
    """Random identifier for callers persisting groups across runs."""
    return str(uuid.uuid4())


class TransportGroupOptimizer:
    """
    Run the transport group optimization pipeline.

    The optimizer holds configuration only; every ``optimize`` call owns its
    own run state, so one instance can serve many runs.

    Attributes:
        config_manager: Source of every weight, threshold and default option
        distance_provider: Optional leg distance source for route estimates
    """

    def __init__(
        self,
        config_manager: OptimizationConfigManager | None = None,
        distance_provider: BaseDistanceProvider | None = None,
    ):
        self.config_manager = config_manager or OptimizationConfigManager.from_defaults()
        self.distance_provider = distance_provider

    def resolve_options(
        self, options: OptimizationOptions | Mapping[str, Any] | None = None
    ) -> OptimizationOptions:
        """Per-run options layered over the configured defaults."""
        if options is None:
            return self.config_manager.get_options()
        if isinstance(options, OptimizationOptions):
            return options
        return OptimizationOptions.from_mapping(options, base=self.config_manager.get_options())

    def optimize(
        self,
        passengers: Iterable[Passenger | Mapping[str, Any]],
        vehicles: Iterable[Vehicle | Mapping[str, Any]],
        options: OptimizationOptions | Mapping[str, Any] | None = None,
        now: datetime | None = None,
        id_generator: Callable[[], str] | None = None,
        should_cancel: Callable[[], bool] | None = None,
    ) -> OptimizationResult:
        """
        Form ride groups for one set of passengers and vehicles.

        Args:
            passengers: Passenger instances or raw mappings
            vehicles: Vehicle instances or raw mappings
            options: Objective options; mappings may use camelCase keys and
                override only the keys they name
            now: Reference time for vehicle availability (default: current UTC)
            id_generator: Group identifier source (default: fresh
                ``<prefix>-001`` sequence per run)
            should_cancel: Cooperative cancellation hook

        Returns:
            OptimizationResult with groups, unassigned passengers, metrics,
            warnings and recommendations

        Raises:
            ConfigurationError: If no vehicle is available
            ValidationError: If a record is malformed and strict validation is on
        """
        start_time = time.time()
        cm = self.config_manager
        run_options = self.resolve_options(options)
        engine = cm.get_engine_config()
        now = ensure_utc(now) if now is not None else datetime.now(timezone.utc)

        logger.info("🚀 Starting transport group optimization")

        valid_passengers, rejected_passengers = preprocess_passengers(passengers, strict=engine.strict_validation)
        valid_vehicles, rejected_vehicles = preprocess_vehicles(vehicles, strict=engine.strict_validation)
        pool = filter_available_vehicles(valid_vehicles, now, prioritize_capacity=run_options.prioritize_capacity)

        logger.info("👥 %d passenger(s), %d vehicle(s) in pool", len(valid_passengers), len(pool))

        classifier = ConstraintClassifier(cm.get_classification_config())
        builder = GroupBuilder(
            options=run_options,
            id_generator=id_generator or sequential_id_generator(engine.group_id_prefix),
            classifier=classifier,
            matcher=VehicleCapabilityMatcher(classifier),
            evaluator=CompatibilityEvaluator(
                cm.get_compatibility_config(),
                prioritize_group_preferences=run_options.prioritize_group_preferences,
            ),
            scorer=VehicleScorer(cm.get_scoring_weights(), run_options),
            route_synthesizer=RouteSynthesizer(
                cm.get_route_config(),
                distance_provider=self.distance_provider,
                optimize_routes=run_options.optimize_routes,
            ),
        )
        outcome = builder.build(valid_passengers, pool, should_cancel=should_cancel)

        metrics_engine = MetricsEngine(cm.get_metrics_thresholds(), run_options, cm.get_scoring_weights())
        result = metrics_engine.build_result(valid_passengers, outcome, rejected_passengers + rejected_vehicles)

        logger.info("🏁 Optimization finished in %.3fs", time.time() - start_time)
        return result


def optimize_transport_groups(
    passengers: Iterable[Passenger | Mapping[str, Any]],
    vehicles: Iterable[Vehicle | Mapping[str, Any]],
    options: OptimizationOptions | Mapping[str, Any] | None = None,
    *,
    config_manager: OptimizationConfigManager | None = None,
    now: datetime | None = None,
    id_generator: Callable[[], str] | None = None,
    distance_provider: BaseDistanceProvider | None = None,
    should_cancel: Callable[[], bool] | None = None,
) -> OptimizationResult:
    """One-shot optimization with an optional configuration."""
    optimizer = TransportGroupOptimizer(config_manager, distance_provider=distance_provider)
    return optimizer.optimize(
        passengers, vehicles, options, now=now, id_generator=id_generator, should_cancel=should_cancel
    )


def optimize_event(
    event_id: str,
    store: BaseTransportStore,
    options: OptimizationOptions | Mapping[str, Any] | None = None,
    *,
    config_manager: OptimizationConfigManager | None = None,
    now: datetime | None = None,
    id_generator: Callable[[], str] | None = None,
    distance_provider: BaseDistanceProvider | None = None,
    should_cancel: Callable[[], bool] | None = None,
) -> OptimizationResult:
    """
    Load an event's vehicles and passengers from ``store``, optimize and
    persist the resulting groups.

    Nothing is persisted if the run raises.
    """
    vehicles = store.load_available_vehicles(event_id)
    passengers = store.load_candidate_passengers(event_id)
    logger.info("📥 Loaded event %s: %d passenger(s), %d vehicle(s)", event_id, len(passengers), len(vehicles))

    result = optimize_transport_groups(
        passengers,
        vehicles,
        options,
        config_manager=config_manager,
        now=now,
        id_generator=id_generator,
        distance_provider=distance_provider,
        should_cancel=should_cancel,
    )
    store.persist_groups(event_id, result.groups)
    return result
