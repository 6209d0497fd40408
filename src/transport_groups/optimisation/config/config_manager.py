"""
Configuration data classes and management for transport group optimization.

This module defines structured configuration classes for the group
optimization engine and provides validation and loading capabilities. Every
weight and threshold the engine uses lives here as a named, documented value
rather than a literal inside the algorithm.

The configuration system supports:
- Objective options (what the caller wants optimized)
- Vehicle scoring weights
- Compatibility admission threshold and pair bonuses
- Route duration/cost placeholder constants
- Warning and recommendation thresholds for the result report
- Requirement classification keywords
- Engine behaviour (strict record validation, group id prefix)

Example YAML Configuration:
```yaml
options:
  minimize_vehicles: true
  respect_special_requirements: true
  optimize_routes: false
  max_travel_time: 90
  minimize_cost: true
  maximize_comfort: false

scoring:
  capacity_weight: 30
  cost_weight: 25

compatibility:
  admission_threshold: 0.7

routing:
  leg_distance: 2.0

engine:
  strict_validation: false

logging:
  log_dir: logs
  console_level: INFO
```

Usage:
```python
config_manager = OptimizationConfigManager('config.yaml')
options = config_manager.get_options()
optimizer = TransportGroupOptimizer(config_manager)
```
"""

import logging
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


@dataclass
class OptimizationOptions:
    """
    Objective knobs supplied by the caller for a single run.

    Attributes:
        prioritize_capacity: Rank the vehicle pool by capacity before cost.
            When False the pool is ranked by cost first.
        minimize_vehicles: Penalise runs that spread passengers over many
            vehicles in the optimization score.
        respect_special_requirements: Treat conflicting requirement tags
            (smoking vs non_smoking, ...) as a hard admission rule and reward
            vehicles whose features match a seed's requirements.
        optimize_routes: Reorder stops with the distance provider instead of
            keeping first-seen order.
        max_travel_time: Minutes. Groups estimated above this are reported.
            Range 15-240.
        allow_partial_filling: When False, groups leaving seats empty are
            reported as warnings.
        prioritize_group_preferences: Apply the mutual preference bonus when
            scoring group compatibility.
        minimize_cost: Include the cost term in vehicle scoring.
        maximize_comfort: Include the comfort term in vehicle scoring.
    """

    prioritize_capacity: bool = True
    minimize_vehicles: bool = True
    respect_special_requirements: bool = True
    optimize_routes: bool = False
    max_travel_time: int = 60
    allow_partial_filling: bool = True
    prioritize_group_preferences: bool = True
    minimize_cost: bool = True
    maximize_comfort: bool = False

    def __post_init__(self):
        """Validate option values."""
        if not 15 <= self.max_travel_time <= 240:
            raise ValueError("max_travel_time must be in range [15, 240] minutes")

    @classmethod
    def from_mapping(
        cls, mapping: Mapping[str, Any], base: "OptimizationOptions | None" = None
    ) -> "OptimizationOptions":
        """
        Build options from a mapping using snake_case or camelCase keys.

        The camelCase spelling is what API callers send (``minimizeVehicles``,
        ``maxTravelTime``); both map onto the same field. Keys missing from
        the mapping keep the value from ``base`` (or the default).
        """
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in mapping.items():
            name = _camel_to_snake(key)
            if name not in known:
                raise ValueError(f"Unknown optimization option '{key}'")
            values[name] = value
        if base is None:
            return cls(**values)
        return replace(base, **values)


@dataclass
class ScoringWeights:
    """
    Weights of the multi-factor vehicle score.

    score = capacity_weight * min(capacity / preferred_group_size, 1)
          + cost_weight * 1 / (1 + cost_per_unit)          (if minimize_cost)
          + comfort_weight * comfort_rank                  (if maximize_comfort)
          + requirement_match_weight                       (if a requirement matches a feature)

    Attributes:
        capacity_weight: Reward for vehicles seating at least a preferred group
        cost_weight: Reward for cheap vehicles
        comfort_weight: Reward for comfortable vehicle types
        requirement_match_weight: Flat bonus when a seed requirement is met
            by a vehicle feature
        preferred_group_size: Seats regarded as a "full" ride group; also used
            as the ideal passengers-per-vehicle in the vehicle efficiency metric
    """

    capacity_weight: float = 30.0
    cost_weight: float = 25.0
    comfort_weight: float = 20.0
    requirement_match_weight: float = 25.0
    preferred_group_size: int = 4

    def __post_init__(self):
        for name in ("capacity_weight", "cost_weight", "comfort_weight", "requirement_match_weight"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cannot be negative")
        if self.preferred_group_size < 1:
            raise ValueError("preferred_group_size must be at least 1")


@dataclass
class CompatibilityConfig:
    """
    Group compatibility scoring parameters.

    Each unordered pair in a prospective group scores its base compatibility
    (1 or 0) plus bonuses, capped at ``max_pair_score``. The group score is
    the mean over pairs; a candidate is admitted when the score of the group
    including the candidate reaches ``admission_threshold``.

    Attributes:
        admission_threshold: Minimum group score for admitting a candidate
        preference_bonus: Added when both passengers list each other as
            preferred co-riders
        shared_location_bonus: Added when passengers share a pickup or
            dropoff location
        max_pair_score: Cap applied to each pair score
    """

    admission_threshold: float = 0.7
    preference_bonus: float = 0.5
    shared_location_bonus: float = 0.3
    max_pair_score: float = 1.0

    def __post_init__(self):
        if not 0.0 <= self.admission_threshold <= 1.0:
            raise ValueError("admission_threshold must be in range [0.0, 1.0]")
        if self.preference_bonus < 0 or self.shared_location_bonus < 0:
            raise ValueError("Compatibility bonuses cannot be negative")
        if self.max_pair_score <= 0:
            raise ValueError("max_pair_score must be positive")


@dataclass
class RouteEstimateConfig:
    """
    Placeholder constants for route duration and cost estimates.

    duration = base_minutes + minutes_per_passenger * passengers
               + minutes_per_stop * stops
    cost = sum of leg distances * vehicle cost per unit, where the default
    distance provider returns ``leg_distance`` for every leg.
    """

    base_minutes: float = 15.0
    minutes_per_passenger: float = 3.0
    minutes_per_stop: float = 5.0
    leg_distance: float = 2.0

    def __post_init__(self):
        for f in fields(self):
            if getattr(self, f.name) < 0:
                raise ValueError(f"{f.name} cannot be negative")


@dataclass
class MetricsThresholds:
    """
    Weights of the optimization score and thresholds for the result report.

    Percentages are on a 0-100 scale.
    """

    assignment_weight: float = 40.0
    utilization_weight: float = 30.0
    coverage_weight: float = 20.0
    vehicle_efficiency_weight: float = 10.0

    low_utilization_warning: float = 50.0
    low_coverage_warning: float = 80.0
    underutilized_group_warning: float = 30.0

    consolidate_recommendation: float = 60.0
    coverage_recommendation: float = 90.0
    score_recommendation: float = 70.0
    high_cost_recommendation: float = 100.0

    def __post_init__(self):
        for f in fields(self):
            if getattr(self, f.name) < 0:
                raise ValueError(f"{f.name} cannot be negative")


@dataclass
class ClassificationConfig:
    """
    Keyword fallbacks for sorting requirement tags into categories.

    A tag that is exactly a category name ("mobility", "child", "elderly")
    is classified directly. Other tags are classified by the first category
    whose keyword occurs inside the normalised tag.
    """

    mobility_keywords: list[str] = field(
        default_factory=lambda: ["wheelchair", "mobility", "accessib", "walker"]
    )
    child_keywords: list[str] = field(
        default_factory=lambda: ["child", "infant", "toddler", "booster", "car_seat"]
    )
    elderly_keywords: list[str] = field(default_factory=lambda: ["elderly", "senior"])

    def __post_init__(self):
        for f in fields(self):
            keywords = getattr(self, f.name)
            if not isinstance(keywords, list) or not all(isinstance(k, str) and k for k in keywords):
                raise ValueError(f"{f.name} must be a list of non-empty strings")


@dataclass
class EngineConfig:
    """
    Engine behaviour switches.

    Attributes:
        strict_validation: Propagate ValidationError for malformed records
            instead of skipping them with a warning
        group_id_prefix: Prefix of the sequential group identifiers
    """

    strict_validation: bool = False
    group_id_prefix: str = "group"

    def __post_init__(self):
        if not self.group_id_prefix:
            raise ValueError("group_id_prefix cannot be empty")


_SECTIONS: dict[str, type] = {
    "options": OptimizationOptions,
    "scoring": ScoringWeights,
    "compatibility": CompatibilityConfig,
    "routing": RouteEstimateConfig,
    "metrics": MetricsThresholds,
    "classification": ClassificationConfig,
    "engine": EngineConfig,
}


def _camel_to_snake(name: str) -> str:
    out = []
    for char in name:
        if char.isupper():
            out.append("_")
            out.append(char.lower())
        else:
            out.append(char)
    return "".join(out).lstrip("_")


class OptimizationConfigManager:
    """
    Configuration manager for transport group optimization.

    Handles loading and validation of configurations from YAML files or
    dictionaries. Every section is optional; missing sections and keys fall
    back to the documented defaults, while unknown sections or keys are
    rejected so typos do not silently change behaviour.

    Configuration Structure:
        ```yaml
        options: {...}          # OptimizationOptions
        scoring: {...}          # ScoringWeights
        compatibility: {...}    # CompatibilityConfig
        routing: {...}          # RouteEstimateConfig
        metrics: {...}          # MetricsThresholds
        classification: {...}   # ClassificationConfig
        engine: {...}           # EngineConfig
        logging: {...}          # passed to setup_logger by the CLI
        ```

    Usage Pattern:
        ```python
        config_manager = OptimizationConfigManager('optimization_config.yaml')
        weights = config_manager.get_scoring_weights()
        optimizer = TransportGroupOptimizer(config_manager)
        ```
    """

    def __init__(self, config_path: str | None = None, config_dict: dict | None = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to YAML configuration file
            config_dict: Configuration dictionary (alternative to file)

        Raises:
            FileNotFoundError: If config_path doesn't exist
            ValueError: If both or neither config sources are provided
            yaml.YAMLError: If YAML file is malformed
            ValueError: If configuration validation fails
        """
        if config_path is not None and config_dict is not None:
            raise ValueError("Provide either config_path or config_dict, not both")

        if config_path is None and config_dict is None:
            raise ValueError(
                "Configuration is required. Provide either:\n"
                "  - config_path: Path to YAML configuration file\n"
                "  - config_dict: Configuration dictionary\n"
                "Example: OptimizationConfigManager('my_config.yaml')"
            )

        if config_path is not None:
            self.config = self._load_yaml_config(config_path)
            logger.info("📋 Using loaded configuration file")
        else:
            self.config = dict(config_dict)
            logger.debug("📋 Using provided configuration dictionary")

        self._validate_config()
        self._setup_structured_configs()

    @classmethod
    def from_defaults(cls) -> "OptimizationConfigManager":
        """Configuration with every section at its defaults."""
        return cls(config_dict={})

    def _load_yaml_config(self, config_path: str) -> dict[str, Any]:
        """Load configuration from YAML file with error handling."""
        config_file = Path(config_path)

        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_file) as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in {config_path}: {e}") from e

        # An empty file means "all defaults"
        if config is None:
            config = {}

        if not isinstance(config, dict):
            raise ValueError(f"Configuration must be a dictionary, got {type(config)}")

        logger.info("📂 Loaded configuration from %s", config_path)
        return config

    def _validate_config(self):
        """Validate configuration structure."""
        allowed_sections = set(_SECTIONS) | {"logging"}
        for section, values in self.config.items():
            if section not in allowed_sections:
                raise ValueError(
                    f"Unknown configuration section: '{section}'. "
                    f"Expected one of {sorted(allowed_sections)}"
                )
            if values is not None and not isinstance(values, dict):
                raise ValueError(f"Configuration section '{section}' must be a mapping")

    def _setup_structured_configs(self):
        """Setup structured configuration objects with validation."""
        built = {}
        for section, config_cls in _SECTIONS.items():
            values = self.config.get(section) or {}
            known = {f.name for f in fields(config_cls)}
            unknown = sorted(set(values) - known)
            if unknown:
                raise ValueError(f"Unknown parameter(s) {unknown} in '{section}' configuration")
            built[section] = config_cls(**values)

        self.options = built["options"]
        self.scoring_weights = built["scoring"]
        self.compatibility_config = built["compatibility"]
        self.route_config = built["routing"]
        self.metrics_thresholds = built["metrics"]
        self.classification_config = built["classification"]
        self.engine_config = built["engine"]
        self.logging_config = dict(self.config.get("logging") or {})

    def get_options(self) -> OptimizationOptions:
        """Get default objective options for runs."""
        return self.options

    def get_scoring_weights(self) -> ScoringWeights:
        """Get vehicle scoring weights."""
        return self.scoring_weights

    def get_compatibility_config(self) -> CompatibilityConfig:
        """Get compatibility threshold and bonuses."""
        return self.compatibility_config

    def get_route_config(self) -> RouteEstimateConfig:
        """Get route estimate constants."""
        return self.route_config

    def get_metrics_thresholds(self) -> MetricsThresholds:
        """Get score weights and report thresholds."""
        return self.metrics_thresholds

    def get_classification_config(self) -> ClassificationConfig:
        """Get requirement classification keywords."""
        return self.classification_config

    def get_engine_config(self) -> EngineConfig:
        """Get engine behaviour switches."""
        return self.engine_config

    def get_logging_config(self) -> dict[str, Any]:
        """Get the raw logging section (consumed by setup_logger)."""
        return self.logging_config

    def get_full_config(self) -> dict[str, Any]:
        """Get complete configuration dictionary."""
        return self.config.copy()

    def to_dict(self) -> dict[str, Any]:
        """Resolved configuration including defaults."""
        resolved = {
            "options": asdict(self.options),
            "scoring": asdict(self.scoring_weights),
            "compatibility": asdict(self.compatibility_config),
            "routing": asdict(self.route_config),
            "metrics": asdict(self.metrics_thresholds),
            "classification": asdict(self.classification_config),
            "engine": asdict(self.engine_config),
        }
        if self.logging_config:
            resolved["logging"] = dict(self.logging_config)
        return resolved

    def print_summary(self):
        """Print configuration summary for verification."""
        opts = self.options
        weights = self.scoring_weights
        print("\n📋 TRANSPORT OPTIMIZATION CONFIGURATION SUMMARY:")

        print("   🎯 Options:")
        print(f"      Minimize vehicles: {opts.minimize_vehicles}")
        print(f"      Respect special requirements: {opts.respect_special_requirements}")
        print(f"      Optimize routes: {opts.optimize_routes}")
        print(f"      Max travel time: {opts.max_travel_time} minutes")
        print(f"      Minimize cost / maximize comfort: {opts.minimize_cost}/{opts.maximize_comfort}")

        print("   🚐 Vehicle scoring:")
        print(f"      Capacity/cost/comfort/requirement weights: "
              f"{weights.capacity_weight}/{weights.cost_weight}/"
              f"{weights.comfort_weight}/{weights.requirement_match_weight}")
        print(f"      Preferred group size: {weights.preferred_group_size}")

        print("   🤝 Compatibility:")
        print(f"      Admission threshold: {self.compatibility_config.admission_threshold}")

        print("   🗺️ Route estimates:")
        print(f"      Leg distance: {self.route_config.leg_distance}")

        print("   ⚙️ Engine:")
        print(f"      Strict validation: {self.engine_config.strict_validation}")
