"""
Configuration management for transport group optimization.

This module provides structured configuration for the group optimization
engine: objective options, scoring weights, compatibility thresholds, route
estimate constants and report thresholds, loadable from YAML.
"""

from .config_manager import (
    ClassificationConfig,
    CompatibilityConfig,
    EngineConfig,
    MetricsThresholds,
    OptimizationConfigManager,
    OptimizationOptions,
    RouteEstimateConfig,
    ScoringWeights,
)

__all__ = [
    "ClassificationConfig",
    "CompatibilityConfig",
    "EngineConfig",
    "MetricsThresholds",
    "OptimizationConfigManager",
    "OptimizationOptions",
    "RouteEstimateConfig",
    "ScoringWeights",
]
