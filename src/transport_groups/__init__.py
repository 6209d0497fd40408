"""Group event attendees into vehicles under capacity, accessibility and compatibility constraints."""

from .exceptions import ConfigurationError, TransportOptimizationError, ValidationError
from .models import (
    OptimizationMetrics,
    OptimizationResult,
    Passenger,
    RouteStop,
    StopType,
    TransportGroup,
    Vehicle,
    VehicleStatus,
    VehicleType,
)
from .optimisation.config import OptimizationConfigManager, OptimizationOptions
from .optimisation.runners import (
    TransportGroupOptimizer,
    optimize_event,
    optimize_transport_groups,
    sequential_id_generator,
    uuid_id_generator,
)
from .store import BaseTransportStore, InMemoryTransportStore

__all__ = [
    "BaseTransportStore",
    "ConfigurationError",
    "InMemoryTransportStore",
    "OptimizationConfigManager",
    "OptimizationMetrics",
    "OptimizationOptions",
    "OptimizationResult",
    "Passenger",
    "RouteStop",
    "StopType",
    "TransportGroup",
    "TransportGroupOptimizer",
    "TransportOptimizationError",
    "ValidationError",
    "Vehicle",
    "VehicleStatus",
    "VehicleType",
    "optimize_event",
    "optimize_transport_groups",
    "sequential_id_generator",
    "uuid_id_generator",
]
