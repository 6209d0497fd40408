"""
Optimization runners for transport group assignment.

This module provides the high-level entry points that integrate the
configuration system with the preprocessing, group building and metrics
stages.
"""

from .optimizer import (
    TransportGroupOptimizer,
    optimize_event,
    optimize_transport_groups,
    sequential_id_generator,
    uuid_id_generator,
)

__all__ = [
    'TransportGroupOptimizer',
    'optimize_event',
    'optimize_transport_groups',
    'sequential_id_generator',
    'uuid_id_generator',
]
