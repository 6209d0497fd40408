"""
Route synthesis and placeholder duration/cost estimates for ride groups.

A group's route visits every distinct pickup location (first-seen order)
before every distinct dropoff location. Durations and costs are coarse
estimates; real distances come from a pluggable distance provider so that a
mapping service can replace the fixed per-leg placeholder without touching
the group builder.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from ..models import Passenger, RouteStop, StopType, Vehicle
from .config import RouteEstimateConfig
from .utils import location_key

logger = logging.getLogger(__name__)


class BaseDistanceProvider(ABC):
    """Base class for distance lookups between two free-text locations."""

    @abstractmethod
    def distance(self, origin: str, destination: str) -> float:
        """Distance units between two locations."""
        pass

    def route_distance(self, locations: Sequence[str]) -> float:
        """Total distance of visiting ``locations`` in order."""
        return sum(self.distance(a, b) for a, b in zip(locations, locations[1:]))


class FixedLegDistanceProvider(BaseDistanceProvider):
    """Every leg between consecutive stops counts as ``leg_distance`` units."""

    def __init__(self, leg_distance: float = 2.0):
        if leg_distance < 0:
            raise ValueError("leg_distance cannot be negative")
        self.leg_distance = leg_distance

    def distance(self, origin: str, destination: str) -> float:
        return self.leg_distance


@dataclass(frozen=True)
class RoutePlan:
    stops: tuple[RouteStop, ...]
    estimated_duration: float
    estimated_cost: float
    total_distance: float


class RouteSynthesizer:
    """
    Build ordered stop lists and estimates for groups.

    Args:
        config: Duration constants and default leg distance
        distance_provider: Leg distance source; defaults to a fixed
            per-leg provider using ``config.leg_distance``
        optimize_routes: Reorder each stop block with a nearest-neighbour
            pass over the provider's distances
    """

    def __init__(
        self,
        config: RouteEstimateConfig | None = None,
        distance_provider: BaseDistanceProvider | None = None,
        optimize_routes: bool = False,
    ):
        self.config = config or RouteEstimateConfig()
        self.distance_provider = distance_provider or FixedLegDistanceProvider(self.config.leg_distance)
        self.optimize_routes = optimize_routes

    @staticmethod
    def _collect(passengers: Sequence[Passenger], attribute: str) -> list[tuple[str, list[str]]]:
        """Distinct locations in first-seen order with the guests served there."""
        blocks: dict[str, tuple[str, list[str]]] = {}
        for passenger in passengers:
            location = getattr(passenger, attribute)
            key = location_key(location)
            if not key:
                continue
            if key not in blocks:
                blocks[key] = (location, [])
            blocks[key][1].append(passenger.guest_id)
        return list(blocks.values())

    def _nearest_neighbour(
        self, block: list[tuple[str, list[str]]], start: str | None
    ) -> list[tuple[str, list[str]]]:
        """Greedy reorder; ties keep the original order."""
        remaining = list(block)
        ordered = []
        current = start
        if current is None and remaining:
            first = remaining.pop(0)
            ordered.append(first)
            current = first[0]
        while remaining:
            distances = [self.distance_provider.distance(current, loc) for loc, _ in remaining]
            nearest = min(range(len(remaining)), key=lambda i: (distances[i], i))
            chosen = remaining.pop(nearest)
            ordered.append(chosen)
            current = chosen[0]
        return ordered

    def build_stops(self, passengers: Sequence[Passenger]) -> tuple[RouteStop, ...]:
        """Pickup stops followed by dropoff stops, numbered from 1."""
        pickups = self._collect(passengers, "pickup_location")
        dropoffs = self._collect(passengers, "dropoff_location")

        if self.optimize_routes:
            pickups = self._nearest_neighbour(pickups, None)
            last_pickup = pickups[-1][0] if pickups else None
            dropoffs = self._nearest_neighbour(dropoffs, last_pickup)

        stops = []
        for stop_type, block in ((StopType.PICKUP, pickups), (StopType.DROPOFF, dropoffs)):
            for location, guest_ids in block:
                stops.append(
                    RouteStop(
                        sequence=len(stops) + 1,
                        location=location,
                        stop_type=stop_type,
                        guest_ids=tuple(guest_ids),
                    )
                )
        return tuple(stops)

    def estimate_duration(self, passenger_count: int, stops: Sequence[RouteStop]) -> float:
        """Minutes: base + per passenger + per stop on the route."""
        c = self.config
        return c.base_minutes + c.minutes_per_passenger * passenger_count + c.minutes_per_stop * len(stops)

    def plan(self, passengers: Sequence[Passenger], vehicle: Vehicle) -> RoutePlan:
        """Stops, duration and cost for ``passengers`` riding in ``vehicle``."""
        stops = self.build_stops(passengers)
        distance = self.distance_provider.route_distance([stop.location for stop in stops])
        plan = RoutePlan(
            stops=stops,
            estimated_duration=self.estimate_duration(len(passengers), stops),
            estimated_cost=distance * vehicle.cost_per_unit,
            total_distance=distance,
        )
        logger.debug(
            "Route for %s: %d stops, %.0f min, cost %.2f",
            vehicle.id,
            len(stops),
            plan.estimated_duration,
            plan.estimated_cost,
        )
        return plan
