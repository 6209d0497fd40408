"""
Data records exchanged between the optimization engine and its callers.

Passengers and vehicles are supplied fresh for every run and are never
modified by the engine; preprocessing produces normalised copies. Groups,
metrics and the result are created during a run and handed back to the
caller, who is responsible for persisting them.

All collections on the frozen records are tuples with duplicates removed in
first-seen order, so two runs over the same input serialize identically.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class VehicleType(str, Enum):
    """Vehicle categories known to the fleet inventory."""

    BUS = "bus"
    VAN = "van"
    CAR = "car"
    LIMOUSINE = "limousine"
    SHUTTLE = "shuttle"


class VehicleStatus(str, Enum):
    """Operational status of a vehicle. Only AVAILABLE vehicles are assignable."""

    AVAILABLE = "available"
    ASSIGNED = "assigned"
    IN_USE = "in_use"
    MAINTENANCE = "maintenance"
    UNAVAILABLE = "unavailable"


class StopType(str, Enum):
    PICKUP = "pickup"
    DROPOFF = "dropoff"


@dataclass(frozen=True)
class Passenger:
    """
    An event attendee needing a single ground transport leg.

    Attributes:
        guest_id: Unique guest identifier
        guest_name: Display name
        pickup_location: Free-text pickup location (None if unknown)
        dropoff_location: Free-text dropoff location (None if unknown)
        arrival_time: Optional arrival time of the guest
        departure_time: Optional departure time of the guest
        special_requirements: Requirement tags, e.g. ("wheelchair", "non_smoking")
        priority: 1-10, higher is served first
        group_preferences: Guest ids this passenger would like to ride with
        avoidances: Guest ids this passenger must not ride with
    """

    guest_id: str
    guest_name: str
    pickup_location: str | None = None
    dropoff_location: str | None = None
    arrival_time: datetime | None = None
    departure_time: datetime | None = None
    special_requirements: tuple[str, ...] = ()
    priority: int = 5
    group_preferences: tuple[str, ...] = ()
    avoidances: tuple[str, ...] = ()


@dataclass(frozen=True)
class Vehicle:
    """
    A vehicle in the event's transport pool.

    Attributes:
        id: Unique vehicle identifier
        name: Display name
        type: One of VehicleType
        capacity: Number of passenger seats
        features: Feature tags, e.g. ("wheelchair_accessible", "child_seats")
        accessible: Whether the vehicle can take wheelchair users
        cost_per_unit: Operating cost per distance unit
        available_from: Start of availability window (None = open)
        available_until: End of availability window (None = open)
        status: Operational status
        driver_id: Assigned driver, if known
    """

    id: str
    name: str
    type: VehicleType
    capacity: int
    features: tuple[str, ...] = ()
    accessible: bool = False
    cost_per_unit: float = 0.0
    available_from: datetime | None = None
    available_until: datetime | None = None
    status: VehicleStatus = VehicleStatus.AVAILABLE
    driver_id: str | None = None

    def is_available_at(self, moment: datetime) -> bool:
        """Whether ``moment`` falls inside the (inclusive) availability window."""
        if self.available_from is not None and moment < self.available_from:
            return False
        if self.available_until is not None and moment > self.available_until:
            return False
        return True


@dataclass(frozen=True)
class RouteStop:
    sequence: int
    location: str
    stop_type: StopType
    guest_ids: tuple[str, ...]


@dataclass(frozen=True)
class TransportGroup:
    """
    A finalized ride group: one vehicle and the passengers assigned to it.

    ``capacity`` is the seat count of the assigned vehicle, so the group is
    self-describing once it leaves the engine.
    """

    id: str
    vehicle_id: str
    vehicle_name: str
    capacity: int
    passengers: tuple[Passenger, ...]
    route: tuple[RouteStop, ...]
    estimated_duration: float
    estimated_cost: float
    capacity_utilization: float
    requirements_covered: tuple[str, ...]

    @property
    def passenger_ids(self) -> tuple[str, ...]:
        return tuple(p.guest_id for p in self.passengers)

    @property
    def occupancy(self) -> int:
        return len(self.passengers)


@dataclass(frozen=True)
class OptimizationMetrics:
    """Summary statistics for one optimization run. Scores are on a 0-100 scale."""

    total_vehicles_used: int
    average_capacity_utilization: float
    total_estimated_duration: float
    total_estimated_cost: float
    optimization_score: float
    satisfaction_score: float
    unassigned_count: int
    special_requirements_coverage: float


@dataclass
class OptimizationResult:
    """Everything a run produces, ready for the caller to persist or display."""

    groups: list[TransportGroup]
    unassigned_passengers: list[Passenger]
    metrics: OptimizationMetrics
    warnings: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    @property
    def assigned_count(self) -> int:
        return sum(group.occupancy for group in self.groups)
