"""Shared fixtures for transport group optimization tests."""

from datetime import datetime, timezone

import pytest

from transport_groups.models import Passenger, Vehicle, VehicleType
from transport_groups.optimisation.config import OptimizationConfigManager

NOW = datetime(2025, 6, 1, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    """Fixed reference time for vehicle availability."""
    return NOW


@pytest.fixture
def make_passenger():
    """Factory for passengers with sensible defaults."""

    def _make(guest_id: str, **kwargs) -> Passenger:
        kwargs.setdefault("guest_name", guest_id.upper())
        kwargs.setdefault("pickup_location", f"Hotel {guest_id}")
        kwargs.setdefault("dropoff_location", "Venue")
        for key in ("special_requirements", "group_preferences", "avoidances"):
            if key in kwargs:
                kwargs[key] = tuple(kwargs[key])
        return Passenger(guest_id=guest_id, **kwargs)

    return _make


@pytest.fixture
def make_vehicle():
    """Factory for available vehicles with sensible defaults."""

    def _make(vehicle_id: str, capacity: int = 4, type: VehicleType = VehicleType.VAN, **kwargs) -> Vehicle:
        kwargs.setdefault("name", f"Vehicle {vehicle_id}")
        if "features" in kwargs:
            kwargs["features"] = tuple(kwargs["features"])
        return Vehicle(id=vehicle_id, type=type, capacity=capacity, **kwargs)

    return _make


@pytest.fixture
def scenario_a_passengers(make_passenger):
    """Three regular riders, one wheelchair user and one child."""
    return [
        make_passenger("r1", pickup_location="Central Station"),
        make_passenger("r2", pickup_location="Central Station"),
        make_passenger("r3", pickup_location="Airport"),
        make_passenger("w1", special_requirements=["wheelchair"], priority=8),
        make_passenger("c1", special_requirements=["child_seat"], priority=7),
    ]


@pytest.fixture
def scenario_a_vehicles(make_vehicle):
    """An accessible van with four seats and a six-seat van with child seats."""
    return [
        make_vehicle("accessible-van", capacity=4, accessible=True, features=["wheelchair_accessible"],
                     cost_per_unit=1.5),
        make_vehicle("family-van", capacity=6, features=["child_seats"], cost_per_unit=1.2),
    ]


@pytest.fixture
def default_config():
    """Configuration manager with every section at its defaults."""
    return OptimizationConfigManager.from_defaults()
