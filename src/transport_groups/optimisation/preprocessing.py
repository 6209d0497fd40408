"""
Passenger preprocessing and vehicle availability filtering.

Raw passenger and vehicle records reach the engine either as model instances
or as plain mappings straight from an API payload (camelCase keys such as
``guestId`` or ``costPerKm``). This module turns both into normalised,
validated model copies:

- priorities are clamped to [1, 10] (missing priority means 5)
- tag lists are normalised and de-duplicated in first-seen order
- timestamps are parsed and made timezone-aware (naive values are UTC)

It also reduces the vehicle inventory to the operational pool for a run and
ranks it. An empty pool is a ConfigurationError: nothing can be assigned.
"""

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any

from ..exceptions import ConfigurationError, ValidationError
from ..models import Passenger, Vehicle, VehicleStatus, VehicleType
from .utils import normalise_tag, unique_in_order

logger = logging.getLogger(__name__)

MIN_PRIORITY = 1
MAX_PRIORITY = 10
DEFAULT_PRIORITY = 5

# spellings accepted for boolean flags arriving as text (form posts, CSV)
TRUE_STRINGS = frozenset({"true", "yes", "y", "1"})
FALSE_STRINGS = frozenset({"false", "no", "n", "0", ""})

# camelCase keys used by the event API, mapped onto model field names
PASSENGER_ALIASES = {
    "guestId": "guest_id",
    "id": "guest_id",
    "guestName": "guest_name",
    "name": "guest_name",
    "pickupLocation": "pickup_location",
    "dropoffLocation": "dropoff_location",
    "arrivalTime": "arrival_time",
    "departureTime": "departure_time",
    "specialRequirements": "special_requirements",
    "groupPreferences": "group_preferences",
}

VEHICLE_ALIASES = {
    "vehicleId": "id",
    "costPerKm": "cost_per_unit",
    "cost_per_km": "cost_per_unit",
    "costPerUnit": "cost_per_unit",
    "isAccessible": "accessible",
    "is_accessible": "accessible",
    "availableFrom": "available_from",
    "availableUntil": "available_until",
    "driverId": "driver_id",
}


def clamp_priority(value: Any) -> int:
    """
    Coerce a raw priority into the [1, 10] range.

    ``None`` becomes the default priority before clamping. Non-numeric and
    non-finite values raise ValidationError.
    """
    if value is None:
        value = DEFAULT_PRIORITY
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        if isinstance(value, str) and value.strip().lstrip("-").isdigit():
            value = int(value.strip())
        else:
            raise ValidationError(f"Priority must be a number, got {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValidationError(f"Priority must be a finite number, got {value!r}")
    return max(MIN_PRIORITY, min(MAX_PRIORITY, int(value)))


def ensure_utc(moment: datetime) -> datetime:
    """Attach UTC to naive datetimes; convert aware ones to UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def parse_datetime(value: Any, field_name: str) -> datetime | None:
    """Parse an optional ISO-8601 timestamp (a trailing ``Z`` is accepted)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return ensure_utc(datetime.fromisoformat(text))
        except ValueError as e:
            raise ValidationError(f"Invalid {field_name} timestamp: {value!r}") from e
    raise ValidationError(f"Invalid {field_name} timestamp: {value!r}")


def _tag_list(value: Any, field_name: str, normalise: bool = True) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, Iterable):
        raise ValidationError(f"{field_name} must be a list of strings")
    tags = []
    for item in value:
        if item is None:
            continue
        if not isinstance(item, (str, int)):
            raise ValidationError(f"{field_name} entries must be strings, got {item!r}")
        text = normalise_tag(str(item)) if normalise else str(item).strip()
        if text:
            tags.append(text)
    return unique_in_order(tags)


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _apply_aliases(record: Mapping[str, Any], aliases: Mapping[str, str]) -> dict[str, Any]:
    resolved = {}
    for key, value in record.items():
        name = aliases.get(key, key)
        # the snake_case spelling wins if both are present
        if name in resolved and key != name:
            continue
        resolved[name] = value
    return resolved


def parse_passenger(record: Passenger | Mapping[str, Any]) -> Passenger:
    """
    Build a normalised Passenger from a model instance or a raw mapping.

    Raises:
        ValidationError: If the guest id is missing or a field has the wrong type
    """
    if isinstance(record, Passenger):
        data = asdict(record)
    elif isinstance(record, Mapping):
        data = _apply_aliases(record, PASSENGER_ALIASES)
    else:
        raise ValidationError(f"Passenger record must be a mapping, got {type(record).__name__}")

    guest_id = _optional_text(data.get("guest_id"))
    if guest_id is None:
        raise ValidationError("Passenger record is missing a guest id")

    try:
        return Passenger(
            guest_id=guest_id,
            guest_name=_optional_text(data.get("guest_name")) or guest_id,
            pickup_location=_optional_text(data.get("pickup_location")),
            dropoff_location=_optional_text(data.get("dropoff_location")),
            arrival_time=parse_datetime(data.get("arrival_time"), "arrival_time"),
            departure_time=parse_datetime(data.get("departure_time"), "departure_time"),
            special_requirements=_tag_list(data.get("special_requirements"), "special_requirements"),
            priority=clamp_priority(data.get("priority")),
            group_preferences=_tag_list(data.get("group_preferences"), "group_preferences", normalise=False),
            avoidances=_tag_list(data.get("avoidances"), "avoidances", normalise=False),
        )
    except ValidationError as e:
        raise ValidationError(f"Passenger {guest_id}: {e}", record_id=guest_id) from e


def parse_vehicle(record: Vehicle | Mapping[str, Any]) -> Vehicle:
    """
    Build a normalised Vehicle from a model instance or a raw mapping.

    Capacity 0 is accepted here (the availability filter drops it); negative
    capacity or cost is malformed.

    Raises:
        ValidationError: If the id is missing or a field is invalid
    """
    if isinstance(record, Vehicle):
        data = asdict(record)
    elif isinstance(record, Mapping):
        data = _apply_aliases(record, VEHICLE_ALIASES)
    else:
        raise ValidationError(f"Vehicle record must be a mapping, got {type(record).__name__}")

    vehicle_id = _optional_text(data.get("id"))
    if vehicle_id is None:
        raise ValidationError("Vehicle record is missing an id")

    def invalid(message: str) -> ValidationError:
        return ValidationError(f"Vehicle {vehicle_id}: {message}", record_id=vehicle_id)

    raw_type = data.get("type")
    try:
        vehicle_type = VehicleType(str(getattr(raw_type, "value", raw_type)).strip().lower())
    except ValueError as e:
        raise invalid(f"unknown vehicle type {raw_type!r}") from e

    raw_status = data.get("status") or VehicleStatus.AVAILABLE
    try:
        status = VehicleStatus(str(getattr(raw_status, "value", raw_status)).strip().lower())
    except ValueError as e:
        raise invalid(f"unknown vehicle status {raw_status!r}") from e

    capacity = data.get("capacity")
    if isinstance(capacity, bool) or not isinstance(capacity, int):
        raise invalid(f"capacity must be an integer, got {capacity!r}")
    if capacity < 0:
        raise invalid("capacity cannot be negative")

    cost = data.get("cost_per_unit")
    cost = 0.0 if cost is None else cost
    if isinstance(cost, bool) or not isinstance(cost, (int, float)):
        raise invalid(f"cost_per_unit must be a number, got {cost!r}")
    if not math.isfinite(cost):
        raise invalid(f"cost_per_unit must be finite, got {cost!r}")
    if cost < 0:
        raise invalid("cost_per_unit cannot be negative")

    accessible = data.get("accessible", False)
    accessible = False if accessible is None else accessible
    if isinstance(accessible, str):
        flag = accessible.strip().lower()
        if flag not in TRUE_STRINGS | FALSE_STRINGS:
            raise invalid(f"accessible must be a boolean, got {accessible!r}")
        accessible = flag in TRUE_STRINGS
    elif not isinstance(accessible, bool):
        raise invalid(f"accessible must be a boolean, got {accessible!r}")

    try:
        return Vehicle(
            id=vehicle_id,
            name=_optional_text(data.get("name")) or vehicle_id,
            type=vehicle_type,
            capacity=capacity,
            features=_tag_list(data.get("features"), "features"),
            accessible=accessible,
            cost_per_unit=float(cost),
            available_from=parse_datetime(data.get("available_from"), "available_from"),
            available_until=parse_datetime(data.get("available_until"), "available_until"),
            status=status,
            driver_id=_optional_text(data.get("driver_id")),
        )
    except ValidationError as e:
        raise invalid(str(e)) from e


def preprocess_passengers(
    records: Iterable[Passenger | Mapping[str, Any]], strict: bool = False
) -> tuple[list[Passenger], list[str]]:
    """
    Parse and normalise a batch of passenger records.

    Args:
        records: Passenger instances or raw mappings
        strict: Propagate the first ValidationError instead of skipping

    Returns:
        Tuple of (valid passengers in input order, rejection messages)
    """
    passengers = []
    rejected = []
    seen_ids = set()

    for position, record in enumerate(records):
        try:
            passenger = parse_passenger(record)
            if passenger.guest_id in seen_ids:
                raise ValidationError(
                    f"Duplicate guest id {passenger.guest_id}", record_id=passenger.guest_id
                )
        except ValidationError as e:
            if strict:
                raise
            message = f"Skipped passenger record #{position}: {e}"
            logger.warning("⚠️ %s", message)
            rejected.append(message)
            continue

        seen_ids.add(passenger.guest_id)
        passengers.append(passenger)

    logger.debug("Preprocessed %d passengers (%d rejected)", len(passengers), len(rejected))
    return passengers, rejected


def preprocess_vehicles(
    records: Iterable[Vehicle | Mapping[str, Any]], strict: bool = False
) -> tuple[list[Vehicle], list[str]]:
    """
    Parse and normalise a batch of vehicle records.

    Returns:
        Tuple of (valid vehicles in input order, rejection messages)
    """
    vehicles = []
    rejected = []
    seen_ids = set()

    for position, record in enumerate(records):
        try:
            vehicle = parse_vehicle(record)
            if vehicle.id in seen_ids:
                raise ValidationError(f"Duplicate vehicle id {vehicle.id}", record_id=vehicle.id)
        except ValidationError as e:
            if strict:
                raise
            message = f"Skipped vehicle record #{position}: {e}"
            logger.warning("⚠️ %s", message)
            rejected.append(message)
            continue

        seen_ids.add(vehicle.id)
        vehicles.append(vehicle)

    logger.debug("Preprocessed %d vehicles (%d rejected)", len(vehicles), len(rejected))
    return vehicles, rejected


def filter_available_vehicles(
    vehicles: Iterable[Vehicle], now: datetime, prioritize_capacity: bool = True
) -> list[Vehicle]:
    """
    Reduce the inventory to the operational pool for this run and rank it.

    A vehicle survives when its status is AVAILABLE, its capacity is positive
    and ``now`` lies within its availability window. The pool is ordered by
    capacity descending then cost ascending; with ``prioritize_capacity``
    off the keys swap. Both sorts are stable.

    Raises:
        ConfigurationError: If no vehicle survives
    """
    now = ensure_utc(now)
    pool = [
        v
        for v in vehicles
        if v.status == VehicleStatus.AVAILABLE and v.capacity > 0 and v.is_available_at(now)
    ]

    if prioritize_capacity:
        pool.sort(key=lambda v: (-v.capacity, v.cost_per_unit))
    else:
        pool.sort(key=lambda v: (v.cost_per_unit, -v.capacity))

    if not pool:
        raise ConfigurationError(f"No available vehicles found for optimization at {now.isoformat()}")

    logger.info("🚐 Vehicle pool: %d available vehicle(s)", len(pool))
    return pool
