"""
Storage contract between the optimization engine and the event platform.

The engine itself never touches persistence. An event platform implements
``BaseTransportStore`` to hand the engine the vehicles and passengers of an
event and to receive the finished groups; ``optimize_event`` drives one
load-optimize-persist cycle against it.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from .models import Passenger, TransportGroup, Vehicle

logger = logging.getLogger(__name__)


class BaseTransportStore(ABC):
    """Base class for event transport data sources and sinks."""

    @abstractmethod
    def load_available_vehicles(self, event_id: str) -> Sequence[Vehicle | Mapping[str, Any]]:
        """Vehicles registered for the event (filtered again by the engine)."""
        pass

    @abstractmethod
    def load_candidate_passengers(self, event_id: str) -> Sequence[Passenger | Mapping[str, Any]]:
        """Guests of the event who need transport."""
        pass

    @abstractmethod
    def persist_groups(self, event_id: str, groups: Sequence[TransportGroup]):
        """Store the groups produced by a run."""
        pass


class InMemoryTransportStore(BaseTransportStore):
    """
    Dictionary-backed store.

    Persisting groups for an event replaces any groups stored by a previous
    run for the same event.
    """

    def __init__(self):
        self.vehicles: dict[str, list] = {}
        self.passengers: dict[str, list] = {}
        self.groups: dict[str, list[TransportGroup]] = {}

    def add_vehicles(self, event_id: str, vehicles: Iterable[Vehicle | Mapping[str, Any]]):
        self.vehicles.setdefault(event_id, []).extend(vehicles)

    def add_passengers(self, event_id: str, passengers: Iterable[Passenger | Mapping[str, Any]]):
        self.passengers.setdefault(event_id, []).extend(passengers)

    def load_available_vehicles(self, event_id: str) -> list:
        return list(self.vehicles.get(event_id, []))

    def load_candidate_passengers(self, event_id: str) -> list:
        return list(self.passengers.get(event_id, []))

    def persist_groups(self, event_id: str, groups: Sequence[TransportGroup]):
        self.groups[event_id] = list(groups)
        logger.info("💾 Stored %d group(s) for event %s", len(groups), event_id)

    def get_groups(self, event_id: str) -> list[TransportGroup]:
        return list(self.groups.get(event_id, []))
