"""
Requirement classification and vehicle capability matching.

Passengers are partitioned into need-based buckets that the group builder
processes in a fixed order, so that scarce vehicles (accessible vans, vans
with child seats) go to the riders who need them before the unconstrained
passengers are placed.

Precedence: mobility > child > elderly > regular.
"""

import logging
from collections.abc import Sequence
from enum import Enum

import numpy as np

from ..models import Passenger, Vehicle, VehicleType
from .config import ClassificationConfig
from .utils import feature_matches, has_any_tag, normalise_tag, unique_in_order

logger = logging.getLogger(__name__)


class RequirementCategory(str, Enum):
    MOBILITY = "mobility"
    CHILD = "child"
    ELDERLY = "elderly"
    REGULAR = "regular"


# Categories a requirement tag can fall into, highest precedence first
CATEGORY_PRECEDENCE = (
    RequirementCategory.MOBILITY,
    RequirementCategory.CHILD,
    RequirementCategory.ELDERLY,
)

# Order in which the group builder processes buckets
BUCKET_ORDER = CATEGORY_PRECEDENCE + (RequirementCategory.REGULAR,)

ACCESSIBILITY_FEATURES = ("wheelchair_accessible", "universal_accessibility", "ramp", "lift")
CHILD_SEAT_FEATURES = ("child_seat", "child_seats", "booster_seat", "booster_seats")
COMFORT_FEATURES = ("comfortable_seating", "comfort_seating", "extra_legroom")

CHILD_FRIENDLY_TYPES = (VehicleType.VAN, VehicleType.BUS)
COMFORT_TYPES = (VehicleType.LIMOUSINE, VehicleType.VAN)


class ConstraintClassifier:
    """
    Sort passengers into requirement buckets.

    A tag equal to a category name is classified directly. Any other tag is
    classified by keyword: the first category (in precedence order) with a
    keyword occurring inside the normalised tag wins.
    """

    def __init__(self, config: ClassificationConfig | None = None):
        self.config = config or ClassificationConfig()
        self._keywords = {
            RequirementCategory.MOBILITY: [normalise_tag(k) for k in self.config.mobility_keywords],
            RequirementCategory.CHILD: [normalise_tag(k) for k in self.config.child_keywords],
            RequirementCategory.ELDERLY: [normalise_tag(k) for k in self.config.elderly_keywords],
        }

    def category_for_tag(self, tag: str) -> RequirementCategory | None:
        """Category a single requirement tag belongs to, or None."""
        normalised = normalise_tag(tag)
        for category in CATEGORY_PRECEDENCE:
            if normalised == category.value:
                return category
        for category in CATEGORY_PRECEDENCE:
            if any(keyword in normalised for keyword in self._keywords[category]):
                return category
        return None

    def categories_for(self, passenger: Passenger) -> tuple[RequirementCategory, ...]:
        """Every category the passenger's tags match, in precedence order."""
        found = {self.category_for_tag(tag) for tag in passenger.special_requirements}
        return tuple(category for category in CATEGORY_PRECEDENCE if category in found)

    def classify(self, passenger: Passenger) -> RequirementCategory:
        """Bucket for a passenger: the highest-precedence matching category."""
        categories = self.categories_for(passenger)
        return categories[0] if categories else RequirementCategory.REGULAR

    def partition(self, passengers: Sequence[Passenger]) -> dict[RequirementCategory, list[int]]:
        """
        Partition passenger positions into buckets.

        Returns:
            Mapping of every category in BUCKET_ORDER to the positions of its
            passengers, in input order
        """
        buckets: dict[RequirementCategory, list[int]] = {category: [] for category in BUCKET_ORDER}
        for index, passenger in enumerate(passengers):
            buckets[self.classify(passenger)].append(index)

        logger.debug(
            "Buckets: %s", {category.value: len(members) for category, members in buckets.items()}
        )
        return buckets


class VehicleCapabilityMatcher:
    """Decide which vehicles can serve which requirement categories."""

    def __init__(self, classifier: ConstraintClassifier | None = None):
        self.classifier = classifier or ConstraintClassifier()

    def supports(self, vehicle: Vehicle, category: RequirementCategory) -> bool:
        """Whether the vehicle provides the capability a category needs."""
        if category == RequirementCategory.MOBILITY:
            return vehicle.accessible or has_any_tag(vehicle.features, ACCESSIBILITY_FEATURES)
        if category == RequirementCategory.CHILD:
            return vehicle.type in CHILD_FRIENDLY_TYPES or has_any_tag(vehicle.features, CHILD_SEAT_FEATURES)
        if category == RequirementCategory.ELDERLY:
            return vehicle.type in COMFORT_TYPES or has_any_tag(vehicle.features, COMFORT_FEATURES)
        return True

    def can_fit(self, passenger: Passenger, vehicle: Vehicle) -> bool:
        """A passenger fits when the vehicle supports every category their tags match."""
        return all(self.supports(vehicle, category) for category in self.classifier.categories_for(passenger))

    def candidate_indices(
        self,
        vehicles: Sequence[Vehicle],
        category: RequirementCategory,
        vehicle_used: np.ndarray | None = None,
    ) -> list[int]:
        """
        Positions of unused vehicles supporting ``category``, in pool order.

        Args:
            vehicles: Ranked vehicle pool
            category: Bucket being processed
            vehicle_used: Boolean array of vehicles already claimed this run
        """
        return [
            index
            for index, vehicle in enumerate(vehicles)
            if (vehicle_used is None or not vehicle_used[index]) and self.supports(vehicle, category)
        ]

    def requirement_covered(self, requirement: str, vehicle: Vehicle) -> bool:
        """
        A requirement is covered when a vehicle feature textually contains it,
        or when it is a mobility requirement and the vehicle is accessible.
        """
        if feature_matches(requirement, vehicle.features):
            return True
        return vehicle.accessible and self.classifier.category_for_tag(requirement) == RequirementCategory.MOBILITY

    def requirements_covered(self, passengers: Sequence[Passenger], vehicle: Vehicle) -> tuple[str, ...]:
        """Requirement tags of ``passengers`` the vehicle actually covers, first-seen order."""
        requested = unique_in_order(tag for p in passengers for tag in p.special_requirements)
        return tuple(tag for tag in requested if self.requirement_covered(tag, vehicle))
