"""Optimisation utilities"""

from .tags import feature_matches, has_any_tag, location_key, normalise_tag, unique_in_order

__all__ = [
    "feature_matches",
    "has_any_tag",
    "location_key",
    "normalise_tag",
    "unique_in_order",
]
