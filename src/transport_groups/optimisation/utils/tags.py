"""
Helpers for comparing free-text requirement and feature tags.

Tags arrive from guest records and vehicle inventories in whatever spelling
the data entry used ("Wheelchair", "child-seat", "quiet environment").
Every comparison in the engine goes through ``normalise_tag`` so that these
spellings line up.
"""

from collections.abc import Iterable, Sequence


def normalise_tag(tag: str) -> str:
    """Lower-case a tag and collapse spaces/hyphens to underscores."""
    return "_".join(tag.strip().lower().replace("-", " ").split())


def unique_in_order(values: Iterable[str]) -> tuple[str, ...]:
    """Drop duplicates while keeping first-seen order."""
    seen = set()
    ordered = []
    for value in values:
        if value not in seen:
            seen.add(value)
            ordered.append(value)
    return tuple(ordered)


def feature_matches(requirement: str, features: Sequence[str]) -> bool:
    """
    Check whether a requirement is textually covered by any vehicle feature.

    A feature covers a requirement when the normalised requirement is a
    substring of the normalised feature, so ``child_seat`` is covered by
    ``child_seats`` and ``wheelchair`` by ``wheelchair_accessible``.
    """
    needle = normalise_tag(requirement)
    if not needle:
        return False
    return any(needle in normalise_tag(feature) for feature in features)


def has_any_tag(tags: Iterable[str], wanted: Iterable[str]) -> bool:
    """True if any normalised tag is in the normalised ``wanted`` set."""
    wanted_set = {normalise_tag(w) for w in wanted}
    return any(normalise_tag(tag) in wanted_set for tag in tags)


def location_key(location: str | None) -> str:
    """Comparison key for free-text locations (case and spacing insensitive)."""
    if not location:
        return ""
    return " ".join(location.split()).casefold()
