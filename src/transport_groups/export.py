"""
Export of optimization results to JSON, CSV and pandas.

The serialized form is plain JSON-compatible data (ISO-8601 timestamps, enum
values as strings), so two runs over the same input serialize identically.
"""

import csv
import json
import logging
from dataclasses import asdict
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

import pandas as pd

from .models import OptimizationResult, Passenger, TransportGroup

logger = logging.getLogger(__name__)

ASSIGNMENT_COLUMNS = [
    "group_id",
    "vehicle_id",
    "vehicle_name",
    "guest_id",
    "guest_name",
    "pickup_location",
    "dropoff_location",
    "priority",
    "special_requirements",
    "assigned",
]


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def passenger_to_dict(passenger: Passenger) -> dict[str, Any]:
    return _jsonable(asdict(passenger))


def group_to_dict(group: TransportGroup) -> dict[str, Any]:
    data = _jsonable(asdict(group))
    data["passenger_ids"] = list(group.passenger_ids)
    return data


def result_to_dict(result: OptimizationResult) -> dict[str, Any]:
    """Plain, JSON-compatible representation of a result."""
    return {
        "groups": [group_to_dict(g) for g in result.groups],
        "unassigned_passengers": [passenger_to_dict(p) for p in result.unassigned_passengers],
        "metrics": _jsonable(asdict(result.metrics)),
        "warnings": list(result.warnings),
        "recommendations": list(result.recommendations),
    }


class ResultExportManager:
    """
    Coordinates export of an optimization result.

    Supports:
    - full result -> JSON document
    - per-passenger assignments -> pandas DataFrame / CSV
    - per-group summary -> CSV
    """

    def __init__(self, result: OptimizationResult):
        self.result = result

    def to_dict(self) -> dict[str, Any]:
        return result_to_dict(self.result)

    def export_json(self, output_path: str, metadata: dict[str, Any] | None = None) -> str:
        """
        Write the result as a JSON document.

        Args:
            output_path: Destination file; parent directories are created
            metadata: Optional extra fields stored under ``metadata``

        Returns:
            Absolute path of the written file
        """
        export_data = self.to_dict()
        if metadata:
            export_data["metadata"] = _jsonable(metadata)

        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(output_file, "w", encoding="utf-8") as f:
                json.dump(export_data, f, indent=2)
        except OSError as e:
            raise OSError(f"Failed to write result file {output_file}: {e}") from e

        logger.info("✅ Result JSON written: %s", output_file)
        return str(output_file.absolute())

    def assignments_frame(self) -> pd.DataFrame:
        """One row per passenger; unassigned passengers have no group or vehicle."""
        rows = []
        for group in self.result.groups:
            for passenger in group.passengers:
                rows.append(self._assignment_row(passenger, group))
        for passenger in self.result.unassigned_passengers:
            rows.append(self._assignment_row(passenger, None))
        return pd.DataFrame(rows, columns=ASSIGNMENT_COLUMNS)

    @staticmethod
    def _assignment_row(passenger: Passenger, group: TransportGroup | None) -> dict[str, Any]:
        return {
            "group_id": group.id if group else None,
            "vehicle_id": group.vehicle_id if group else None,
            "vehicle_name": group.vehicle_name if group else None,
            "guest_id": passenger.guest_id,
            "guest_name": passenger.guest_name,
            "pickup_location": passenger.pickup_location,
            "dropoff_location": passenger.dropoff_location,
            "priority": passenger.priority,
            "special_requirements": ";".join(passenger.special_requirements),
            "assigned": group is not None,
        }

    def export_assignments_csv(self, output_path: str) -> str:
        """Write the per-passenger assignment table as CSV."""
        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        self.assignments_frame().to_csv(output_file, index=False)
        logger.info("✅ Assignments CSV written: %s", output_file)
        return str(output_file.absolute())

    def export_group_summary_csv(self, output_path: str) -> str:
        """Write a CSV summary with one row per group."""
        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        fieldnames = [
            "group_id",
            "vehicle_id",
            "passengers",
            "capacity",
            "capacity_utilization",
            "estimated_duration",
            "estimated_cost",
        ]
        with open(output_file, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            for group in self.result.groups:
                writer.writerow(
                    {
                        "group_id": group.id,
                        "vehicle_id": group.vehicle_id,
                        "passengers": group.occupancy,
                        "capacity": group.capacity,
                        "capacity_utilization": round(group.capacity_utilization, 2),
                        "estimated_duration": group.estimated_duration,
                        "estimated_cost": round(group.estimated_cost, 2),
                    }
                )
        logger.info("✅ Group summary CSV written: %s", output_file)
        return str(output_file.absolute())
