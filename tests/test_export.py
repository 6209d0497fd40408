"""
Tests for result export to JSON, pandas and CSV.
"""

import csv
import json

import pandas as pd
import pytest

from transport_groups.export import ASSIGNMENT_COLUMNS, ResultExportManager, result_to_dict
from transport_groups.optimisation.runners import optimize_transport_groups


@pytest.fixture
def partial_result(make_passenger, make_vehicle, now):
    """Four riders, one of whom needs a wheelchair and cannot be placed."""
    passengers = [
        make_passenger("w1", special_requirements=["wheelchair"], arrival_time=now),
        make_passenger("r1"),
        make_passenger("r2"),
        make_passenger("r3"),
    ]
    return optimize_transport_groups(passengers, [make_vehicle("v1", capacity=4, cost_per_unit=1.0)], now=now)


class TestResultSerialization:
    """Test the plain dict form of a result."""

    def test_result_to_dict_is_json_compatible(self, partial_result):
        """Test enums and datetimes serialize to strings."""
        data = result_to_dict(partial_result)
        encoded = json.dumps(data)

        assert json.loads(encoded) == data
        group = data["groups"][0]
        assert group["passenger_ids"] == ["r1", "r2", "r3"]
        assert group["route"][0]["stop_type"] == "pickup"
        assert data["unassigned_passengers"][0]["arrival_time"] == "2025-06-01T10:00:00+00:00"
        assert data["metrics"]["unassigned_count"] == 1


class TestResultExportManager:
    """Test file exports."""

    def test_export_json(self, partial_result, tmp_path):
        """Test the JSON document includes optional metadata."""
        exporter = ResultExportManager(partial_result)
        path = exporter.export_json(str(tmp_path / "out" / "result.json"), metadata={"event_id": "gala"})

        with open(path) as f:
            data = json.load(f)
        assert data["metadata"] == {"event_id": "gala"}
        assert len(data["groups"]) == 1

    def test_assignments_frame(self, partial_result):
        """Test one row per passenger including the unassigned."""
        frame = ResultExportManager(partial_result).assignments_frame()

        assert isinstance(frame, pd.DataFrame)
        assert list(frame.columns) == ASSIGNMENT_COLUMNS
        assert len(frame) == 4
        assert frame["assigned"].sum() == 3
        unassigned = frame[~frame["assigned"]].iloc[0]
        assert unassigned["guest_id"] == "w1"
        assert unassigned["special_requirements"] == "wheelchair"

    def test_export_csvs(self, partial_result, tmp_path):
        """Test assignment and group summary CSV files."""
        exporter = ResultExportManager(partial_result)

        assignments = pd.read_csv(exporter.export_assignments_csv(str(tmp_path / "assignments.csv")))
        assert len(assignments) == 4

        with open(exporter.export_group_summary_csv(str(tmp_path / "groups.csv")), newline="") as f:
            rows = list(csv.DictReader(f))
        assert len(rows) == 1
        assert rows[0]["vehicle_id"] == "v1"
        assert rows[0]["passengers"] == "3"
        assert float(rows[0]["capacity_utilization"]) == 75.0
