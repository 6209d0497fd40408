"""
Basic tests for optimization configuration management.

These tests validate that the configuration system works correctly with
simple, realistic configurations. Focus on core functionality rather than
edge cases.
"""

import tempfile
from pathlib import Path

import pytest
import yaml

from transport_groups.optimisation.config import (
    EngineConfig,
    OptimizationConfigManager,
    OptimizationOptions,
    RouteEstimateConfig,
    ScoringWeights,
)


class TestConfigDataClasses:
    """Test basic configuration data class creation and validation."""

    def test_options_defaults(self):
        """Test OptimizationOptions creates with the documented defaults."""
        options = OptimizationOptions()

        assert options.prioritize_capacity
        assert options.minimize_vehicles
        assert options.respect_special_requirements
        assert not options.optimize_routes
        assert options.max_travel_time == 60
        assert options.allow_partial_filling
        assert options.prioritize_group_preferences
        assert options.minimize_cost
        assert not options.maximize_comfort

        print(f"✅ OptimizationOptions defaults: max_travel_time={options.max_travel_time}")

    def test_options_validation(self):
        """Test max_travel_time range is enforced."""
        assert OptimizationOptions(max_travel_time=15).max_travel_time == 15
        assert OptimizationOptions(max_travel_time=240).max_travel_time == 240

        with pytest.raises(ValueError, match="max_travel_time"):
            OptimizationOptions(max_travel_time=10)
        with pytest.raises(ValueError, match="max_travel_time"):
            OptimizationOptions(max_travel_time=300)

        print("✅ OptimizationOptions validation works")

    def test_options_from_camel_case_mapping(self):
        """Test API-style option names map onto fields."""
        options = OptimizationOptions.from_mapping(
            {"minimizeVehicles": False, "maxTravelTime": 120, "prioritize_capacity": False}
        )
        assert not options.minimize_vehicles
        assert options.max_travel_time == 120
        assert not options.prioritize_capacity
        assert options.minimize_cost

    def test_scoring_and_route_defaults(self):
        """Test weight and estimate defaults."""
        weights = ScoringWeights()
        assert (weights.capacity_weight, weights.cost_weight, weights.comfort_weight) == (30.0, 25.0, 20.0)
        assert weights.requirement_match_weight == 25.0
        assert weights.preferred_group_size == 4

        route = RouteEstimateConfig()
        assert (route.base_minutes, route.minutes_per_passenger, route.minutes_per_stop) == (15.0, 3.0, 5.0)
        assert route.leg_distance == 2.0

        with pytest.raises(ValueError, match="leg_distance"):
            RouteEstimateConfig(leg_distance=-1)
        with pytest.raises(ValueError, match="group_id_prefix"):
            EngineConfig(group_id_prefix="")


class TestConfigManager:
    """Test OptimizationConfigManager core functionality."""

    def test_yaml_config_loading(self):
        """Test loading configuration from YAML file."""
        test_config = {
            "options": {"minimize_cost": False, "max_travel_time": 90},
            "scoring": {"cost_weight": 10},
            "compatibility": {"admission_threshold": 0.6},
            "engine": {"strict_validation": True},
            "logging": {"console_level": "DEBUG"},
        }

        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            yaml.dump(test_config, f)
            temp_path = f.name

        try:
            manager = OptimizationConfigManager(temp_path)

            assert not manager.get_options().minimize_cost
            assert manager.get_options().max_travel_time == 90
            assert manager.get_scoring_weights().cost_weight == 10
            assert manager.get_scoring_weights().capacity_weight == 30.0
            assert manager.get_compatibility_config().admission_threshold == 0.6
            assert manager.get_engine_config().strict_validation
            assert manager.get_logging_config() == {"console_level": "DEBUG"}

            print("✅ YAML config loading works")

        finally:
            Path(temp_path).unlink()

    def test_empty_yaml_means_defaults(self, tmp_path):
        """Test an empty file yields default configuration."""
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")

        manager = OptimizationConfigManager(str(config_file))
        assert manager.get_options() == OptimizationOptions()

    def test_dict_config_loading(self):
        """Test loading configuration from dictionary."""
        manager = OptimizationConfigManager(config_dict={"routing": {"leg_distance": 3.5}})

        assert manager.get_route_config().leg_distance == 3.5
        assert manager.get_metrics_thresholds().assignment_weight == 40.0
        assert manager.get_full_config() == {"routing": {"leg_distance": 3.5}}

        print("✅ Dictionary config loading works")

    def test_source_validation(self):
        """Test exactly one configuration source is required."""
        with pytest.raises(ValueError, match="Configuration is required"):
            OptimizationConfigManager()
        with pytest.raises(ValueError, match="not both"):
            OptimizationConfigManager(config_path="x.yaml", config_dict={})
        with pytest.raises(FileNotFoundError):
            OptimizationConfigManager("does/not/exist.yaml")

    def test_unknown_keys_rejected(self):
        """Test typos in sections or keys fail loudly."""
        with pytest.raises(ValueError, match="Unknown configuration section"):
            OptimizationConfigManager(config_dict={"optimisation": {}})
        with pytest.raises(ValueError, match="Unknown parameter"):
            OptimizationConfigManager(config_dict={"scoring": {"capacity_wieght": 3}})
        with pytest.raises(ValueError, match="must be a mapping"):
            OptimizationConfigManager(config_dict={"options": [1, 2]})

    def test_invalid_yaml(self, tmp_path):
        """Test malformed YAML raises a YAMLError naming the file."""
        config_file = tmp_path / "broken.yaml"
        config_file.write_text("options: [unclosed")

        with pytest.raises(yaml.YAMLError, match="broken.yaml"):
            OptimizationConfigManager(str(config_file))

    def test_to_dict_round_trips(self):
        """Test the resolved configuration can rebuild an equal manager."""
        manager = OptimizationConfigManager(config_dict={"options": {"optimize_routes": True}})
        rebuilt = OptimizationConfigManager(config_dict=manager.to_dict())

        assert rebuilt.get_options() == manager.get_options()
        assert rebuilt.get_classification_config() == manager.get_classification_config()

    def test_print_summary(self, capsys):
        """Test the summary prints the key settings."""
        OptimizationConfigManager.from_defaults().print_summary()
        out = capsys.readouterr().out

        assert "TRANSPORT OPTIMIZATION CONFIGURATION SUMMARY" in out
        assert "Max travel time: 60 minutes" in out
        assert "Admission threshold: 0.7" in out
