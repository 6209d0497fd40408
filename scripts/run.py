# Run script for a full optimization from a run config
# Run from repo root:  python3 scripts/run.py --config configs/config_example.yaml
# Replace config_example with your config name

import argparse
import logging
import shutil
import sys
from pathlib import Path

import yaml

# put src on path
project_root = Path(__file__).resolve().parents[1]
src = project_root / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))


from transport_groups.export import ResultExportManager
from transport_groups.logging import setup_logger_from_config
from transport_groups.optimisation.config.config_manager import OptimizationConfigManager
from transport_groups.optimisation.preprocessing import parse_datetime
from transport_groups.optimisation.runners.optimizer import TransportGroupOptimizer

# Sections of the run config consumed here rather than by the optimizer
RUN_SECTIONS = ("input", "output")


def load_config(path: str) -> dict:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_event_data(cfg: dict) -> dict:
    inp = cfg.get("input", {})
    data_path = inp.get("data_path")
    if not data_path:
        raise ValueError("input.data_path is required")
    with open(data_path) as f:
        return yaml.safe_load(f) or {}


def export_results(result, cfg: dict) -> None:
    logger = logging.getLogger("transport_groups.scripts.run")

    out_cfg = cfg.get("output", {})
    if not out_cfg.get("save_results", False):
        return

    out_dir = Path(out_cfg.get("results_dir", "results"))
    out_dir.mkdir(parents=True, exist_ok=True)
    prefix = out_cfg.get("result_prefix", "transport_groups")

    exporter = ResultExportManager(result)
    written = [
        exporter.export_json(str(out_dir / f"{prefix}.json")),
        exporter.export_assignments_csv(str(out_dir / f"{prefix}_assignments.csv")),
        exporter.export_group_summary_csv(str(out_dir / f"{prefix}_groups.csv")),
    ]

    logger.info("Export completed. Files written:")
    for path in written:
        logger.info("  %s", path)


def main(config_path: str):
    # 1. Load config and set up logging
    cfg = load_config(config_path)
    setup_logger_from_config(cfg.get("logging", {}))
    logger = logging.getLogger("transport_groups.scripts.run")
    logger.info("🚀 Starting transport group optimization run")
    logger.info("📋 Config file:\n%s", yaml.dump(cfg, sort_keys=False, default_flow_style=False))

    # Save config to output directory (copy original file)
    out_cfg = cfg.get("output", {})
    if out_cfg.get("save_results", False):
        out_dir = Path(out_cfg.get("results_dir", "results"))
        out_dir.mkdir(parents=True, exist_ok=True)
        cfg_dest = out_dir / "config.yaml"
        shutil.copy2(config_path, cfg_dest)
        logger.info(f"💾 Saved config to {cfg_dest}")

    # 2. Load event passengers and vehicles
    data = load_event_data(cfg)

    # 3. Run optimization
    cfg_manager = OptimizationConfigManager(
        config_dict={k: v for k, v in cfg.items() if k not in RUN_SECTIONS}
    )
    cfg_manager.print_summary()

    now = cfg.get("input", {}).get("now")
    optimizer = TransportGroupOptimizer(cfg_manager)
    result = optimizer.optimize(
        data.get("passengers", []),
        data.get("vehicles", []),
        now=parse_datetime(now, "now") if now else None,
    )
    for warning in result.warnings:
        logger.warning("⚠️ %s", warning)

    # 4. Export results to file
    export_results(result, cfg)

    logger.info("✅ Optimization complete!")


if __name__ == "__main__":
    p = argparse.ArgumentParser(description="Run transport_groups optimization from config")
    p.add_argument("--config", "-c", default="configs/config_example.yaml", help="YAML config path")
    args = p.parse_args()
    main(args.config)
