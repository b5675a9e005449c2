"""CLI 엔트리 포인트

사용법:
    python -m housing_abm --preset default --steps 120
    python -m housing_abm --preset-dir ./my_preset --micro-data out/transactions.csv --plot-dir out
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import numpy as np

from .config.loader import preset_path
from .core.errors import ConfigError
from .simulation.engine import SimulationEngine


class NumpyEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, (np.integer,)):
            return int(obj)
        if isinstance(obj, (np.floating,)):
            return float(obj)
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        return super().default(obj)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Housing market ABM simulation")
    parser.add_argument("--preset", type=str, default="default",
                        help="built-in preset name")
    parser.add_argument("--preset-dir", type=str, default=None,
                        help="preset directory (overrides --preset)")
    parser.add_argument("--steps", type=int, default=None,
                        help="number of monthly steps")
    parser.add_argument("--households", type=int, default=None,
                        help="target households per region")
    parser.add_argument("--seed", type=int, default=None,
                        help="random seed")
    parser.add_argument("--strict", action="store_true",
                        help="check invariants every step and stop on violation")
    parser.add_argument("--micro-data", type=str, default=None,
                        help="write transaction micro-data CSV to this path")
    parser.add_argument("--plot-dir", type=str, default=None,
                        help="save result plots into this directory")
    parser.add_argument("--log-level", type=str, default="WARNING",
                        help="logging level (DEBUG, INFO, WARNING, ERROR)")
    parser.add_argument("--quiet", action="store_true",
                        help="no progress output, print JSON summary")

    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    preset_dir = Path(args.preset_dir) if args.preset_dir else preset_path(args.preset)
    try:
        engine = SimulationEngine.from_preset(preset_dir)
    except ConfigError as e:
        print(f"Error: {e}")
        sys.exit(1)

    # CLI 인자로 오버라이드 (엔진 재구성)
    sim = engine.config.simulation
    if args.steps is not None:
        sim.num_steps = args.steps
    if args.seed is not None:
        sim.seed = args.seed
    if args.strict:
        sim.strict_invariants = True
        sim.check_invariants = True
    if args.households is not None:
        for region in engine.config.regions:
            region.target_population = args.households
    engine.reset()

    summary = engine.run(progress=not args.quiet)

    if args.micro_data:
        engine.recorder.export_transactions_csv(args.micro_data)
    if args.plot_dir:
        from .viz.plots import save_all
        save_all(engine.recorder, engine.world.get_names(), args.plot_dir)

    if args.quiet:
        print(json.dumps(summary, indent=2, ensure_ascii=False, cls=NumpyEncoder))
    return summary


if __name__ == "__main__":
    main()
