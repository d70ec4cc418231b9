from __future__ import annotations

import argparse
from typing import List, Optional

from chessevo.config import TrainerConfig, load_config_from_file, get_config, setup_logging
from chessevo.evolution import EvolutionTrainer


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Evolve chess piece-square tables by self-play tournaments")
    ap.add_argument("--config", help="JSON configuration file")
    ap.add_argument("--population", type=int, help="Population size")
    ap.add_argument("--generations", type=int, help="Number of generations")
    ap.add_argument("--mutation-frequency", type=float, help="Per-gene mutation probability")
    ap.add_argument("--half-move-cap", type=int, help="Half-moves before the material tiebreak")
    ap.add_argument("--executor", choices=["process", "thread", "serial"], help="How pairings are run")
    ap.add_argument("--workers", type=int, help="Number of parallel workers")
    ap.add_argument("--seed", type=int, help="Seed for the evolution RNG")
    ap.add_argument("--report", help="Report output path")
    ap.add_argument("--seed-report", help="Seed the initial population from a previous report")
    ap.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    return ap.parse_args(argv)


def build_config(args: argparse.Namespace) -> TrainerConfig:
    """Environment/file configuration overridden by command line flags."""
    config = load_config_from_file(args.config) if args.config else get_config()
    overrides = {
        "evolution": {
            "population_size": args.population,
            "generations": args.generations,
            "mutation_frequency": args.mutation_frequency,
            "seed": args.seed,
            "report_path": args.report,
            "seed_report": args.seed_report,
        },
        "match": {"half_move_cap": args.half_move_cap},
        "evaluation": {"executor": args.executor, "max_workers": args.workers},
        "logging": {"log_level": args.log_level},
    }
    config.update_from_dict({
        section: {k: v for k, v in values.items() if v is not None}
        for section, values in overrides.items()
    })
    return config


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    config = build_config(args)
    setup_logging(config.logging)

    trainer = EvolutionTrainer(config)
    trainer.run()


if __name__ == "__main__":
    main()
