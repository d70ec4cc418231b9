import json

import numpy as np
import pytest

from chessevo.config import EvaluationSettings, MatchSettings, TrainerConfig
from chessevo.evolution import EvolutionTrainer, load_report, save_report
from chessevo.genome import Genome
from chessevo.tournament import TournamentEvaluator


class FixedEvaluator:
    """Stands in for the tournament: fitness rises with the mean weight."""

    def __init__(self):
        self.last_failures = []
        self.calls = 0

    def evaluate(self, population):
        self.calls += 1
        means = np.array([g.weights.mean() for g in population])
        return list(means / means.max())


def make_config(tmp_path, **evolution):
    settings = {"population_size": 4, "generations": 2, "seed": 123,
                "report_path": str(tmp_path / "out" / "report.json")}
    settings.update(evolution)
    return TrainerConfig(
        evolution=settings,
        match=MatchSettings(half_move_cap=6),
        evaluation=EvaluationSettings(executor="serial"),
    )


def test_report_round_trip(tmp_path):
    r = np.random.default_rng(0)
    pop = [Genome(random=True, rng=r) for _ in range(3)]
    path = str(tmp_path / "report.json")
    save_report(path, pop, [0.25, 0.5, 1.0])

    with open(path) as f:
        data = json.load(f)
    assert len(data) == 3
    assert set(data[0]) == {"pawn", "knight", "bishop", "rook", "queen", "king", "fitness"}

    loaded = load_report(path)
    assert [fit for _, fit in loaded] == [0.25, 0.5, 1.0]
    assert all(g == orig for (g, _), orig in zip(loaded, pop))


def test_save_report_length_mismatch(tmp_path):
    with pytest.raises(ValueError):
        save_report(str(tmp_path / "r.json"), [Genome()], [0.1, 0.2])


def test_next_generation_keeps_size_and_replaces_parents(tmp_path):
    trainer = EvolutionTrainer(make_config(tmp_path), evaluator=FixedEvaluator())
    pop = trainer.initial_population()
    assert len(pop) == 4
    children = trainer.next_generation(pop, [0.1, 0.2, 0.3, 0.4])
    assert len(children) == 4
    assert all(child is not parent for child in children for parent in pop)


def test_run_writes_report_and_history(tmp_path):
    evaluator = FixedEvaluator()
    config = make_config(tmp_path)
    result = EvolutionTrainer(config, evaluator=evaluator).run()

    assert evaluator.calls == 3  # two generations plus the final evaluation
    assert [s.generation for s in result.history] == [0, 1, 2]
    assert len(result.population) == 4
    assert len(load_report(config.evolution.report_path)) == 4
    best, fit = result.best()
    assert fit == max(result.fitness)


def test_seeded_runs_are_reproducible(tmp_path):
    a = EvolutionTrainer(make_config(tmp_path / "a"), evaluator=FixedEvaluator()).run()
    b = EvolutionTrainer(make_config(tmp_path / "b"), evaluator=FixedEvaluator()).run()
    assert all(x == y for x, y in zip(a.population, b.population))


def test_seed_report_is_used_and_padded(tmp_path):
    seed_path = str(tmp_path / "seed.json")
    seeds = [Genome(weights=np.full((6, 64), 0.5)), Genome(weights=np.full((6, 64), 0.25))]
    save_report(seed_path, seeds, [1.0, 0.0])

    trainer = EvolutionTrainer(make_config(tmp_path, seed_report=seed_path), evaluator=FixedEvaluator())
    pop = trainer.initial_population()
    assert len(pop) == 4
    assert pop[0] == seeds[0] and pop[1] == seeds[1]


def test_small_real_run(tmp_path):
    config = make_config(tmp_path, population_size=3, generations=1)
    trainer = EvolutionTrainer(config, evaluator=TournamentEvaluator(config.evaluation, config.match))
    result = trainer.run()
    assert len(result.fitness) == 3
    assert all(0.0 <= f <= 1.0 for f in result.fitness)
    assert result.history[-1].failed_pairings == 0
