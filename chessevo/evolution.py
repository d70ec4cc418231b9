"""
Generational evolution loop.

Each generation is scored by a round-robin tournament, then replaced by
children of fitness-sampled parents (crossover followed by mutation). The
final population and its fitness are written once, as a JSON report.
"""
from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .config import TrainerConfig, get_config
from .genome import Genome
from .operators import breed, seed_rng
from .tournament import TournamentEvaluator
from .types import FitnessVector, ReportEntry

logger = logging.getLogger(__name__)


@dataclass
class GenerationStats:
    """Diagnostics recorded for one generation."""
    generation: int
    max_fitness: float
    mean_fitness: float
    failed_pairings: int = 0
    elapsed: float = 0.0


@dataclass
class TrainingResult:
    population: List[Genome]
    fitness: FitnessVector
    history: List[GenerationStats] = field(default_factory=list)
    report_path: Optional[str] = None

    def best(self) -> Tuple[Genome, float]:
        idx = int(np.argmax(self.fitness))
        return self.population[idx], self.fitness[idx]


# ============================
# Report persistence
# ============================
def save_report(path: str, population: List[Genome], fitness: FitnessVector) -> None:
    """Write each individual's genome annotated with its fitness."""
    if len(population) != len(fitness):
        raise ValueError("population and fitness must have the same length")
    report: List[ReportEntry] = []
    for genome, fit in zip(population, fitness):
        entry: ReportEntry = dict(genome.serialize())
        entry["fitness"] = float(fit)
        report.append(entry)

    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w") as f:
        json.dump(report, f)


def load_report(path: str) -> List[Tuple[Genome, float]]:
    """Read a report written by ``save_report``."""
    with open(path, "r") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"report {path} must contain a JSON array")
    return [(Genome.deserialize(entry), float(entry.get("fitness", 0.0))) for entry in data]


# ============================
# Trainer
# ============================
class EvolutionTrainer:
    """Drives generations of tournament evaluation and breeding."""

    def __init__(self, config: Optional[TrainerConfig] = None,
                 evaluator: Optional[TournamentEvaluator] = None,
                 rng: Optional[np.random.Generator] = None) -> None:
        self.config: TrainerConfig = config or get_config()
        self.evaluator: TournamentEvaluator = evaluator or TournamentEvaluator(
            self.config.evaluation, self.config.match)
        self.rng: np.random.Generator = rng or seed_rng(self.config.evolution.seed)
        self.history: List[GenerationStats] = []

    def initial_population(self) -> List[Genome]:
        """Random genomes, or the genomes of a previous report when one is configured."""
        size = self.config.evolution.population_size
        seed_report = self.config.evolution.seed_report
        if not seed_report:
            return [Genome(random=True, rng=self.rng) for _ in range(size)]

        genomes = [g for g, _ in load_report(seed_report)]
        logger.info("Seeding population from %s (%d individuals)", seed_report, len(genomes))
        if len(genomes) != size:
            logger.warning("Seed report has %d individuals, population size is %d", len(genomes), size)
        genomes = genomes[:size]
        while len(genomes) < size:
            genomes.append(Genome(random=True, rng=self.rng))
        return genomes

    def next_generation(self, population: List[Genome], fitness: FitnessVector) -> List[Genome]:
        """Same-size population of children; parents do not survive."""
        freq = self.config.evolution.mutation_frequency
        return [breed(population, fitness, freq, self.rng) for _ in range(len(population))]

    def _evaluate(self, generation: int, population: List[Genome]) -> FitnessVector:
        start = time.time()
        fitness = self.evaluator.evaluate(population)
        stats = GenerationStats(
            generation=generation,
            max_fitness=max(fitness),
            mean_fitness=sum(fitness) / len(fitness),
            failed_pairings=len(self.evaluator.last_failures),
            elapsed=time.time() - start,
        )
        self.history.append(stats)
        return fitness

    def run(self) -> TrainingResult:
        """Evolve for the configured number of generations and write the report."""
        evo = self.config.evolution
        logger.info("Starting evolution: population %d, %d generations, mutation frequency %.3f",
                    evo.population_size, evo.generations, evo.mutation_frequency)
        population = self.initial_population()

        for gen in range(evo.generations):
            fitness = self._evaluate(gen, population)
            stats = self.history[-1]
            logger.info("Generation %d/%d (%.1f%% complete): max fitness %.4f, mean %.4f, %.1fs",
                        gen + 1, evo.generations, 100.0 * gen / evo.generations,
                        stats.max_fitness, stats.mean_fitness, stats.elapsed)
            population = self.next_generation(population, fitness)

        fitness = self._evaluate(evo.generations, population)
        save_report(evo.report_path, population, fitness)
        logger.info("Final max fitness %.4f; report written to %s", max(fitness), evo.report_path)
        return TrainingResult(population, fitness, list(self.history), evo.report_path)


__all__ = [
    "GenerationStats",
    "TrainingResult",
    "save_report",
    "load_report",
    "EvolutionTrainer",
]
