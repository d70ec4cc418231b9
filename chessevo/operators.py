"""
Evolution operators: mutation, quadrant crossover and fitness-proportional
parent selection. All operators are pure with respect to their inputs.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np

from .genome import Genome
from .types import BOARD_FILES, BOARD_RANKS, PIECE_TYPES

logger = logging.getLogger(__name__)

MUTATION_STEP: float = 0.1

# File and rank of every gene column (column = file * 8 + rank - 1)
_FILES = np.repeat(np.arange(BOARD_FILES), BOARD_RANKS)
_RANKS = np.tile(np.arange(1, BOARD_RANKS + 1), BOARD_FILES)

_rng: np.random.Generator = np.random.default_rng()


def get_rng() -> np.random.Generator:
    """Module level generator used when no explicit generator is given."""
    return _rng


def seed_rng(seed: Optional[int]) -> np.random.Generator:
    global _rng
    _rng = np.random.default_rng(seed)
    return _rng


def mutate(source: Genome, frequency: float, rng: Optional[np.random.Generator] = None) -> Genome:
    """Copy of ``source`` where each gene, with probability ``frequency``,
    is shifted by a uniform delta in [-0.1, 0.1)."""
    rng = rng or _rng
    shape = source.weights.shape
    mask = rng.random(shape) < frequency
    delta = rng.random(shape) * (2 * MUTATION_STEP) - MUTATION_STEP
    return Genome(weights=source.weights + np.where(mask, delta, 0.0))


def quadrant_mask(quadrant: int, pivot_file: int, pivot_rank: int) -> np.ndarray:
    """Boolean gene mask for one quadrant around a pivot square, boundary inclusive.

    Quadrants: 1 top-right, 2 top-left, 3 bottom-left, 4 bottom-right.
    """
    top = quadrant in (1, 2)
    right = quadrant in (1, 4)
    in_ranks = _RANKS >= pivot_rank if top else _RANKS <= pivot_rank
    in_files = _FILES >= pivot_file if right else _FILES <= pivot_file
    return in_ranks & in_files


def cross(a: Genome, b: Genome, rng: Optional[np.random.Generator] = None) -> Genome:
    """Child taking ``a``'s genes inside a random quadrant and ``b``'s outside.

    Quadrant and pivot are drawn independently per piece type, so spatially
    coherent blocks of a table are inherited together.
    """
    rng = rng or _rng
    out = np.empty_like(a.weights)
    for row in range(len(PIECE_TYPES)):
        quadrant = int(rng.integers(1, 5))
        pivot_file = int(rng.integers(0, BOARD_FILES))
        pivot_rank = int(rng.integers(1, BOARD_RANKS + 1))
        mask = quadrant_mask(quadrant, pivot_file, pivot_rank)
        out[row] = np.where(mask, a.weights[row], b.weights[row])
    return Genome(weights=out)


def select_parent(population: Sequence[Genome], fitness: Sequence[float],
                  rng: Optional[np.random.Generator] = None) -> Genome:
    """Sample one individual with probability proportional to its fitness."""
    rng = rng or _rng
    if len(population) != len(fitness):
        raise ValueError("population and fitness must have the same length")
    weights = np.asarray(fitness, dtype=np.float64)
    total = weights.sum()
    if total <= 0:
        logger.warning("All fitness values are zero; selecting parent uniformly")
        idx = int(rng.integers(0, len(population)))
    else:
        idx = int(rng.choice(len(population), p=weights / total))
    return population[idx]


def breed(population: Sequence[Genome], fitness: Sequence[float], frequency: float,
          rng: Optional[np.random.Generator] = None) -> Genome:
    """One child of two fitness-sampled parents."""
    rng = rng or _rng
    parent_a = select_parent(population, fitness, rng)
    parent_b = select_parent(population, fitness, rng)
    return mutate(cross(parent_a, parent_b, rng), frequency, rng)


__all__ = [
    "MUTATION_STEP",
    "get_rng",
    "seed_rng",
    "mutate",
    "quadrant_mask",
    "cross",
    "select_parent",
    "breed",
]
