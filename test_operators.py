import numpy as np
import pytest

from chessevo.genome import Genome
from chessevo.operators import MUTATION_STEP, breed, cross, mutate, quadrant_mask, select_parent


def rng(seed=0):
    return np.random.default_rng(seed)


def test_mutate_zero_frequency_is_identity():
    g = Genome(random=True, rng=rng(1))
    out = mutate(g, 0.0, rng(2))
    assert out == g
    assert out is not g


def test_mutate_full_frequency_changes_every_gene_within_bounds():
    g = Genome(random=True, rng=rng(1))
    out = mutate(g, 1.0, rng(2))
    diff = out.weights - g.weights
    assert np.all(diff != 0)
    assert np.all(np.abs(diff) < MUTATION_STEP + 1e-12)


def test_mutate_partial_frequency_bounds_and_source_untouched():
    g = Genome(random=True, rng=rng(3))
    before = g.weights.copy()
    out = mutate(g, 0.2, rng(4))
    diff = out.weights - g.weights
    changed = diff != 0
    assert 0 < changed.sum() < diff.size
    assert np.all(np.abs(diff[changed]) < MUTATION_STEP + 1e-12)
    assert np.array_equal(g.weights, before)


def test_quadrant_mask_is_inclusive_rectangle():
    # top-right of pivot file 3 (d), rank 5
    mask = quadrant_mask(1, 3, 5)
    for file in range(8):
        for rank in range(1, 9):
            assert mask[file * 8 + rank - 1] == (file >= 3 and rank >= 5)
    # bottom-left
    mask = quadrant_mask(3, 3, 5)
    for file in range(8):
        for rank in range(1, 9):
            assert mask[file * 8 + rank - 1] == (file <= 3 and rank <= 5)


def _is_quadrant(region):
    """True if the set of (file, rank) squares is a rectangle touching a corner."""
    if not region:
        return False
    files = {f for f, _ in region}
    ranks = {r for _, r in region}
    lo_f, hi_f, lo_r, hi_r = min(files), max(files), min(ranks), max(ranks)
    full = {(f, r) for f in range(lo_f, hi_f + 1) for r in range(lo_r, hi_r + 1)}
    return full == region and (lo_f == 0 or hi_f == 7) and (lo_r == 1 or hi_r == 8)


def test_cross_takes_quadrant_from_a_and_rest_from_b():
    a = Genome(weights=np.ones((6, 64)))
    b = Genome(weights=np.full((6, 64), 2.0))
    for seed in range(20):
        child = cross(a, b, rng(seed))
        assert np.all((child.weights == 1.0) | (child.weights == 2.0))
        for row in range(6):
            region = {(idx // 8, idx % 8 + 1) for idx in range(64) if child.weights[row, idx] == 1.0}
            assert _is_quadrant(region)


def test_cross_genes_come_from_a_parent():
    a = Genome(random=True, rng=rng(10))
    b = Genome(random=True, rng=rng(11))
    child = cross(a, b, rng(12))
    assert np.all((child.weights == a.weights) | (child.weights == b.weights))


def test_select_parent_is_fitness_proportional():
    pop = [Genome(), Genome(weights=np.ones((6, 64)))]
    r = rng(0)
    for _ in range(20):
        assert select_parent(pop, [0.0, 1.0], r) is pop[1]


def test_select_parent_all_zero_fitness_falls_back_to_uniform():
    pop = [Genome(weights=np.full((6, 64), float(k))) for k in range(4)]
    r = rng(0)
    picks = {id(select_parent(pop, [0.0] * 4, r)) for _ in range(200)}
    assert len(picks) == 4


def test_select_parent_length_mismatch():
    with pytest.raises(ValueError):
        select_parent([Genome()], [0.5, 0.5])


def test_breed_returns_new_genome():
    pop = [Genome(random=True, rng=rng(k)) for k in range(3)]
    child = breed(pop, [0.2, 0.3, 0.5], 0.2, rng(9))
    assert isinstance(child, Genome)
    assert all(child is not p for p in pop)
