"""
Round-robin tournament evaluator.

Every unordered pair of individuals is one unit of work run on a bounded
worker pool. Units return a ``PairingOutcome`` and the driver merges them
in its own thread, so no counters are shared between workers.
"""
from __future__ import annotations

import logging
from concurrent.futures import (
    BrokenExecutor,
    Executor,
    Future,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    as_completed,
)
from typing import Dict, List, Optional, Sequence

from .config import EvaluationSettings, MatchSettings
from .engine import new_game
from .errors import ConfigurationError, DispatchError
from .genome import Genome
from .match import GameFactory, MatchFn, play_match, play_pairing
from .types import FitnessVector, Pairing, PairingOutcome

logger = logging.getLogger(__name__)


def pairings(n: int, reverse: bool = False) -> List[Pairing]:
    """All (i, j) with i < j, in dispatch order."""
    out = [(i, j) for i in range(n) for j in range(i + 1, n)]
    if reverse:
        out.reverse()
    return out


class TournamentEvaluator:
    """Computes a fitness vector by playing every pairing in a population."""

    def __init__(self, settings: Optional[EvaluationSettings] = None,
                 match_settings: Optional[MatchSettings] = None,
                 game_factory: GameFactory = new_game,
                 match_fn: MatchFn = play_match) -> None:
        self.settings = settings or EvaluationSettings()
        self.match_settings = match_settings or MatchSettings()
        self.game_factory = game_factory
        self.match_fn = match_fn
        self.last_failures: List[PairingOutcome] = []
        self.last_wins: List[float] = []

    # -----------------------------
    # Public API
    # -----------------------------
    def evaluate(self, population: Sequence[Genome]) -> FitnessVector:
        """Win rate of every individual, aligned with ``population``."""
        n = len(population)
        if n < 2:
            raise ConfigurationError(f"tournament needs at least 2 individuals, got {n}")

        order = pairings(n, reverse=self.settings.dispatch_order == "reverse")
        if self.settings.executor == "serial":
            outcomes = [self._play(i, j, population) for i, j in order]
        else:
            outcomes = self._run_pool(order, population)

        wins = [0.0] * n
        failures: List[PairingOutcome] = []
        for outcome in outcomes:
            if outcome.ok:
                wins[outcome.i] += outcome.result.a
                wins[outcome.j] += outcome.result.b
            else:
                failures.append(outcome)
                logger.error("Game error in pairing (%d, %d): %s", outcome.i, outcome.j, outcome.error)
                if outcome.fen:
                    logger.error("FEN dump: %s", outcome.fen)

        if failures:
            logger.warning("%d of %d pairings failed and were scored as zero", len(failures), len(order))
        self.last_failures = failures
        self.last_wins = wins
        max_wins = 2 * (n - 1)
        return [w / max_wins for w in wins]

    # -----------------------------
    # Execution
    # -----------------------------
    def _play(self, i: int, j: int, population: Sequence[Genome]) -> PairingOutcome:
        return play_pairing(i, j, population[i], population[j], self.match_settings,
                            self.game_factory, self.match_fn)

    def _make_executor(self, workers: int) -> Executor:
        if self.settings.executor == "process":
            return ProcessPoolExecutor(max_workers=workers)
        return ThreadPoolExecutor(max_workers=workers)

    def _submit(self, pool: Executor, i: int, j: int, population: Sequence[Genome]) -> Future:
        try:
            return pool.submit(play_pairing, i, j, population[i], population[j],
                               self.match_settings, self.game_factory, self.match_fn)
        except (RuntimeError, OSError) as e:
            raise DispatchError(f"could not start pairing ({i}, {j}): {e}") from e

    def _run_pool(self, order: List[Pairing], population: Sequence[Genome]) -> List[PairingOutcome]:
        outcomes: List[PairingOutcome] = []
        remaining = list(order)
        total = len(order)
        attempt = 0
        while remaining:
            retry: List[Pairing] = []
            workers = min(self.settings.worker_count(), len(remaining))
            with self._make_executor(workers) as pool:
                pending: Dict[Future, Pairing] = {}
                for i, j in remaining:
                    try:
                        pending[self._submit(pool, i, j, population)] = (i, j)
                    except DispatchError as e:
                        logger.warning("Starting pairing error: %s", e)
                        retry.append((i, j))

                for fut in as_completed(pending):
                    i, j = pending[fut]
                    try:
                        outcomes.append(fut.result())
                    except BrokenExecutor as e:
                        logger.warning("Worker pool broke while running pairing (%d, %d): %s", i, j, e)
                        retry.append((i, j))
                    except Exception as e:
                        outcomes.append(PairingOutcome(i, j, error=f"{type(e).__name__}: {e}"))
                    logger.debug("Evaluation %.1f%% complete", 100.0 * len(outcomes) / total)

            if retry:
                attempt += 1
                if attempt > self.settings.dispatch_retries:
                    for i, j in retry:
                        logger.error("Dropping pairing (%d, %d) after %d dispatch retries",
                                     i, j, self.settings.dispatch_retries)
                        outcomes.append(PairingOutcome(i, j, error="dispatch failed"))
                    break
                logger.warning("Retrying %d pairings (attempt %d of %d)",
                               len(retry), attempt, self.settings.dispatch_retries)
            remaining = retry
        return outcomes


def evaluate_population(population: Sequence[Genome], settings: Optional[EvaluationSettings] = None,
                        match_settings: Optional[MatchSettings] = None) -> FitnessVector:
    """Convenience wrapper around ``TournamentEvaluator.evaluate``."""
    return TournamentEvaluator(settings, match_settings).evaluate(population)


__all__ = ["pairings", "TournamentEvaluator", "evaluate_population"]
