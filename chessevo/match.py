"""
Match simulation between two genomes using greedy one-ply search.

A pairing is two games with colours swapped. Engine faults are wrapped in
``GameError`` with a FEN snapshot; ``play_pairing`` turns them into a
failure outcome so a single bad game never escapes its unit of work.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Sequence, Tuple

from .config import MatchSettings
from .engine import new_game
from .errors import GameError
from .genome import Genome
from .types import (
    PROMOTION_CHOICES,
    GameEngine,
    GameRecord,
    GameTermination,
    MatchResult,
    PairingOutcome,
    PieceType,
    Side,
)

logger = logging.getLogger(__name__)

GameFactory = Callable[[], GameEngine]
MatchFn = Callable[..., MatchResult]


def choose_move(game: GameEngine, moves: Sequence[Any], genome: Genome, mover: Side) -> Any:
    """Move whose resulting position scores highest for ``mover``; ties go to the first."""
    best = moves[0]
    best_score = genome.evaluate_position(game.branch(best), mover)
    for mv in moves[1:]:
        score = genome.evaluate_position(game.branch(mv), mover)
        if score > best_score:
            best, best_score = mv, score
    return best


def choose_promotion(game: GameEngine, square: int, genome: Genome, mover: Side) -> PieceType:
    """Best promotion piece for ``mover``; knight unless another scores strictly higher."""
    best = PROMOTION_CHOICES[0]
    best_score = genome.evaluate_position(game.branch_promote(square, best), mover)
    for piece_type in PROMOTION_CHOICES[1:]:
        score = genome.evaluate_position(game.branch_promote(square, piece_type), mover)
        if score > best_score:
            best, best_score = piece_type, score
    return best


def _snapshot(game: Optional[GameEngine]) -> Optional[str]:
    if game is None:
        return None
    try:
        return game.dump_fen()
    except Exception as e:  # the snapshot is diagnostic only
        logger.debug("FEN snapshot unavailable: %s", e)
        return None


def _decide(game: GameEngine, moves: Sequence[Any],
            settings: MatchSettings) -> Tuple[Optional[Side], GameTermination]:
    """Winner (or None for a split point) and the termination state."""
    if not moves:
        # Side to move has no legal moves
        to_move = game.turn()
        if settings.stalemate_rule == "draw" and not game.is_check():
            return None, GameTermination.TERMINATED_BY_NO_MOVES
        return to_move.opponent, GameTermination.TERMINATED_BY_NO_MOVES

    white = game.material(Side.WHITE)
    black = game.material(Side.BLACK)
    if white > black:
        winner = Side.WHITE
    elif black > white:
        winner = Side.BLACK
    else:
        winner = Side(settings.material_tie_winner)
    return winner, GameTermination.TERMINATED_BY_MOVE_CAP


def play_game(white: Genome, black: Genome, settings: Optional[MatchSettings] = None,
              game_factory: GameFactory = new_game) -> GameRecord:
    """Play one game to completion; raises ``GameError`` on any engine fault."""
    settings = settings or MatchSettings()
    game: Optional[GameEngine] = None
    half_moves = 0
    try:
        game = game_factory()
        moves = game.available_moves()
        while moves and half_moves < settings.half_move_cap:
            mover = game.turn()
            genome = white if mover is Side.WHITE else black
            chosen = choose_move(game, moves, genome, mover)
            if game.move(chosen):
                square = chosen.to_square
                game.promote(square, choose_promotion(game, square, genome, mover))
            half_moves += 1
            moves = game.available_moves()

        winner, termination = _decide(game, moves, settings)
        record = GameRecord(winner=winner, termination=termination,
                            half_moves=half_moves, fen=game.dump_fen())
    except GameError as e:
        if e.fen is None:
            e.fen = _snapshot(game)
        raise
    except Exception as e:
        raise GameError(f"{type(e).__name__}: {e}", _snapshot(game)) from e

    logger.debug("Game over after %d half-moves (%s), winner %s",
                 half_moves, termination.value, winner.value if winner else "split")
    return record


def _points(record: GameRecord, side: Side) -> float:
    if record.winner is None:
        return 0.5
    return 1.0 if record.winner is side else 0.0


def play_match(a: Genome, b: Genome, settings: Optional[MatchSettings] = None,
               game_factory: GameFactory = new_game) -> MatchResult:
    """Two games, ``a`` as white then ``b`` as white."""
    a_white = play_game(a, b, settings, game_factory)
    b_white = play_game(b, a, settings, game_factory)
    return MatchResult(
        a=_points(a_white, Side.WHITE) + _points(b_white, Side.BLACK),
        b=_points(a_white, Side.BLACK) + _points(b_white, Side.WHITE),
    )


def play_pairing(i: int, j: int, a: Genome, b: Genome, settings: Optional[MatchSettings] = None,
                 game_factory: GameFactory = new_game, match_fn: MatchFn = play_match) -> PairingOutcome:
    """Unit of tournament work; never raises for a failed match."""
    try:
        result = match_fn(a, b, settings, game_factory)
    except GameError as e:
        return PairingOutcome(i, j, error=str(e.args[0]) if e.args else "game error", fen=e.fen)
    except Exception as e:
        return PairingOutcome(i, j, error=f"{type(e).__name__}: {e}")
    return PairingOutcome(i, j, result=result)


__all__ = [
    "GameFactory",
    "MatchFn",
    "choose_move",
    "choose_promotion",
    "play_game",
    "play_match",
    "play_pairing",
]
