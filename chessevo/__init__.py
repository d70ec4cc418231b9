"""chessevo: evolve chess piece-square tables through self-play tournaments.

Usage examples:
    from chessevo import Genome, mutate, cross
    from chessevo import TournamentEvaluator
    from chessevo import EvolutionTrainer
"""
from __future__ import annotations

from .config import TrainerConfig, get_config, setup_logging
from .engine import ChessGame, new_game
from .errors import ChessEvoError, ConfigurationError, DispatchError, GameError
from .evolution import EvolutionTrainer, GenerationStats, TrainingResult, load_report, save_report
from .genome import Genome
from .match import play_game, play_match, play_pairing
from .operators import breed, cross, mutate, seed_rng, select_parent
from .tournament import TournamentEvaluator, evaluate_population, pairings
from .types import GameTermination, MatchResult, PairingOutcome, PieceType, Side

__version__ = "1.0.0"
