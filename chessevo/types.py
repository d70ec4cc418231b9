"""
Type definitions and protocols for the piece-square evolution system.

This module provides:
- Enumerations for piece types and sides
- Dataclasses for match and pairing results
- The protocol the training engine expects from a game engine
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Dict, Iterator, List, Optional, Protocol, Tuple

# Basic type aliases
Square = int  # python-chess square index 0..63 (a1 = 0, h8 = 63)
GeneIndex = int  # file * 8 + rank - 1, file 0..7, rank 1..8
Pairing = Tuple[int, int]  # (i, j) with i < j
FitnessVector = List[float]
GenomeDocument = Dict[str, List[float]]
ReportEntry = Dict[str, Any]

BOARD_FILES: int = 8
BOARD_RANKS: int = 8
SQUARES: int = BOARD_FILES * BOARD_RANKS


class PieceType(IntEnum):
    """Piece types, numbered like python-chess piece types."""

    PAWN = 1
    KNIGHT = 2
    BISHOP = 3
    ROOK = 4
    QUEEN = 5
    KING = 6

    @property
    def label(self) -> str:
        return self.name.lower()


PIECE_TYPES: Tuple[PieceType, ...] = tuple(PieceType)

# Order in which promotion choices are scored; the first one wins ties.
PROMOTION_CHOICES: Tuple[PieceType, ...] = (
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.ROOK,
    PieceType.QUEEN,
)

MATERIAL_VALUES: Dict[PieceType, int] = {
    PieceType.PAWN: 1,
    PieceType.KNIGHT: 3,
    PieceType.BISHOP: 3,
    PieceType.ROOK: 5,
    PieceType.QUEEN: 9,
    PieceType.KING: 0,
}


class Side(Enum):
    """The two players."""

    WHITE = "white"
    BLACK = "black"

    @property
    def opponent(self) -> Side:
        return Side.BLACK if self is Side.WHITE else Side.WHITE


class GameTermination(Enum):
    """States of a single simulated game."""

    IN_PROGRESS = "in_progress"
    TERMINATED_BY_NO_MOVES = "no_moves"
    TERMINATED_BY_MOVE_CAP = "move_cap"


def square_index(file: int, rank: int) -> GeneIndex:
    """Index of a square inside a 64-entry weight table.

    Files run 0 (a) .. 7 (h), ranks run 1 .. 8.
    """
    if not (0 <= file < BOARD_FILES and 1 <= rank <= BOARD_RANKS):
        raise ValueError(f"square out of range: file={file}, rank={rank}")
    return file * 8 + rank - 1


@dataclass(frozen=True)
class MatchResult:
    """Points won by each genome over a two-game pairing."""

    a: float = 0.0
    b: float = 0.0

    @property
    def total(self) -> float:
        return self.a + self.b


@dataclass(frozen=True)
class GameRecord:
    """Outcome of one simulated game."""

    winner: Optional[Side]  # None means the point was split
    termination: GameTermination
    half_moves: int
    fen: str


@dataclass(frozen=True)
class PairingOutcome:
    """Result of one unit of tournament work.

    Exactly one of ``result`` and ``error`` is set.
    """

    i: int
    j: int
    result: Optional[MatchResult] = None
    error: Optional[str] = None
    fen: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.result is None) == (self.error is None):
            raise ValueError("PairingOutcome needs exactly one of result or error")

    @property
    def ok(self) -> bool:
        return self.result is not None


class GameEngine(Protocol):
    """Interface consumed from the game engine collaborator.

    Move objects are opaque except for ``to_square``, which names the
    promotion square when ``move`` reports a pending promotion.
    """

    def turn(self) -> Side:
        ...

    def available_moves(self) -> List[Any]:
        ...

    def branch(self, move: Any) -> GameEngine:
        ...

    def branch_promote(self, square: Square, piece_type: PieceType) -> GameEngine:
        ...

    def move(self, move: Any) -> bool:
        ...

    def promote(self, square: Square, piece_type: PieceType) -> None:
        ...

    def material(self, side: Side) -> int:
        ...

    def piece_at(self, file: int, rank: int) -> Optional[Tuple[PieceType, Side]]:
        ...

    def pieces(self) -> Iterator[Tuple[int, int, PieceType, Side]]:
        ...

    def is_check(self) -> bool:
        ...

    def dump_fen(self) -> str:
        ...


__all__ = [
    "Square",
    "GeneIndex",
    "Pairing",
    "FitnessVector",
    "GenomeDocument",
    "ReportEntry",
    "BOARD_FILES",
    "BOARD_RANKS",
    "SQUARES",
    "PieceType",
    "PIECE_TYPES",
    "PROMOTION_CHOICES",
    "MATERIAL_VALUES",
    "Side",
    "GameTermination",
    "square_index",
    "MatchResult",
    "GameRecord",
    "PairingOutcome",
    "GameEngine",
]
