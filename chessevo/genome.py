"""
Piece-square table genome.

A genome holds one 64-entry weight table per piece type in a single
contiguous (6, 64) float64 buffer. Row ``t - 1`` belongs to piece type
``t``; column ``file * 8 + rank - 1`` belongs to a square.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional

import numpy as np

from .types import PIECE_TYPES, SQUARES, GameEngine, GenomeDocument, PieceType, Side, square_index


class Genome:
    """Evolvable position evaluator: a linear sum of piece-square weights."""

    __slots__ = ("weights",)

    def __init__(self, random: bool = False, rng: Optional[np.random.Generator] = None,
                 weights: Optional[np.ndarray] = None) -> None:
        shape = (len(PIECE_TYPES), SQUARES)
        if weights is not None:
            arr = np.array(weights, dtype=np.float64)
            if arr.shape != shape:
                raise ValueError(f"weights must have shape {shape}, got {arr.shape}")
            self.weights: np.ndarray = arr
        elif random:
            if rng is None:
                from .operators import get_rng
                rng = get_rng()
            self.weights = rng.random(shape)
        else:
            self.weights = np.zeros(shape, dtype=np.float64)

    def copy(self) -> Genome:
        return Genome(weights=self.weights.copy())

    def weights_for(self, piece_type: PieceType) -> np.ndarray:
        """Read-only view of the table for ``piece_type``."""
        view = self.weights[int(piece_type) - 1]
        view.flags.writeable = False
        return view

    def weight(self, piece_type: PieceType, file: int, rank: int) -> float:
        return float(self.weights[int(piece_type) - 1, square_index(file, rank)])

    def evaluate_position(self, game: GameEngine, perspective: Side) -> float:
        """Net piece-square advantage of ``perspective`` in ``game``.

        Own pieces add their weight, enemy pieces subtract theirs. The same
        table is used for both colours.
        """
        advantage = 0.0
        w = self.weights
        for file, rank, piece_type, side in game.pieces():
            value = w[int(piece_type) - 1, file * 8 + rank - 1]
            if side is perspective:
                advantage += value
            else:
                advantage -= value
        return float(advantage)

    # -----------------------------
    # Serialization
    # -----------------------------
    def serialize(self) -> GenomeDocument:
        return {t.label: [float(x) for x in self.weights[int(t) - 1]] for t in PIECE_TYPES}

    @classmethod
    def deserialize(cls, document: Mapping[str, Any]) -> Genome:
        rows = []
        for t in PIECE_TYPES:
            if t.label not in document:
                raise ValueError(f"genome document is missing '{t.label}'")
            row = document[t.label]
            if len(row) != SQUARES:
                raise ValueError(f"'{t.label}' must have {SQUARES} entries, got {len(row)}")
            rows.append([float(x) for x in row])
        return cls(weights=np.array(rows, dtype=np.float64))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Genome):
            return NotImplemented
        return bool(np.array_equal(self.weights, other.weights))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Genome(mean={self.weights.mean():.4f}, std={self.weights.std():.4f})"


__all__ = ["Genome"]
