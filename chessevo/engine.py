"""
Game engine adapter over python-chess.

The training engine never implements chess rules itself; it talks to
``ChessGame``, which exposes the narrow interface described by
``chessevo.types.GameEngine``.

Promotions are handled in two steps: ``available_moves`` lists a single
entry per promoting from/to pair, ``move`` reports the pending promotion
without passing the turn, and ``promote`` commits the chosen piece.
"""
from __future__ import annotations

from typing import Iterator, List, Optional, Tuple

import chess

from .errors import GameError
from .types import MATERIAL_VALUES, PieceType, Side, Square

_COLOR_OF = {Side.WHITE: chess.WHITE, Side.BLACK: chess.BLACK}


def _side(color: chess.Color) -> Side:
    return Side.WHITE if color == chess.WHITE else Side.BLACK


class ChessGame:
    """A standard chess game backed by ``chess.Board``."""

    def __init__(self, fen: Optional[str] = None, board: Optional[chess.Board] = None) -> None:
        if board is not None:
            self.board = board
        else:
            self.board = chess.Board(fen) if fen else chess.Board()
        self._pending: Optional[chess.Move] = None

    # -----------------------------
    # Queries
    # -----------------------------
    def turn(self) -> Side:
        return _side(self.board.turn)

    def available_moves(self) -> List[chess.Move]:
        """Legal moves in python-chess generation order, promotions collapsed."""
        if self._pending is not None:
            return []
        moves: List[chess.Move] = []
        seen = set()
        for mv in self.board.legal_moves:
            if mv.promotion is not None:
                key = (mv.from_square, mv.to_square)
                if key in seen:
                    continue
                seen.add(key)
                mv = chess.Move(mv.from_square, mv.to_square)
            moves.append(mv)
        return moves

    def material(self, side: Side) -> int:
        color = _COLOR_OF[side]
        return sum(
            MATERIAL_VALUES[PieceType(p.piece_type)]
            for p in self.board.piece_map().values()
            if p.color == color
        )

    def piece_at(self, file: int, rank: int) -> Optional[Tuple[PieceType, Side]]:
        """Piece on the square at ``file`` 0..7 and ``rank`` 1..8, if any."""
        piece = self.board.piece_at(chess.square(file, rank - 1))
        if piece is None:
            return None
        return PieceType(piece.piece_type), _side(piece.color)

    def pieces(self) -> Iterator[Tuple[int, int, PieceType, Side]]:
        """Occupied squares as ``(file, rank, piece_type, side)``."""
        for sq, piece in self.board.piece_map().items():
            yield (
                chess.square_file(sq),
                chess.square_rank(sq) + 1,
                PieceType(piece.piece_type),
                _side(piece.color),
            )

    def is_check(self) -> bool:
        return self.board.is_check()

    def dump_fen(self) -> str:
        return self.board.fen()

    # -----------------------------
    # Branching (non-mutating)
    # -----------------------------
    def _copy(self) -> ChessGame:
        return ChessGame(board=self.board.copy(stack=False))

    def branch(self, move: chess.Move) -> ChessGame:
        """Position after ``move``; a promoting move is scored as a queen promotion."""
        out = self._copy()
        if self._is_promotion(move):
            move = chess.Move(move.from_square, move.to_square, promotion=chess.QUEEN)
        out.board.push(move)
        return out

    def branch_promote(self, square: Square, piece_type: PieceType) -> ChessGame:
        """Position after the pending promotion on ``square`` resolves to ``piece_type``."""
        pending = self._require_pending(square)
        out = self._copy()
        out.board.push(chess.Move(pending.from_square, pending.to_square, promotion=int(piece_type)))
        return out

    # -----------------------------
    # Mutation
    # -----------------------------
    def move(self, move: chess.Move) -> bool:
        """Apply ``move``; True means a promotion choice is pending."""
        if self._pending is not None:
            raise GameError("cannot move while a promotion is pending", self.dump_fen())
        if self._is_promotion(move):
            if not self.board.is_legal(chess.Move(move.from_square, move.to_square, promotion=chess.QUEEN)):
                raise GameError(f"illegal move {move.uci()}", self.dump_fen())
            self._pending = chess.Move(move.from_square, move.to_square)
            return True
        self._push(move)
        return False

    def promote(self, square: Square, piece_type: PieceType) -> None:
        if piece_type not in (PieceType.KNIGHT, PieceType.BISHOP, PieceType.ROOK, PieceType.QUEEN):
            raise GameError(f"cannot promote to {piece_type.label}", self.dump_fen())
        pending = self._require_pending(square)
        self._pending = None
        self._push(chess.Move(pending.from_square, pending.to_square, promotion=int(piece_type)))

    # -----------------------------
    # Helpers
    # -----------------------------
    def _is_promotion(self, move: chess.Move) -> bool:
        if move.promotion is not None:
            return True
        piece = self.board.piece_at(move.from_square)
        return (
            piece is not None
            and piece.piece_type == chess.PAWN
            and chess.square_rank(move.to_square) in (0, 7)
        )

    def _require_pending(self, square: Square) -> chess.Move:
        if self._pending is None or self._pending.to_square != square:
            raise GameError(f"no promotion pending on {chess.square_name(square)}", self.dump_fen())
        return self._pending

    def _push(self, move: chess.Move) -> None:
        if not self.board.is_legal(move):
            raise GameError(f"illegal move {move.uci()}", self.dump_fen())
        self.board.push(move)


def new_game() -> ChessGame:
    """Default game factory: the standard starting position."""
    return ChessGame()


__all__ = ["ChessGame", "new_game"]
