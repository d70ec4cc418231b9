import chess
import pytest

from chessevo.engine import ChessGame
from chessevo.errors import GameError
from chessevo.types import PieceType, Side

PROMOTION_FEN = "8/P7/8/8/8/8/8/k6K w - - 0 1"


def test_initial_position():
    game = ChessGame()
    assert game.turn() is Side.WHITE
    assert len(game.available_moves()) == 20
    assert game.material(Side.WHITE) == game.material(Side.BLACK) == 39
    assert game.piece_at(4, 1) == (PieceType.KING, Side.WHITE)
    assert game.piece_at(3, 8) == (PieceType.QUEEN, Side.BLACK)
    assert game.piece_at(4, 4) is None
    assert len(list(game.pieces())) == 32


def test_move_order_is_stable():
    assert ChessGame().available_moves() == ChessGame().available_moves()


def test_branch_does_not_mutate():
    game = ChessGame()
    fen = game.dump_fen()
    child = game.branch(game.available_moves()[0])
    assert game.dump_fen() == fen
    assert child.turn() is Side.BLACK


def test_move_applies_in_place():
    game = ChessGame()
    assert game.move(chess.Move.from_uci("e2e4")) is False
    assert game.turn() is Side.BLACK
    assert game.piece_at(4, 4) == (PieceType.PAWN, Side.WHITE)


def test_illegal_move_raises_game_error_with_fen():
    game = ChessGame()
    with pytest.raises(GameError) as info:
        game.move(chess.Move.from_uci("e2e5"))
    assert info.value.fen == game.dump_fen()


def test_promotion_is_collapsed_and_pending():
    game = ChessGame(PROMOTION_FEN)
    a7a8 = [m for m in game.available_moves() if m.from_square == chess.A7]
    assert len(a7a8) == 1

    assert game.move(a7a8[0]) is True
    assert game.turn() is Side.WHITE  # still white until the promotion is chosen

    rook = game.branch_promote(chess.A8, PieceType.ROOK)
    assert rook.piece_at(0, 8) == (PieceType.ROOK, Side.WHITE)
    assert game.piece_at(0, 7) == (PieceType.PAWN, Side.WHITE)

    game.promote(chess.A8, PieceType.BISHOP)
    assert game.piece_at(0, 8) == (PieceType.BISHOP, Side.WHITE)
    assert game.turn() is Side.BLACK


def test_promotion_misuse_raises():
    game = ChessGame(PROMOTION_FEN)
    with pytest.raises(GameError):
        game.promote(chess.A8, PieceType.QUEEN)
    game.move(chess.Move.from_uci("a7a8"))
    with pytest.raises(GameError):
        game.move(chess.Move.from_uci("h1g1"))
    with pytest.raises(GameError):
        game.promote(chess.A8, PieceType.KING)


def test_checkmate_has_no_moves():
    # fool's mate
    game = ChessGame("rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3")
    assert game.available_moves() == []
    assert game.is_check()
