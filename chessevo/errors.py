"""Exceptions raised by the training engine."""
from __future__ import annotations

from typing import Optional


class ChessEvoError(Exception):
    """Base class for all chessevo errors."""


class ConfigurationError(ChessEvoError):
    """Settings or inputs the engine cannot work with."""


class GameError(ChessEvoError):
    """The game engine reported an invalid or unexpected state.

    Carries a FEN snapshot of the position at the time of the fault.
    """

    def __init__(self, message: str, fen: Optional[str] = None) -> None:
        super().__init__(message)
        self.fen = fen

    def __str__(self) -> str:
        base = super().__str__()
        if self.fen:
            return f"{base} [FEN: {self.fen}]"
        return base


class DispatchError(ChessEvoError):
    """A unit of tournament work could not be started."""


__all__ = ["ChessEvoError", "ConfigurationError", "GameError", "DispatchError"]
