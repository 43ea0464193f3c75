"""
Board helpers shared by the evaluator and the search.

The search never copies the board. It pushes a move, looks at the result,
possibly recurses, and pops the move again, so every push must be paired
with exactly one pop in reverse order. applied() is the only place the
engine pushes moves; it pops on every exit path and checks that the move
being popped is the one it pushed.
"""

from contextlib import contextmanager
from typing import Iterator

import chess

from chessbot.constants import CENTRE_FILES, CENTRE_RANKS


class MoveStackError(RuntimeError):
    """Raised when a move is reverted out of order."""


@contextmanager
def applied(board: chess.Board, move: chess.Move) -> Iterator[chess.Board]:
    """
    Push move for the duration of the with-block, then pop it.

    Raises:
        MoveStackError: if the top of the move stack is not move when the
            block exits, i.e. something inside pushed without popping.
    """
    depth = len(board.move_stack)
    board.push(move)
    try:
        yield board
    finally:
        if len(board.move_stack) != depth + 1 or board.peek() != move:
            raise MoveStackError(
                f"move stack out of sync reverting {move.uci()}: "
                f"expected depth {depth + 1}, found {len(board.move_stack)}"
            )
        board.pop()


def captured_piece_type(board: chess.Board, move: chess.Move) -> int | None:
    """Type of the piece move would capture, before the move is pushed."""
    if board.is_en_passant(move):
        return chess.PAWN
    if not board.is_capture(move):
        return None
    return board.piece_type_at(move.to_square)


def is_draw(board: chess.Board, repetition_count: int = 2) -> bool:
    """
    Draw classification for the side to move.

    Covers stalemate, insufficient material, the fifty-move rule and
    repetition. repetition_count=2 treats the first repeat as a draw.
    """
    return (
        board.is_stalemate()
        or board.is_insufficient_material()
        or board.halfmove_clock >= 100
        or board.is_repetition(repetition_count)
    )


def is_centre(square: chess.Square) -> bool:
    return chess.square_file(square) in CENTRE_FILES and chess.square_rank(square) in CENTRE_RANKS


def is_edge(square: chess.Square) -> bool:
    return chess.square_file(square) in (0, 7) or chess.square_rank(square) in (0, 7)


def relative_rank(square: chess.Square, color: chess.Color) -> int:
    """Rank counted from color's own back rank (0) to the promotion rank (7)."""
    rank = chess.square_rank(square)
    return rank if color == chess.WHITE else 7 - rank


def material_total(board: chess.Board, color: chess.Color, piece_values: dict[int, int]) -> int:
    """Sum of piece values of all of color's pieces on the board."""
    return sum(
        len(board.pieces(piece_type, color)) * value
        for piece_type, value in piece_values.items()
    )
