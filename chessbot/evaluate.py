"""
Move evaluation: heuristic score of a single candidate move.

Unlike a position evaluator, the score here belongs to a move. It is the sum
of independent terms:

    capture     value of the captured piece, weighted by who captures
    cost        fixed price for moving a piece of this type
    positional  centralisation of minor pieces, pawn advancement
    special     flat bonuses for promotion, en passant and castling
    game state  check, checkmate and draw, read after the move is pushed

and an interest category that the search uses to decide whether the move is
worth looking at more deeply.

Scores are always expressed from the perspective of the side that moved at
the root. perspective_scale() turns the raw sum of a ply into that frame:
the root mover's own plies count positive, the opponent's count negative,
weighted by opponent_weight so that what the opponent gains stings a little
more than what we gain helps.
"""

from dataclasses import dataclass
from enum import IntEnum

import chess

from chessbot.config import EvalConfig
from chessbot.position import captured_piece_type, is_centre, is_draw, is_edge, relative_rank


class Interest(IntEnum):
    """How much a move merits looking further ahead. Ordered."""

    NONE = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3


@dataclass
class EvaluatedMove:
    """
    A candidate move with its score.

    Attributes:
        move:     The candidate move.
        score:    Value of the move to the root mover, including the best
                  reply folded in from deeper plies.
        interest: Category used to extend the search depth at the root.
    """

    move: chess.Move
    score: int = 0
    interest: Interest = Interest.NONE


def capture_interest(piece_type: int | None) -> Interest:
    if piece_type is None or piece_type == chess.KING:
        return Interest.NONE
    if piece_type == chess.PAWN:
        return Interest.LOW
    return Interest.MEDIUM


def move_terms(
    board: chess.Board,
    move: chess.Move,
    my_turn: bool,
    cfg: EvalConfig,
) -> tuple[int, Interest]:
    """
    Capture, cost, positional and special-move terms of move.

    Must be called before move is pushed; only reads the board.

    Args:
        board:   Position in which move is legal.
        move:    The candidate move.
        my_turn: True when the root mover makes this move. Selects the
                 capture multiplier.
        cfg:     Weight table.

    Returns:
        (raw score, interest from the capture).
    """
    score = 0
    mover = board.turn
    moved = board.piece_type_at(move.from_square)

    captured = captured_piece_type(board, move)
    interest = capture_interest(captured)
    if captured is not None:
        multiplier = cfg.own_capture_multiplier if my_turn else cfg.opponent_capture_multiplier
        score += int(cfg.piece_values[captured] * multiplier)

    score -= cfg.move_costs[moved]

    if moved in (chess.KNIGHT, chess.BISHOP):
        if is_centre(move.to_square):
            score += cfg.centre_bonus
        elif is_edge(move.to_square):
            score -= cfg.edge_penalty
    elif moved == chess.PAWN and relative_rank(move.to_square, mover) >= cfg.pawn_advance_rank:
        score += cfg.pawn_advance_bonus

    if move.promotion:
        score += cfg.promotion_bonus
    if board.is_en_passant(move):
        score += cfg.en_passant_bonus
    if board.is_castling(move):
        score += cfg.castle_bonus

    return score, interest


def game_state_terms(board: chess.Board, cfg: EvalConfig) -> tuple[int, bool, bool]:
    """
    Check, checkmate and draw terms of the position after a move.

    Must be called with the move pushed, so board.turn is the side that
    has to answer it.

    Returns:
        (score, gives_check, terminal). terminal is True when the game is
        over in this position and nothing below it should be searched.
    """
    score = 0
    gives_check = board.is_check()
    if gives_check:
        score += cfg.check_value
        if board.is_checkmate():
            return score + cfg.checkmate_value, True, True

    if is_draw(board, cfg.draw_repetition_count):
        return score + cfg.draw_value, gives_check, True

    return score, gives_check, False


def perspective_scale(
    score: int,
    ply: int,
    my_turn: bool,
    opponent_weight: float,
    depth_scaling: bool = True,
) -> int:
    """
    Convert the raw score of one ply into the root mover's frame.

    With depth_scaling, our own gains are worth less the deeper they lie and
    the opponent's gains worth more, so the search plays it safe against
    threats it can only see far ahead.
    """
    if my_turn:
        return int(score / ply) if depth_scaling else score
    scaled = score * ply if depth_scaling else score
    return int(-scaled * opponent_weight)
