"""
Engine constants: piece values, move costs, bonuses, and search parameters.

Every hand-tuned number the evaluator and search use is defined here. None
of these values has a derivation behind it; they are a starting point and
are meant to be overridden through chessbot.config rather than edited in
place when experimenting.

Scores are plain integers. The checkmate and draw scores are several orders
of magnitude above anything the material and positional terms can produce,
so the game-state term always dominates at the ply where it fires.
"""

import chess

# ---------------------------------------------------------------------------
# Piece values
# ---------------------------------------------------------------------------
# Value of a piece when it is captured. The king is listed so that the
# leverage diagnostic can count it; a king is never actually captured.

PIECE_VALUES: dict[int, int] = {
    chess.PAWN:   200,
    chess.KNIGHT: 300,
    chess.BISHOP: 400,
    chess.ROOK:   400,
    chess.QUEEN:  700,
    chess.KING:   800,
}

# ---------------------------------------------------------------------------
# Movement costs
# ---------------------------------------------------------------------------
# Subtracted every time a piece of this type moves, so valuable pieces are
# not thrown forward without something to show for it.

MOVE_COSTS: dict[int, int] = {
    chess.PAWN:   50,
    chess.KNIGHT: 85,
    chess.BISHOP: 100,
    chess.ROOK:   100,
    chess.QUEEN:  200,
    chess.KING:   450,
}

# ---------------------------------------------------------------------------
# Capture multipliers
# ---------------------------------------------------------------------------
# Captures made by the opponent weigh more than captures made by the engine:
# protecting our own pieces is preferred over grabbing theirs.

OWN_CAPTURE_MULTIPLIER: float = 1.0
OPPONENT_CAPTURE_MULTIPLIER: float = 3.5

# Extra weight applied to every opponent ply once its score has been negated.
OPPONENT_WEIGHT: float = 1.25

# ---------------------------------------------------------------------------
# Game-state scores
# ---------------------------------------------------------------------------

CHECK_VALUE: int = 150
CHECKMATE_VALUE: int = 10_000_000
DRAW_VALUE: int = -20_000_000

# A position seen this many times counts as a draw. Two matches the
# tournament host, which ends the game on the first repetition.
DRAW_REPETITION_COUNT: int = 2

# ---------------------------------------------------------------------------
# Special-move bonuses
# ---------------------------------------------------------------------------

PROMOTION_BONUS: int = 500
EN_PASSANT_BONUS: int = 300
CASTLE_BONUS: int = 200

# ---------------------------------------------------------------------------
# Positional terms
# ---------------------------------------------------------------------------
# Knights and bishops are nudged toward the c3-f6 block and away from the rim.
# Pawns get a bonus once they reach the sixth rank (relative to their side).

CENTRE_BONUS: int = 20
EDGE_PENALTY: int = 20
PAWN_ADVANCE_BONUS: int = 30
PAWN_ADVANCE_RANK: int = 5  # zero-based relative rank, i.e. the sixth rank

CENTRE_FILES: range = range(2, 6)
CENTRE_RANKS: range = range(2, 6)

# ---------------------------------------------------------------------------
# Search parameters
# ---------------------------------------------------------------------------
# BASE_DEPTH is the number of plies explored below (and including) the root
# move. Interesting root moves may be extended by INTEREST_BONUS plies, but
# only when the clock still holds more than EXTENSION_TIME_THRESHOLD_MS.

BASE_DEPTH: int = 3
EXTENSION_TIME_THRESHOLD_MS: int = 5_000

# Keyed by chessbot.evaluate.Interest names.
INTEREST_BONUS: dict[str, int] = {
    "NONE":   0,
    "LOW":    0,
    "MEDIUM": 0,
    "HIGH":   2,
}

# ---------------------------------------------------------------------------
# Time management
# ---------------------------------------------------------------------------
# The search is full width, so a hard deadline is needed to keep it inside
# the clock. The per-move allowance is remaining / MOVES_TO_GO, of which
# TIME_USAGE_FRACTION may actually be spent.

MOVES_TO_GO: int = 40
TIME_USAGE_FRACTION: float = 0.9

# TIME_CHECK_NODES: how often (in nodes) the search reads the clock.
TIME_CHECK_NODES: int = 512
