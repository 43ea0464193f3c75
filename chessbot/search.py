"""
Search entry point: full-width recursive look-ahead over every legal move.

think() is the stable interface used by interface/uci.py and web/app.py.

How a move is scored:

1. The move's own terms are computed (see chessbot.evaluate) and converted
   into the root mover's frame for the ply it is played on.

2. While the move is pushed, if depth remains, every reply of the other side
   is scored the same way and the reply that side would pick (the lowest
   score on an opponent ply, the highest on ours) is added to the move.

3. The root picks the highest scoring move.

There is no pruning: each ply below the root looks at every legal reply.
The depth limit is SearchConfig.base_depth plies. A root move whose
interest earns a bonus (checks, by default) is searched deeper, but only
while the clock holds more than extension_time_threshold_ms.

Ties:
    Selection starts from a random candidate and only replaces it on a
    strict improvement, so among equally scored moves the random pick wins
    if it is one of them, and otherwise the first in generation order.
    The random source is injectable so tests can pin it.

Time:
    The clock is read every time_check_nodes nodes. Once the per-move
    deadline passes, or stop_event is set from outside, no new subtree is
    entered; the move whose subtree was cut short is discarded and the
    root chooses among the moves it finished.
"""

import logging
import random
import threading
import time
from dataclasses import dataclass, field, replace

import chess

from chessbot.config import Config
from chessbot.constants import BASE_DEPTH, TIME_CHECK_NODES
from chessbot.evaluate import EvaluatedMove, Interest, game_state_terms, move_terms, perspective_scale
from chessbot.position import applied, material_total

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchContext:
    """
    One frame of the recursion.

    Attributes:
        ply:          1 for the root moves, 2 for the replies, and so on.
        max_depth:    Deepest ply searched below this frame. Includes the
                      interest bonus once it has been granted at ply 1.
        my_turn:      True when the root mover plays at this ply. Always
                      equal to (ply - 1) % 2 == 0.
        remaining_ms: Clock left for the root mover when the search began.
    """

    ply: int = 1
    max_depth: int = BASE_DEPTH
    my_turn: bool = True
    remaining_ms: float = float("inf")

    def descend(self, max_depth: int) -> "SearchContext":
        return replace(self, ply=self.ply + 1, max_depth=max_depth, my_turn=not self.my_turn)


@dataclass
class SearchState:
    """
    Per-call bookkeeping shared by every frame of one search.

    Attributes:
        stop_event:     Set from outside (UCI "stop") or by the deadline.
        time_limit_ms:  Wall time the search may use.
        check_every:    Nodes between clock reads.
        node_count:     Moves evaluated so far.
        max_ply:        Deepest ply evaluated.
        start_time:     Monotonic timestamp of the start of the search.
    """

    stop_event: threading.Event = field(default_factory=threading.Event)
    time_limit_ms: float = float("inf")
    check_every: int = TIME_CHECK_NODES
    node_count: int = 0
    max_ply: int = 0
    start_time: float = field(default_factory=time.monotonic)

    @property
    def stopped(self) -> bool:
        return self.stop_event.is_set()

    def elapsed_ms(self) -> float:
        return (time.monotonic() - self.start_time) * 1000

    def tick(self, ply: int) -> None:
        self.node_count += 1
        if ply > self.max_ply:
            self.max_ply = ply
        if self.node_count % self.check_every == 0 and self.elapsed_ms() >= self.time_limit_ms:
            self.stop_event.set()


@dataclass
class SearchResult:
    """
    Outcome of search().

    Attributes:
        move:        The chosen move. Always one of the legal moves.
        score:       Its score in the root mover's frame.
        depth:       Deepest ply reached.
        nodes:       Number of moves evaluated.
        leverage:    Mover's total material over the opponent's. Diagnostic only.
        elapsed_ms:  Wall time spent.
        interrupted: True if the deadline or stop_event cut the search short.
    """

    move: chess.Move
    score: int
    depth: int
    nodes: int
    leverage: float
    elapsed_ms: float
    interrupted: bool


def evaluate_move(
    move: chess.Move,
    board: chess.Board,
    context: SearchContext,
    config: Config,
    state: SearchState,
    rng: random.Random,
) -> EvaluatedMove:
    """
    Score move, including the best reply below it while depth remains.

    The board is returned in exactly the state it was passed in, whatever
    happens below.
    """
    state.tick(context.ply)
    cfg = config.eval

    score, interest = move_terms(board, move, context.my_turn, cfg)

    with applied(board, move):
        state_score, gives_check, terminal = game_state_terms(board, cfg)
        score += state_score
        if gives_check:
            interest = Interest.HIGH

        evaluated = EvaluatedMove(
            move=move,
            score=perspective_scale(
                score,
                context.ply,
                context.my_turn,
                cfg.opponent_weight,
                config.search.depth_scaling,
            ),
            interest=interest,
        )

        limit = context.max_depth
        if context.ply == 1 and context.remaining_ms > config.search.extension_time_threshold_ms:
            limit += config.search.interest_bonus.get(interest.name, 0)

        if context.ply < limit and not terminal and not state.stopped:
            replies = list(board.legal_moves)
            if replies:
                child = context.descend(limit)
                evaluated_replies = evaluate_moves(replies, board, child, config, state, rng)
                if evaluated_replies:
                    evaluated.score += select_best_move(evaluated_replies, child, rng).score

    return evaluated


def evaluate_moves(
    moves: list[chess.Move],
    board: chess.Board,
    context: SearchContext,
    config: Config,
    state: SearchState,
    rng: random.Random,
) -> list[EvaluatedMove]:
    """
    Evaluate every move in order.

    If the search is stopped while a move is being evaluated, that move's
    result is incomplete and is left out; the list evaluated so far is
    returned.
    """
    evaluated = []
    for move in moves:
        result = evaluate_move(move, board, context, config, state, rng)
        if state.stopped:
            break
        evaluated.append(result)
    return evaluated


def select_best_move(
    evaluated: list[EvaluatedMove],
    context: SearchContext,
    rng: random.Random,
) -> EvaluatedMove:
    """
    Pick the move the side to play at context would choose.

    Maximises on the root mover's plies and minimises on the opponent's.
    Starts from a random element and only replaces it on strict improvement.

    Raises:
        ValueError: if evaluated is empty.
    """
    if not evaluated:
        raise ValueError("select_best_move() needs at least one evaluated move")

    best = rng.choice(evaluated)
    for candidate in evaluated:
        if context.my_turn:
            if candidate.score > best.score:
                best = candidate
        elif candidate.score < best.score:
            best = candidate
    return best


def material_leverage(board: chess.Board, piece_values: dict[int, int]) -> float:
    """Side to move's total material divided by the opponent's."""
    mine = material_total(board, board.turn, piece_values)
    theirs = material_total(board, not board.turn, piece_values)
    if theirs == 0:
        return float("inf")
    return mine / theirs


def search(
    board: chess.Board,
    remaining_ms: float,
    config: Config | None = None,
    rng: random.Random | None = None,
    stop_event: threading.Event | None = None,
    move_time_ms: float | None = None,
) -> SearchResult:
    """
    Choose a move for the side to move.

    Args:
        board:        The current position. Pushed and popped during the
                      search; left unchanged on return.
        remaining_ms: Clock left for the side to move. Gates the depth
                      extension and, unless move_time_ms is given, sets the
                      deadline to remaining_ms / moves_to_go.
        config:       Weights and search parameters. Defaults to Config().
        rng:          Random source for tie-breaking.
        stop_event:   Set it from another thread to end the search early.
        move_time_ms: Explicit time allowance for this move.

    Returns:
        SearchResult whose move is always in board.legal_moves.

    Raises:
        ValueError: if the side to move has no legal move.
    """
    config = config or Config()
    rng = rng or random.Random()

    moves = list(board.legal_moves)
    if not moves:
        raise ValueError("search() called on a position with no legal moves")

    allowance = move_time_ms if move_time_ms is not None else remaining_ms / config.search.moves_to_go
    state = SearchState(
        stop_event=stop_event or threading.Event(),
        time_limit_ms=allowance * config.search.time_usage_fraction,
        check_every=config.search.time_check_nodes,
    )
    context = SearchContext(
        ply=1,
        max_depth=config.search.base_depth,
        my_turn=True,
        remaining_ms=remaining_ms,
    )

    leverage = material_leverage(board, config.eval.piece_values)
    _log.debug("leverage %.3f over %d candidates", leverage, len(moves))

    evaluated = evaluate_moves(moves, board, context, config, state, rng)
    if evaluated:
        best = select_best_move(evaluated, context, rng)
    else:
        best = EvaluatedMove(move=rng.choice(moves))

    result = SearchResult(
        move=best.move,
        score=best.score,
        depth=state.max_ply,
        nodes=state.node_count,
        leverage=leverage,
        elapsed_ms=state.elapsed_ms(),
        interrupted=state.stopped,
    )
    _log.info(
        "move=%s score=%d depth=%d nodes=%d leverage=%.2f time=%dms completed=%d/%d%s",
        result.move.uci(),
        result.score,
        result.depth,
        result.nodes,
        result.leverage,
        result.elapsed_ms,
        len(evaluated),
        len(moves),
        " (interrupted)" if result.interrupted else "",
    )
    return result


def think(
    board: chess.Board,
    remaining_ms: float,
    config: Config | None = None,
    rng: random.Random | None = None,
) -> chess.Move:
    """Return the move to play in board with remaining_ms on the clock."""
    return search(board, remaining_ms, config=config, rng=rng).move
