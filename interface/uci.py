"""
UCI (Universal Chess Interface) protocol handler.

UCI is the text protocol chess GUIs and tournament tools (cutechess-cli,
lichess-bot) use to drive an engine. The engine reads commands from stdin
and writes responses to stdout, flushing every line.

Protocol overview:
    GUI → Engine: uci, isready, ucinewgame, setoption, position, go, stop, quit
    Engine → GUI: id name, id author, option, uciok, readyok, info, bestmove

Threading model:
    The loop runs on the main thread and never blocks on the search. "go"
    starts the search on a daemon thread; "stop" sets the search's
    stop_event and the thread answers with the best move it has finished.

Critical rule: NEVER print to stdout except for valid UCI responses.
Diagnostics go through logging, which writes to stderr.
"""

import logging
import os
import sys
import threading

# Make 'chessbot' importable when this script is run directly as
# `python interface/uci.py` from the repo root.
_REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _REPO_ROOT not in sys.path:
    sys.path.insert(0, _REPO_ROOT)

import chess

from chessbot.config import Config, load_config
from chessbot.search import search

_logger = logging.getLogger(__name__)

# Clock handed to the engine for "go infinite" and bare "go".
INFINITE_MS = 10_000_000


def _send(line: str) -> None:
    """Write a UCI response line to stdout and flush immediately."""
    print(line, flush=True)


def _log(message: str, level: int = logging.WARNING) -> None:
    """Diagnostic output; never reaches stdout."""
    _logger.log(level, message)


class UciHandler:
    """
    Stateful handler for the UCI protocol.

    Attributes:
        board:         Current position, updated by "position" commands.
        config:        Engine configuration; "setoption" edits it.
        search_thread: The running search thread, or None.
        stop_event:    Shared with the search thread; set to end it.
    """

    def __init__(self, config: Config | None = None) -> None:
        self.board: chess.Board = chess.Board()
        self.config: Config = config or Config()
        self.search_thread: threading.Thread | None = None
        self.stop_event: threading.Event = threading.Event()

    # -----------------------------------------------------------------------
    # Command handlers
    # -----------------------------------------------------------------------

    def handle_uci(self) -> None:
        _send("id name chessbot")
        _send("id author chessbot developers")
        _send(f"option name Depth type spin default {self.config.search.base_depth} min 1 max 8")
        _send("uciok")

    def handle_isready(self) -> None:
        _send("readyok")

    def handle_ucinewgame(self) -> None:
        """Stop any search and reset to the starting position."""
        self._stop_search()
        self.board = chess.Board()

    def handle_setoption(self, tokens: list[str]) -> None:
        """
        Apply "setoption name <name> value <value>".

        Only Depth is supported; anything else is logged and ignored.
        """
        if "name" not in tokens or "value" not in tokens:
            _log(f"uci: malformed setoption: {' '.join(tokens)}")
            return
        name = " ".join(tokens[tokens.index("name") + 1:tokens.index("value")])
        value = " ".join(tokens[tokens.index("value") + 1:])

        if name.lower() != "depth":
            _log(f"uci: unknown option: {name!r}", logging.DEBUG)
            return
        try:
            depth = int(value)
        except ValueError:
            _log(f"uci: Depth must be an integer, got {value!r}")
            return
        self.config.search.base_depth = max(1, depth)

    def handle_position(self, tokens: list[str]) -> None:
        """
        Parse and apply a "position" command.

        Command formats:
            position startpos [moves e2e4 e7e5 ...]
            position fen <FEN> [moves e2e4 e7e5 ...]
        """
        try:
            if not tokens:
                return

            if tokens[0] == "startpos":
                self.board = chess.Board()
                move_tokens = tokens[2:] if len(tokens) > 1 and tokens[1] == "moves" else []
            elif tokens[0] == "fen":
                if "moves" in tokens:
                    moves_idx = tokens.index("moves")
                    fen = " ".join(tokens[1:moves_idx])
                    move_tokens = tokens[moves_idx + 1:]
                else:
                    fen = " ".join(tokens[1:])
                    move_tokens = []
                self.board = chess.Board(fen)
            else:
                _log(f"uci: unknown position type: {tokens[0]}")
                return

            for uci_move in move_tokens:
                move = chess.Move.from_uci(uci_move)
                if move in self.board.legal_moves:
                    self.board.push(move)
                else:
                    _log(f"uci: illegal move in position command: {uci_move}")
                    break

        except ValueError as e:
            _log(f"uci: error in position command: {e}")

    def handle_go(self, tokens: list[str]) -> None:
        """
        Parse a "go" command and start the search in a background thread.

        The side to move's clock (wtime/btime) is passed to the engine as
        its remaining budget; movetime is passed as an explicit allowance.
        """
        self._stop_search()

        remaining_ms, move_time_ms = self._parse_go_time(tokens)
        self.stop_event = threading.Event()
        board_copy = self.board.copy()
        stop_event = self.stop_event
        config = self.config

        def search_and_reply() -> None:
            if not any(board_copy.legal_moves):
                _send("bestmove (none)")
                return
            try:
                result = search(
                    board_copy,
                    remaining_ms,
                    config=config,
                    stop_event=stop_event,
                    move_time_ms=move_time_ms,
                )
            except Exception:
                _logger.exception("search failed for FEN=%s", board_copy.fen())
                _send("bestmove (none)")
                return

            elapsed_ms = max(1, int(result.elapsed_ms))
            nps = result.nodes * 1000 // elapsed_ms
            _send(
                f"info depth {result.depth} score cp {result.score} "
                f"nodes {result.nodes} nps {nps} time {elapsed_ms}"
            )
            _send(f"bestmove {result.move.uci()}")

        self.search_thread = threading.Thread(target=search_and_reply, daemon=True)
        self.search_thread.start()

    def handle_stop(self) -> None:
        self._stop_search()

    def handle_quit(self) -> None:
        self._stop_search()
        sys.exit(0)

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    def _stop_search(self) -> None:
        """Signal the running search to stop and wait for it to reply."""
        self.stop_event.set()
        if self.search_thread is not None and self.search_thread.is_alive():
            self.search_thread.join(timeout=2.0)
        self.search_thread = None

    def wait(self) -> None:
        """Block until the running search, if any, has replied."""
        if self.search_thread is not None:
            self.search_thread.join()

    def _parse_go_time(self, tokens: list[str]) -> tuple[float, float | None]:
        """
        Extract the clock from "go" command tokens.

        Returns:
            (remaining_ms, move_time_ms). remaining_ms is the side to move's
            clock, or INFINITE_MS when none was given. move_time_ms is the
            movetime value, or None to let the engine divide the clock.
        """
        params: dict[str, int] = {}
        i = 0
        while i < len(tokens) - 1:
            key = tokens[i]
            try:
                params[key] = int(tokens[i + 1])
                i += 2
            except ValueError:
                i += 1

        time_key = "wtime" if self.board.turn == chess.WHITE else "btime"
        remaining_ms = float(params.get(time_key, INFINITE_MS))

        if "movetime" in params:
            return remaining_ms, float(params["movetime"])
        if time_key in params:
            return remaining_ms, None
        # "go infinite" or "go depth N": search until done or stopped.
        return remaining_ms, float(INFINITE_MS)


def run_uci_loop(config: Config | None = None) -> None:
    """
    Main UCI protocol loop.

    Reads lines from stdin and dispatches each command to the UciHandler
    until "quit" or end of input. An error in one command is logged and
    the loop carries on.
    """
    config = config or load_config()
    logging.basicConfig(level=config.log_level, stream=sys.stderr)
    handler = UciHandler(config)

    for raw_line in sys.stdin:
        line = raw_line.strip()
        if not line:
            continue

        tokens = line.split()
        command = tokens[0]
        args = tokens[1:]

        try:
            if command == "uci":
                handler.handle_uci()
            elif command == "isready":
                handler.handle_isready()
            elif command == "ucinewgame":
                handler.handle_ucinewgame()
            elif command == "setoption":
                handler.handle_setoption(args)
            elif command == "position":
                handler.handle_position(args)
            elif command == "go":
                handler.handle_go(args)
            elif command == "stop":
                handler.handle_stop()
            elif command == "quit":
                handler.handle_quit()
            else:
                _log(f"uci: ignoring unknown command: {command!r}", logging.DEBUG)

        except Exception:
            _logger.exception("uci: unhandled error for command %r", command)

    handler.wait()


if __name__ == "__main__":
    run_uci_loop()
