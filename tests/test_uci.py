"""
Tests for interface/uci.py: command parsing and the search thread.
"""

import io
import logging

import chess
import pytest

from chessbot.config import Config
from interface.uci import INFINITE_MS, UciHandler, run_uci_loop


def shallow_config() -> Config:
    cfg = Config()
    cfg.search.base_depth = 1
    return cfg


def output_lines(capsys) -> list[str]:
    return capsys.readouterr().out.splitlines()


class TestHandshake:
    def test_uci(self, capsys):
        UciHandler().handle_uci()
        lines = output_lines(capsys)
        assert lines[0] == "id name chessbot"
        assert any(line.startswith("option name Depth") for line in lines)
        assert lines[-1] == "uciok"

    def test_isready(self, capsys):
        UciHandler().handle_isready()
        assert output_lines(capsys) == ["readyok"]


class TestPosition:
    def setup_method(self):
        self.handler = UciHandler()

    def test_startpos_with_moves(self):
        self.handler.handle_position(["startpos", "moves", "e2e4", "e7e5"])
        assert len(self.handler.board.move_stack) == 2
        assert self.handler.board.turn == chess.WHITE

    def test_fen(self):
        fen = "4k3/8/8/8/8/8/8/R3K3 w Q - 0 1"
        self.handler.handle_position(["fen", *fen.split()])
        assert self.handler.board.fen() == fen

    def test_fen_with_moves(self):
        fen = "4k3/8/8/8/8/8/8/R3K3 w Q - 0 1"
        self.handler.handle_position(["fen", *fen.split(), "moves", "a1a8"])
        assert self.handler.board.is_check()

    def test_illegal_move_stops_replay(self):
        self.handler.handle_position(["startpos", "moves", "e2e4", "e2e4", "d7d5"])
        assert len(self.handler.board.move_stack) == 1

    def test_bad_fen_keeps_previous_board(self):
        self.handler.handle_position(["startpos", "moves", "d2d4"])
        self.handler.handle_position(["fen", "not", "a", "fen"])
        assert len(self.handler.board.move_stack) == 1

    def test_ucinewgame_resets(self):
        self.handler.handle_position(["startpos", "moves", "e2e4"])
        self.handler.handle_ucinewgame()
        assert self.handler.board.fen() == chess.STARTING_FEN


class TestOptions:
    def test_depth(self):
        handler = UciHandler(Config())
        handler.handle_setoption(["name", "Depth", "value", "2"])
        assert handler.config.search.base_depth == 2

    def test_depth_is_clamped(self):
        handler = UciHandler(Config())
        handler.handle_setoption(["name", "Depth", "value", "-3"])
        assert handler.config.search.base_depth == 1

    def test_unknown_option_ignored(self):
        handler = UciHandler(Config())
        handler.handle_setoption(["name", "Hash", "value", "64"])
        assert handler.config == Config()


class TestGoTime:
    def setup_method(self):
        self.handler = UciHandler()

    def test_movetime(self):
        assert self.handler._parse_go_time(["movetime", "1500"]) == (INFINITE_MS, 1500)

    def test_white_clock(self):
        assert self.handler._parse_go_time(["wtime", "60000", "btime", "30000"]) == (60000, None)

    def test_black_clock(self):
        self.handler.handle_position(["startpos", "moves", "e2e4"])
        assert self.handler._parse_go_time(["wtime", "60000", "btime", "30000"]) == (30000, None)

    def test_infinite(self):
        assert self.handler._parse_go_time(["infinite"]) == (INFINITE_MS, INFINITE_MS)


class TestGo:
    def test_bestmove_is_legal(self, capsys):
        handler = UciHandler(shallow_config())
        handler.handle_position(["startpos", "moves", "e2e4"])
        handler.handle_go(["movetime", "60000"])
        handler.wait()

        lines = output_lines(capsys)
        assert lines[0].startswith("info depth 1 ")
        assert lines[-1].startswith("bestmove ")
        move = chess.Move.from_uci(lines[-1].split()[1])
        assert move in handler.board.legal_moves

    def test_game_over(self, capsys):
        handler = UciHandler(shallow_config())
        handler.handle_position(["fen", *"rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3".split()])
        handler.handle_go(["movetime", "1000"])
        handler.wait()
        assert output_lines(capsys) == ["bestmove (none)"]

    def test_search_does_not_touch_handler_board(self):
        handler = UciHandler(shallow_config())
        handler.handle_go(["movetime", "60000"])
        handler.wait()
        assert handler.board.fen() == chess.STARTING_FEN


class TestLoop:
    def test_session(self, capsys, monkeypatch):
        commands = "uci\nisready\nbogus\nposition startpos moves d2d4\ngo movetime 60000\n"
        monkeypatch.setattr("sys.stdin", io.StringIO(commands))
        run_uci_loop(shallow_config())

        lines = output_lines(capsys)
        assert "uciok" in lines
        assert "readyok" in lines
        assert lines[-1].startswith("bestmove ")

        board = chess.Board()
        board.push_uci("d2d4")
        assert chess.Move.from_uci(lines[-1].split()[1]) in board.legal_moves

    def test_unknown_command_logged_at_debug(self, caplog, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("bogus\n"))
        with caplog.at_level(logging.DEBUG, logger="interface.uci"):
            run_uci_loop(shallow_config())
        records = [r for r in caplog.records if "bogus" in r.getMessage()]
        assert records
        assert all(r.levelno == logging.DEBUG for r in records)

    def test_illegal_position_move_still_warns(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="interface.uci"):
            UciHandler().handle_position(["startpos", "moves", "e2e5"])
        records = [r for r in caplog.records if "e2e5" in r.getMessage()]
        assert [r.levelno for r in records] == [logging.WARNING]

    def test_quit(self, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("quit\n"))
        with pytest.raises(SystemExit):
            run_uci_loop(shallow_config())
