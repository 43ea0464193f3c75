"""
Protocol front ends for chessbot.

Modules:
    uci — Universal Chess Interface loop on stdin/stdout. Also reachable as
          `python -m chessbot` or `python interface/uci.py`.
"""
