"""
chessbot: a full-width recursive chess move searcher.

The engine scores every legal move with a set of hand-tuned heuristics and
looks a fixed number of plies ahead, folding the opponent's best reply into
each move's score. There is no pruning, no transposition table and no
opening book.

Modules:
    constants — Default weights and search parameters
    config    — Tunable configuration (dataclasses, TOML, environment)
    position  — Apply/revert guard and board queries
    evaluate  — Heuristic terms of a single move
    search    — Recursive look-ahead and the think() entry point
"""
