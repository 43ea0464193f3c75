"""
HTTP front end for chessbot.

A FastAPI app with one endpoint that takes a FEN and a time limit and
returns the engine's move.
"""
