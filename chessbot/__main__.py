"""Run the UCI loop: python -m chessbot"""

from interface.uci import run_uci_loop

if __name__ == "__main__":
    run_uci_loop()
